"""Request-scoped AI plan generation pipeline.

Order of operations for one request:
1. Rate limiter (the request is counted even if it is invalid)
2. Preference validation (invalid input never reaches the audit log or the LLM)
3. Audit: ai_generation_requested
4. AI planner, bounded by the request-level timeout
5. Audit: exactly one of ai_generation_completed / ai_generation_failed
"""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from gym_planner.audit.audit_log import AuditEventType, AuditLogService
from gym_planner.config.settings import settings
from gym_planner.core.errors import GenerationFailedError
from gym_planner.planning.ai_planner import AiPlannerService
from gym_planner.schemas.ai_plan import PlanPreview
from gym_planner.schemas.preferences import validate_preferences
from gym_planner.services.rate_limiter import RateLimiter


class PlanGenerationPipeline:
    def __init__(
        self,
        rate_limiter: RateLimiter,
        planner: AiPlannerService,
        audit_log: AuditLogService,
        timeout_seconds: float | None = None,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.planner = planner
        self.audit_log = audit_log
        self.timeout_seconds = timeout_seconds or settings.generation_timeout_seconds

    async def _log_failure(self, user_id: str, error_type: str, error: str) -> None:
        await self.audit_log.log_event(
            user_id,
            AuditEventType.AI_GENERATION_FAILED,
            {"error_type": error_type, "error": error},
        )

    async def run(self, user_id: str, preferences_payload: Any) -> PlanPreview:
        """Generate a plan preview for a user.

        Args:
            user_id: Authenticated user ID
            preferences_payload: Raw "preferences" value from the request body

        Returns:
            PlanPreview for the validated preferences

        Raises:
            RateLimitExceededError: If the user is over quota
            PreferencesValidationError: If the payload is invalid
            GenerationFailedError: If generation failed or timed out
            Exception: Any unexpected error, after it has been audited as failed
        """
        self.rate_limiter.check_and_record(user_id)
        preferences = validate_preferences(preferences_payload)

        await self.audit_log.log_event(
            user_id,
            AuditEventType.AI_GENERATION_REQUESTED,
            {"preferences": preferences.model_dump()},
        )

        try:
            preview = await asyncio.wait_for(
                self.planner.generate_plan_preview(preferences),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as e:
            message = f"Plan generation timed out after {self.timeout_seconds}s"
            logger.error(message, user_id=user_id)
            await self._log_failure(user_id, "timeout", message)
            raise GenerationFailedError(message, error_type="timeout") from e
        except GenerationFailedError as e:
            await self._log_failure(user_id, e.error_type, str(e))
            raise
        except asyncio.CancelledError:
            logger.warning("Plan generation cancelled", user_id=user_id)
            await self._log_failure(user_id, "cancelled", "Generation request was cancelled")
            raise
        except Exception as e:
            logger.exception("Unexpected error during AI plan generation", user_id=user_id)
            await self._log_failure(user_id, "unknown", str(e))
            raise

        await self.audit_log.log_event(
            user_id,
            AuditEventType.AI_GENERATION_COMPLETED,
            {
                "model": preview.metadata.model,
                "fallback_used": preview.metadata.fallback_used,
                "generation_time_ms": preview.metadata.generation_time_ms,
            },
        )
        return preview
