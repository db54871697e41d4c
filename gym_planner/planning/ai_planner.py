"""AI planner service.

Orchestrates prompt rendering, the structured completion and plan schema
validation. It does not retry: the only retry is the single fallback
attempt inside the completion client.
"""

from __future__ import annotations

import time

from loguru import logger

from gym_planner.core.errors import GenerationFailedError, PlanSchemaError
from gym_planner.planning.prompts import SYSTEM_PROMPT, build_plan_prompt
from gym_planner.planning.validate import validate_plan_output
from gym_planner.schemas.ai_plan import AiPlanResponse, GenerationMetadata, PlanPreview
from gym_planner.schemas.preferences import UserPreferences
from gym_planner.services.llm.completion import CompletionFailure, StructuredCompletionClient


class AiPlannerService:
    def __init__(self, completion_client: StructuredCompletionClient | None = None) -> None:
        self.completion_client = completion_client or StructuredCompletionClient()

    async def generate_plan_preview(self, preferences: UserPreferences) -> PlanPreview:
        """Generate a plan preview from validated preferences.

        Args:
            preferences: Validated user preferences

        Returns:
            PlanPreview with the plan, the preferences and generation metadata

        Raises:
            GenerationFailedError: If both models failed or the output is not a valid plan
        """
        started = time.perf_counter()
        try:
            user_prompt = build_plan_prompt(preferences)
        except Exception as e:
            logger.exception("Plan prompt rendering failed")
            raise GenerationFailedError(f"Prompt rendering failed: {e}", error_type="unknown") from e

        result = await self.completion_client.complete(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=user_prompt,
            output_type=AiPlanResponse,
        )

        if isinstance(result, CompletionFailure):
            logger.error("Plan generation failed", reason=result.reason, attempts=len(result.errors))
            raise GenerationFailedError(f"{result.reason}: {'; '.join(result.errors)}", error_type="completion")

        try:
            plan = validate_plan_output(result.data, preferences)
        except PlanSchemaError as e:
            raise GenerationFailedError(str(e), error_type="schema") from e
        except Exception as e:
            logger.exception("Plan output validation crashed", model=result.model)
            raise GenerationFailedError(f"Plan validation failed: {e}", error_type="unknown") from e

        generation_time_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Plan preview generated",
            model=result.model,
            fallback_used=result.fallback_used,
            workout_days=len(plan.schedule),
            generation_time_ms=generation_time_ms,
        )

        return PlanPreview(
            plan=plan,
            preferences=preferences,
            metadata=GenerationMetadata(
                model=result.model,
                fallback_used=result.fallback_used,
                generation_time_ms=generation_time_ms,
            ),
        )
