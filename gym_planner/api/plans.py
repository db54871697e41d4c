"""AI plan generation endpoint."""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from gym_planner.api.dependencies.auth import get_current_user_id
from gym_planner.api.dependencies.services import get_generation_pipeline
from gym_planner.core.errors import GenerationFailedError, PreferencesValidationError, RateLimitExceededError
from gym_planner.planning.pipeline import PlanGenerationPipeline
from gym_planner.schemas.ai_plan import PlanPreview

router = APIRouter(prefix="/plans", tags=["plans"])

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def _error_response(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message, **extra})


@router.post("/generate", response_model=PlanPreview)
async def generate_plan(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    pipeline: PlanGenerationPipeline = Depends(get_generation_pipeline),
):
    """Generate a training plan preview from user preferences.

    Body: {"preferences": {...}}

    Returns:
        200 PlanPreview, 400 validation errors, 429 over quota, 500 on generation failure
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    preferences_payload = body.get("preferences") if isinstance(body, dict) else None

    try:
        return await pipeline.run(user_id, preferences_payload)
    except RateLimitExceededError as e:
        response = _error_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "RateLimitExceeded",
            "Too many AI generation requests. Please try again later.",
        )
        response.headers["Retry-After"] = str(e.retry_after_seconds)
        return response
    except PreferencesValidationError as e:
        message = ". ".join(v["message"] for v in e.violations) or "Invalid preferences"
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "ValidationError",
            message,
            details=e.violations,
        )
    except GenerationFailedError:
        # Already logged and audited by the pipeline; detail stays server-side
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "InternalServerError", INTERNAL_ERROR_MESSAGE)
    except Exception:
        logger.exception("Plan generation request failed", user_id=user_id)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "InternalServerError", INTERNAL_ERROR_MESSAGE)
