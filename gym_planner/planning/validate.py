"""Plan output validation layer.

Re-validates whatever the completion client returned against the
AiPlanResponse schema. The model may produce JSON that parses but is
semantically broken (a day with zero exercises, a negative rest period), so
this check runs regardless of any validation done during the completion.
"""

from __future__ import annotations

import math
from typing import Any

from loguru import logger
from pydantic import BaseModel, ValidationError

from gym_planner.core.errors import PlanSchemaError
from gym_planner.schemas.ai_plan import AiPlanResponse
from gym_planner.schemas.preferences import UserPreferences

_TEXT_FIELDS = ("name", "description", "notes")

# Requested lengths at or above this are not restored into the plan
MAX_CYCLE_WEEKS = 520


def _strip_text(node: Any) -> Any:
    """Strip surrounding whitespace from text fields, recursively."""
    if isinstance(node, dict):
        return {
            key: value.strip() if key in _TEXT_FIELDS and isinstance(value, str) else _strip_text(value)
            for key, value in node.items()
        }
    if isinstance(node, list):
        return [_strip_text(item) for item in node]
    return node


def _repair(data: dict[str, Any], preferences: UserPreferences | None) -> dict[str, Any]:
    repaired = _strip_text(data)

    if preferences is not None:
        requested = preferences.cycle_duration_weeks
        requested_weeks = int(requested) if math.isfinite(requested) and requested < MAX_CYCLE_WEEKS else 0
        reported_weeks = repaired.get("cycle_duration_weeks")
        if requested_weeks > 0 and reported_weeks != requested_weeks:
            logger.warning(
                "Model changed cycle length, restoring requested value",
                requested=requested_weeks,
                reported=reported_weeks,
            )
            repaired["cycle_duration_weeks"] = requested_weeks

    return repaired


def validate_plan_output(raw: BaseModel | dict[str, Any], preferences: UserPreferences | None = None) -> AiPlanResponse:
    """Validate and lightly repair LLM plan output.

    Repairs:
    - Surrounding whitespace is removed from names, descriptions and notes
    - cycle_duration_weeks is reset to the requested value when preferences are given

    Args:
        raw: Model instance or mapping produced by the completion client
        preferences: Preferences the plan was generated for (optional)

    Returns:
        A fresh, fully validated AiPlanResponse

    Raises:
        PlanSchemaError: If the output violates the plan schema after repair
    """
    if isinstance(raw, BaseModel):
        data = raw.model_dump()
    elif isinstance(raw, dict):
        data = raw
    else:
        raise PlanSchemaError([f"Expected a plan object, got {type(raw).__name__}"])

    try:
        return AiPlanResponse.model_validate(_repair(data, preferences))
    except ValidationError as e:
        violations = [
            f"{'.'.join(str(part) for part in error['loc']) or 'plan'}: {error['msg']}"
            for error in e.errors()
        ]
        logger.warning("Generated plan rejected by schema validation", violation_count=len(violations))
        raise PlanSchemaError(violations) from e
