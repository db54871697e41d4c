"""User preferences submitted for AI plan generation."""

from __future__ import annotations

from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gym_planner.core.errors import PreferencesValidationError

MAX_NOTES_LENGTH = 500


class UserPreferences(BaseModel):
    """Validated generation input. Frozen once constructed."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    goal: str = Field(strict=True, min_length=1, description="Training goal, e.g. hypertrophy or strength")
    system: str = Field(strict=True, min_length=1, description="Training methodology, e.g. PPL or Upper/Lower")
    available_days: list[str] = Field(strict=True, min_length=1, description="Days the user can train")
    session_duration_minutes: float = Field(strict=True, gt=0, allow_inf_nan=False, description="Time available per session")
    cycle_duration_weeks: float = Field(strict=True, gt=0, allow_inf_nan=False, description="Length of the training cycle")
    notes: str | None = Field(default=None, strict=True, max_length=MAX_NOTES_LENGTH)

    @field_validator("goal", "system")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("available_days")
    @classmethod
    def validate_available_days(cls, value: list[str]) -> list[str]:
        blank = [day for day in value if not day.strip()]
        if blank:
            raise ValueError("day identifiers must not be blank")
        if len(set(value)) != len(value):
            raise ValueError("day identifiers must be unique")
        return value


def _format_location(loc: tuple[int | str, ...]) -> str:
    if not loc:
        return "preferences"
    return ".".join(str(part) for part in loc)


def validate_preferences(payload: Any) -> UserPreferences:
    """Validate a raw request payload into UserPreferences.

    Every failing field is reported, not only the first one.

    Args:
        payload: Untyped value taken from the request body

    Returns:
        Validated, immutable UserPreferences

    Raises:
        PreferencesValidationError: If the payload is not a valid preferences object
    """
    if not isinstance(payload, dict):
        raise PreferencesValidationError(
            [{"field": "preferences", "message": "Preferences must be an object"}]
        )

    try:
        return UserPreferences.model_validate(payload)
    except ValidationError as e:
        violations = [
            {"field": _format_location(error["loc"]), "message": error["msg"]}
            for error in e.errors()
        ]
        logger.debug(
            "Preferences rejected",
            violation_count=len(violations),
            fields=[v["field"] for v in violations],
        )
        raise PreferencesValidationError(violations) from e
