"""Strict output schemas for AI-generated training plans.

These schemas are handed to the LLM as the required output shape and are
used again to re-validate whatever the model returned.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from gym_planner.schemas.preferences import UserPreferences


class AiSet(BaseModel):
    """A single set: reps, optional load, rest and intensity."""

    reps: int = Field(gt=0, description="Number of repetitions")
    weight: float | None = Field(default=None, ge=0, description="Suggested weight in kg (optional)")
    rest_seconds: int = Field(ge=0, description="Rest time between sets in seconds")
    rir: int | None = Field(default=None, ge=0, le=5, description="Reps In Reserve - suggested intensity level (0-5)")


class AiExercise(BaseModel):
    name: str = Field(min_length=1, max_length=100, description="Exact exercise name")
    sets: list[AiSet] = Field(min_length=1, description="List of sets for this exercise")
    notes: str | None = Field(default=None, max_length=500, description="Technical tips and form cues")


class AiWorkoutDay(BaseModel):
    name: str = Field(min_length=1, max_length=100, description="Workout name, e.g. 'Push A', 'Upper Body'")
    exercises: list[AiExercise] = Field(min_length=1, description="List of exercises for this workout day")


class AiPlanResponse(BaseModel):
    """Complete training plan as returned by the model."""

    name: str = Field(min_length=1, max_length=100, description="Name of the complete training plan")
    description: str = Field(min_length=1, max_length=500, description="Brief description of plan strategy and goals")
    cycle_duration_weeks: int = Field(gt=0, description="Duration of the training cycle in weeks")
    schedule: list[AiWorkoutDay] = Field(min_length=1, description="List of workout days in the training cycle")


class GenerationMetadata(BaseModel):
    model: str = Field(description="Identifier of the model that produced the plan")
    fallback_used: bool = Field(description="True when the primary model failed and the fallback answered")
    generation_time_ms: int = Field(ge=0)


class PlanPreview(BaseModel):
    """Successful generation result returned to the caller."""

    plan: AiPlanResponse
    preferences: UserPreferences
    metadata: GenerationMetadata
