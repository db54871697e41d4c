"""Dashboard read models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

UserState = Literal["new", "active", "completed"]


class ScheduledWorkout(BaseModel):
    """One dated workout occurrence inside a stored plan."""

    name: str
    done: bool = False


class PlanRecord(BaseModel):
    """Read-only view of a non-archived plan as returned by the plan store."""

    id: str
    name: str
    schedule: dict[str, ScheduledWorkout] | None = None


class UpcomingWorkout(BaseModel):
    plan_id: str
    plan_name: str
    day_name: str
    date: str = Field(description="ISO calendar date (YYYY-MM-DD)")
    is_next: bool = False


class DashboardSummary(BaseModel):
    upcoming_workouts: list[UpcomingWorkout]
    user_state: UserState
