"""Dashboard aggregation.

Collects future, not-yet-done workouts across a user's active plans and
determines the user's state (new, active or completed).
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timezone

from loguru import logger

from gym_planner.dashboard.plan_store import PlanStore, SqlPlanStore
from gym_planner.schemas.dashboard import DashboardSummary, PlanRecord, UpcomingWorkout

MAX_UPCOMING_WORKOUTS = 10


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class DashboardService:
    def __init__(self, plan_store: PlanStore | None = None, today: Callable[[], date] = _utc_today) -> None:
        self.plan_store = plan_store or SqlPlanStore()
        self._today = today

    def get_dashboard_summary(self, user_id: str) -> DashboardSummary:
        """Build dashboard data for the user.

        Args:
            user_id: Authenticated user ID

        Returns:
            DashboardSummary with at most 10 upcoming workouts and the user state
        """
        plans = self.plan_store.list_active_plans(user_id)

        if not plans:
            logger.debug("Dashboard: no active plans", user_id=user_id)
            return DashboardSummary(upcoming_workouts=[], user_state="new")

        upcoming = self.extract_upcoming_workouts(plans, self._today().isoformat())
        user_state = "active" if upcoming else "completed"

        logger.debug(
            "Dashboard summary built",
            user_id=user_id,
            plan_count=len(plans),
            upcoming_count=len(upcoming),
            user_state=user_state,
        )
        return DashboardSummary(upcoming_workouts=upcoming, user_state=user_state)

    @staticmethod
    def extract_upcoming_workouts(plans: list[PlanRecord], today: str) -> list[UpcomingWorkout]:
        """Extract pending workouts dated today or later.

        Dates are compared as strings, which is valid for zero-padded
        YYYY-MM-DD. Ties on date are ordered by plan ID.

        Args:
            plans: Active plans with their schedules
            today: Cutoff date (YYYY-MM-DD), computed once per aggregation

        Returns:
            Up to MAX_UPCOMING_WORKOUTS workouts, earliest first, first one marked is_next
        """
        workouts: list[UpcomingWorkout] = []

        for plan in plans:
            if not plan.schedule:
                continue

            for workout_date, occurrence in plan.schedule.items():
                if workout_date < today:
                    continue
                if occurrence.done:
                    continue

                workouts.append(
                    UpcomingWorkout(
                        plan_id=plan.id,
                        plan_name=plan.name,
                        day_name=occurrence.name,
                        date=workout_date,
                    )
                )

        workouts.sort(key=lambda w: (w.date, w.plan_id))

        if workouts:
            workouts[0].is_next = True

        return workouts[:MAX_UPCOMING_WORKOUTS]
