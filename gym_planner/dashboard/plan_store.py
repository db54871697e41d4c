"""Read-only access to a user's active plans."""

from __future__ import annotations

from typing import Protocol

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import select

from gym_planner.db.models import Plan
from gym_planner.db.session import get_session
from gym_planner.schemas.dashboard import PlanRecord


class PlanStore(Protocol):
    def list_active_plans(self, user_id: str) -> list[PlanRecord]: ...


class SqlPlanStore:
    """Plan store reading non-archived rows from the plans table."""

    def list_active_plans(self, user_id: str) -> list[PlanRecord]:
        with get_session() as session:
            rows = session.execute(
                select(Plan.id, Plan.name, Plan.plan)
                .where(Plan.user_id == user_id, Plan.archived.is_(False))
                .order_by(Plan.created_at, Plan.id)
            ).all()

        records: list[PlanRecord] = []
        for plan_id, name, structure in rows:
            schedule = structure.get("schedule") if isinstance(structure, dict) else None
            try:
                records.append(PlanRecord(id=plan_id, name=name, schedule=schedule))
            except ValidationError as e:
                # A malformed schedule must not hide the user's other plans
                logger.warning("Skipping schedule of malformed plan", plan_id=plan_id, error_count=e.error_count())
                records.append(PlanRecord(id=plan_id, name=name, schedule=None))
        return records
