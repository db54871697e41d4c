"""Root conftest for all tests.

This file makes shared fixtures available across all test modules.
"""

from __future__ import annotations

from typing import Any

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from gym_planner.schemas.ai_plan import AiPlanResponse
from gym_planner.schemas.preferences import UserPreferences


@pytest.fixture
def preferences_payload() -> dict[str, Any]:
    """Raw preferences as they arrive in a request body."""
    return {
        "goal": "hypertrophy",
        "system": "PPL",
        "available_days": ["monday", "wednesday", "friday"],
        "session_duration_minutes": 60,
        "cycle_duration_weeks": 4,
        "notes": "Bad left shoulder, avoid overhead pressing",
    }


@pytest.fixture
def preferences(preferences_payload: dict[str, Any]) -> UserPreferences:
    return UserPreferences.model_validate(preferences_payload)


@pytest.fixture
def plan_dict() -> dict[str, Any]:
    """A valid AI plan as a plain mapping."""
    return {
        "name": "4-Week PPL Hypertrophy",
        "description": "Push/pull/legs split focused on moderate loads and volume.",
        "cycle_duration_weeks": 4,
        "schedule": [
            {
                "name": "Push",
                "exercises": [
                    {
                        "name": "Bench Press",
                        "sets": [
                            {"reps": 8, "weight": 80, "rest_seconds": 120, "rir": 2},
                            {"reps": 8, "weight": 80, "rest_seconds": 120, "rir": 2},
                        ],
                        "notes": "Keep shoulder blades retracted",
                    }
                ],
            },
            {
                "name": "Pull",
                "exercises": [
                    {"name": "Pull Ups", "sets": [{"reps": 8, "rest_seconds": 90}]},
                ],
            },
            {
                "name": "Legs",
                "exercises": [
                    {"name": "Squat", "sets": [{"reps": 5, "weight": 100, "rest_seconds": 180, "rir": 1}]},
                ],
            },
        ],
    }


@pytest.fixture
def plan_response(plan_dict: dict[str, Any]) -> AiPlanResponse:
    return AiPlanResponse.model_validate(plan_dict)


@pytest.fixture(scope="function")
def db_engine(monkeypatch):
    """
    Provides an isolated in-memory SQLite database per test.

    Patches the engine getter so every get_session() call in the code under
    test hits the same in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    import gym_planner.db.session as session_module
    from gym_planner.db.models import Base

    monkeypatch.setattr(session_module, "_get_engine", lambda: engine)
    monkeypatch.setattr(session_module, "_SessionLocal", None)

    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()
