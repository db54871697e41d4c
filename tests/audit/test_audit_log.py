"""Tests for best-effort audit logging."""

import time

import pytest
from sqlalchemy import select

from gym_planner.audit.audit_log import AuditEvent, AuditEventType, AuditLogService, SqlAuditStore
from gym_planner.db.models import AuditEventRecord
from gym_planner.db.session import get_session


@pytest.mark.asyncio
async def test_event_is_persisted(db_engine):
    service = AuditLogService(store=SqlAuditStore())

    await service.log_event(
        "user-1",
        AuditEventType.AI_GENERATION_COMPLETED,
        {"model": "primary/model", "fallback_used": False},
        entity_type="plan",
    )

    with get_session() as session:
        rows = session.execute(select(AuditEventRecord)).scalars().all()

    assert len(rows) == 1
    assert rows[0].user_id == "user-1"
    assert rows[0].event_type == "ai_generation_completed"
    assert rows[0].entity_type == "plan"
    assert rows[0].entity_id is None
    assert rows[0].payload == {"model": "primary/model", "fallback_used": False}


@pytest.mark.asyncio
async def test_missing_payload_is_stored_as_empty(db_engine):
    await AuditLogService(store=SqlAuditStore()).log_event("user-1", AuditEventType.AI_GENERATION_REQUESTED)

    with get_session() as session:
        row = session.execute(select(AuditEventRecord)).scalar_one()

    assert row.payload == {}


@pytest.mark.asyncio
async def test_store_error_is_swallowed():
    class BrokenStore:
        def write(self, event: AuditEvent) -> None:
            raise RuntimeError("insert failed")

    # Must not raise
    await AuditLogService(store=BrokenStore()).log_event("user-1", AuditEventType.AI_GENERATION_FAILED, {"error": "x"})


@pytest.mark.asyncio
async def test_slow_store_is_bounded_by_timeout():
    class SlowStore:
        def write(self, event: AuditEvent) -> None:
            time.sleep(0.5)

    started = time.perf_counter()
    await AuditLogService(store=SlowStore(), timeout_seconds=0.05).log_event(
        "user-1", AuditEventType.AI_GENERATION_REQUESTED
    )

    assert time.perf_counter() - started < 0.4


@pytest.mark.asyncio
async def test_event_carries_timestamp_and_actor():
    captured: list[AuditEvent] = []

    class CapturingStore:
        def write(self, event: AuditEvent) -> None:
            captured.append(event)

    await AuditLogService(store=CapturingStore()).log_event(
        "user-9", AuditEventType.AI_GENERATION_REQUESTED, {"preferences": {"goal": "strength"}}
    )

    assert captured[0].actor == "user-9"
    assert captured[0].event_type is AuditEventType.AI_GENERATION_REQUESTED
    assert captured[0].timestamp.tzinfo is not None
