"""Tests for the end-to-end generation pipeline (without HTTP)."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from gym_planner.audit.audit_log import AuditEvent, AuditEventType, AuditLogService
from gym_planner.core.errors import GenerationFailedError, PreferencesValidationError, RateLimitExceededError
from gym_planner.planning.ai_planner import AiPlannerService
from gym_planner.planning.pipeline import PlanGenerationPipeline
from gym_planner.schemas.ai_plan import GenerationMetadata, PlanPreview
from gym_planner.services.rate_limiter import SlidingWindowRateLimiter


class RecordingAuditStore:
    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    def write(self, event: AuditEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[AuditEventType]:
        return [e.event_type for e in self.events]


class FailingAuditStore:
    def write(self, event: AuditEvent) -> None:
        raise ConnectionError("audit database unavailable")


@pytest.fixture
def audit_store() -> RecordingAuditStore:
    return RecordingAuditStore()


@pytest.fixture
def preview(preferences, plan_response) -> PlanPreview:
    return PlanPreview(
        plan=plan_response,
        preferences=preferences,
        metadata=GenerationMetadata(model="primary/model", fallback_used=False, generation_time_ms=1200),
    )


def _pipeline(planner_side_effect, audit_store, rate_limiter=None, timeout_seconds=5.0):
    planner = MagicMock(spec=AiPlannerService)
    planner.generate_plan_preview = AsyncMock(side_effect=planner_side_effect)
    pipeline = PlanGenerationPipeline(
        rate_limiter=rate_limiter or SlidingWindowRateLimiter(max_requests=10, window_seconds=3600),
        planner=planner,
        audit_log=AuditLogService(store=audit_store, timeout_seconds=1.0),
        timeout_seconds=timeout_seconds,
    )
    return pipeline, planner


@pytest.mark.asyncio
async def test_success_logs_requested_then_completed(preferences_payload, preview, audit_store):
    pipeline, _ = _pipeline([preview], audit_store)

    result = await pipeline.run("user-1", preferences_payload)

    assert result == preview
    assert audit_store.types == [
        AuditEventType.AI_GENERATION_REQUESTED,
        AuditEventType.AI_GENERATION_COMPLETED,
    ]
    assert audit_store.events[0].payload["preferences"]["goal"] == "hypertrophy"
    assert audit_store.events[1].payload["model"] == "primary/model"
    assert all(e.actor == "user-1" for e in audit_store.events)


@pytest.mark.asyncio
async def test_invalid_preferences_skip_audit_and_llm(preferences_payload, audit_store):
    del preferences_payload["goal"]
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=3600)
    pipeline, planner = _pipeline([], audit_store, rate_limiter=limiter)

    with pytest.raises(PreferencesValidationError):
        await pipeline.run("user-1", preferences_payload)

    assert audit_store.events == []
    planner.generate_plan_preview.assert_not_awaited()
    # The rejected request still consumed quota
    with pytest.raises(RateLimitExceededError):
        limiter.check_and_record("user-1")


@pytest.mark.asyncio
async def test_rate_limited_request_never_reaches_planner(preferences_payload, audit_store):
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=3600)
    limiter.check_and_record("user-1")
    pipeline, planner = _pipeline([], audit_store, rate_limiter=limiter)

    with pytest.raises(RateLimitExceededError):
        await pipeline.run("user-1", preferences_payload)

    assert audit_store.events == []
    planner.generate_plan_preview.assert_not_awaited()


@pytest.mark.asyncio
async def test_generation_failure_logs_exactly_one_failed_event(preferences_payload, audit_store):
    pipeline, _ = _pipeline(
        GenerationFailedError("Primary and fallback models both failed", error_type="completion"),
        audit_store,
    )

    with pytest.raises(GenerationFailedError):
        await pipeline.run("user-1", preferences_payload)

    assert audit_store.types == [
        AuditEventType.AI_GENERATION_REQUESTED,
        AuditEventType.AI_GENERATION_FAILED,
    ]
    assert audit_store.events[1].payload == {
        "error_type": "completion",
        "error": "Primary and fallback models both failed",
    }


@pytest.mark.asyncio
async def test_unexpected_error_is_audited_and_reraised(preferences_payload, audit_store):
    pipeline, _ = _pipeline(KeyError("boom"), audit_store)

    with pytest.raises(KeyError):
        await pipeline.run("user-1", preferences_payload)

    assert audit_store.types[-1] == AuditEventType.AI_GENERATION_FAILED
    assert audit_store.events[-1].payload["error_type"] == "unknown"


@pytest.mark.asyncio
async def test_request_timeout_becomes_generation_failed(preferences_payload, audit_store):
    async def _slow(_preferences):
        await asyncio.sleep(10)

    pipeline, _ = _pipeline(_slow, audit_store, timeout_seconds=0.05)

    with pytest.raises(GenerationFailedError) as exc_info:
        await pipeline.run("user-1", preferences_payload)

    assert exc_info.value.error_type == "timeout"
    assert audit_store.types == [
        AuditEventType.AI_GENERATION_REQUESTED,
        AuditEventType.AI_GENERATION_FAILED,
    ]


@pytest.mark.asyncio
async def test_cancellation_is_audited_as_failed(preferences_payload, audit_store):
    started = asyncio.Event()

    async def _hang(_preferences):
        started.set()
        await asyncio.sleep(10)

    pipeline, _ = _pipeline(_hang, audit_store)

    task = asyncio.create_task(pipeline.run("user-1", preferences_payload))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert audit_store.types == [
        AuditEventType.AI_GENERATION_REQUESTED,
        AuditEventType.AI_GENERATION_FAILED,
    ]
    assert audit_store.events[-1].payload["error_type"] == "cancelled"


@pytest.mark.asyncio
async def test_audit_outage_does_not_fail_generation(preferences_payload, preview):
    pipeline, _ = _pipeline([preview], FailingAuditStore())

    result = await pipeline.run("user-1", preferences_payload)

    assert result == preview


@pytest.mark.asyncio
async def test_audit_outage_does_not_mask_generation_error(preferences_payload):
    pipeline, _ = _pipeline(GenerationFailedError("models down"), FailingAuditStore())

    with pytest.raises(GenerationFailedError, match="models down"):
        await pipeline.run("user-1", preferences_payload)
