"""Audit event logging for plan generation.

Append-only record of every generation attempt. Writes are best-effort:
a failing or slow audit store is logged and ignored so it can never fail
or change the response of the request being audited.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

from loguru import logger
from sqlalchemy.orm import Session

from gym_planner.config.settings import settings
from gym_planner.db.models import AuditEventRecord
from gym_planner.db.session import get_session


class AuditEventType(str, Enum):
    AI_GENERATION_REQUESTED = "ai_generation_requested"
    AI_GENERATION_COMPLETED = "ai_generation_completed"
    AI_GENERATION_FAILED = "ai_generation_failed"


@dataclass(frozen=True)
class AuditEvent:
    actor: str
    event_type: AuditEventType
    payload: dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity_type: str | None = None
    entity_id: str | None = None


class AuditStore(Protocol):
    def write(self, event: AuditEvent) -> None: ...


class SqlAuditStore:
    """Audit store backed by the audit_events table."""

    def write(self, event: AuditEvent) -> None:
        with get_session() as session:
            _insert_event(session, event)


def _insert_event(session: Session, event: AuditEvent) -> None:
    session.add(
        AuditEventRecord(
            user_id=event.actor,
            event_type=event.event_type.value,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            payload=event.payload,
            created_at=event.timestamp,
        )
    )


class AuditLogService:
    def __init__(self, store: AuditStore | None = None, timeout_seconds: float | None = None) -> None:
        self.store = store or SqlAuditStore()
        self.timeout_seconds = timeout_seconds or settings.audit_write_timeout_seconds

    async def log_event(
        self,
        actor: str,
        event_type: AuditEventType,
        payload: dict[str, Any] | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
    ) -> None:
        """Record an audit event without ever raising.

        The blocking store write runs in a worker thread and is bounded by
        timeout_seconds. Errors and timeouts are logged and swallowed.

        Args:
            actor: User ID performing the action
            event_type: Type of audit event
            payload: Additional event data
            entity_type: Type of affected entity (e.g., "plan")
            entity_id: ID of the affected entity
        """
        event = AuditEvent(
            actor=actor,
            event_type=event_type,
            payload=payload or {},
            entity_type=entity_type,
            entity_id=entity_id,
        )
        try:
            await asyncio.wait_for(asyncio.to_thread(self.store.write, event), timeout=self.timeout_seconds)
        except Exception as e:
            logger.error(
                "Failed to log audit event",
                user_id=actor,
                event_type=event_type.value,
                error_type=type(e).__name__,
                error_message=str(e),
            )
        else:
            logger.debug("Audit event logged", user_id=actor, event_type=event_type.value)
