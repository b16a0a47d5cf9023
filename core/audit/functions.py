"""
DUKA Core Audit — Audit Entry Factory and Sinks
==================================================
Writing audit entries to durable storage is an external concern.
The engine only talks to an AuditSink; the in-memory sink serves
local runs and tests.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime
from typing import Optional, Protocol

from core.audit.models import AuditEntry


def create_audit_entry(
    business_id: uuid.UUID,
    actor_id: str,
    action: str,
    record_type: str,
    record_id: str,
    occurred_at: datetime,
    description: str = "",
    metadata: Optional[dict] = None,
) -> AuditEntry:
    """Create an immutable audit entry."""
    return AuditEntry(
        entry_id=uuid.uuid4(),
        business_id=business_id,
        actor_id=actor_id,
        action=action,
        record_type=record_type,
        record_id=record_id,
        description=description,
        occurred_at=occurred_at,
        metadata=metadata or {},
    )


class AuditSink(Protocol):
    def record(self, entry: AuditEntry) -> None:
        ...


class InMemoryAuditSink:
    """Append-only in-memory audit trail."""

    def __init__(self):
        self._entries: list[AuditEntry] = []
        self._lock = threading.Lock()

    def record(self, entry: AuditEntry) -> None:
        if not isinstance(entry, AuditEntry):
            raise TypeError("entry must be AuditEntry.")
        with self._lock:
            self._entries.append(entry)

    def entries_for_business(self, business_id: uuid.UUID) -> tuple[AuditEntry, ...]:
        with self._lock:
            return tuple(e for e in self._entries if e.business_id == business_id)

    @property
    def entries(self) -> tuple[AuditEntry, ...]:
        with self._lock:
            return tuple(self._entries)
