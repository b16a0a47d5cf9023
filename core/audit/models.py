"""
DUKA Core Audit — Immutable Audit Models
===========================================
Append-only audit log entries.
Frozen dataclasses — once created, never modified.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime

AUDIT_ACTION_CREATE = "create"
AUDIT_ACTION_UPDATE = "update"
AUDIT_ACTION_SUBMIT = "submit"
AUDIT_ACTION_DELETE = "delete"

VALID_AUDIT_ACTIONS = frozenset({
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_UPDATE,
    AUDIT_ACTION_SUBMIT,
    AUDIT_ACTION_DELETE,
})


# ══════════════════════════════════════════════════════════════
# AUDIT LOG ENTRY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AuditEntry:
    """
    Immutable record of a state-changing action.

    Fields:
        entry_id:     Unique identifier.
        business_id:  Tenant boundary.
        actor_id:     Who performed the action.
        action:       create | update | submit | delete.
        record_type:  Kind of record touched (e.g. 'DailyForm').
        record_id:    Identifier of the record touched.
        description:  Human-readable summary.
        occurred_at:  When the action completed.
        metadata:     Structured extras (dropped fields, status, ...).
    """

    entry_id: uuid.UUID
    business_id: uuid.UUID
    actor_id: str
    action: str
    record_type: str
    record_id: str
    description: str
    occurred_at: datetime
    metadata: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.action not in VALID_AUDIT_ACTIONS:
            raise ValueError(
                f"AuditEntry action must be one of {sorted(VALID_AUDIT_ACTIONS)}, "
                f"got '{self.action}'."
            )
        if not self.record_type:
            raise ValueError("record_type must be non-empty.")

    def to_dict(self) -> dict:
        return {
            "entry_id": str(self.entry_id),
            "business_id": str(self.business_id),
            "actor_id": self.actor_id,
            "action": self.action,
            "record_type": self.record_type,
            "record_id": self.record_id,
            "description": self.description,
            "occurred_at": self.occurred_at.isoformat(),
            "metadata": dict(self.metadata),
        }
