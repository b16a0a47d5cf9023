"""
DUKA Core Audit — Public API
===============================
Immutable audit entries and the sink they are written to.
"""

from core.audit.functions import AuditSink, InMemoryAuditSink, create_audit_entry
from core.audit.models import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_DELETE,
    AUDIT_ACTION_SUBMIT,
    AUDIT_ACTION_UPDATE,
    AuditEntry,
)

__all__ = [
    "AUDIT_ACTION_CREATE",
    "AUDIT_ACTION_UPDATE",
    "AUDIT_ACTION_SUBMIT",
    "AUDIT_ACTION_DELETE",
    "AuditEntry",
    "AuditSink",
    "InMemoryAuditSink",
    "create_audit_entry",
]
