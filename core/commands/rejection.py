"""
DUKA Command Layer — Rejection Model
=======================================
Structured rejection reasons for denied requests.

Every rejection must be:
- Deterministic (same input → same rejection)
- Auditable (code + message + policy)
- Machine-readable (reason_code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for request rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'FORM_NOT_DRAFT').
        message:     Human-readable explanation.
        policy_name: Name of the policy or guard that caused rejection.
        details:     Optional structured context (row index, item code, ...).
    """

    code: str
    message: str
    policy_name: str
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

        if not isinstance(self.details, dict):
            raise ValueError("details must be a dict.")

    def to_dict(self) -> dict:
        """Serialize for audit metadata and transport."""
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
            "details": dict(self.details),
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Identity / authorization ──────────────────────────────
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_INVALID = "AUTH_INVALID"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    # ── Request structure ─────────────────────────────────────
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_INPUT = "INVALID_INPUT"

    # ── Daily form lifecycle ──────────────────────────────────
    FORM_NOT_FOUND = "FORM_NOT_FOUND"
    FORM_CONFLICT = "FORM_CONFLICT"
    FORM_NOT_DRAFT = "FORM_NOT_DRAFT"
    VALIDATION_FAILED = "VALIDATION_FAILED"

    # ── Product catalog ───────────────────────────────────────
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PRODUCT_CONFLICT = "PRODUCT_CONFLICT"

    # ── Transport ─────────────────────────────────────────────
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
