"""
DUKA Daily Form Engine — Errors
==================================
Typed failures of the daily form lifecycle.

Every error carries a machine-readable code and converts into a
RejectionReason so the HTTP layer can map it without parsing text.
None of these are retried; the caller corrects input and re-requests.
"""

from __future__ import annotations

from typing import Any, Optional

from core.commands.rejection import ReasonCode, RejectionReason


class DailyFormError(Exception):
    """Base class for all daily form engine failures."""

    code = ReasonCode.INVALID_REQUEST
    policy_name = "daily_form_engine"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = dict(details or {})
        super().__init__(message)

    def to_rejection(self) -> RejectionReason:
        return RejectionReason(
            code=self.code,
            message=self.message,
            policy_name=self.policy_name,
            details=dict(self.details),
        )


class FormNotFoundError(DailyFormError):
    code = ReasonCode.FORM_NOT_FOUND
    policy_name = "daily_form_lookup"


class FormConflictError(DailyFormError):
    """Duplicate (business, date, shift) or stale version on save."""

    code = ReasonCode.FORM_CONFLICT
    policy_name = "daily_form_uniqueness"


class ForbiddenError(DailyFormError):
    code = ReasonCode.PERMISSION_DENIED
    policy_name = "daily_form_role_policy"


class InvalidStateError(ForbiddenError):
    """Mutation attempted on a form that is no longer a draft."""

    code = ReasonCode.FORM_NOT_DRAFT
    policy_name = "daily_form_state_guard"


class InvalidInputError(DailyFormError, ValueError):
    code = ReasonCode.INVALID_INPUT
    policy_name = "daily_form_input"


class SubmissionValidationError(DailyFormError):
    """A submission rule failed; the form stays in draft."""

    code = ReasonCode.VALIDATION_FAILED
    policy_name = "daily_form_submission_validator"

    def __init__(self, reason: RejectionReason):
        self.reason = reason
        super().__init__(reason.message, details=reason.details)

    def to_rejection(self) -> RejectionReason:
        return self.reason


class ProductNotFoundError(DailyFormError):
    code = ReasonCode.PRODUCT_NOT_FOUND
    policy_name = "product_lookup"


class ProductConflictError(FormConflictError):
    """item_code already used by another product of the business."""

    code = ReasonCode.PRODUCT_CONFLICT
    policy_name = "product_item_code_uniqueness"
