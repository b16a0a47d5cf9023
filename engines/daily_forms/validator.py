"""
DUKA Daily Form Engine — Submission Validator
================================================
Rules that gate the draft → submitted transition.

Runs against a fully recomputed form. Checks run in a fixed order
and the first failure wins, so the cashier always gets one concrete
thing to fix. Row numbers in messages are 1-based.

The validator never mutates the form.
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from engines.daily_forms.models import ZERO, DailyForm

POLICY_NAME = "daily_form_submission_validator"


def _fail(message: str, **details) -> RejectionReason:
    return RejectionReason(
        code=ReasonCode.VALIDATION_FAILED,
        message=message,
        policy_name=POLICY_NAME,
        details=details,
    )


def _check_supplier_entries(form: DailyForm) -> Optional[RejectionReason]:
    if not form.supplier_entries:
        return _fail("Add at least one supplier entry.", table="supplierEntries")

    for index, entry in enumerate(form.supplier_entries, start=1):
        if not entry.supplier_name.strip():
            return _fail(
                f"Supplier row {index}: Supplier Name is required.",
                table="supplierEntries", row=index, field="supplierName",
            )
        if entry.ordered_qty <= ZERO:
            return _fail(
                f"Supplier row {index}: Ordered Qty must be > 0.",
                table="supplierEntries", row=index, field="orderedQty",
            )
        if entry.actual_qty <= ZERO:
            return _fail(
                f"Supplier row {index}: Actual Qty must be > 0.",
                table="supplierEntries", row=index, field="actualQty",
            )
    return None


def _check_items(form: DailyForm) -> Optional[RejectionReason]:
    if not form.items:
        return _fail("Add at least one item row in the stock table.", table="items")

    for index, item in enumerate(form.items, start=1):
        if not item.item_code.strip():
            return _fail(
                f"Item row {index}: Item Code is required.",
                table="items", row=index, field="itemCode",
            )
        if not item.item_name.strip():
            return _fail(
                f"Item row {index}: Item Name is required.",
                table="items", row=index, field="itemName",
            )
    return None


def _check_oversell(form: DailyForm) -> Optional[RejectionReason]:
    for index, item in enumerate(form.items, start=1):
        if item.qty_sold > item.total_available:
            return _fail(
                f"Item {item.item_code}: Qty sold exceeds available stock.",
                table="items", row=index, field="qtySold", itemCode=item.item_code,
            )
    return None


def _check_cash_difference(form: DailyForm) -> Optional[RejectionReason]:
    summary = form.cash_summary
    if summary.cash_difference != ZERO and not summary.difference_explanation.strip():
        return _fail(
            "Cash difference is not zero. Provide explanation.",
            table="cashSummary", field="differenceExplanation",
        )
    return None


SUBMISSION_CHECKS = (
    _check_supplier_entries,
    _check_items,
    _check_oversell,
    _check_cash_difference,
)


def validate_submission(form: DailyForm) -> Optional[RejectionReason]:
    """Return the first failed rule, or None when the form may be submitted."""
    for check in SUBMISSION_CHECKS:
        rejection = check(form)
        if rejection is not None:
            return rejection
    return None
