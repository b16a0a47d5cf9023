"""
DUKA Daily Form Engine — Role-Scoped Mutation Policy
=======================================================
Declarative tables deciding what each role may write and do.

Field paths:
    "notes"                        top-level field
    "items.qtySold"                value column of an existing item row
    "cashSummary.actualCashCounted" raw input inside the cash summary

Whole-table paths ("supplierEntries", "expenses") replace the table.
Item rows are matched by itemCode; rows are never added or removed
and itemCode / itemName are never writable by anyone.

Anything outside the role's writable set is dropped and reported
back as a dropped path; the caller decides whether that is an error.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.context.actor_context import ROLE_CASHIER, ROLE_MANAGER, ROLE_OWNER
from engines.daily_forms.errors import InvalidInputError
from engines.daily_forms.models import (
    ITEM_VALUE_FIELDS,
    DailyForm,
    ExpenseEntry,
    SupplierEntry,
    to_decimal,
    to_text,
)


# ══════════════════════════════════════════════════════════════
# ACTIONS
# ══════════════════════════════════════════════════════════════

ACTION_CREATE = "create"
ACTION_EDIT = "edit"
ACTION_SUBMIT = "submit"
ACTION_DELETE = "delete"
ACTION_MANAGE_PRODUCTS = "manage_products"

ROLE_ACTIONS: dict[str, frozenset[str]] = {
    ROLE_CASHIER: frozenset({ACTION_EDIT}),
    ROLE_MANAGER: frozenset({
        ACTION_CREATE, ACTION_EDIT, ACTION_SUBMIT, ACTION_MANAGE_PRODUCTS,
    }),
    ROLE_OWNER: frozenset({
        ACTION_CREATE, ACTION_EDIT, ACTION_SUBMIT, ACTION_DELETE, ACTION_MANAGE_PRODUCTS,
    }),
}

ACTION_DESCRIPTIONS = {
    ACTION_CREATE: "create daily forms",
    ACTION_EDIT: "edit daily forms",
    ACTION_SUBMIT: "submit daily forms",
    ACTION_DELETE: "delete daily forms",
    ACTION_MANAGE_PRODUCTS: "manage products",
}


# ══════════════════════════════════════════════════════════════
# WRITABLE FIELDS
# ══════════════════════════════════════════════════════════════

CASH_COUNT_FIELDS = frozenset({
    "cashSummary.actualCashCounted",
    "cashSummary.differenceExplanation",
})

EDITABLE_FIELDS = frozenset({
    "supplierEntries",
    "expenses",
    "kplcMeterOpening",
    "kplcMeterClosing",
    "notes",
    *(f"items.{name}" for name in ITEM_VALUE_FIELDS),
    *CASH_COUNT_FIELDS,
})

ROLE_WRITABLE_FIELDS: dict[str, frozenset[str]] = {
    ROLE_CASHIER: EDITABLE_FIELDS,
    ROLE_MANAGER: EDITABLE_FIELDS,
    ROLE_OWNER: EDITABLE_FIELDS,
}

# The final patch sent with a submission: cash count and notes only.
SUBMIT_WRITABLE_FIELDS = frozenset({"notes", *CASH_COUNT_FIELDS})


def role_may(role: str, action: str) -> bool:
    return action in ROLE_ACTIONS.get(role, frozenset())


def check_role_action(role: str, action: str) -> Optional[RejectionReason]:
    """Reject when `role` may not perform `action`."""
    if role_may(role, action):
        return None
    allowed = sorted(r for r, actions in ROLE_ACTIONS.items() if action in actions)
    return RejectionReason(
        code=ReasonCode.PERMISSION_DENIED,
        message=f"Only {'/'.join(allowed)} can {ACTION_DESCRIPTIONS.get(action, action)}.",
        policy_name="check_role_action",
        details={"role": role, "action": action},
    )


# ══════════════════════════════════════════════════════════════
# PATCH FILTERING
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FilteredPatch:
    """
    Outcome of filtering a raw patch.

    accepted keeps the raw patch shape, restricted to writable paths.
    dropped lists every path that was present but not writable.
    """

    accepted: dict
    dropped: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.accepted


def _filter_items(
    raw_items: Any,
    writable: frozenset[str],
    dropped: list[str],
    item_codes: Optional[frozenset[str]] = None,
) -> list[dict]:
    if not isinstance(raw_items, list):
        raise InvalidInputError("items must be a list.", details={"field": "items"})

    accepted: list[dict] = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, Mapping):
            raise InvalidInputError(
                "items entries must be objects.", details={"field": f"items[{index}]"}
            )
        code = to_text(raw.get("itemCode"))
        if not code:
            dropped.append(f"items[{index}]")
            continue
        if item_codes is not None and code not in item_codes:
            dropped.append(f"items[{code}]")
            continue

        values = {}
        for name, value in raw.items():
            if name == "itemCode":
                continue
            path = f"items.{name}"
            if path in writable:
                values[name] = value
            else:
                dropped.append(path)
        if values:
            accepted.append({"itemCode": code, **values})
    return accepted


def _filter_cash_summary(raw: Any, writable: frozenset[str], dropped: list[str]) -> dict:
    if not isinstance(raw, Mapping):
        raise InvalidInputError(
            "cashSummary must be an object.", details={"field": "cashSummary"}
        )
    accepted = {}
    for name, value in raw.items():
        path = f"cashSummary.{name}"
        if path in writable:
            accepted[name] = value
        else:
            dropped.append(path)
    return accepted


def filter_patch(
    role: str,
    patch: Mapping[str, Any],
    writable: Optional[frozenset[str]] = None,
    item_codes: Optional[frozenset[str]] = None,
) -> FilteredPatch:
    """
    Restrict `patch` to what `role` may write.

    `writable` narrows the role's set further (e.g. submit-time patch).
    `item_codes` are the rows of the target form; item patches naming
    any other code are dropped as "items[<code>]".
    A null "items" or "cashSummary" changes nothing.
    """
    if not isinstance(patch, Mapping):
        raise InvalidInputError("patch must be an object.")

    allowed = ROLE_WRITABLE_FIELDS.get(role, frozenset())
    if writable is not None:
        allowed = allowed & writable

    accepted: dict[str, Any] = {}
    dropped: list[str] = []

    for key, value in patch.items():
        if key in ("items", "cashSummary") and value is None:
            continue
        if key == "items":
            items = _filter_items(value, allowed, dropped, item_codes)
            if items:
                accepted["items"] = items
        elif key == "cashSummary":
            summary = _filter_cash_summary(value, allowed, dropped)
            if summary:
                accepted["cashSummary"] = summary
        elif key in allowed:
            accepted[key] = value
        else:
            dropped.append(key)

    return FilteredPatch(
        accepted=accepted,
        dropped=tuple(dict.fromkeys(dropped)),
    )


# ══════════════════════════════════════════════════════════════
# MERGE
# ══════════════════════════════════════════════════════════════

def _merge_items(form: DailyForm, item_patches: list[dict]) -> tuple:
    patch_by_code = {entry["itemCode"]: entry for entry in item_patches}
    merged = []
    for item in form.items:
        entry = patch_by_code.get(item.item_code)
        if entry is None:
            merged.append(item)
            continue
        changes = {
            ITEM_VALUE_FIELDS[name]: to_decimal(value, name)
            for name, value in entry.items()
            if name in ITEM_VALUE_FIELDS and value is not None
        }
        merged.append(replace(item, **changes))
    return tuple(merged)


def _table(value: Any, name: str, row_type) -> tuple:
    if not isinstance(value, list):
        raise InvalidInputError(f"{name} must be a list.", details={"field": name})
    return tuple(row_type.from_dict(row) for row in value)


def merge_patch(form: DailyForm, accepted: Mapping[str, Any]) -> DailyForm:
    """
    Merge an already-filtered patch into `form`.

    Derived fields are left stale; run the calculator afterwards.
    A None value keeps the current value.
    """
    changes: dict[str, Any] = {}

    if accepted.get("supplierEntries") is not None:
        changes["supplier_entries"] = _table(
            accepted["supplierEntries"], "supplierEntries", SupplierEntry
        )
    if accepted.get("expenses") is not None:
        changes["expenses"] = _table(accepted["expenses"], "expenses", ExpenseEntry)
    if accepted.get("items") is not None:
        changes["items"] = _merge_items(form, accepted["items"])

    for wire, attr in (
        ("kplcMeterOpening", "kplc_meter_opening"),
        ("kplcMeterClosing", "kplc_meter_closing"),
    ):
        if accepted.get(wire) is not None:
            changes[attr] = to_decimal(accepted[wire], wire)

    if accepted.get("notes") is not None:
        changes["notes"] = to_text(accepted["notes"])

    summary_patch = accepted.get("cashSummary") or {}
    summary_changes = {}
    if summary_patch.get("actualCashCounted") is not None:
        summary_changes["actual_cash_counted"] = to_decimal(
            summary_patch["actualCashCounted"], "actualCashCounted"
        )
    if summary_patch.get("differenceExplanation") is not None:
        summary_changes["difference_explanation"] = to_text(
            summary_patch["differenceExplanation"]
        )
    if summary_changes:
        changes["cash_summary"] = replace(form.cash_summary, **summary_changes)

    if not changes:
        return form
    return replace(form, **changes)
