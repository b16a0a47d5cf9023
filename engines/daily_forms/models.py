"""
DUKA Daily Form Engine — Document Model
==========================================
One DailyForm per (business, date, shift).

The form has four tables and a header:
    supplier_entries  — deliveries received from suppliers
    items             — stock + sales line per catalog product
    expenses          — money paid out during the shift
    cash_summary      — derived totals plus the counted cash

RULES:
- All quantities and amounts are Decimal (exact, no float drift)
- Rows are frozen; every change produces a new form value
- item_code / item_name are fixed when the form is created
- Wire format uses camelCase keys and decimal strings

This file contains NO persistence logic and NO derivation logic.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional

from core.time.clock import format_business_date, parse_business_date
from engines.daily_forms.errors import InvalidInputError

ZERO = Decimal("0")

# Raw inputs stay below 10**15 with at most 15 decimal places.
# Derived totals are sums over rows and get a wider bound.
MAX_MAGNITUDE = 15
MAX_TOTAL_MAGNITUDE = 21
MAX_SCALE = 15


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class FormStatus(Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    LOCKED = "locked"          # schema-level terminal state, no transition leads here


class Shift(Enum):
    MORNING = "Morning"
    EVENING = "Evening"

    @classmethod
    def parse(cls, value) -> "Shift":
        if isinstance(value, Shift):
            return value
        if value is None or value == "":
            return cls.MORNING
        for shift in cls:
            if str(value).strip().lower() == shift.value.lower():
                return shift
        raise InvalidInputError(
            f"shift '{value}' not valid. Must be one of: "
            f"{[s.value for s in cls]}",
            details={"field": "shift"},
        )


class PaymentMethod(Enum):
    CASH = "cash"
    BANK = "bank"
    MOBILE = "mobile"
    OTHER = "other"

    @classmethod
    def parse(cls, value) -> "PaymentMethod":
        if isinstance(value, PaymentMethod):
            return value
        if value is None or value == "":
            return cls.CASH
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise InvalidInputError(
                f"paymentMethod '{value}' not valid. Must be one of: "
                f"{[m.value for m in cls]}",
                details={"field": "paymentMethod"},
            ) from exc


SHIFT_ORDER = {Shift.MORNING: 0, Shift.EVENING: 1}


# ══════════════════════════════════════════════════════════════
# VALUE COERCION
# ══════════════════════════════════════════════════════════════

def to_decimal(value: Any, field_name: str, max_magnitude: int = MAX_MAGNITUDE) -> Decimal:
    """
    Coerce a raw numeric input into Decimal.

    None and empty strings count as zero. Floats go through str()
    so 0.1 stays 0.1. Booleans, non-finite and out-of-range values
    are rejected.
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        raise InvalidInputError(
            f"{field_name} must be a number.", details={"field": field_name}
        )
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise InvalidInputError(
                f"{field_name} must be a number, got '{value}'.",
                details={"field": field_name},
            ) from exc
    else:
        raise InvalidInputError(
            f"{field_name} must be a number.", details={"field": field_name}
        )
    if not result.is_finite():
        raise InvalidInputError(
            f"{field_name} must be a finite number.", details={"field": field_name}
        )
    exponent = result.as_tuple().exponent
    if not result:
        return result if -MAX_SCALE <= exponent <= 0 else ZERO
    if result.adjusted() >= max_magnitude or exponent < -MAX_SCALE:
        raise InvalidInputError(
            f"{field_name} is out of range.", details={"field": field_name}
        )
    return result


def to_total(value: Any, field_name: str) -> Decimal:
    return to_decimal(value, field_name, max_magnitude=MAX_TOTAL_MAGNITUDE)


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def render_decimal(value: Decimal) -> str:
    return format(value, "f")


def _require_mapping(raw: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise InvalidInputError(f"{what} must be an object.", details={"field": what})
    return raw


# ══════════════════════════════════════════════════════════════
# ROWS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SupplierEntry:
    """One delivery from a supplier. bonus_qty is derived."""

    supplier_name: str = ""
    product: str = "Milk"
    ordered_qty: Decimal = ZERO
    actual_qty: Decimal = ZERO
    bonus_qty: Decimal = ZERO
    qty_after_boiling: Decimal = ZERO

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SupplierEntry":
        raw = _require_mapping(raw, "supplierEntries[]")
        return cls(
            supplier_name=to_text(raw.get("supplierName")),
            product=to_text(raw.get("product")) or "Milk",
            ordered_qty=to_decimal(raw.get("orderedQty"), "orderedQty"),
            actual_qty=to_decimal(raw.get("actualQty"), "actualQty"),
            bonus_qty=to_total(raw.get("bonusQty"), "bonusQty"),
            qty_after_boiling=to_decimal(raw.get("qtyAfterBoiling"), "qtyAfterBoiling"),
        )

    def to_dict(self) -> dict:
        return {
            "supplierName": self.supplier_name,
            "product": self.product,
            "orderedQty": render_decimal(self.ordered_qty),
            "actualQty": render_decimal(self.actual_qty),
            "bonusQty": render_decimal(self.bonus_qty),
            "qtyAfterBoiling": render_decimal(self.qty_after_boiling),
        }


# Raw value columns of an item row, wire name → attribute name.
ITEM_VALUE_FIELDS = {
    "openingStock": "opening_stock",
    "newStockIn": "new_stock_in",
    "spoiledDisposed": "spoiled_disposed",
    "qtySold": "qty_sold",
    "salesCash": "sales_cash",
    "salesBank": "sales_bank",
    "salesDebt": "sales_debt",
    "deviation": "deviation",
}


@dataclass(frozen=True)
class ItemRow:
    """Stock and sales line for one product. total_available and closing_stock are derived."""

    item_code: str
    item_name: str
    opening_stock: Decimal = ZERO
    new_stock_in: Decimal = ZERO
    spoiled_disposed: Decimal = ZERO
    total_available: Decimal = ZERO
    qty_sold: Decimal = ZERO
    sales_cash: Decimal = ZERO
    sales_bank: Decimal = ZERO
    sales_debt: Decimal = ZERO
    closing_stock: Decimal = ZERO
    deviation: Decimal = ZERO

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ItemRow":
        raw = _require_mapping(raw, "items[]")
        values = {
            attr: to_decimal(raw.get(wire), wire)
            for wire, attr in ITEM_VALUE_FIELDS.items()
        }
        return cls(
            item_code=to_text(raw.get("itemCode")),
            item_name=to_text(raw.get("itemName")),
            total_available=to_total(raw.get("totalAvailable"), "totalAvailable"),
            closing_stock=to_total(raw.get("closingStock"), "closingStock"),
            **values,
        )

    def to_dict(self) -> dict:
        return {
            "itemCode": self.item_code,
            "itemName": self.item_name,
            "openingStock": render_decimal(self.opening_stock),
            "newStockIn": render_decimal(self.new_stock_in),
            "spoiledDisposed": render_decimal(self.spoiled_disposed),
            "totalAvailable": render_decimal(self.total_available),
            "qtySold": render_decimal(self.qty_sold),
            "salesCash": render_decimal(self.sales_cash),
            "salesBank": render_decimal(self.sales_bank),
            "salesDebt": render_decimal(self.sales_debt),
            "closingStock": render_decimal(self.closing_stock),
            "deviation": render_decimal(self.deviation),
        }


@dataclass(frozen=True)
class ExpenseEntry:
    category: str
    description: str = ""
    amount: Decimal = ZERO
    payment_method: PaymentMethod = PaymentMethod.CASH

    def __post_init__(self):
        if not self.category:
            raise InvalidInputError(
                "Expense category is required.", details={"field": "category"}
            )

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ExpenseEntry":
        raw = _require_mapping(raw, "expenses[]")
        return cls(
            category=to_text(raw.get("category")),
            description=to_text(raw.get("description")),
            amount=to_decimal(raw.get("amount"), "amount"),
            payment_method=PaymentMethod.parse(raw.get("paymentMethod")),
        )

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "description": self.description,
            "amount": render_decimal(self.amount),
            "paymentMethod": self.payment_method.value,
        }


@dataclass(frozen=True)
class CashSummary:
    """
    Cash reconciliation block.

    Only actual_cash_counted and difference_explanation are raw input;
    every other field is recomputed from items and expenses.
    """

    total_cash_in: Decimal = ZERO
    total_bank_in: Decimal = ZERO
    total_debt: Decimal = ZERO
    total_expenses: Decimal = ZERO
    expected_cash_at_hand: Decimal = ZERO
    actual_cash_counted: Decimal = ZERO
    cash_difference: Decimal = ZERO
    difference_explanation: str = ""

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> "CashSummary":
        if raw is None:
            return cls()
        raw = _require_mapping(raw, "cashSummary")
        return cls(
            total_cash_in=to_total(raw.get("totalCashIn"), "totalCashIn"),
            total_bank_in=to_total(raw.get("totalBankIn"), "totalBankIn"),
            total_debt=to_total(raw.get("totalDebt"), "totalDebt"),
            total_expenses=to_total(raw.get("totalExpenses"), "totalExpenses"),
            expected_cash_at_hand=to_total(
                raw.get("expectedCashAtHand"), "expectedCashAtHand"
            ),
            actual_cash_counted=to_decimal(
                raw.get("actualCashCounted"), "actualCashCounted"
            ),
            cash_difference=to_total(raw.get("cashDifference"), "cashDifference"),
            difference_explanation=to_text(raw.get("differenceExplanation")),
        )

    def to_dict(self) -> dict:
        return {
            "totalCashIn": render_decimal(self.total_cash_in),
            "totalBankIn": render_decimal(self.total_bank_in),
            "totalDebt": render_decimal(self.total_debt),
            "totalExpenses": render_decimal(self.total_expenses),
            "expectedCashAtHand": render_decimal(self.expected_cash_at_hand),
            "actualCashCounted": render_decimal(self.actual_cash_counted),
            "cashDifference": render_decimal(self.cash_difference),
            "differenceExplanation": self.difference_explanation,
        }


# ══════════════════════════════════════════════════════════════
# FORM KEY + FORM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FormKey:
    """Uniqueness key: at most one form per business/date/shift."""

    business_id: uuid.UUID
    date: date
    shift: Shift


@dataclass(frozen=True)
class DailyForm:
    """
    Daily operational form.

    Fields:
        form_id:       Unique identifier.
        business_id:   Tenant boundary.
        date:          Calendar day the form covers.
        shift:         Morning | Evening.
        status:        draft | submitted | locked.
        recorded_by:   Actor that created the form.
        approved_by:   Actor that submitted it (None while draft).
        version:       Incremented on every save.
    """

    form_id: str
    business_id: uuid.UUID
    date: date
    shift: Shift
    recorded_by: str
    status: FormStatus = FormStatus.DRAFT
    approved_by: Optional[str] = None
    kplc_meter_opening: Decimal = ZERO
    kplc_meter_closing: Decimal = ZERO
    supplier_entries: tuple[SupplierEntry, ...] = ()
    items: tuple[ItemRow, ...] = ()
    expenses: tuple[ExpenseEntry, ...] = ()
    cash_summary: CashSummary = field(default_factory=CashSummary)
    notes: str = ""
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.form_id or not isinstance(self.form_id, str):
            raise ValueError("form_id must be a non-empty string.")
        if not isinstance(self.business_id, uuid.UUID):
            raise ValueError("business_id must be UUID.")
        if not isinstance(self.date, date) or isinstance(self.date, datetime):
            raise ValueError("date must be a date (not datetime).")
        if not isinstance(self.shift, Shift):
            raise ValueError("shift must be Shift enum.")
        if not isinstance(self.status, FormStatus):
            raise ValueError("status must be FormStatus enum.")
        for name in ("supplier_entries", "items", "expenses"):
            if not isinstance(getattr(self, name), tuple):
                raise ValueError(f"{name} must be a tuple.")
        if not isinstance(self.version, int) or self.version < 1:
            raise ValueError("version must be int >= 1.")

    @property
    def key(self) -> FormKey:
        return FormKey(business_id=self.business_id, date=self.date, shift=self.shift)

    @property
    def is_draft(self) -> bool:
        return self.status == FormStatus.DRAFT

    def item_codes(self) -> tuple[str, ...]:
        return tuple(item.item_code for item in self.items)

    def to_dict(self) -> dict:
        return {
            "id": self.form_id,
            "businessId": str(self.business_id),
            "date": format_business_date(self.date),
            "shift": self.shift.value,
            "status": self.status.value,
            "kplcMeterOpening": render_decimal(self.kplc_meter_opening),
            "kplcMeterClosing": render_decimal(self.kplc_meter_closing),
            "supplierEntries": [entry.to_dict() for entry in self.supplier_entries],
            "items": [item.to_dict() for item in self.items],
            "expenses": [expense.to_dict() for expense in self.expenses],
            "cashSummary": self.cash_summary.to_dict(),
            "notes": self.notes,
            "recordedBy": self.recorded_by,
            "approvedBy": self.approved_by,
            "version": self.version,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "DailyForm":
        """Rebuild a stored document. Derived values are taken as stored."""
        raw = _require_mapping(raw, "form")
        try:
            business_id = uuid.UUID(str(raw["businessId"]))
            form_date = parse_business_date(raw["date"])
            status = FormStatus(raw.get("status", FormStatus.DRAFT.value))
        except (KeyError, ValueError) as exc:
            raise InvalidInputError(f"Malformed daily form document: {exc}") from exc

        return cls(
            form_id=str(raw.get("id") or ""),
            business_id=business_id,
            date=form_date,
            shift=Shift.parse(raw.get("shift")),
            status=status,
            recorded_by=to_text(raw.get("recordedBy")),
            approved_by=raw.get("approvedBy") or None,
            kplc_meter_opening=to_decimal(raw.get("kplcMeterOpening"), "kplcMeterOpening"),
            kplc_meter_closing=to_decimal(raw.get("kplcMeterClosing"), "kplcMeterClosing"),
            supplier_entries=tuple(
                SupplierEntry.from_dict(entry) for entry in raw.get("supplierEntries") or ()
            ),
            items=tuple(ItemRow.from_dict(item) for item in raw.get("items") or ()),
            expenses=tuple(
                ExpenseEntry.from_dict(expense) for expense in raw.get("expenses") or ()
            ),
            cash_summary=CashSummary.from_dict(raw.get("cashSummary")),
            notes=to_text(raw.get("notes")),
            version=int(raw.get("version") or 1),
            created_at=_parse_optional_datetime(raw.get("createdAt")),
            updated_at=_parse_optional_datetime(raw.get("updatedAt")),
        )


def _parse_optional_datetime(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
