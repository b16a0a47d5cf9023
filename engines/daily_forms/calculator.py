"""
DUKA Daily Form Engine — Derived-Value Calculator
====================================================
Pure, deterministic recomputation of every derived field.

Used by the authoritative save path and by the preview endpoint,
so the numbers a cashier sees while typing are the numbers that
get stored.

Derivation rules:
    supplier row   bonus = actual − ordered          (may be negative)
    item row       available = max(0, opening + in − spoiled)
                   closing   = max(0, available − sold)
    cash summary   cash/bank/debt = sums over item rows
                   expenses       = sum of expense amounts
                   expected       = cash − expenses
                   difference     = counted − expected

Stock values that would go negative are clamped to zero, never
reported. Cash values are plain Decimal arithmetic, no rounding.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable

from engines.daily_forms.models import (
    ZERO,
    CashSummary,
    DailyForm,
    ExpenseEntry,
    ItemRow,
    SupplierEntry,
)


def compute_supplier_entry(entry: SupplierEntry) -> SupplierEntry:
    return replace(entry, bonus_qty=entry.actual_qty - entry.ordered_qty)


def compute_item_row(row: ItemRow) -> ItemRow:
    total_available = max(
        ZERO, row.opening_stock + row.new_stock_in - row.spoiled_disposed
    )
    closing_stock = max(ZERO, total_available - row.qty_sold)
    return replace(
        row,
        total_available=total_available,
        closing_stock=closing_stock,
    )


def _total(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def compute_cash_summary(
    items: Iterable[ItemRow],
    expenses: Iterable[ExpenseEntry],
    cash_summary: CashSummary,
) -> CashSummary:
    items = tuple(items)
    total_cash_in = _total(item.sales_cash for item in items)
    total_bank_in = _total(item.sales_bank for item in items)
    total_debt = _total(item.sales_debt for item in items)
    total_expenses = _total(expense.amount for expense in expenses)

    expected_cash_at_hand = total_cash_in - total_expenses
    cash_difference = cash_summary.actual_cash_counted - expected_cash_at_hand

    return replace(
        cash_summary,
        total_cash_in=total_cash_in,
        total_bank_in=total_bank_in,
        total_debt=total_debt,
        total_expenses=total_expenses,
        expected_cash_at_hand=expected_cash_at_hand,
        cash_difference=cash_difference,
    )


@dataclass(frozen=True)
class DerivedValues:
    """Recomputed tables, independent of any stored form."""

    supplier_entries: tuple[SupplierEntry, ...]
    items: tuple[ItemRow, ...]
    expenses: tuple[ExpenseEntry, ...]
    cash_summary: CashSummary

    def to_dict(self) -> dict:
        return {
            "supplierEntries": [entry.to_dict() for entry in self.supplier_entries],
            "items": [item.to_dict() for item in self.items],
            "expenses": [expense.to_dict() for expense in self.expenses],
            "cashSummary": self.cash_summary.to_dict(),
        }


def compute_values(
    supplier_entries: Iterable[SupplierEntry],
    items: Iterable[ItemRow],
    expenses: Iterable[ExpenseEntry],
    cash_summary: CashSummary,
) -> DerivedValues:
    computed_items = tuple(compute_item_row(item) for item in items)
    expenses = tuple(expenses)
    return DerivedValues(
        supplier_entries=tuple(
            compute_supplier_entry(entry) for entry in supplier_entries
        ),
        items=computed_items,
        expenses=expenses,
        cash_summary=compute_cash_summary(computed_items, expenses, cash_summary),
    )


def compute_derived(form: DailyForm) -> DailyForm:
    """Return `form` with every derived field recomputed from its raw inputs."""
    values = compute_values(
        form.supplier_entries,
        form.items,
        form.expenses,
        form.cash_summary,
    )
    return replace(
        form,
        supplier_entries=values.supplier_entries,
        items=values.items,
        cash_summary=values.cash_summary,
    )
