"""
Tests for engines.daily_forms.policy — role actions, patch filter, merge.
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest

from core.commands.rejection import ReasonCode
from core.context.actor_context import ROLE_CASHIER, ROLE_MANAGER, ROLE_OWNER
from engines.daily_forms.errors import InvalidInputError
from engines.daily_forms.models import DailyForm, ItemRow, PaymentMethod, Shift
from engines.daily_forms.policy import (
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_EDIT,
    ACTION_MANAGE_PRODUCTS,
    ACTION_SUBMIT,
    SUBMIT_WRITABLE_FIELDS,
    check_role_action,
    filter_patch,
    merge_patch,
    role_may,
)

BUSINESS_ID = uuid.uuid5(uuid.NAMESPACE_URL, "duka-policy-business")


def _form() -> DailyForm:
    return DailyForm(
        form_id="form-pol-1",
        business_id=BUSINESS_ID,
        date=date(2025, 1, 1),
        shift=Shift.MORNING,
        recorded_by="manager-1",
        items=(
            ItemRow(item_code="MLK", item_name="Milk", opening_stock=Decimal("4")),
            ItemRow(item_code="YGT", item_name="Yoghurt"),
        ),
    )


class TestRoleActions:
    @pytest.mark.parametrize(
        "role,action,allowed",
        [
            (ROLE_CASHIER, ACTION_EDIT, True),
            (ROLE_CASHIER, ACTION_CREATE, False),
            (ROLE_CASHIER, ACTION_SUBMIT, False),
            (ROLE_CASHIER, ACTION_DELETE, False),
            (ROLE_MANAGER, ACTION_CREATE, True),
            (ROLE_MANAGER, ACTION_SUBMIT, True),
            (ROLE_MANAGER, ACTION_DELETE, False),
            (ROLE_OWNER, ACTION_DELETE, True),
            (ROLE_CASHIER, ACTION_MANAGE_PRODUCTS, False),
            (ROLE_MANAGER, ACTION_MANAGE_PRODUCTS, True),
            (ROLE_OWNER, ACTION_MANAGE_PRODUCTS, True),
        ],
    )
    def test_matrix(self, role, action, allowed):
        assert role_may(role, action) is allowed

    def test_rejection_names_allowed_roles(self):
        rejection = check_role_action(ROLE_CASHIER, ACTION_SUBMIT)
        assert rejection.code == ReasonCode.PERMISSION_DENIED
        assert rejection.message == "Only manager/owner can submit daily forms."

    def test_allowed_action_has_no_rejection(self):
        assert check_role_action(ROLE_OWNER, ACTION_DELETE) is None

    def test_unknown_role_denied(self):
        assert role_may("auditor", ACTION_EDIT) is False


class TestFilterPatch:
    def test_keeps_writable_fields(self):
        result = filter_patch(
            ROLE_CASHIER,
            {
                "notes": "ok",
                "kplcMeterOpening": 100,
                "items": [{"itemCode": "MLK", "qtySold": 2}],
                "cashSummary": {"actualCashCounted": 40},
            },
        )
        assert result.dropped == ()
        assert result.accepted["items"] == [{"itemCode": "MLK", "qtySold": 2}]
        assert result.accepted["cashSummary"] == {"actualCashCounted": 40}

    def test_drops_structural_and_derived_fields(self):
        result = filter_patch(
            ROLE_OWNER,
            {
                "status": "submitted",
                "date": "2030-01-01",
                "approvedBy": "me",
                "items": [{"itemCode": "MLK", "itemName": "Renamed", "closingStock": 99}],
                "cashSummary": {"cashDifference": 0, "totalCashIn": 1},
            },
        )
        assert result.accepted == {}
        assert set(result.dropped) == {
            "status",
            "date",
            "approvedBy",
            "items.itemName",
            "items.closingStock",
            "cashSummary.cashDifference",
            "cashSummary.totalCashIn",
        }

    def test_item_without_code_is_dropped(self):
        result = filter_patch(ROLE_CASHIER, {"items": [{"qtySold": 2}]})
        assert "items" not in result.accepted
        assert result.dropped == ("items[0]",)

    def test_submit_subset(self):
        result = filter_patch(
            ROLE_MANAGER,
            {"notes": "n", "expenses": [], "cashSummary": {"actualCashCounted": 1}},
            writable=SUBMIT_WRITABLE_FIELDS,
        )
        assert result.accepted == {"notes": "n", "cashSummary": {"actualCashCounted": 1}}
        assert result.dropped == ("expenses",)

    def test_non_object_patch_rejected(self):
        with pytest.raises(InvalidInputError):
            filter_patch(ROLE_CASHIER, ["notes"])

    def test_items_must_be_list(self):
        with pytest.raises(InvalidInputError, match="items must be a list"):
            filter_patch(ROLE_CASHIER, {"items": {"itemCode": "MLK"}})

    def test_null_items_is_no_change(self):
        result = filter_patch(ROLE_CASHIER, {"items": None, "notes": "n"})
        assert result.accepted == {"notes": "n"}
        assert result.dropped == ()

    def test_unknown_item_code_reported_as_dropped(self):
        result = filter_patch(
            ROLE_CASHIER,
            {"items": [{"itemCode": "MLK", "qtySold": 1}, {"itemCode": "ZZZ", "qtySold": 1}]},
            item_codes=frozenset({"MLK", "YGT"}),
        )
        assert result.accepted["items"] == [{"itemCode": "MLK", "qtySold": 1}]
        assert result.dropped == ("items[ZZZ]",)


class TestMergePatch:
    def test_items_merged_by_code(self):
        merged = merge_patch(_form(), {"items": [{"itemCode": "YGT", "qtySold": "3"}]})
        assert merged.items[0].opening_stock == Decimal("4")
        assert merged.items[1].qty_sold == Decimal("3")
        assert merged.item_codes() == ("MLK", "YGT")

    def test_unknown_item_code_adds_no_row(self):
        merged = merge_patch(_form(), {"items": [{"itemCode": "NEW", "qtySold": 1}]})
        assert merged.item_codes() == ("MLK", "YGT")

    def test_null_value_keeps_existing(self):
        merged = merge_patch(_form(), {"items": [{"itemCode": "MLK", "openingStock": None}]})
        assert merged.items[0].opening_stock == Decimal("4")

    def test_tables_are_replaced(self):
        merged = merge_patch(
            _form(),
            {
                "supplierEntries": [{"supplierName": "A", "orderedQty": 5, "actualQty": 6}],
                "expenses": [{"category": "fuel", "amount": "12.50", "paymentMethod": "mobile"}],
            },
        )
        assert merged.supplier_entries[0].supplier_name == "A"
        assert merged.expenses[0].amount == Decimal("12.50")
        assert merged.expenses[0].payment_method is PaymentMethod.MOBILE

    def test_cash_count_and_notes(self):
        merged = merge_patch(
            _form(),
            {
                "notes": " till was short ",
                "cashSummary": {"actualCashCounted": "30", "differenceExplanation": "change"},
            },
        )
        assert merged.notes == "till was short"
        assert merged.cash_summary.actual_cash_counted == Decimal("30")
        assert merged.cash_summary.difference_explanation == "change"

    def test_null_table_keeps_rows(self):
        form = merge_patch(
            _form(),
            {
                "supplierEntries": [{"supplierName": "A", "orderedQty": 5, "actualQty": 5}],
                "expenses": [{"category": "fuel", "amount": 3}],
            },
        )
        merged = merge_patch(form, {"supplierEntries": None, "expenses": None, "notes": "x"})
        assert len(merged.supplier_entries) == 1
        assert len(merged.expenses) == 1
        assert merged.notes == "x"

    def test_empty_table_clears_rows(self):
        form = merge_patch(_form(), {"expenses": [{"category": "fuel", "amount": 3}]})
        assert merge_patch(form, {"expenses": []}).expenses == ()

    def test_empty_patch_returns_same_form(self):
        form = _form()
        assert merge_patch(form, {}) is form

    def test_bad_number_rejected(self):
        with pytest.raises(InvalidInputError, match="qtySold"):
            merge_patch(_form(), {"items": [{"itemCode": "MLK", "qtySold": "lots"}]})
