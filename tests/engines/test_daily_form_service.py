"""
Tests for engines.daily_forms.service — form lifecycle.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from itertools import count

import pytest

from core.audit import InMemoryAuditSink
from core.catalog import InMemoryProductCatalog, Product
from core.context.actor_context import ActorContext
from core.time.clock import FixedClock
from engines.daily_forms import (
    DailyFormEngineConfig,
    DailyFormService,
    ForbiddenError,
    FormConflictError,
    FormNotFoundError,
    FormStatus,
    InMemoryDailyFormRepository,
    InvalidInputError,
    InvalidStateError,
    Shift,
    SubmissionValidationError,
)

BUSINESS_ID = uuid.uuid5(uuid.NAMESPACE_URL, "duka-service-business")
OTHER_BUSINESS_ID = uuid.uuid5(uuid.NAMESPACE_URL, "duka-service-other-business")
NOW = datetime(2025, 1, 1, 6, 0, tzinfo=timezone.utc)

OWNER = ActorContext(actor_id="owner-1", business_id=BUSINESS_ID, role="owner")
MANAGER = ActorContext(actor_id="manager-1", business_id=BUSINESS_ID, role="manager")
CASHIER = ActorContext(actor_id="cashier-1", business_id=BUSINESS_ID, role="cashier")
OTHER_OWNER = ActorContext(actor_id="owner-2", business_id=OTHER_BUSINESS_ID, role="owner")

PRODUCTS = (
    Product(product_id="p-mlk", business_id=BUSINESS_ID, item_code="MLK", name="Milk 500ml"),
    Product(product_id="p-ygt", business_id=BUSINESS_ID, item_code="YGT", name="Yoghurt"),
    Product(
        product_id="p-old",
        business_id=BUSINESS_ID,
        item_code="OLD",
        name="Discontinued",
        is_active=False,
    ),
)

SUPPLIER_PATCH = {
    "supplierEntries": [{"supplierName": "Kinangop Dairy", "orderedQty": 100, "actualQty": 90}],
}


@pytest.fixture
def audit_sink():
    return InMemoryAuditSink()


@pytest.fixture
def service(audit_sink):
    ids = count(1)
    return DailyFormService(
        repository=InMemoryDailyFormRepository(),
        catalog=InMemoryProductCatalog(PRODUCTS),
        audit_sink=audit_sink,
        clock=FixedClock(NOW),
        id_factory=lambda: f"form-{next(ids)}",
    )


def _ready_form(service):
    form = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
    return service.apply_patch(
        CASHIER,
        form.form_id,
        {
            **SUPPLIER_PATCH,
            "items": [
                {"itemCode": "MLK", "openingStock": 20, "qtySold": 10,
                 "salesCash": 50, "salesBank": 20, "salesDebt": 5},
            ],
            "expenses": [{"category": "transport", "amount": 10}],
        },
    )


class _SubmitDuringSave(InMemoryDailyFormRepository):
    """Runs a hook (e.g. another actor's submit) right before the next save lands."""

    def __init__(self):
        super().__init__()
        self.before_save = None

    def save(self, form, expected_version=None, require_draft=True):
        hook, self.before_save = self.before_save, None
        if hook is not None:
            hook()
        return super().save(form, expected_version=expected_version, require_draft=require_draft)


class TestCreate:
    def test_creates_draft_from_active_products(self, service):
        form = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        assert form.status is FormStatus.DRAFT
        assert form.item_codes() == ("MLK", "YGT")
        assert form.recorded_by == "manager-1"
        assert form.version == 1
        assert form.supplier_entries == ()
        assert form.items[0].item_name == "Milk 500ml"
        assert form.items[0].opening_stock == Decimal("0")

    def test_product_ids_narrow_snapshot(self, service):
        form = service.create_from_catalog(OWNER, "2025-01-01", None, product_ids=["p-ygt"])
        assert form.item_codes() == ("YGT",)
        assert form.shift is Shift.MORNING

    def test_datetime_string_keys_by_day(self, service):
        form = service.create_from_catalog(MANAGER, "2025-01-01T17:45:00Z", "evening")
        assert form.date == date(2025, 1, 1)
        assert form.shift is Shift.EVENING

    def test_duplicate_key_conflicts(self, service):
        service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        with pytest.raises(FormConflictError):
            service.create_from_catalog(OWNER, date(2025, 1, 1), "Morning")

    def test_other_shift_is_a_different_form(self, service):
        service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        evening = service.create_from_catalog(MANAGER, "2025-01-01", "Evening")
        assert evening.shift is Shift.EVENING

    def test_cashier_cannot_create(self, service):
        with pytest.raises(ForbiddenError):
            service.create_from_catalog(CASHIER, "2025-01-01", "Morning")

    def test_no_active_products(self, service):
        with pytest.raises(InvalidInputError, match="No active products"):
            service.create_from_catalog(MANAGER, "2025-01-01", "Morning", product_ids=["p-old"])

    def test_bad_date(self, service):
        with pytest.raises(InvalidInputError):
            service.create_from_catalog(MANAGER, "not-a-date", "Morning")

    def test_bad_shift(self, service):
        with pytest.raises(InvalidInputError):
            service.create_from_catalog(MANAGER, "2025-01-01", "Night")

    def test_later_catalog_change_does_not_reach_form(self, service):
        catalog = InMemoryProductCatalog(PRODUCTS)
        svc = DailyFormService(repository=InMemoryDailyFormRepository(), catalog=catalog)
        form = svc.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        catalog.add(Product(product_id="p-new", business_id=BUSINESS_ID, item_code="NEW", name="New"))
        assert svc.get(BUSINESS_ID, form.form_id).item_codes() == ("MLK", "YGT")


class TestReads:
    def test_load_or_not_found_never_creates(self, service):
        with pytest.raises(FormNotFoundError, match="not created yet"):
            service.load_or_not_found(BUSINESS_ID, "2025-01-01", "Morning")
        page = service.list_forms(BUSINESS_ID)
        assert page.total == 0

    def test_load_returns_existing(self, service):
        created = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        loaded = service.load_or_not_found(BUSINESS_ID, "2025-01-01", "morning")
        assert loaded.form_id == created.form_id

    def test_tenant_isolation(self, service):
        form = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        with pytest.raises(FormNotFoundError):
            service.get(OTHER_BUSINESS_ID, form.form_id)
        with pytest.raises(FormNotFoundError):
            service.apply_patch(OTHER_OWNER, form.form_id, {"notes": "x"})

    def test_list_sorted_and_paginated(self, service):
        for day in ("2025-01-01", "2025-01-03", "2025-01-02"):
            service.create_from_catalog(MANAGER, day, "Evening")
            service.create_from_catalog(MANAGER, day, "Morning")

        page = service.list_forms(BUSINESS_ID, page=1, limit=4)
        assert page.total == 6
        assert page.pages == 2
        assert [(f.date.day, f.shift) for f in page.forms] == [
            (3, Shift.MORNING),
            (3, Shift.EVENING),
            (2, Shift.MORNING),
            (2, Shift.EVENING),
        ]
        second = service.list_forms(BUSINESS_ID, page=2, limit=4)
        assert len(second.forms) == 2

    def test_list_date_filter(self, service):
        for day in ("2025-01-01", "2025-01-02", "2025-01-03"):
            service.create_from_catalog(MANAGER, day, "Morning")
        page = service.list_forms(
            BUSINESS_ID, start_date=date(2025, 1, 2), end_date=date(2025, 1, 2)
        )
        assert [f.date for f in page.forms] == [date(2025, 1, 2)]
        assert service.list_forms(BUSINESS_ID, start_date=date(2025, 1, 2)).total == 2

    def test_list_rejects_bad_paging(self, service):
        with pytest.raises(InvalidInputError):
            service.list_forms(BUSINESS_ID, page=0)
        with pytest.raises(InvalidInputError):
            service.list_forms(
                BUSINESS_ID, start_date=date(2025, 1, 3), end_date=date(2025, 1, 1)
            )

    def test_limit_capped(self, service):
        assert service.list_forms(BUSINESS_ID, limit=10_000).limit == 100


class TestApplyPatch:
    def test_recomputes_on_save(self, service):
        form = _ready_form(service)
        assert form.items[0].total_available == Decimal("20")
        assert form.items[0].closing_stock == Decimal("10")
        assert form.supplier_entries[0].bonus_qty == Decimal("-10")
        assert form.cash_summary.expected_cash_at_hand == Decimal("40")
        assert form.cash_summary.cash_difference == Decimal("-40")

    def test_same_patch_twice_is_idempotent(self, service):
        form = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        patch = {"items": [{"itemCode": "MLK", "openingStock": 7, "qtySold": 2}]}
        first = service.apply_patch(CASHIER, form.form_id, patch)
        second = service.apply_patch(CASHIER, form.form_id, patch)
        assert first.items == second.items
        assert first.cash_summary == second.cash_summary
        assert second.version == first.version + 1

    def test_structure_is_immutable(self, service):
        form = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        updated = service.apply_patch(
            OWNER,
            form.form_id,
            {
                "status": "submitted",
                "date": "2030-01-01",
                "items": [{"itemCode": "MLK", "itemName": "Renamed"}, {"itemCode": "ZZZ", "qtySold": 1}],
            },
        )
        assert updated.status is FormStatus.DRAFT
        assert updated.date == date(2025, 1, 1)
        assert updated.item_codes() == ("MLK", "YGT")
        assert updated.items[0].item_name == "Milk 500ml"

    def test_strict_mode_rejects_dropped_fields(self, audit_sink):
        service = DailyFormService(
            repository=InMemoryDailyFormRepository(),
            catalog=InMemoryProductCatalog(PRODUCTS),
            audit_sink=audit_sink,
            config=DailyFormEngineConfig(strict_patch_fields=True),
        )
        form = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        with pytest.raises(InvalidInputError) as exc_info:
            service.apply_patch(CASHIER, form.form_id, {"status": "submitted"})
        assert exc_info.value.details["dropped"] == ["status"]

    def test_stale_version_conflicts(self, service):
        form = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        service.apply_patch(CASHIER, form.form_id, {"notes": "a"}, expected_version=1)
        with pytest.raises(FormConflictError):
            service.apply_patch(CASHIER, form.form_id, {"notes": "b"}, expected_version=1)
        assert service.get(BUSINESS_ID, form.form_id).notes == "a"

    def test_null_table_keeps_rows(self, service):
        form = _ready_form(service)
        updated = service.apply_patch(
            CASHIER, form.form_id, {"supplierEntries": None, "expenses": None, "notes": "x"}
        )
        assert len(updated.supplier_entries) == 1
        assert len(updated.expenses) == 1
        assert updated.cash_summary == form.cash_summary

    def test_strict_mode_rejects_unknown_item_code(self, audit_sink):
        service = DailyFormService(
            repository=InMemoryDailyFormRepository(),
            catalog=InMemoryProductCatalog(PRODUCTS),
            audit_sink=audit_sink,
            config=DailyFormEngineConfig(strict_patch_fields=True),
        )
        form = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        with pytest.raises(InvalidInputError) as exc_info:
            service.apply_patch(CASHIER, form.form_id, {"items": [{"itemCode": "ZZZ", "qtySold": 1}]})
        assert exc_info.value.details["dropped"] == ["items[ZZZ]"]

    def test_huge_exponent_rejected(self, service):
        form = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        with pytest.raises(InvalidInputError, match="out of range"):
            service.apply_patch(
                CASHIER, form.form_id, {"items": [{"itemCode": "MLK", "qtySold": "1e999999999"}]}
            )
        assert service.get(BUSINESS_ID, form.form_id).version == form.version

    def test_draft_save_after_concurrent_submit_is_refused(self, audit_sink):
        repository = _SubmitDuringSave()
        service = DailyFormService(
            repository=repository,
            catalog=InMemoryProductCatalog(PRODUCTS),
            audit_sink=audit_sink,
            clock=FixedClock(NOW),
        )
        form = _ready_form(service)
        repository.before_save = lambda: service.submit(
            MANAGER, form.form_id, {"cashSummary": {"actualCashCounted": 40}}
        )

        with pytest.raises(InvalidStateError):
            service.apply_patch(CASHIER, form.form_id, {"notes": "late edit"})

        stored = service.get(BUSINESS_ID, form.form_id)
        assert stored.status is FormStatus.SUBMITTED
        assert stored.approved_by == "manager-1"
        assert stored.notes == ""

    def test_missing_form(self, service):
        with pytest.raises(FormNotFoundError):
            service.apply_patch(CASHIER, "nope", {"notes": "x"})


class TestSubmit:
    def test_cashier_cannot_submit(self, service):
        form = _ready_form(service)
        with pytest.raises(ForbiddenError) as exc_info:
            service.submit(CASHIER, form.form_id)
        assert not isinstance(exc_info.value, InvalidStateError)

    def test_successful_submit(self, service):
        form = _ready_form(service)
        submitted = service.submit(MANAGER, form.form_id, {"cashSummary": {"actualCashCounted": 40}})
        assert submitted.status is FormStatus.SUBMITTED
        assert submitted.approved_by == "manager-1"
        assert submitted.cash_summary.cash_difference == Decimal("0")

    def test_failed_submit_persists_nothing(self, service):
        form = _ready_form(service)
        with pytest.raises(SubmissionValidationError) as exc_info:
            service.submit(MANAGER, form.form_id, {"cashSummary": {"actualCashCounted": 30}})
        assert exc_info.value.message == "Cash difference is not zero. Provide explanation."

        stored = service.get(BUSINESS_ID, form.form_id)
        assert stored.status is FormStatus.DRAFT
        assert stored.version == form.version
        assert stored.cash_summary.actual_cash_counted == Decimal("0")

    def test_explained_shortfall_submits(self, service):
        form = _ready_form(service)
        submitted = service.submit(
            OWNER,
            form.form_id,
            {"cashSummary": {"actualCashCounted": 30, "differenceExplanation": "paid milk boy"}},
        )
        assert submitted.cash_summary.cash_difference == Decimal("-10")

    def test_submit_patch_cannot_touch_items(self, service):
        form = _ready_form(service)
        submitted = service.submit(
            MANAGER,
            form.form_id,
            {"items": [{"itemCode": "MLK", "qtySold": 0}], "cashSummary": {"actualCashCounted": 40}},
        )
        assert submitted.items[0].qty_sold == Decimal("10")

    def test_submitted_form_is_frozen(self, service):
        form = _ready_form(service)
        service.submit(MANAGER, form.form_id, {"cashSummary": {"actualCashCounted": 40}})
        with pytest.raises(InvalidStateError):
            service.apply_patch(OWNER, form.form_id, {"notes": "late"})
        with pytest.raises(InvalidStateError, match="already submitted"):
            service.submit(OWNER, form.form_id)
        stored = service.get(BUSINESS_ID, form.form_id)
        assert stored.notes == ""
        assert stored.status is FormStatus.SUBMITTED

    def test_oversell_blocks_submit(self, service):
        form = _ready_form(service)
        service.apply_patch(
            CASHIER,
            form.form_id,
            {"items": [{"itemCode": "YGT", "openingStock": 5, "qtySold": 6}]},
        )
        with pytest.raises(SubmissionValidationError, match="Item YGT: Qty sold exceeds available stock."):
            service.submit(MANAGER, form.form_id, {"cashSummary": {"actualCashCounted": 40}})

    def test_empty_form_rejected(self, service):
        form = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        with pytest.raises(SubmissionValidationError, match="supplier entry"):
            service.submit(MANAGER, form.form_id)


class TestDelete:
    def test_owner_deletes_any_status(self, service):
        form = _ready_form(service)
        service.submit(MANAGER, form.form_id, {"cashSummary": {"actualCashCounted": 40}})
        service.delete(OWNER, form.form_id)
        with pytest.raises(FormNotFoundError):
            service.get(BUSINESS_ID, form.form_id)

    def test_manager_cannot_delete(self, service):
        form = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        with pytest.raises(ForbiddenError):
            service.delete(MANAGER, form.form_id)

    def test_key_reusable_after_delete(self, service):
        form = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        service.delete(OWNER, form.form_id)
        again = service.create_from_catalog(MANAGER, "2025-01-01", "Morning")
        assert again.form_id != form.form_id


class TestAudit:
    def test_lifecycle_is_audited(self, service, audit_sink):
        form = _ready_form(service)
        service.submit(MANAGER, form.form_id, {"cashSummary": {"actualCashCounted": 40}})
        service.delete(OWNER, form.form_id)
        actions = [entry.action for entry in audit_sink.entries_for_business(BUSINESS_ID)]
        assert actions == ["create", "update", "submit", "delete"]
        assert audit_sink.entries[0].occurred_at == NOW

    def test_rejected_request_not_audited(self, service, audit_sink):
        with pytest.raises(ForbiddenError):
            service.create_from_catalog(CASHIER, "2025-01-01", "Morning")
        assert audit_sink.entries == ()


class TestPreview:
    def test_preview_computes_without_storing(self, service):
        values = service.preview(
            {
                "items": [{"itemCode": "MLK", "itemName": "Milk", "openingStock": "5", "qtySold": "2", "salesCash": "100"}],
                "expenses": [{"category": "fuel", "amount": "20"}],
                "cashSummary": {"actualCashCounted": "80"},
            }
        )
        assert values.items[0].closing_stock == Decimal("3")
        assert values.cash_summary.cash_difference == Decimal("0")
        assert service.list_forms(BUSINESS_ID).total == 0

    def test_preview_rejects_bad_table(self, service):
        with pytest.raises(InvalidInputError):
            service.preview({"items": "MLK"})
