"""
Tests for engines.daily_forms.products — catalog maintenance.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from itertools import count

import pytest

from core.audit import InMemoryAuditSink
from core.catalog import InMemoryProductCatalog
from core.context.actor_context import ActorContext
from core.time.clock import FixedClock
from engines.daily_forms import (
    DailyFormService,
    ForbiddenError,
    InMemoryDailyFormRepository,
    InvalidInputError,
    ProductConflictError,
    ProductNotFoundError,
    ProductService,
)

BUSINESS_ID = uuid.uuid5(uuid.NAMESPACE_URL, "duka-products-business")
OTHER_BUSINESS_ID = uuid.uuid5(uuid.NAMESPACE_URL, "duka-products-other-business")
NOW = datetime(2025, 1, 1, 6, 0, tzinfo=timezone.utc)

OWNER = ActorContext(actor_id="owner-1", business_id=BUSINESS_ID, role="owner")
MANAGER = ActorContext(actor_id="manager-1", business_id=BUSINESS_ID, role="manager")
CASHIER = ActorContext(actor_id="cashier-1", business_id=BUSINESS_ID, role="cashier")
OTHER_OWNER = ActorContext(actor_id="owner-2", business_id=OTHER_BUSINESS_ID, role="owner")


@pytest.fixture
def catalog():
    return InMemoryProductCatalog()


@pytest.fixture
def audit_sink():
    return InMemoryAuditSink()


@pytest.fixture
def products(catalog, audit_sink):
    ids = count(1)
    return ProductService(
        catalog=catalog,
        audit_sink=audit_sink,
        clock=FixedClock(NOW),
        id_factory=lambda: f"prod-{next(ids)}",
    )


class TestCreate:
    def test_creates_with_defaults(self, products):
        product = products.create(MANAGER, {"itemCode": " MLK-500 ", "name": "Milk 500ml"})
        assert product.product_id == "prod-1"
        assert product.business_id == BUSINESS_ID
        assert product.item_code == "MLK-500"
        assert product.unit == "pcs"
        assert product.category == "general"
        assert product.selling_price == Decimal("0")
        assert product.is_active is True

    def test_prices_parsed_as_decimal(self, products):
        product = products.create(
            OWNER,
            {"itemCode": "MLK", "name": "Milk", "sellingPrice": "60.50",
             "costPrice": 45, "reorderLevel": "10"},
        )
        assert product.selling_price == Decimal("60.50")
        assert product.cost_price == Decimal("45")
        assert product.reorder_level == Decimal("10")

    def test_code_and_name_required(self, products):
        with pytest.raises(InvalidInputError, match="itemCode and name are required"):
            products.create(MANAGER, {"itemCode": "MLK"})

    def test_cashier_cannot_create(self, products):
        with pytest.raises(ForbiddenError, match="Only manager/owner can manage products."):
            products.create(CASHIER, {"itemCode": "MLK", "name": "Milk"})

    def test_duplicate_code_conflicts(self, products):
        products.create(MANAGER, {"itemCode": "MLK", "name": "Milk"})
        with pytest.raises(ProductConflictError, match="Item code already exists"):
            products.create(OWNER, {"itemCode": "MLK", "name": "Milk again"})

    def test_same_code_in_other_business(self, products):
        products.create(MANAGER, {"itemCode": "MLK", "name": "Milk"})
        products.create(OTHER_OWNER, {"itemCode": "MLK", "name": "Milk"})

    @pytest.mark.parametrize("price", ["-1", "60.555", "1000000000000", "lots"])
    def test_bad_price_rejected(self, products, price):
        with pytest.raises(InvalidInputError):
            products.create(MANAGER, {"itemCode": "MLK", "name": "Milk", "sellingPrice": price})


class TestUpdate:
    def test_updates_given_fields_only(self, products):
        created = products.create(MANAGER, {"itemCode": "MLK", "name": "Milk", "sellingPrice": 60})
        updated = products.update(MANAGER, created.product_id, {"name": "Fresh Milk", "unit": None})
        assert updated.name == "Fresh Milk"
        assert updated.unit == "pcs"
        assert updated.selling_price == Decimal("60")
        assert products.get(BUSINESS_ID, created.product_id) == updated

    def test_reactivate(self, products):
        created = products.create(MANAGER, {"itemCode": "MLK", "name": "Milk"})
        products.deactivate(MANAGER, created.product_id)
        updated = products.update(OWNER, created.product_id, {"isActive": True})
        assert updated.is_active is True

    def test_is_active_must_be_bool(self, products):
        created = products.create(MANAGER, {"itemCode": "MLK", "name": "Milk"})
        with pytest.raises(InvalidInputError, match="isActive"):
            products.update(MANAGER, created.product_id, {"isActive": "no"})

    def test_code_taken_by_other_product(self, products):
        products.create(MANAGER, {"itemCode": "MLK", "name": "Milk"})
        yoghurt = products.create(MANAGER, {"itemCode": "YGT", "name": "Yoghurt"})
        with pytest.raises(ProductConflictError):
            products.update(MANAGER, yoghurt.product_id, {"itemCode": "MLK"})
        assert products.get(BUSINESS_ID, yoghurt.product_id).item_code == "YGT"

    def test_blank_name_rejected(self, products):
        created = products.create(MANAGER, {"itemCode": "MLK", "name": "Milk"})
        with pytest.raises(InvalidInputError, match="name"):
            products.update(MANAGER, created.product_id, {"name": "  "})

    def test_other_business_product_not_found(self, products):
        created = products.create(MANAGER, {"itemCode": "MLK", "name": "Milk"})
        with pytest.raises(ProductNotFoundError):
            products.update(OTHER_OWNER, created.product_id, {"name": "Mine"})


class TestDeactivate:
    def test_deactivated_product_leaves_new_forms(self, catalog, products):
        milk = products.create(MANAGER, {"itemCode": "MLK", "name": "Milk"})
        products.create(MANAGER, {"itemCode": "YGT", "name": "Yoghurt"})
        forms = DailyFormService(
            repository=InMemoryDailyFormRepository(),
            catalog=catalog,
            clock=FixedClock(NOW),
        )
        before = forms.create_from_catalog(MANAGER, "2025-01-01", "Morning")

        products.deactivate(MANAGER, milk.product_id)

        after = forms.create_from_catalog(MANAGER, "2025-01-01", "Evening")
        assert after.item_codes() == ("YGT",)
        assert forms.get(BUSINESS_ID, before.form_id).item_codes() == ("MLK", "YGT")

    def test_deactivated_product_still_listed_as_inactive(self, products):
        milk = products.create(MANAGER, {"itemCode": "MLK", "name": "Milk"})
        products.deactivate(OWNER, milk.product_id)
        assert products.list_products(BUSINESS_ID) == ()
        assert [p.item_code for p in products.list_products(BUSINESS_ID, active=False)] == ["MLK"]

    def test_cashier_cannot_deactivate(self, products):
        milk = products.create(MANAGER, {"itemCode": "MLK", "name": "Milk"})
        with pytest.raises(ForbiddenError):
            products.deactivate(CASHIER, milk.product_id)

    def test_unknown_product(self, products):
        with pytest.raises(ProductNotFoundError):
            products.deactivate(OWNER, "missing")


class TestReadsAndAudit:
    def test_cashier_can_read(self, products):
        milk = products.create(MANAGER, {"itemCode": "MLK", "name": "Milk"})
        assert products.get(CASHIER.business_id, milk.product_id).name == "Milk"
        assert len(products.list_products(CASHIER.business_id, search="mil")) == 1

    def test_writes_are_audited(self, products, audit_sink):
        milk = products.create(MANAGER, {"itemCode": "MLK", "name": "Milk"})
        products.update(MANAGER, milk.product_id, {"sellingPrice": "65"})
        products.deactivate(OWNER, milk.product_id)

        entries = audit_sink.entries
        assert [entry.action for entry in entries] == ["create", "update", "update"]
        assert {entry.record_type for entry in entries} == {"Product"}
        assert entries[0].description == "Created product MLK - Milk"
        assert entries[1].metadata["before"]["sellingPrice"] == "0"
        assert entries[1].metadata["after"]["sellingPrice"] == "65"
        assert entries[2].description == "Deactivated product MLK - Milk"

    def test_rejected_write_not_audited(self, products, audit_sink):
        with pytest.raises(ForbiddenError):
            products.create(CASHIER, {"itemCode": "MLK", "name": "Milk"})
        assert audit_sink.entries == ()
