"""
Tests for core.catalog — product model and in-memory catalog.
"""

import uuid
from decimal import Decimal

import pytest

from core.catalog import DuplicateItemCodeError, InMemoryProductCatalog, Product

BIZ = uuid.uuid5(uuid.NAMESPACE_URL, "duka-catalog-business")
OTHER_BIZ = uuid.uuid5(uuid.NAMESPACE_URL, "duka-catalog-other-business")


def _product(product_id, code, business_id=BIZ, **kwargs):
    return Product(product_id=product_id, business_id=business_id, item_code=code, name=f"Product {code}", **kwargs)


class TestProduct:
    def test_strips_code_and_name(self):
        product = Product(product_id="p1", business_id=BIZ, item_code=" MLK ", name=" Milk ")
        assert product.item_code == "MLK"
        assert product.name == "Milk"

    def test_rejects_blank_code(self):
        with pytest.raises(ValueError, match="item_code"):
            _product("p1", "  ")

    def test_rejects_negative_price(self):
        with pytest.raises(ValueError):
            _product("p1", "MLK", selling_price=Decimal("-1"))

    def test_rejects_negative_reorder_level(self):
        with pytest.raises(ValueError, match="reorder_level"):
            _product("p1", "MLK", reorder_level=Decimal("-1"))

    def test_matches_code_or_name(self):
        product = _product("p1", "MLK")
        assert product.matches("mlk")
        assert product.matches("PRODUCT")
        assert product.matches("")
        assert not product.matches("ygt")

    def test_to_dict(self):
        data = _product("p1", "MLK", selling_price=Decimal("60")).to_dict()
        assert data["itemCode"] == "MLK"
        assert data["sellingPrice"] == "60"
        assert data["isActive"] is True


class TestInMemoryProductCatalog:
    def test_active_products_in_insertion_order(self):
        catalog = InMemoryProductCatalog([
            _product("p2", "YGT"),
            _product("p1", "MLK"),
            _product("p3", "OLD", is_active=False),
        ])
        assert [p.item_code for p in catalog.active_products(BIZ)] == ["YGT", "MLK"]

    def test_filters_by_product_ids(self):
        catalog = InMemoryProductCatalog([_product("p1", "MLK"), _product("p2", "YGT")])
        assert [p.item_code for p in catalog.active_products(BIZ, ["p2"])] == ["YGT"]

    def test_tenant_scoped(self):
        catalog = InMemoryProductCatalog([_product("p1", "MLK")])
        assert catalog.active_products(OTHER_BIZ) == ()

    def test_duplicate_code_rejected(self):
        catalog = InMemoryProductCatalog([_product("p1", "MLK")])
        with pytest.raises(ValueError, match="Duplicate item_code"):
            catalog.add(_product("p2", "MLK"))

    def test_same_code_other_business_allowed(self):
        catalog = InMemoryProductCatalog([_product("p1", "MLK")])
        catalog.add(_product("p2", "MLK", business_id=OTHER_BIZ))
        assert len(catalog.active_products(OTHER_BIZ)) == 1

    def test_get_product_is_tenant_scoped(self):
        catalog = InMemoryProductCatalog([_product("p1", "MLK")])
        assert catalog.get_product(BIZ, "p1").item_code == "MLK"
        assert catalog.get_product(OTHER_BIZ, "p1") is None

    def test_list_newest_first_with_filters(self):
        catalog = InMemoryProductCatalog([
            _product("p1", "MLK"),
            _product("p2", "YGT"),
            _product("p3", "OLD", is_active=False),
        ])
        assert [p.product_id for p in catalog.list_products(BIZ)] == ["p2", "p1"]
        assert [p.product_id for p in catalog.list_products(BIZ, active=False)] == ["p3"]
        assert [p.product_id for p in catalog.list_products(BIZ, active=None, search="ygt")] == ["p2"]
        assert [p.product_id for p in catalog.list_products(BIZ, search="product m")] == ["p1"]

    def test_save_replaces_in_place(self):
        catalog = InMemoryProductCatalog([_product("p1", "MLK"), _product("p2", "YGT")])
        catalog.save(_product("p1", "MLK2"))
        assert [p.item_code for p in catalog.active_products(BIZ)] == ["MLK2", "YGT"]

    def test_save_duplicate_code_rejected(self):
        catalog = InMemoryProductCatalog([_product("p1", "MLK"), _product("p2", "YGT")])
        with pytest.raises(DuplicateItemCodeError):
            catalog.save(_product("p2", "MLK"))
        assert catalog.get_product(BIZ, "p2").item_code == "YGT"

    def test_save_keeping_own_code_allowed(self):
        catalog = InMemoryProductCatalog([_product("p1", "MLK")])
        catalog.save(_product("p1", "MLK", is_active=False))
        assert catalog.active_products(BIZ) == ()

    def test_save_unknown_product(self):
        with pytest.raises(LookupError):
            InMemoryProductCatalog().save(_product("p1", "MLK"))
