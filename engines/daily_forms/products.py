"""
DUKA Daily Form Engine — Product Catalog Service
===================================================
Maintenance of the products daily forms are created from.

RULES:
- Every role may read the catalog of its own business
- Only owner/manager create, update or deactivate products
- item_code is unique per business (ProductConflictError)
- Deactivation is soft: the product stays listed under active=false
  and is no longer snapshotted into new forms
- Forms that already exist never see catalog edits

Wire fields: itemCode, name, unit, category, sellingPrice, costPrice,
reorderLevel, isActive (update only). A None value keeps the current
value; unknown fields are ignored.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

from core.audit import AUDIT_ACTION_CREATE, AUDIT_ACTION_UPDATE, AuditSink, create_audit_entry
from core.catalog import DuplicateItemCodeError, Product, ProductCatalog
from core.context.actor_context import ActorContext
from core.time.clock import Clock, SystemClock
from engines.daily_forms.errors import (
    ForbiddenError,
    InvalidInputError,
    ProductConflictError,
    ProductNotFoundError,
)
from engines.daily_forms.models import to_decimal, to_text
from engines.daily_forms.policy import ACTION_MANAGE_PRODUCTS, check_role_action

logger = logging.getLogger("duka.catalog")

RECORD_TYPE = "Product"

# Prices and levels are stored with two decimal places below 10**12.
AMOUNT_LIMIT = Decimal("1000000000000")
AMOUNT_SCALE = 2

TEXT_FIELDS = {
    "itemCode": "item_code",
    "name": "name",
    "unit": "unit",
    "category": "category",
}

AMOUNT_FIELDS = {
    "sellingPrice": "selling_price",
    "costPrice": "cost_price",
    "reorderLevel": "reorder_level",
}

TEXT_DEFAULTS = {"unit": "pcs", "category": "general"}


def _new_product_id() -> str:
    return uuid.uuid4().hex


def _amount(value: Any, wire: str) -> Decimal:
    amount = to_decimal(value, wire)
    if amount < 0:
        raise InvalidInputError(f"{wire} must be non-negative.", details={"field": wire})
    if amount >= AMOUNT_LIMIT or amount.as_tuple().exponent < -AMOUNT_SCALE:
        raise InvalidInputError(
            f"{wire} must be below {AMOUNT_LIMIT} with at most "
            f"{AMOUNT_SCALE} decimal places.",
            details={"field": wire},
        )
    return amount


def _product_changes(fields: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(fields, Mapping):
        raise InvalidInputError("product must be an object.")

    changes: dict[str, Any] = {}
    for wire, attr in TEXT_FIELDS.items():
        if fields.get(wire) is not None:
            changes[attr] = to_text(fields[wire]) or TEXT_DEFAULTS.get(attr, "")
    for wire, attr in AMOUNT_FIELDS.items():
        if fields.get(wire) is not None:
            changes[attr] = _amount(fields[wire], wire)
    return changes


class ProductService:
    """Owner/manager product maintenance plus catalog reads for every role."""

    def __init__(
        self,
        *,
        catalog: ProductCatalog,
        audit_sink: AuditSink | None = None,
        clock: Clock | None = None,
        id_factory: Callable[[], str] = _new_product_id,
    ):
        self._catalog = catalog
        self._audit_sink = audit_sink
        self._clock = clock or SystemClock()
        self._id_factory = id_factory

    def _require_manage(self, actor: ActorContext) -> None:
        rejection = check_role_action(actor.role, ACTION_MANAGE_PRODUCTS)
        if rejection is not None:
            raise ForbiddenError(rejection.message, details=rejection.details)

    def _audit(self, actor: ActorContext, product: Product, description: str,
               action: str = AUDIT_ACTION_UPDATE, metadata: Optional[dict] = None) -> None:
        if self._audit_sink is None:
            return
        self._audit_sink.record(
            create_audit_entry(
                business_id=actor.business_id,
                actor_id=actor.actor_id,
                action=action,
                record_type=RECORD_TYPE,
                record_id=product.product_id,
                occurred_at=self._clock.now_utc(),
                description=description,
                metadata=metadata,
            )
        )

    def _store(self, write: Callable[[Product], Product], product: Product) -> Product:
        try:
            return write(product)
        except DuplicateItemCodeError as exc:
            raise ProductConflictError(
                "Item code already exists in this business",
                details={"item_code": exc.item_code},
            ) from exc

    # ── reads ─────────────────────────────────────────────────

    def list_products(
        self,
        business_id: uuid.UUID,
        *,
        active: Optional[bool] = True,
        search: str = "",
    ) -> tuple[Product, ...]:
        return self._catalog.list_products(business_id, active=active, search=search or "")

    def get(self, business_id: uuid.UUID, product_id: str) -> Product:
        product = self._catalog.get_product(business_id, product_id)
        if product is None:
            raise ProductNotFoundError(
                "Product not found", details={"product_id": product_id}
            )
        return product

    # ── writes ────────────────────────────────────────────────

    def create(self, actor: ActorContext, fields: Mapping[str, Any]) -> Product:
        self._require_manage(actor)
        changes = _product_changes(fields)
        if not changes.get("item_code") or not changes.get("name"):
            raise InvalidInputError("itemCode and name are required")

        try:
            product = Product(
                product_id=self._id_factory(),
                business_id=actor.business_id,
                **changes,
            )
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc
        product = self._store(self._catalog.add, product)

        logger.info("Product %s (%s) created by %s",
                    product.product_id, product.item_code, actor.actor_id)
        self._audit(
            actor, product,
            f"Created product {product.item_code} - {product.name}",
            action=AUDIT_ACTION_CREATE,
        )
        return product

    def update(self, actor: ActorContext, product_id: str, fields: Mapping[str, Any]) -> Product:
        self._require_manage(actor)
        current = self.get(actor.business_id, product_id)
        changes = _product_changes(fields)

        is_active = fields.get("isActive")
        if is_active is not None:
            if not isinstance(is_active, bool):
                raise InvalidInputError(
                    "isActive must be true or false.", details={"field": "isActive"}
                )
            changes["is_active"] = is_active

        try:
            updated = replace(current, **changes)
        except ValueError as exc:
            raise InvalidInputError(str(exc)) from exc
        updated = self._store(self._catalog.save, updated)

        logger.info("Product %s updated by %s", product_id, actor.actor_id)
        self._audit(
            actor, updated,
            f"Updated product {updated.item_code} - {updated.name}",
            metadata={"before": current.to_dict(), "after": updated.to_dict()},
        )
        return updated

    def deactivate(self, actor: ActorContext, product_id: str) -> Product:
        self._require_manage(actor)
        current = self.get(actor.business_id, product_id)
        updated = self._store(self._catalog.save, replace(current, is_active=False))

        logger.info("Product %s deactivated by %s", product_id, actor.actor_id)
        self._audit(
            actor, updated,
            f"Deactivated product {updated.item_code} - {updated.name}",
        )
        return updated
