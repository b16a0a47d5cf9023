"""
DUKA Catalog - Provider Protocol and In-Memory Provider
=========================================================
Listings are newest first; active_products keeps catalog order,
which becomes the row order of forms created from it.
"""

from __future__ import annotations

import threading
import uuid
from typing import Iterable, Optional, Protocol

from core.catalog.models import Product


class DuplicateItemCodeError(ValueError):
    """item_code already used by another product of the same business."""

    def __init__(self, product: Product):
        self.item_code = product.item_code
        self.business_id = product.business_id
        super().__init__(
            f"Duplicate item_code '{product.item_code}' "
            f"for business '{product.business_id}'."
        )


class ProductCatalog(Protocol):
    def active_products(
        self,
        business_id: uuid.UUID,
        product_ids: Optional[Iterable[str]] = None,
    ) -> tuple[Product, ...]:
        ...

    def list_products(
        self,
        business_id: uuid.UUID,
        *,
        active: Optional[bool] = True,
        search: str = "",
    ) -> tuple[Product, ...]:
        ...

    def get_product(self, business_id: uuid.UUID, product_id: str) -> Optional[Product]:
        ...

    def add(self, product: Product) -> Product:
        ...

    def save(self, product: Product) -> Product:
        ...


class InMemoryProductCatalog:
    """
    Deterministic in-memory catalog used by tests/bootstrap.

    Products keep their insertion order; that order becomes the
    row order of forms created from this catalog.
    """

    def __init__(self, products: Iterable[Product] | None = None):
        self._products_by_business: dict[uuid.UUID, list[Product]] = {}
        self._lock = threading.Lock()
        for product in products or ():
            self.add(product)

    def _check_item_code(self, existing: list[Product], product: Product) -> None:
        for current in existing:
            if current.product_id != product.product_id and current.item_code == product.item_code:
                raise DuplicateItemCodeError(product)

    def add(self, product: Product) -> Product:
        with self._lock:
            existing = self._products_by_business.setdefault(product.business_id, [])
            if any(current.product_id == product.product_id for current in existing):
                raise ValueError(f"Duplicate product_id '{product.product_id}'.")
            self._check_item_code(existing, product)
            existing.append(product)
            return product

    def save(self, product: Product) -> Product:
        with self._lock:
            existing = self._products_by_business.get(product.business_id, [])
            for index, current in enumerate(existing):
                if current.product_id == product.product_id:
                    self._check_item_code(existing, product)
                    existing[index] = product
                    return product
        raise LookupError(f"Product '{product.product_id}' not found.")

    def get_product(self, business_id: uuid.UUID, product_id: str) -> Optional[Product]:
        with self._lock:
            for product in self._products_by_business.get(business_id, ()):
                if product.product_id == product_id:
                    return product
        return None

    def list_products(
        self,
        business_id: uuid.UUID,
        *,
        active: Optional[bool] = True,
        search: str = "",
    ) -> tuple[Product, ...]:
        with self._lock:
            products = list(self._products_by_business.get(business_id, ()))
        return tuple(
            product
            for product in reversed(products)
            if (active is None or product.is_active is active)
            and product.matches(search)
        )

    def active_products(
        self,
        business_id: uuid.UUID,
        product_ids: Optional[Iterable[str]] = None,
    ) -> tuple[Product, ...]:
        wanted = None if not product_ids else {str(pid) for pid in product_ids}
        with self._lock:
            products = list(self._products_by_business.get(business_id, ()))
        return tuple(
            product
            for product in products
            if product.is_active
            and (wanted is None or product.product_id in wanted)
        )
