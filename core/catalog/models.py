"""
DUKA Catalog — Product Snapshot Model
========================================
A Product is the catalog entry a daily form row is built from.

RULES:
- item_code is unique per business
- Only active products are snapshotted into new daily forms
- Products are deactivated, never deleted
- The snapshot copies code and name; later catalog edits never
  reach forms that were already created

This file contains NO persistence logic.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Product:
    """Catalog product scoped to one business."""

    product_id: str
    business_id: uuid.UUID
    item_code: str
    name: str
    unit: str = "pcs"
    category: str = "general"
    selling_price: Decimal = Decimal("0")
    cost_price: Decimal = Decimal("0")
    reorder_level: Decimal = Decimal("0")
    is_active: bool = True

    def __post_init__(self):
        if not self.product_id or not isinstance(self.product_id, str):
            raise ValueError("product_id must be a non-empty string.")
        if not isinstance(self.business_id, uuid.UUID):
            raise ValueError("business_id must be UUID.")
        if not isinstance(self.item_code, str) or not self.item_code.strip():
            raise ValueError("item_code must be a non-empty string.")
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("name must be a non-empty string.")
        for name in ("selling_price", "cost_price", "reorder_level"):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                raise ValueError(f"{name} must be Decimal.")
            if value < 0:
                raise ValueError(f"{name} must be non-negative.")
        if not isinstance(self.is_active, bool):
            raise ValueError("is_active must be bool.")
        object.__setattr__(self, "item_code", self.item_code.strip())
        object.__setattr__(self, "name", self.name.strip())

    def matches(self, search: str) -> bool:
        """Case-insensitive match on item code or name."""
        needle = search.strip().lower()
        return not needle or needle in self.item_code.lower() or needle in self.name.lower()

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "businessId": str(self.business_id),
            "itemCode": self.item_code,
            "name": self.name,
            "unit": self.unit,
            "category": self.category,
            "sellingPrice": str(self.selling_price),
            "costPrice": str(self.cost_price),
            "reorderLevel": str(self.reorder_level),
            "isActive": self.is_active,
        }
