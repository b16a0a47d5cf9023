"""
DUKA Catalog — Public API
===========================
"""

from core.catalog.models import Product
from core.catalog.provider import DuplicateItemCodeError, InMemoryProductCatalog, ProductCatalog

__all__ = [
    "Product",
    "ProductCatalog",
    "InMemoryProductCatalog",
    "DuplicateItemCodeError",
]
