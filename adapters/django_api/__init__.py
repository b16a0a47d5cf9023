"""
DUKA Django HTTP adapter.
Thin framework glue over core/http_api handlers.
"""

from adapters.django_api.wiring import (
    DEV_BUSINESS_ID,
    DEV_CASHIER_API_KEY,
    DEV_MANAGER_API_KEY,
    DEV_OWNER_API_KEY,
    build_dependencies,
    reset_dependencies,
)

__all__ = [
    "DEV_OWNER_API_KEY",
    "DEV_MANAGER_API_KEY",
    "DEV_CASHIER_API_KEY",
    "DEV_BUSINESS_ID",
    "build_dependencies",
    "reset_dependencies",
]
