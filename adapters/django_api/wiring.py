"""
DUKA Django Adapter Wiring
==========================
Constructs HttpApiDependencies for local/staging live runs.

The form store backend comes from settings.DAILY_FORMS["STORE"]:
- "memory": in-memory forms and a seeded dev catalog
- "db": Django ORM tables from core.form_store, starting with an
  empty catalog that owners/managers fill through v1/products
"""

from __future__ import annotations

import threading
import uuid
from decimal import Decimal

from django.conf import settings

from core.audit import InMemoryAuditSink
from core.catalog import InMemoryProductCatalog, Product
from core.context.actor_context import ROLE_CASHIER, ROLE_MANAGER, ROLE_OWNER
from core.http_api.auth import AuthPrincipal, InMemoryAuthProvider
from core.http_api.dependencies import HttpApiDependencies
from core.time.clock import SystemClock
from engines.daily_forms import (
    STORE_DB,
    DailyFormEngineConfig,
    DailyFormService,
    InMemoryDailyFormRepository,
    ProductService,
)


DEV_OWNER_API_KEY = "dev-owner-key"
DEV_MANAGER_API_KEY = "dev-manager-key"
DEV_CASHIER_API_KEY = "dev-cashier-key"

DEV_BUSINESS_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")

_DEV_OWNER_ACTOR_ID = "live-owner-user"
_DEV_MANAGER_ACTOR_ID = "live-manager-user"
_DEV_CASHIER_ACTOR_ID = "live-cashier-user"

_DEV_PRODUCTS = (
    ("MLK-500", "Fresh Milk 500ml", "pcs", "dairy", "60"),
    ("MLK-1L", "Fresh Milk 1L", "pcs", "dairy", "110"),
    ("YGT-250", "Yoghurt 250ml", "pcs", "dairy", "70"),
)

_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: HttpApiDependencies | None = None


def _build_auth_provider() -> InMemoryAuthProvider:
    return InMemoryAuthProvider(
        {
            DEV_OWNER_API_KEY: AuthPrincipal(
                actor_id=_DEV_OWNER_ACTOR_ID,
                business_id=DEV_BUSINESS_ID,
                role=ROLE_OWNER,
            ),
            DEV_MANAGER_API_KEY: AuthPrincipal(
                actor_id=_DEV_MANAGER_ACTOR_ID,
                business_id=DEV_BUSINESS_ID,
                role=ROLE_MANAGER,
            ),
            DEV_CASHIER_API_KEY: AuthPrincipal(
                actor_id=_DEV_CASHIER_ACTOR_ID,
                business_id=DEV_BUSINESS_ID,
                role=ROLE_CASHIER,
            ),
        }
    )


def _build_dev_catalog() -> InMemoryProductCatalog:
    return InMemoryProductCatalog(
        Product(
            product_id=f"dev-{item_code.lower()}",
            business_id=DEV_BUSINESS_ID,
            item_code=item_code,
            name=name,
            unit=unit,
            category=category,
            selling_price=Decimal(price),
        )
        for item_code, name, unit, category, price in _DEV_PRODUCTS
    )


def _build_stores(config: DailyFormEngineConfig):
    if config.store == STORE_DB:
        from core.form_store.repository import DbDailyFormRepository, DbProductCatalog

        return DbDailyFormRepository(), DbProductCatalog()
    return InMemoryDailyFormRepository(), _build_dev_catalog()


def _create_dependencies() -> HttpApiDependencies:
    config = DailyFormEngineConfig.from_settings(getattr(settings, "DAILY_FORMS", None))
    repository, catalog = _build_stores(config)
    audit_sink = InMemoryAuditSink()
    clock = SystemClock()
    form_service = DailyFormService(
        repository=repository,
        catalog=catalog,
        audit_sink=audit_sink,
        clock=clock,
        config=config,
    )
    return HttpApiDependencies(
        form_service=form_service,
        auth_provider=_build_auth_provider(),
        product_service=ProductService(catalog=catalog, audit_sink=audit_sink, clock=clock),
    )


def build_dependencies() -> HttpApiDependencies:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _create_dependencies()
        return _DEPENDENCIES


def reset_dependencies() -> None:
    """Drop the cached wiring; the next request rebuilds it from settings."""
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = None
