"""
DUKA HTTP API - Dependencies
============================
Injected services and auth provider for handler wiring.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.http_api.auth.provider import AuthProvider
from engines.daily_forms.products import ProductService
from engines.daily_forms.service import DailyFormService


@dataclass(frozen=True)
class HttpApiDependencies:
    form_service: DailyFormService
    auth_provider: AuthProvider
    product_service: Optional[ProductService] = None

    def __post_init__(self):
        if not isinstance(self.form_service, DailyFormService):
            raise ValueError("form_service must be DailyFormService.")
        if self.auth_provider is None:
            raise ValueError("auth_provider is required.")
        if self.product_service is not None and not isinstance(
            self.product_service, ProductService
        ):
            raise ValueError("product_service must be ProductService or None.")
