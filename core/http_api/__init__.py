"""
DUKA HTTP API - Public API
==========================
"""

from core.http_api.contracts import (
    DailyFormCreateHttpRequest,
    DailyFormDraftHttpRequest,
    DailyFormListHttpRequest,
    DailyFormPatchHttpRequest,
    DailyFormPreviewHttpRequest,
    DailyFormRefHttpRequest,
    DailyFormSubmitHttpRequest,
    HttpApiErrorBody,
    HttpApiResponse,
    ProductCreateHttpRequest,
    ProductListHttpRequest,
    ProductRefHttpRequest,
    ProductUpdateHttpRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import (
    HTTP_STATUS_BY_CODE,
    error_response,
    http_status_for,
    map_rejection_reason,
    rejection_response,
    success_response,
)
from core.http_api.handlers import (
    delete_daily_form,
    delete_product,
    get_daily_form,
    get_product,
    list_daily_forms,
    list_products,
    post_daily_form_create,
    post_daily_form_draft,
    post_daily_form_preview,
    post_daily_form_submit,
    post_product_create,
    put_daily_form,
    put_product,
)

__all__ = [
    "DailyFormCreateHttpRequest",
    "DailyFormDraftHttpRequest",
    "DailyFormListHttpRequest",
    "DailyFormPatchHttpRequest",
    "DailyFormPreviewHttpRequest",
    "DailyFormRefHttpRequest",
    "DailyFormSubmitHttpRequest",
    "HttpApiErrorBody",
    "HttpApiResponse",
    "ProductCreateHttpRequest",
    "ProductListHttpRequest",
    "ProductRefHttpRequest",
    "ProductUpdateHttpRequest",
    "HttpApiDependencies",
    "HTTP_STATUS_BY_CODE",
    "error_response",
    "http_status_for",
    "map_rejection_reason",
    "rejection_response",
    "success_response",
    "delete_daily_form",
    "get_daily_form",
    "list_daily_forms",
    "post_daily_form_create",
    "post_daily_form_draft",
    "post_daily_form_preview",
    "post_daily_form_submit",
    "put_daily_form",
    "delete_product",
    "get_product",
    "list_products",
    "post_product_create",
    "put_product",
]
