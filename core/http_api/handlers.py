"""
DUKA HTTP API - Framework-Agnostic Handlers
===========================================
Pure handler functions over contracts and injected dependencies.

Every handler returns the response envelope; the adapter derives the
HTTP status from the error code (see errors.http_status_for).
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from core.commands.rejection import ReasonCode, RejectionReason
from core.context.actor_context import ActorContext
from core.http_api.auth.resolver import resolve_actor_context
from core.http_api.contracts import (
    DailyFormCreateHttpRequest,
    DailyFormDraftHttpRequest,
    DailyFormListHttpRequest,
    DailyFormPatchHttpRequest,
    DailyFormPreviewHttpRequest,
    DailyFormRefHttpRequest,
    DailyFormSubmitHttpRequest,
    ProductCreateHttpRequest,
    ProductListHttpRequest,
    ProductRefHttpRequest,
    ProductUpdateHttpRequest,
)
from core.http_api.errors import error_response, rejection_response, success_response
from engines.daily_forms.errors import DailyFormError, InvalidInputError
from engines.daily_forms.products import ProductService

logger = logging.getLogger("duka.http")


def _run(
    dependencies,
    headers: dict[str, Any] | None,
    operation: Callable[[ActorContext], Any],
) -> dict[str, Any]:
    actor = resolve_actor_context(headers, dependencies.auth_provider)
    if isinstance(actor, RejectionReason):
        logger.info("Request rejected: %s", actor.code)
        return rejection_response(actor)

    try:
        data = operation(actor)
    except DailyFormError as exc:
        rejection = exc.to_rejection()
        logger.info(
            "Request by %s rejected: %s (%s)",
            actor.actor_id, rejection.code, rejection.message,
        )
        return rejection_response(rejection)
    except ValueError as exc:
        return error_response(code=ReasonCode.INVALID_REQUEST, message=str(exc))
    return success_response(data)


def post_daily_form_create(
    request: DailyFormCreateHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    service = dependencies.form_service
    return _run(
        dependencies,
        headers,
        lambda actor: service.create_from_catalog(
            actor,
            request.date,
            request.shift,
            product_ids=request.product_ids,
        ).to_dict(),
    )


def post_daily_form_draft(
    request: DailyFormDraftHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    service = dependencies.form_service
    return _run(
        dependencies,
        headers,
        lambda actor: service.load_or_not_found(
            actor.business_id, request.date, request.shift
        ).to_dict(),
    )


def post_daily_form_preview(
    request: DailyFormPreviewHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    service = dependencies.form_service

    def _preview(actor: ActorContext) -> dict[str, Any]:
        derived = service.preview(request.form)
        return {**request.form, **derived.to_dict()}

    return _run(dependencies, headers, _preview)


def list_daily_forms(
    request: DailyFormListHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    service = dependencies.form_service
    return _run(
        dependencies,
        headers,
        lambda actor: service.list_forms(
            actor.business_id,
            start_date=request.start_date,
            end_date=request.end_date,
            page=request.page,
            limit=request.limit,
        ).to_dict(),
    )


def get_daily_form(
    request: DailyFormRefHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    service = dependencies.form_service
    return _run(
        dependencies,
        headers,
        lambda actor: service.get(actor.business_id, request.form_id).to_dict(),
    )


def put_daily_form(
    request: DailyFormPatchHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    service = dependencies.form_service
    return _run(
        dependencies,
        headers,
        lambda actor: service.apply_patch(
            actor,
            request.form_id,
            request.patch,
            expected_version=request.version,
        ).to_dict(),
    )


def post_daily_form_submit(
    request: DailyFormSubmitHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    service = dependencies.form_service
    return _run(
        dependencies,
        headers,
        lambda actor: service.submit(
            actor,
            request.form_id,
            request.patch,
            expected_version=request.version,
        ).to_dict(),
    )


def delete_daily_form(
    request: DailyFormRefHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    service = dependencies.form_service

    def _delete(actor: ActorContext) -> dict[str, Any]:
        service.delete(actor, request.form_id)
        return {"id": request.form_id, "deleted": True}

    return _run(dependencies, headers, _delete)


# ── products ──────────────────────────────────────────────────

def _product_service(dependencies) -> ProductService:
    service = dependencies.product_service
    if service is None:
        raise InvalidInputError("Product catalog is not configured.")
    return service


def list_products(
    request: ProductListHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    def _list(actor: ActorContext) -> dict[str, Any]:
        products = _product_service(dependencies).list_products(
            actor.business_id,
            active=request.active,
            search=request.search,
        )
        return {
            "count": len(products),
            "products": [product.to_dict() for product in products],
        }

    return _run(dependencies, headers, _list)


def get_product(
    request: ProductRefHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return _run(
        dependencies,
        headers,
        lambda actor: _product_service(dependencies).get(
            actor.business_id, request.product_id
        ).to_dict(),
    )


def post_product_create(
    request: ProductCreateHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return _run(
        dependencies,
        headers,
        lambda actor: _product_service(dependencies).create(actor, request.fields).to_dict(),
    )


def put_product(
    request: ProductUpdateHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return _run(
        dependencies,
        headers,
        lambda actor: _product_service(dependencies).update(
            actor, request.product_id, request.fields
        ).to_dict(),
    )


def delete_product(
    request: ProductRefHttpRequest,
    dependencies,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Soft delete: the product is deactivated, never removed."""
    return _run(
        dependencies,
        headers,
        lambda actor: _product_service(dependencies).deactivate(
            actor, request.product_id
        ).to_dict(),
    )
