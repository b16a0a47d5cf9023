"""
DUKA Django Adapter Views
=========================
Pass-through HTTP views over core/http_api handlers.
"""

from __future__ import annotations

import json
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.wiring import build_dependencies
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
from core.http_api.errors import error_response, http_status_for
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
from core.time.clock import parse_business_date


def _headers_from_request(request: HttpRequest) -> dict[str, str]:
    return {str(key): str(value) for key, value in request.headers.items()}


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return JsonResponse(
        error_response(code=code, message=message, details={}),
        status=status,
    )


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        "METHOD_NOT_ALLOWED",
        "Method not allowed for this endpoint.",
        status=405,
    )


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except Exception as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _parse_optional_int(value: Any, field_name: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be an integer.") from exc


def _parse_optional_date(value: Any):
    if value is None or value == "":
        return None
    return parse_business_date(value)


def _parse_product_ids(value: Any) -> tuple[str, ...] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValueError("productIds must be a list.")
    return tuple(str(product_id) for product_id in value)


def _respond(handler, contract, request: HttpRequest, *, success_status: int = 200):
    payload = handler(
        contract,
        build_dependencies(),
        headers=_headers_from_request(request),
    )
    return JsonResponse(
        payload,
        status=http_status_for(payload, success_status=success_status),
    )


@csrf_exempt
def daily_form_create_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    try:
        body = _parse_json_body(request)
        contract = DailyFormCreateHttpRequest(
            date=body.get("date"),
            shift=body.get("shift"),
            product_ids=_parse_product_ids(body.get("productIds")),
        )
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return _respond(post_daily_form_create, contract, request, success_status=201)


@csrf_exempt
def daily_form_draft_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    try:
        body = _parse_json_body(request)
        contract = DailyFormDraftHttpRequest(
            date=body.get("date"),
            shift=body.get("shift"),
        )
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return _respond(post_daily_form_draft, contract, request)


@csrf_exempt
def daily_form_preview_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    try:
        body = _parse_json_body(request)
        contract = DailyFormPreviewHttpRequest(form=body.get("form", body))
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return _respond(post_daily_form_preview, contract, request)


@csrf_exempt
def daily_forms_list_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    try:
        contract = DailyFormListHttpRequest(
            start_date=_parse_optional_date(request.GET.get("startDate")),
            end_date=_parse_optional_date(request.GET.get("endDate")),
            page=_parse_optional_int(request.GET.get("page"), "page") or 1,
            limit=_parse_optional_int(request.GET.get("limit"), "limit"),
        )
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return _respond(list_daily_forms, contract, request)


@csrf_exempt
def daily_form_detail_view(request: HttpRequest, form_id: str) -> JsonResponse:
    try:
        if request.method == "GET":
            return _respond(get_daily_form, DailyFormRefHttpRequest(form_id=form_id), request)
        if request.method == "DELETE":
            return _respond(
                delete_daily_form, DailyFormRefHttpRequest(form_id=form_id), request
            )
        if request.method != "PUT":
            return _method_not_allowed()

        body = _parse_json_body(request)
        version = _parse_optional_int(body.pop("version", None), "version")
        contract = DailyFormPatchHttpRequest(form_id=form_id, patch=body, version=version)
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return _respond(put_daily_form, contract, request)


@csrf_exempt
def daily_form_submit_view(request: HttpRequest, form_id: str) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    try:
        body = _parse_json_body(request)
        version = _parse_optional_int(body.pop("version", None), "version")
        contract = DailyFormSubmitHttpRequest(form_id=form_id, patch=body, version=version)
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return _respond(post_daily_form_submit, contract, request)


def _parse_active_filter(value: Any) -> bool | None:
    if value is None or value == "" or value == "true":
        return True
    if value == "false":
        return False
    if value == "all":
        return None
    raise ValueError("active must be one of: true, false, all.")


@csrf_exempt
def products_view(request: HttpRequest) -> JsonResponse:
    try:
        if request.method == "GET":
            contract = ProductListHttpRequest(
                active=_parse_active_filter(request.GET.get("active")),
                search=request.GET.get("q", ""),
            )
            return _respond(list_products, contract, request)
        if request.method != "POST":
            return _method_not_allowed()
        contract = ProductCreateHttpRequest(fields=_parse_json_body(request))
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return _respond(post_product_create, contract, request, success_status=201)


@csrf_exempt
def product_detail_view(request: HttpRequest, product_id: str) -> JsonResponse:
    try:
        if request.method == "GET":
            return _respond(get_product, ProductRefHttpRequest(product_id=product_id), request)
        if request.method == "DELETE":
            return _respond(
                delete_product, ProductRefHttpRequest(product_id=product_id), request
            )
        if request.method != "PUT":
            return _method_not_allowed()
        contract = ProductUpdateHttpRequest(
            product_id=product_id, fields=_parse_json_body(request)
        )
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return _respond(put_product, contract, request)
