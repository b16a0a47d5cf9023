"""
DUKA HTTP API - Error Mapping
=============================
Stable transport error mapping for rejections and engine failures.
"""

from __future__ import annotations

from typing import Any, Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.http_api.contracts import HttpApiErrorBody, HttpApiResponse

HTTP_STATUS_BY_CODE: dict[str, int] = {
    ReasonCode.AUTH_REQUIRED: 401,
    ReasonCode.AUTH_INVALID: 401,
    ReasonCode.PERMISSION_DENIED: 403,
    ReasonCode.FORM_NOT_FOUND: 404,
    ReasonCode.METHOD_NOT_ALLOWED: 405,
    ReasonCode.FORM_CONFLICT: 400,
    ReasonCode.FORM_NOT_DRAFT: 400,
    ReasonCode.INVALID_INPUT: 400,
    ReasonCode.INVALID_REQUEST: 400,
    ReasonCode.VALIDATION_FAILED: 400,
    ReasonCode.PRODUCT_NOT_FOUND: 404,
    ReasonCode.PRODUCT_CONFLICT: 400,
}


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(
        ok=False,
        error=HttpApiErrorBody(
            code=code,
            message=message,
            details=details or {},
        ),
    ).to_dict()


def success_response(
    data: Any,
    *,
    meta: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(ok=True, data=data, meta=meta).to_dict()


def map_rejection_reason(reason: RejectionReason) -> HttpApiErrorBody:
    return HttpApiErrorBody(
        code=reason.code,
        message=reason.message,
        details={"policy_name": reason.policy_name, **reason.details},
    )


def rejection_response(reason: RejectionReason) -> dict[str, Any]:
    mapped = map_rejection_reason(reason)
    return error_response(
        code=mapped.code,
        message=mapped.message,
        details=mapped.details,
    )


def http_status_for(payload: dict[str, Any], *, success_status: int = 200) -> int:
    if payload.get("ok"):
        return success_status
    code = (payload.get("error") or {}).get("code")
    return HTTP_STATUS_BY_CODE.get(code, 400)
