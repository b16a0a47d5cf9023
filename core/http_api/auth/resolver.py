"""
DUKA HTTP API Auth - Actor Resolver
===================================
Resolve the acting principal from request headers.

Accepted credentials:
    X-API-KEY: <key>
    Authorization: Bearer <key>
"""

from __future__ import annotations

from typing import Any

from core.commands.rejection import ReasonCode, RejectionReason
from core.context.actor_context import ActorContext
from core.http_api.auth.provider import AuthPrincipal

HEADER_API_KEY = "x-api-key"
HEADER_AUTHORIZATION = "authorization"
BEARER_PREFIX = "bearer "


def _normalize_headers(headers: dict[str, Any] | None) -> dict[str, str]:
    normalized: dict[str, str] = {}
    for key, value in (headers or {}).items():
        normalized[str(key).strip().lower()] = str(value).strip()
    return normalized


def _reject(code: str, message: str) -> RejectionReason:
    return RejectionReason(
        code=code,
        message=message,
        policy_name="http_api_auth_resolver",
    )


def extract_api_key(headers: dict[str, Any] | None) -> str | None:
    normalized = _normalize_headers(headers)
    api_key = normalized.get(HEADER_API_KEY)
    if api_key:
        return api_key

    authorization = normalized.get(HEADER_AUTHORIZATION, "")
    if authorization.lower().startswith(BEARER_PREFIX):
        token = authorization[len(BEARER_PREFIX):].strip()
        return token or None
    return None


def resolve_auth_principal(
    headers: dict[str, Any] | None,
    provider,
) -> AuthPrincipal | RejectionReason:
    api_key = extract_api_key(headers)
    if api_key is None:
        return _reject(
            ReasonCode.AUTH_REQUIRED,
            "Missing or invalid authorization header",
        )

    principal = provider.resolve_api_key(api_key)
    if principal is None:
        return _reject(ReasonCode.AUTH_INVALID, "Invalid API key.")
    return principal


def resolve_actor_context(
    headers: dict[str, Any] | None,
    provider,
) -> ActorContext | RejectionReason:
    principal = resolve_auth_principal(headers, provider)
    if isinstance(principal, RejectionReason):
        return principal
    return ActorContext(
        actor_id=principal.actor_id,
        business_id=principal.business_id,
        role=principal.role,
    )
