"""
DUKA HTTP API Auth - Public API
===============================
"""

from core.http_api.auth.provider import (
    AuthPrincipal,
    AuthProvider,
    InMemoryAuthProvider,
)
from core.http_api.auth.resolver import (
    extract_api_key,
    resolve_actor_context,
    resolve_auth_principal,
)

__all__ = [
    "AuthPrincipal",
    "AuthProvider",
    "InMemoryAuthProvider",
    "extract_api_key",
    "resolve_actor_context",
    "resolve_auth_principal",
]
