"""
DUKA HTTP API Auth - Provider and Principal Models
==================================================
API-key principal resolution.

Issuing and verifying real credentials is an external concern;
the engine only needs "who is this, for which business, in which role".
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Mapping, Protocol

from core.context.actor_context import VALID_ROLES


@dataclass(frozen=True)
class AuthPrincipal:
    actor_id: str
    business_id: uuid.UUID
    role: str

    def __post_init__(self):
        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")
        if not isinstance(self.business_id, uuid.UUID):
            try:
                object.__setattr__(
                    self, "business_id", uuid.UUID(str(self.business_id).strip())
                )
            except Exception as exc:
                raise ValueError("business_id must be a valid UUID.") from exc
        role = str(self.role or "").strip().lower()
        if role not in VALID_ROLES:
            raise ValueError(
                f"role '{self.role}' not valid. Must be one of: {sorted(VALID_ROLES)}"
            )
        object.__setattr__(self, "role", role)


class AuthProvider(Protocol):
    def resolve_api_key(self, api_key: str) -> AuthPrincipal | None:
        ...


class InMemoryAuthProvider:
    """
    Deterministic in-memory auth provider for tests/bootstrap.
    """

    def __init__(self, api_key_to_principal: Mapping[str, AuthPrincipal] | None = None):
        normalized: dict[str, AuthPrincipal] = {}
        for api_key, principal in sorted(
            dict(api_key_to_principal or {}).items(),
            key=lambda item: item[0],
        ):
            if not isinstance(api_key, str) or not api_key.strip():
                raise ValueError("API key must be a non-empty string.")
            if not isinstance(principal, AuthPrincipal):
                raise ValueError("Principal must be AuthPrincipal.")
            normalized[api_key] = principal
        self._api_key_to_principal = normalized

    def resolve_api_key(self, api_key: str) -> AuthPrincipal | None:
        if not isinstance(api_key, str):
            return None
        return self._api_key_to_principal.get(api_key)
