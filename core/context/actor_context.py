"""
DUKA Context - ActorContext
===========================
Immutable identity of the person behind a request.

Every request is scoped to exactly one business (tenant) and is
performed under exactly one role. The role decides which fields
the actor may write and which lifecycle transitions it may trigger.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

ROLE_OWNER = "owner"
ROLE_MANAGER = "manager"
ROLE_CASHIER = "cashier"

VALID_ROLES = frozenset({ROLE_OWNER, ROLE_MANAGER, ROLE_CASHIER})


@dataclass(frozen=True)
class ActorContext:
    """Canonical actor identity context."""

    actor_id: str
    business_id: uuid.UUID
    role: str

    def __post_init__(self):
        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")

        if not isinstance(self.business_id, uuid.UUID):
            raise ValueError("business_id must be UUID.")

        if not isinstance(self.role, str):
            raise ValueError("role must be a string.")

        normalized = self.role.strip().lower()
        if normalized not in VALID_ROLES:
            raise ValueError(
                f"role '{self.role}' not valid. "
                f"Must be one of: {sorted(VALID_ROLES)}"
            )
        object.__setattr__(self, "role", normalized)

    def has_role(self, *roles: str) -> bool:
        return self.role in roles
