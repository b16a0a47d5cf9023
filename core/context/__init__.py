"""
DUKA Context — Public API
==========================
Actor identity and role constants.
"""

from core.context.actor_context import (
    ROLE_CASHIER,
    ROLE_MANAGER,
    ROLE_OWNER,
    VALID_ROLES,
    ActorContext,
)

__all__ = [
    "ActorContext",
    "ROLE_OWNER",
    "ROLE_MANAGER",
    "ROLE_CASHIER",
    "VALID_ROLES",
]
