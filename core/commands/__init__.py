"""
DUKA Command Layer — Public API
==================================
Structured rejection reasons shared by engines and the HTTP layer.
"""

from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "ReasonCode",
    "RejectionReason",
]
