"""
DUKA Core Time — Public API
=============================
Explicit clock protocol and business-date helpers.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    format_business_date,
    parse_business_date,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "format_business_date",
    "parse_business_date",
]
