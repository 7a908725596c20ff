"""
HarborQuote Core Time — Public API
===================================
Explicit clock protocol and temporal helpers.
Doctrine: NO datetime.now() in engine logic.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    now_utc,
    set_default_clock,
)
from core.time.temporal import (
    age_seconds,
    days_until,
    format_expiry,
    is_expired,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "set_default_clock",
    "now_utc",
    "age_seconds",
    "days_until",
    "format_expiry",
    "is_expired",
]
