"""
HarborQuote Core Time — Temporal Helpers
=========================================
Pure functions for age, expiry and countdown copy.
All functions take explicit datetime arguments — no hidden clock access.
"""

from __future__ import annotations

import math
from datetime import datetime


def age_seconds(since: datetime, now: datetime) -> float:
    """Seconds elapsed between `since` and `now` (negative if in the future)."""
    return (now - since).total_seconds()


def is_expired(issued_at: datetime, ttl_seconds: float, now: datetime) -> bool:
    """
    True when more than `ttl_seconds` have passed since `issued_at`.

    A record exactly `ttl_seconds` old is still valid.
    """
    return age_seconds(issued_at, now) > ttl_seconds


def days_until(target: datetime, now: datetime) -> int:
    """Whole days remaining until `target`, rounded up, never negative."""
    remaining = (target - now).total_seconds() / 86400
    return max(0, math.ceil(remaining))


def format_expiry(ends_at: datetime, now: datetime) -> str:
    """Countdown label for a promotion end date."""
    days = days_until(ends_at, now)
    if days == 0:
        return "Expires today"
    if days == 1:
        return "Expires tomorrow"
    if days <= 7:
        return f"Expires in {days} days"
    if days <= 30:
        return f"Expires in {math.ceil(days / 7)} weeks"
    return f"Expires {ends_at.date().isoformat()}"
