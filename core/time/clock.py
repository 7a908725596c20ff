"""
HarborQuote Core Time — Clocks
==============================
Promotion windows, record expiry and the wizard's debounce and
inactivity deadlines all read time through a Clock, never through
datetime.now(). Production wires SystemClock; tests hand the same
FixedClock to the code under test and to a VirtualScheduler, and
move it forward explicitly.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


def _require_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        raise ValueError("FixedClock requires timezone-aware datetime.")
    return dt


class Clock(Protocol):
    def now_utc(self) -> datetime:
        ...  # pragma: no cover


class SystemClock:
    """Wall-clock UTC."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Manually driven clock. `advance` moves it by seconds; `set` jumps
    to an instant (VirtualScheduler uses it to land on task deadlines).
    """

    def __init__(self, start: datetime) -> None:
        self._now = _require_aware(start)

    def now_utc(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)

    def set(self, dt: datetime) -> None:
        self._now = _require_aware(dt)


# Fallback for services constructed without an explicit clock.
_default_clock: Clock = SystemClock()


def set_default_clock(clock: Clock) -> None:
    global _default_clock
    _default_clock = clock


def get_default_clock() -> Clock:
    return _default_clock


def now_utc() -> datetime:
    return _default_clock.now_utc()
