"""
HarborQuote Core Scheduling — Cancellable Deferred Tasks
=========================================================
The only asynchronous primitive in the quote wizard is "run this
later unless something newer replaces it". Debounced writes and the
inactivity deadline are both expressed as ScheduledTask handles.

TimerScheduler runs callbacks on threading.Timer threads.
VirtualScheduler runs them when a FixedClock is advanced, so tests
exercise cancel-and-reschedule without real waits.
"""

from __future__ import annotations

import itertools
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Protocol

from core.time.clock import FixedClock

logger = logging.getLogger("harborquote.scheduling")


# ══════════════════════════════════════════════════════════════
# TASK HANDLE
# ══════════════════════════════════════════════════════════════

class ScheduledTask:
    """
    Handle for a callback scheduled to run once.

    A task runs at most once. Cancelling a task that already ran
    (or was already cancelled) is a no-op.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        due_at: Optional[datetime] = None,
    ) -> None:
        self._callback = callback
        self._due_at = due_at
        self._cancelled = False
        self._done = False
        self._lock = threading.Lock()

    @property
    def due_at(self) -> Optional[datetime]:
        return self._due_at

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._done)

    def cancel(self) -> bool:
        """Cancel the task. Returns True if it was still pending."""
        with self._lock:
            if not self.pending:
                return False
            self._cancelled = True
        self._on_cancel()
        return True

    def run(self) -> None:
        """Run the callback now, unless cancelled or already run."""
        with self._lock:
            if not self.pending:
                return
            self._done = True
        self._callback()

    def _on_cancel(self) -> None:
        pass


# ══════════════════════════════════════════════════════════════
# SCHEDULER PROTOCOL
# ══════════════════════════════════════════════════════════════

class Scheduler(Protocol):
    """Schedules a callback to run once after a delay."""

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> ScheduledTask:
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# THREADING TIMER SCHEDULER (production)
# ══════════════════════════════════════════════════════════════

class _TimerTask(ScheduledTask):
    def __init__(self, callback: Callable[[], None], delay_seconds: float) -> None:
        super().__init__(callback)
        self._timer = threading.Timer(delay_seconds, self._fire)
        self._timer.daemon = True

    def start(self) -> None:
        self._timer.start()

    def _fire(self) -> None:
        try:
            self.run()
        except Exception as exc:
            logger.error(f"Scheduled task failed: {exc}", exc_info=True)

    def _on_cancel(self) -> None:
        self._timer.cancel()


class TimerScheduler:
    """Runs callbacks on daemon threading.Timer threads."""

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> ScheduledTask:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0.")
        task = _TimerTask(callback, delay_seconds)
        task.start()
        return task


# ══════════════════════════════════════════════════════════════
# VIRTUAL SCHEDULER (tests)
# ══════════════════════════════════════════════════════════════

class VirtualScheduler:
    """
    Deterministic scheduler driven by a FixedClock.

    Tasks run only inside advance()/run_all(), in deadline order
    (ties in scheduling order). The clock is moved to each task's
    deadline before its callback runs, so callbacks that read the
    clock see the time they were due.
    """

    def __init__(self, clock: FixedClock) -> None:
        self._clock = clock
        self._tasks: List[tuple] = []
        self._seq = itertools.count()

    @property
    def clock(self) -> FixedClock:
        return self._clock

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> ScheduledTask:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0.")
        due_at = self._clock.now_utc() + timedelta(seconds=delay_seconds)
        task = ScheduledTask(callback, due_at=due_at)
        self._tasks.append((due_at, next(self._seq), task))
        return task

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, task in self._tasks if task.pending)

    def pending_tasks(self) -> List[ScheduledTask]:
        return [task for _, _, task in sorted(self._tasks, key=lambda t: t[:2]) if task.pending]

    def advance(self, seconds: float) -> int:
        """Move time forward, running every task that falls due. Returns count run."""
        target = self._clock.now_utc() + timedelta(seconds=seconds)
        ran = 0
        while True:
            task = self._next_due(target)
            if task is None:
                break
            self._clock.set(task.due_at)
            task.run()
            ran += 1
        self._clock.set(target)
        self._prune()
        return ran

    def run_all(self) -> int:
        """Run every pending task regardless of deadline."""
        ran = 0
        while True:
            pending = self.pending_tasks()
            if not pending:
                break
            task = pending[0]
            if task.due_at > self._clock.now_utc():
                self._clock.set(task.due_at)
            task.run()
            ran += 1
        self._prune()
        return ran

    def _next_due(self, target: datetime) -> Optional[ScheduledTask]:
        due = [
            entry for entry in self._tasks
            if entry[2].pending and entry[0] <= target
        ]
        if not due:
            return None
        return min(due, key=lambda entry: entry[:2])[2]

    def _prune(self) -> None:
        self._tasks = [entry for entry in self._tasks if entry[2].pending]


__all__ = [
    "ScheduledTask",
    "Scheduler",
    "TimerScheduler",
    "VirtualScheduler",
]
