"""
HarborQuote Quote Engine — Persistence Controller
==================================================
Keeps the wizard durable across reloads through a KeyValueStore.

Behaviour:
- Routine changes are debounced: a new change inside the quiet
  period cancels the pending write and reschedules it, so only the
  latest snapshot is ever written.
- A change to the trade-in record is written immediately.
- Each write stores {state, timestamp, last_activity} as JSON
  (timestamps in epoch milliseconds).
- On load, stale (too old), idle (inactive too long) or malformed
  records are removed and the wizard starts empty.
- An inactivity timer clears the stored record after the idle
  window even if no load ever happens.

Failure semantics: any exception from the store or from decoding is
logged and treated as "nothing persisted". The wizard keeps working
in memory.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from core.config.rules import PersistencePolicy
from core.scheduling import ScheduledTask, Scheduler
from core.storage import KeyValueStore
from core.time.clock import Clock
from core.time.temporal import age_seconds
from engines.quote.state import WizardState

logger = logging.getLogger("harborquote.persistence")


class CorruptRecordError(ValueError):
    """Stored wizard record failed the shape check."""


# ══════════════════════════════════════════════════════════════
# RECORD ENCODING
# ══════════════════════════════════════════════════════════════

def to_epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def from_epoch_ms(value: Any, field_name: str) -> datetime:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CorruptRecordError(f"{field_name} must be epoch milliseconds.")
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def encode_record(state: WizardState, now: datetime) -> str:
    stamp = to_epoch_ms(now)
    return json.dumps(
        {"state": state.to_dict(), "timestamp": stamp, "last_activity": stamp},
        sort_keys=True,
    )


def decode_record(raw: str) -> Mapping[str, Any]:
    """Parse and shape-check a stored record. Raises CorruptRecordError."""
    try:
        record = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise CorruptRecordError(f"Stored record is not valid JSON: {exc}") from exc
    if not isinstance(record, dict):
        raise CorruptRecordError("Stored record must be a JSON object.")
    if not isinstance(record.get("state"), dict):
        raise CorruptRecordError("Stored record has no state object.")
    if "timestamp" not in record:
        raise CorruptRecordError("Stored record has no timestamp.")
    return record


# ══════════════════════════════════════════════════════════════
# CONTROLLER
# ══════════════════════════════════════════════════════════════

class PersistenceController:
    """Sole reader/writer of the wizard's durable record."""

    def __init__(
        self,
        store: KeyValueStore,
        scheduler: Scheduler,
        clock: Clock,
        policy: Optional[PersistencePolicy] = None,
    ):
        self._store = store
        self._scheduler = scheduler
        self._clock = clock
        self._policy = policy or PersistencePolicy()
        self._lock = threading.RLock()
        self._pending_write: Optional[ScheduledTask] = None
        self._pending_state: Optional[WizardState] = None
        self._inactivity_timer: Optional[ScheduledTask] = None
        self._last_trade_in = None
        # Bumped whenever a pending snapshot is superseded or dropped.
        self._generation = 0
        self._inactivity_generation = 0

    @property
    def policy(self) -> PersistencePolicy:
        return self._policy

    @property
    def has_pending_write(self) -> bool:
        with self._lock:
            return self._pending_write is not None and self._pending_write.pending

    # ── writes ────────────────────────────────────────────────

    def schedule(self, state: WizardState) -> None:
        """Call after every reducer transition."""
        with self._lock:
            trade_in_changed = state.trade_in_info != self._last_trade_in
            self._last_trade_in = state.trade_in_info
            self._cancel_pending_locked()
            if trade_in_changed:
                logger.debug("Trade-in changed; writing wizard state immediately.")
                self._write(state)
            else:
                generation = self._generation
                self._pending_state = state
                self._pending_write = self._scheduler.call_later(
                    self._policy.debounce_seconds,
                    lambda: self._run_pending(generation),
                )
            self._arm_inactivity_locked()

    def flush(self) -> bool:
        """Write the pending snapshot now. Returns True if one was written."""
        with self._lock:
            task = self._pending_write
            if task is None or not task.pending:
                return False
            state = self._pending_state
            self._cancel_pending_locked()
            return self._write(state)

    def clear(self) -> None:
        """Drop any pending write and remove the stored record (start over)."""
        with self._lock:
            self._cancel_pending_locked()
            self._cancel_inactivity_locked()
            self._last_trade_in = None
            self._remove("start over")

    def close(self) -> None:
        """Teardown: flush the pending write and stop the inactivity timer."""
        self.flush()
        with self._lock:
            self._cancel_inactivity_locked()

    def touch(self) -> None:
        """
        Record shopper activity without a state change: re-arm the
        inactivity deadline and refresh last_activity on the stored record.
        """
        with self._lock:
            self._arm_inactivity_locked()
            self._refresh_activity_locked()

    # ── reads ─────────────────────────────────────────────────

    def load_on_init(self) -> Optional[WizardState]:
        try:
            raw = self._store.get(self._policy.storage_key)
        except Exception as exc:
            logger.warning(f"Wizard store unavailable on load: {exc}")
            return None
        if raw is None:
            return None

        now = self._clock.now_utc()
        try:
            record = decode_record(raw)
            written_at = from_epoch_ms(record["timestamp"], "timestamp")
            last_activity = from_epoch_ms(
                record.get("last_activity", record["timestamp"]), "last_activity"
            )
            state = WizardState.from_dict(record["state"])
        except (CorruptRecordError, KeyError, TypeError, ValueError) as exc:
            logger.warning(f"Discarding malformed wizard record: {exc}")
            self._remove("malformed")
            return None

        if age_seconds(written_at, now) > self._policy.max_age_seconds:
            logger.info("Discarding wizard record older than max age.")
            self._remove("expired")
            return None
        if age_seconds(last_activity, now) > self._policy.inactivity_seconds:
            logger.info("Discarding wizard record idle past inactivity window.")
            self._remove("inactive")
            return None

        with self._lock:
            self._last_trade_in = state.trade_in_info
            self._arm_inactivity_locked()
        return state

    # ── internals ─────────────────────────────────────────────

    def _run_pending(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            state = self._pending_state
            self._pending_write = None
            self._pending_state = None
            if state is not None:
                self._write(state)

    def _write(self, state: WizardState) -> bool:
        try:
            payload = encode_record(state, self._clock.now_utc())
            self._store.set(self._policy.storage_key, payload)
        except Exception as exc:
            logger.warning(f"Could not persist wizard state: {exc}")
            return False
        logger.debug("Wizard state persisted.")
        return True

    def _remove(self, reason: str) -> None:
        try:
            self._store.remove(self._policy.storage_key)
        except Exception as exc:
            logger.warning(f"Could not remove wizard record ({reason}): {exc}")
            return
        logger.debug(f"Wizard record removed ({reason}).")

    def _refresh_activity_locked(self) -> None:
        try:
            raw = self._store.get(self._policy.storage_key)
            if raw is None:
                return
            record = dict(decode_record(raw))
            record["last_activity"] = to_epoch_ms(self._clock.now_utc())
            self._store.set(self._policy.storage_key, json.dumps(record, sort_keys=True))
        except Exception as exc:
            logger.warning(f"Could not refresh wizard activity: {exc}")

    def _on_inactive(self, generation: int) -> None:
        with self._lock:
            if generation != self._inactivity_generation:
                return
            self._inactivity_timer = None
            self._cancel_pending_locked()
            logger.info("Wizard inactive; clearing stored record.")
            self._remove("inactive")

    def _cancel_pending_locked(self) -> None:
        self._generation += 1
        if self._pending_write is not None:
            self._pending_write.cancel()
        self._pending_write = None
        self._pending_state = None

    def _cancel_inactivity_locked(self) -> None:
        self._inactivity_generation += 1
        if self._inactivity_timer is not None:
            self._inactivity_timer.cancel()
        self._inactivity_timer = None

    def _arm_inactivity_locked(self) -> None:
        self._cancel_inactivity_locked()
        generation = self._inactivity_generation
        self._inactivity_timer = self._scheduler.call_later(
            self._policy.inactivity_seconds,
            lambda: self._on_inactive(generation),
        )
