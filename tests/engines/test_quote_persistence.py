"""
Tests — Quote Engine persistence controller
============================================
Debounce, immediate trade-in writes, age / inactivity expiry and
degraded behaviour when the store misbehaves. Time is virtual.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime, timedelta, timezone

import pytest

from core.config.rules import PersistencePolicy
from core.scheduling import TimerScheduler, VirtualScheduler
from core.storage import InMemoryKeyValueStore
from core.time.clock import FixedClock
from engines.quote.actions import CompleteStep, SetPurchasePath, SetTradeInInfo
from engines.quote.persistence import (
    CorruptRecordError,
    PersistenceController,
    decode_record,
    encode_record,
    to_epoch_ms,
)
from engines.quote.reducer import reduce
from engines.quote.state import PurchasePath, TradeInInfo, WizardState


T0 = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
KEY = "quoteBuilder"


class Harness:
    def __init__(self, policy: PersistencePolicy | None = None, initial=None):
        self.clock = FixedClock(T0)
        self.scheduler = VirtualScheduler(self.clock)
        self.store = InMemoryKeyValueStore(initial)
        self.controller = PersistenceController(
            self.store, self.scheduler, self.clock, policy
        )

    def stored(self) -> dict | None:
        raw = self.store.get(KEY)
        return None if raw is None else json.loads(raw)


@pytest.fixture
def harness() -> Harness:
    return Harness()


def _record(state: WizardState, written_at: datetime, last_activity: datetime | None = None) -> str:
    payload = {"state": state.to_dict(), "timestamp": to_epoch_ms(written_at)}
    if last_activity is not None:
        payload["last_activity"] = to_epoch_ms(last_activity)
    return json.dumps(payload)


class TestRecordCodec:
    def test_encode_shape(self):
        record = json.loads(encode_record(WizardState(), T0))
        assert set(record) == {"state", "timestamp", "last_activity"}
        assert record["timestamp"] == record["last_activity"] == to_epoch_ms(T0)

    @pytest.mark.parametrize(
        "raw",
        ["not json", "[1, 2]", '{"timestamp": 1}', '{"state": {}}', '{"state": 3, "timestamp": 1}'],
    )
    def test_shape_check(self, raw):
        with pytest.raises(CorruptRecordError):
            decode_record(raw)


class TestDebounce:
    def test_write_waits_for_quiet_period(self, harness):
        harness.controller.schedule(reduce(WizardState(), CompleteStep(1)))
        assert harness.store.get(KEY) is None
        assert harness.controller.has_pending_write
        harness.scheduler.advance(0.999)
        assert harness.store.get(KEY) is None
        harness.scheduler.advance(0.001)
        assert harness.stored()["state"]["completed_steps"] == [1]

    def test_new_change_cancels_and_reschedules(self, harness):
        state = reduce(WizardState(), CompleteStep(1))
        harness.controller.schedule(state)
        harness.scheduler.advance(0.5)
        state = reduce(state, CompleteStep(2))
        harness.controller.schedule(state)
        harness.scheduler.advance(0.6)
        assert harness.store.get(KEY) is None
        harness.scheduler.advance(0.4)
        assert harness.store.write_count == 1
        assert harness.stored()["state"]["completed_steps"] == [1, 2]

    def test_write_timestamps_use_clock(self, harness):
        harness.controller.schedule(WizardState())
        harness.scheduler.advance(1)
        expected = to_epoch_ms(T0 + timedelta(seconds=1))
        assert harness.stored()["timestamp"] == expected
        assert harness.stored()["last_activity"] == expected

    def test_flush_writes_pending_now(self, harness):
        harness.controller.schedule(reduce(WizardState(), CompleteStep(1)))
        assert harness.controller.flush() is True
        assert harness.store.write_count == 1
        assert not harness.controller.has_pending_write
        assert harness.controller.flush() is False

    def test_close_flushes_and_stops_inactivity_timer(self, harness):
        harness.controller.schedule(WizardState())
        harness.controller.close()
        assert harness.store.write_count == 1
        assert harness.scheduler.pending_count == 0


class TestImmediateTradeInWrite:
    def test_trade_in_change_writes_immediately(self, harness):
        state = reduce(WizardState(), SetTradeInInfo(TradeInInfo(has_trade_in=True, brand="Honda")))
        harness.controller.schedule(state)
        assert harness.store.write_count == 1
        assert harness.stored()["state"]["trade_in_info"]["brand"] == "Honda"
        assert not harness.controller.has_pending_write

    def test_immediate_write_supersedes_pending_debounce(self, harness):
        state = reduce(WizardState(), CompleteStep(1))
        harness.controller.schedule(state)
        state = reduce(state, SetTradeInInfo(TradeInInfo(has_trade_in=False)))
        harness.controller.schedule(state)
        assert harness.store.write_count == 1
        harness.scheduler.advance(5)
        assert harness.store.write_count == 1
        assert harness.stored()["state"]["completed_steps"] == [1]

    def test_equal_trade_in_is_debounced(self, harness):
        info = TradeInInfo(has_trade_in=True, brand="Honda")
        state = reduce(WizardState(), SetTradeInInfo(info))
        harness.controller.schedule(state)
        state = reduce(state, SetTradeInInfo(TradeInInfo(has_trade_in=True, brand="Honda")))
        harness.controller.schedule(state)
        assert harness.store.write_count == 1
        assert harness.controller.has_pending_write


class TestLoadOnInit:
    def test_nothing_stored(self, harness):
        assert harness.controller.load_on_init() is None

    def test_fresh_record_restores(self):
        saved = reduce(WizardState(), SetPurchasePath(PurchasePath.LOOSE))
        harness = Harness(initial={KEY: _record(saved, T0 - timedelta(minutes=5))})
        assert harness.controller.load_on_init() == saved

    def test_scenario_e_stale_record_discarded(self):
        record = _record(WizardState(), T0 - timedelta(hours=25), T0 - timedelta(minutes=1))
        harness = Harness(initial={KEY: record})
        assert harness.controller.load_on_init() is None
        assert KEY not in harness.store

    def test_inactive_record_discarded(self):
        record = _record(WizardState(), T0 - timedelta(hours=1), T0 - timedelta(minutes=31))
        harness = Harness(initial={KEY: record})
        assert harness.controller.load_on_init() is None
        assert KEY not in harness.store

    def test_missing_last_activity_uses_timestamp(self):
        record = _record(WizardState(), T0 - timedelta(minutes=45))
        harness = Harness(initial={KEY: record})
        assert harness.controller.load_on_init() is None

    def test_corrupt_json_discarded(self):
        harness = Harness(initial={KEY: "{not json"})
        assert harness.controller.load_on_init() is None
        assert KEY not in harness.store

    def test_bad_state_payload_discarded(self):
        raw = json.dumps({"state": {"purchase_path": "teleport"}, "timestamp": to_epoch_ms(T0)})
        harness = Harness(initial={KEY: raw})
        assert harness.controller.load_on_init() is None
        assert KEY not in harness.store

    @pytest.mark.parametrize(
        "field_name, value",
        [
            ("boat_info", [1, 2]),
            ("trade_in_info", "yes"),
            ("financing", 5),
            ("motor", ["m-115"]),
            ("motor", {"item": [1], "pricing": {}}),
            ("fuel_tank_config", "tank"),
            ("install_config", [1]),
        ],
    )
    def test_non_object_nested_record_discarded(self, field_name, value):
        raw = json.dumps({"state": {field_name: value}, "timestamp": to_epoch_ms(T0)})
        harness = Harness(initial={KEY: raw})
        assert harness.controller.load_on_init() is None
        assert KEY not in harness.store

    def test_load_arms_inactivity_timer(self):
        record = _record(WizardState(), T0)
        harness = Harness(initial={KEY: record})
        assert harness.controller.load_on_init() is not None
        assert harness.scheduler.pending_count == 1
        harness.scheduler.advance(30 * 60)
        assert KEY not in harness.store

    def test_restored_trade_in_not_rewritten(self):
        saved = reduce(WizardState(), SetTradeInInfo(TradeInInfo(has_trade_in=True, brand="Honda")))
        harness = Harness(initial={KEY: _record(saved, T0)})
        state = harness.controller.load_on_init()
        harness.controller.schedule(reduce(state, CompleteStep(1)))
        assert harness.store.write_count == 0
        assert harness.controller.has_pending_write

    def test_custom_policy_key_and_windows(self):
        policy = PersistencePolicy(storage_key="wizard", max_age_seconds=60)
        record = _record(WizardState(), T0 - timedelta(seconds=61))
        harness = Harness(policy=policy, initial={"wizard": record})
        assert harness.controller.load_on_init() is None
        assert "wizard" not in harness.store


class TestInactivity:
    def test_idle_clears_store(self, harness):
        harness.controller.schedule(WizardState())
        harness.scheduler.advance(1)
        assert KEY in harness.store
        harness.scheduler.advance(30 * 60)
        assert KEY not in harness.store

    def test_activity_rearms_single_deadline(self, harness):
        harness.controller.schedule(WizardState())
        harness.scheduler.advance(20 * 60)
        harness.controller.touch()
        harness.scheduler.advance(20 * 60)
        assert KEY in harness.store
        # one inactivity timer only
        assert harness.scheduler.pending_count == 1
        harness.scheduler.advance(10 * 60)
        assert KEY not in harness.store

    def test_touch_refreshes_stored_last_activity(self, harness):
        harness.controller.schedule(WizardState())
        harness.scheduler.advance(1)
        harness.scheduler.advance(25 * 60)
        harness.controller.touch()
        assert harness.stored()["last_activity"] == to_epoch_ms(harness.clock.now_utc())
        harness.scheduler.advance(25 * 60)

        reloaded = PersistenceController(
            harness.store, VirtualScheduler(harness.clock), harness.clock
        )
        assert reloaded.load_on_init() == WizardState()

    def test_touch_without_record_writes_nothing(self, harness):
        harness.controller.touch()
        assert harness.store.write_count == 0
        assert harness.scheduler.pending_count == 1

    def test_idle_cancels_pending_write(self):
        policy = PersistencePolicy(debounce_seconds=10, inactivity_seconds=5)
        harness = Harness(policy=policy)
        harness.controller.schedule(WizardState())
        harness.scheduler.advance(60)
        assert harness.store.write_count == 0
        assert KEY not in harness.store


class TestClear:
    def test_clear_cancels_pending_and_removes(self, harness):
        state = reduce(WizardState(), CompleteStep(1))
        harness.controller.schedule(state)
        harness.scheduler.advance(1)
        harness.controller.schedule(reduce(state, CompleteStep(2)))
        harness.controller.clear()
        harness.scheduler.advance(60 * 60)
        assert KEY not in harness.store
        assert harness.store.write_count == 1
        assert harness.scheduler.pending_count == 0

    def test_trade_in_after_clear_writes_immediately(self, harness):
        info = TradeInInfo(has_trade_in=True, brand="Honda")
        harness.controller.schedule(reduce(WizardState(), SetTradeInInfo(info)))
        harness.controller.clear()
        harness.controller.schedule(reduce(WizardState(), SetTradeInInfo(info)))
        assert harness.store.write_count == 2


class TestStoreFailures:
    def test_unavailable_store_on_load(self, harness):
        harness.store.unavailable = True
        assert harness.controller.load_on_init() is None

    def test_unavailable_store_on_write(self, harness, caplog):
        harness.store.unavailable = True
        with caplog.at_level("WARNING", logger="harborquote.persistence"):
            harness.controller.schedule(
                reduce(WizardState(), SetTradeInInfo(TradeInInfo(has_trade_in=False)))
            )
            harness.scheduler.advance(60 * 60)
        assert "Could not" in caplog.text

    def test_flush_reports_failed_write(self, harness):
        harness.controller.schedule(WizardState())
        harness.store.unavailable = True
        assert harness.controller.flush() is False


# ══════════════════════════════════════════════════════════════
# THREADED TIMERS
# ══════════════════════════════════════════════════════════════


class GatedStore(InMemoryKeyValueStore):
    """Holds the first set() open until `release` is set."""

    def __init__(self):
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()
        self._gated = True

    def set(self, key: str, value: str) -> None:
        if self._gated:
            self._gated = False
            self.entered.set()
            assert self.release.wait(5)
        super().set(key, value)


class TestThreadedWrites:
    def _controller(self, store):
        policy = PersistencePolicy(debounce_seconds=0.01, inactivity_seconds=60)
        return PersistenceController(store, TimerScheduler(), FixedClock(T0), policy)

    def test_clear_waits_for_inflight_debounced_write(self):
        store = GatedStore()
        controller = self._controller(store)
        controller.schedule(reduce(WizardState(), SetPurchasePath(PurchasePath.LOOSE)))
        assert store.entered.wait(5)

        clearer = threading.Thread(target=controller.clear)
        clearer.start()
        clearer.join(0.05)
        assert clearer.is_alive()

        store.release.set()
        clearer.join(5)
        assert not clearer.is_alive()
        assert store.get(KEY) is None
        controller.close()

    def test_trade_in_write_lands_after_inflight_debounced_write(self):
        store = GatedStore()
        controller = self._controller(store)
        state = reduce(WizardState(), SetPurchasePath(PurchasePath.LOOSE))
        controller.schedule(state)
        assert store.entered.wait(5)

        state = reduce(state, SetTradeInInfo(TradeInInfo(has_trade_in=True, brand="Honda")))
        writer = threading.Thread(target=controller.schedule, args=(state,))
        writer.start()
        store.release.set()
        writer.join(5)

        stored = json.loads(store.get(KEY))
        assert stored["state"]["trade_in_info"]["brand"] == "Honda"
        controller.close()
