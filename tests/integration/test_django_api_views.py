"""
Tests — Django Adapter
======================
JSON views routed under /v1/, the cache-backed key/value store and
server-side quote sessions built from settings.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from django.core.cache import caches
from django.test import Client

from adapters.django_api.storage import DjangoCacheKeyValueStore
from adapters.django_api.wiring import (
    build_dependencies,
    build_quote_session,
    load_quote_config,
    reset_dependencies,
)
from core.scheduling import VirtualScheduler
from core.storage import StorageUnavailableError
from core.time.clock import FixedClock
from engines.catalog.models import CatalogItem
from engines.promotion.models import PricingResult
from engines.quote.actions import SetMotor, SetPurchasePath
from engines.quote.reducer import reduce
from engines.quote.state import PurchasePath, WizardState


T0 = datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc)

ITEM_RECORD = {
    "id": "m-115",
    "model": "115 ELPT FourStroke",
    "horsepower": 115,
    "base_price": 10000,
    "motor_type": "Remote",
}
PROMOTION_RECORD = {
    "id": "spring",
    "name": "Spring Savings",
    "discount_percentage": 10,
    "is_active": True,
    "end_date": "2026-02-28",
}
RULE_RECORD = {"id": "r1", "promotion_id": "spring", "rule_type": "all"}

MOTOR = CatalogItem(
    item_id="m-115",
    model="115 ELPT FourStroke",
    horsepower=Decimal("115"),
    base_price=Decimal("10000"),
)
PRICING = PricingResult(original_price=Decimal("10000"), effective_price=9000)


@pytest.fixture(autouse=True)
def fresh_wiring():
    reset_dependencies()
    caches["default"].clear()
    yield
    reset_dependencies()


@pytest.fixture
def client() -> Client:
    return Client()


def _post(client: Client, path: str, body) -> tuple[int, dict]:
    raw = body if isinstance(body, str) else json.dumps(body)
    response = client.post(path, data=raw, content_type="application/json")
    return response.status_code, response.json()


def _loose_state() -> dict:
    state = reduce(WizardState(), SetMotor(MOTOR, PRICING))
    return reduce(state, SetPurchasePath(PurchasePath.LOOSE)).to_dict()


# ══════════════════════════════════════════════════════════════
# PRICING VIEWS
# ══════════════════════════════════════════════════════════════


class TestPricingViews:
    def test_evaluate(self, client):
        status, payload = _post(client, "/v1/pricing/evaluate", {
            "item": ITEM_RECORD,
            "promotions": [PROMOTION_RECORD],
            "rules": [RULE_RECORD],
            "now": "2026-02-01T09:30:00Z",
        })
        assert status == 200
        assert payload["ok"] is True
        assert payload["data"]["pricing"]["effective_price"] == 9000
        assert payload["meta"]["evaluated_at"].startswith("2026-02-01T09:30:00")

    def test_evaluate_after_promotion_ends(self, client):
        status, payload = _post(client, "/v1/pricing/evaluate", {
            "item": ITEM_RECORD,
            "promotions": [PROMOTION_RECORD],
            "rules": [RULE_RECORD],
            "now": "2026-03-01",
        })
        assert status == 200
        assert payload["data"]["pricing"]["effective_price"] == 10000

    def test_malformed_promotion_is_skipped(self, client):
        status, payload = _post(client, "/v1/pricing/evaluate", {
            "item": ITEM_RECORD,
            "promotions": [{"id": "bad", "discount_percentage": "lots"}],
            "rules": [RULE_RECORD],
        })
        assert status == 200
        assert payload["data"]["pricing"]["effective_price"] == 10000

    def test_catalog(self, client):
        jet = dict(ITEM_RECORD, id="jet", model="80 Jet", horsepower=80)
        status, payload = _post(client, "/v1/pricing/catalog", {
            "items": [ITEM_RECORD, jet],
            "promotions": [PROMOTION_RECORD],
            "rules": [RULE_RECORD],
            "now": "2026-02-01",
        })
        assert status == 200
        assert payload["data"]["count"] == 1
        assert payload["data"]["excluded"] == 1


# ══════════════════════════════════════════════════════════════
# QUOTE VIEWS
# ══════════════════════════════════════════════════════════════


class TestQuoteViews:
    def test_steps(self, client):
        status, payload = _post(client, "/v1/quote/steps", {"state": _loose_state()})
        assert status == 200
        assert payload["data"]["visible_steps"] == [1, 2, 4, 6, 7]
        assert payload["data"]["accessible"]["5"] is False

    def test_summary_uses_configured_region(self, client):
        status, payload = _post(client, "/v1/quote/summary", {
            "state": _loose_state(),
            "accessory_total": "100",
        })
        assert status == 200
        assert payload["data"]["tax"]["region_code"] == "ON"
        assert payload["data"]["totals"]["subtotal"] == "9100.00"

    def test_summary_unknown_region_is_unprocessable(self, client):
        status, payload = _post(client, "/v1/quote/summary", {
            "state": _loose_state(),
            "tax_region": "ZZ",
        })
        assert status == 422
        assert payload["error"]["code"] == "UNKNOWN_TAX_REGION"

    def test_summary_without_motor_is_unprocessable(self, client):
        status, payload = _post(client, "/v1/quote/summary", {"state": {}})
        assert status == 422
        assert payload["error"]["code"] == "QUOTE_INCOMPLETE"

    def test_region_follows_settings(self, client, settings):
        settings.HARBORQUOTE = dict(
            settings.HARBORQUOTE, TAX_REGION="AB", TAX_TYPE="GST", TAX_RATE=0.05
        )
        reset_dependencies()
        status, payload = _post(client, "/v1/quote/summary", {"state": _loose_state()})
        assert status == 200
        assert payload["data"]["tax"]["tax_type"] == "GST"
        assert payload["data"]["totals"]["tax"] == "450.00"


# ══════════════════════════════════════════════════════════════
# REQUEST VALIDATION
# ══════════════════════════════════════════════════════════════


class TestRequestValidation:
    def test_get_not_allowed(self, client):
        response = client.get("/v1/pricing/evaluate")
        assert response.status_code == 405
        assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"

    def test_invalid_json(self, client):
        status, payload = _post(client, "/v1/quote/steps", "{nope")
        assert status == 400
        assert payload["error"]["code"] == "INVALID_REQUEST"

    def test_body_must_be_object(self, client):
        status, payload = _post(client, "/v1/quote/steps", [1, 2])
        assert status == 400
        assert "JSON object" in payload["error"]["message"]

    def test_missing_item(self, client):
        status, payload = _post(client, "/v1/pricing/evaluate", {"promotions": []})
        assert status == 400
        assert "item is required" in payload["error"]["message"]

    def test_promotions_must_be_list(self, client):
        status, _ = _post(client, "/v1/pricing/evaluate", {
            "item": ITEM_RECORD,
            "promotions": {"id": "spring"},
        })
        assert status == 400

    def test_bad_state_payload(self, client):
        status, _ = _post(client, "/v1/quote/steps", {"state": {"purchase_path": "teleport"}})
        assert status == 400

    @pytest.mark.parametrize("path", ["/v1/quote/steps", "/v1/quote/summary"])
    def test_non_object_nested_state_record(self, client, path):
        status, payload = _post(client, path, {"state": {"boat_info": [1, 2]}})
        assert status == 400
        assert "boat_info must be an object" in payload["error"]["message"]

    def test_negative_accessories(self, client):
        status, _ = _post(client, "/v1/quote/summary", {
            "state": _loose_state(),
            "accessory_total": -5,
        })
        assert status == 400


# ══════════════════════════════════════════════════════════════
# CACHE STORE + SESSIONS
# ══════════════════════════════════════════════════════════════


class TestDjangoCacheKeyValueStore:
    def test_round_trip_under_prefix(self):
        store = DjangoCacheKeyValueStore(prefix="quote:abc")
        store.set("quoteBuilder", "{}")
        assert store.get("quoteBuilder") == "{}"
        assert caches["default"].get("quote:abc:quoteBuilder") == "{}"
        store.remove("quoteBuilder")
        assert store.get("quoteBuilder") is None

    def test_prefixes_are_isolated(self):
        DjangoCacheKeyValueStore(prefix="a").set("k", "1")
        assert DjangoCacheKeyValueStore(prefix="b").get("k") is None

    def test_rejects_non_string(self):
        with pytest.raises(TypeError):
            DjangoCacheKeyValueStore(prefix="a").set("k", 1)

    def test_empty_prefix(self):
        with pytest.raises(ValueError):
            DjangoCacheKeyValueStore(prefix="")

    def test_unknown_alias_is_unavailable(self):
        store = DjangoCacheKeyValueStore(prefix="a", alias="missing")
        with pytest.raises(StorageUnavailableError):
            store.get("k")


class TestWiring:
    def test_dependencies_are_cached(self):
        assert build_dependencies() is build_dependencies()

    def test_config_from_settings(self):
        config = load_quote_config()
        assert config.persistence.storage_key == "quoteBuilder"
        assert config.tax.region_code == "ON"

    def test_session_persists_through_cache(self):
        clock = FixedClock(T0)
        scheduler = VirtualScheduler(clock)
        session = build_quote_session("abc", clock=clock, scheduler=scheduler)
        session.select_motor(MOTOR, PRICING)
        scheduler.advance(1)

        restored = build_quote_session("abc", clock=clock, scheduler=VirtualScheduler(clock))
        assert restored.restore() is True
        assert restored.state.motor.item == MOTOR

        other = build_quote_session("xyz", clock=clock, scheduler=VirtualScheduler(clock))
        assert other.restore() is False
