"""
Tests for core.config — tax, persistence windows and financing defaults.
"""

from decimal import Decimal

import pytest

from core.config.rules import (
    DEFAULT_TAX_RULE,
    FinancingDefaults,
    InMemoryConfigStore,
    PersistencePolicy,
    QuoteConfig,
    TaxRule,
)


# ── TaxRule Tests ────────────────────────────────────────────

class TestTaxRule:
    def test_compute_tax(self):
        rule = TaxRule(region_code="ON", tax_type="HST", rate=0.13)
        assert rule.compute_tax(Decimal("1000")) == Decimal("130.00")

    def test_rounds_half_up_to_cents(self):
        rule = TaxRule(region_code="ON", tax_type="HST", rate=0.13)
        # 0.13 * 0.50 = 0.065
        assert rule.compute_tax(Decimal("0.50")) == Decimal("0.07")

    def test_zero_rate(self):
        rule = TaxRule(region_code="AB", tax_type="GST", rate=0.0)
        assert rule.compute_tax(Decimal("1000")) == Decimal("0.00")

    def test_invalid_rate_too_high(self):
        with pytest.raises(ValueError, match="between 0 and 1"):
            TaxRule(region_code="ON", tax_type="HST", rate=1.5)

    def test_invalid_rate_negative(self):
        with pytest.raises(ValueError, match="between 0 and 1"):
            TaxRule(region_code="ON", tax_type="HST", rate=-0.1)

    def test_frozen_immutability(self):
        with pytest.raises(AttributeError):
            DEFAULT_TAX_RULE.rate = 0.5


# ── PersistencePolicy Tests ──────────────────────────────────

class TestPersistencePolicy:
    def test_defaults(self):
        policy = PersistencePolicy()
        assert policy.storage_key == "quoteBuilder"
        assert policy.debounce_seconds == 1.0
        assert policy.max_age_seconds == 86400
        assert policy.inactivity_seconds == 1800

    def test_rejects_empty_key(self):
        with pytest.raises(ValueError, match="storage_key"):
            PersistencePolicy(storage_key="")

    def test_rejects_negative_debounce(self):
        with pytest.raises(ValueError, match="debounce_seconds"):
            PersistencePolicy(debounce_seconds=-1)

    def test_rejects_zero_inactivity(self):
        with pytest.raises(ValueError, match="inactivity_seconds"):
            PersistencePolicy(inactivity_seconds=0)


class TestFinancingDefaults:
    def test_defaults(self):
        defaults = FinancingDefaults()
        assert defaults.term_months == 48
        assert defaults.apr_percent == Decimal("7.99")

    def test_rejects_zero_term(self):
        with pytest.raises(ValueError, match="term_months"):
            FinancingDefaults(term_months=0)


# ── QuoteConfig / Store ──────────────────────────────────────

class TestQuoteConfig:
    def test_from_empty_mapping_keeps_defaults(self):
        config = QuoteConfig.from_mapping(None)
        assert config.persistence == PersistencePolicy()
        assert config.tax == DEFAULT_TAX_RULE

    def test_from_mapping_overrides(self):
        config = QuoteConfig.from_mapping({
            "STORAGE_KEY": "wizard",
            "DEBOUNCE_SECONDS": 2,
            "INACTIVITY_SECONDS": 600,
            "TAX_REGION": "BC",
            "TAX_TYPE": "GST",
            "TAX_RATE": 0.05,
        })
        assert config.persistence.storage_key == "wizard"
        assert config.persistence.debounce_seconds == 2.0
        assert config.persistence.inactivity_seconds == 600.0
        assert config.persistence.max_age_seconds == 86400
        assert config.tax == TaxRule(region_code="BC", tax_type="GST", rate=0.05)


class TestInMemoryConfigStore:
    def test_seeded_with_default_rule(self):
        store = InMemoryConfigStore()
        assert store.get_tax_rule("ON") == DEFAULT_TAX_RULE

    def test_add_and_get(self):
        store = InMemoryConfigStore()
        rule = TaxRule(region_code="QC", tax_type="GST", rate=0.05)
        store.add_tax_rule(rule)
        assert store.get_tax_rule("QC") == rule

    def test_unknown_region(self):
        assert InMemoryConfigStore().get_tax_rule("XX") is None
