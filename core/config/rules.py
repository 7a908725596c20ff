"""
HarborQuote Core Config — Tunable Rules
========================================
Doctrine: No hardcoded tax rates or timeouts in engine logic.
Persistence windows, financing defaults and regional tax come from
these frozen rule objects; callers override them per deployment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Protocol


# ══════════════════════════════════════════════════════════════
# TAX RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TaxRule:
    """
    Sales tax applied to a quote subtotal (HST, GST, PST...).

    Rates are admin-defined per region, never hardcoded in engine logic.
    """

    region_code: str
    tax_type: str  # HST | GST | PST | SALES_TAX
    rate: float  # 0.13 means 13%

    def __post_init__(self) -> None:
        if not 0 <= self.rate <= 1:
            raise ValueError(f"Tax rate must be between 0 and 1, got {self.rate}.")

    def compute_tax(self, amount: Decimal) -> Decimal:
        """Tax on `amount`, rounded to cents."""
        tax = Decimal(str(amount)) * Decimal(str(self.rate))
        return tax.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


DEFAULT_TAX_RULE = TaxRule(region_code="ON", tax_type="HST", rate=0.13)


# ══════════════════════════════════════════════════════════════
# PERSISTENCE POLICY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PersistencePolicy:
    """
    Timing rules for the wizard's durable snapshot.

    debounce_seconds:   quiet period before a routine write
    max_age_seconds:    snapshots older than this are discarded on load
    inactivity_seconds: snapshots idle longer than this are discarded,
                        and the inactivity timer clears the store
    """

    storage_key: str = "quoteBuilder"
    debounce_seconds: float = 1.0
    max_age_seconds: float = 24 * 60 * 60
    inactivity_seconds: float = 30 * 60

    def __post_init__(self) -> None:
        if not self.storage_key:
            raise ValueError("storage_key must be non-empty.")
        if self.debounce_seconds < 0:
            raise ValueError("debounce_seconds must be >= 0.")
        if self.max_age_seconds <= 0:
            raise ValueError("max_age_seconds must be > 0.")
        if self.inactivity_seconds <= 0:
            raise ValueError("inactivity_seconds must be > 0.")


# ══════════════════════════════════════════════════════════════
# FINANCING DEFAULTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FinancingDefaults:
    """Initial financing terms for a fresh quote."""

    down_payment: Decimal = Decimal("0")
    term_months: int = 48
    apr_percent: Decimal = Decimal("7.99")

    def __post_init__(self) -> None:
        if self.term_months <= 0:
            raise ValueError("term_months must be > 0.")
        if Decimal(self.apr_percent) < 0:
            raise ValueError("apr_percent must be >= 0.")


# ══════════════════════════════════════════════════════════════
# BUNDLE + STORE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class QuoteConfig:
    persistence: PersistencePolicy = field(default_factory=PersistencePolicy)
    financing: FinancingDefaults = field(default_factory=FinancingDefaults)
    tax: TaxRule = DEFAULT_TAX_RULE

    @classmethod
    def from_mapping(cls, values: Optional[Dict[str, object]]) -> "QuoteConfig":
        """
        Build a config from a flat mapping (e.g. a Django settings dict).

        Recognised keys: STORAGE_KEY, DEBOUNCE_SECONDS, MAX_AGE_SECONDS,
        INACTIVITY_SECONDS, TAX_REGION, TAX_TYPE, TAX_RATE.
        Missing keys keep their defaults.
        """
        values = dict(values or {})
        base = PersistencePolicy()
        persistence = PersistencePolicy(
            storage_key=str(values.get("STORAGE_KEY", base.storage_key)),
            debounce_seconds=float(values.get("DEBOUNCE_SECONDS", base.debounce_seconds)),
            max_age_seconds=float(values.get("MAX_AGE_SECONDS", base.max_age_seconds)),
            inactivity_seconds=float(
                values.get("INACTIVITY_SECONDS", base.inactivity_seconds)
            ),
        )
        tax = TaxRule(
            region_code=str(values.get("TAX_REGION", DEFAULT_TAX_RULE.region_code)),
            tax_type=str(values.get("TAX_TYPE", DEFAULT_TAX_RULE.tax_type)),
            rate=float(values.get("TAX_RATE", DEFAULT_TAX_RULE.rate)),
        )
        return cls(persistence=persistence, tax=tax)


class ConfigStore(Protocol):
    """
    Protocol for admin-configured rule storage.

    Implementations may back this with a database, file, or in-memory store.
    """

    def get_tax_rule(self, region_code: str) -> Optional[TaxRule]:
        ...  # pragma: no cover


class InMemoryConfigStore:
    """Simple in-memory config store for testing and bootstrap."""

    def __init__(self) -> None:
        self._tax_rules: Dict[str, TaxRule] = {
            DEFAULT_TAX_RULE.region_code: DEFAULT_TAX_RULE,
        }

    def add_tax_rule(self, rule: TaxRule) -> None:
        self._tax_rules[rule.region_code] = rule

    def get_tax_rule(self, region_code: str) -> Optional[TaxRule]:
        return self._tax_rules.get(region_code)
