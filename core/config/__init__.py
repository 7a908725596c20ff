"""
HarborQuote Core Config — Public API
=====================================
Tunable rules (tax, persistence windows, financing defaults).
Doctrine: No hardcoded rates or timeouts in engine logic.
"""

from core.config.rules import (
    DEFAULT_TAX_RULE,
    ConfigStore,
    FinancingDefaults,
    InMemoryConfigStore,
    PersistencePolicy,
    QuoteConfig,
    TaxRule,
)

__all__ = [
    "DEFAULT_TAX_RULE",
    "TaxRule",
    "PersistencePolicy",
    "FinancingDefaults",
    "QuoteConfig",
    "ConfigStore",
    "InMemoryConfigStore",
]
