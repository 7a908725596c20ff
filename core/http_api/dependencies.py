"""
HarborQuote HTTP API - Dependencies
===================================
Injected clock and configuration for handler wiring.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.config.rules import ConfigStore, InMemoryConfigStore, QuoteConfig
from core.time.clock import Clock, SystemClock


@dataclass(frozen=True)
class HttpApiDependencies:
    clock: Clock = field(default_factory=SystemClock)
    config_store: ConfigStore = field(default_factory=InMemoryConfigStore)
    quote_config: QuoteConfig = field(default_factory=QuoteConfig)
