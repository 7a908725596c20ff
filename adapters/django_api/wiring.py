"""
HarborQuote Django Adapter Wiring
=================================
Constructs HttpApiDependencies and server-side quote sessions from
Django settings.

This module is adapter-only glue:
- no engine logic
- configuration comes from settings.HARBORQUOTE
"""

from __future__ import annotations

import threading
from typing import Optional

from django.conf import settings

from adapters.django_api.storage import DjangoCacheKeyValueStore
from core.config.rules import InMemoryConfigStore, QuoteConfig
from core.http_api.dependencies import HttpApiDependencies
from core.scheduling import Scheduler, TimerScheduler
from core.time.clock import Clock, SystemClock
from engines.quote.persistence import PersistenceController
from engines.quote.session import QuoteSession


_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: HttpApiDependencies | None = None


def load_quote_config() -> QuoteConfig:
    return QuoteConfig.from_mapping(getattr(settings, "HARBORQUOTE", None))


def _create_dependencies() -> HttpApiDependencies:
    quote_config = load_quote_config()
    config_store = InMemoryConfigStore()
    config_store.add_tax_rule(quote_config.tax)
    return HttpApiDependencies(
        clock=SystemClock(),
        config_store=config_store,
        quote_config=quote_config,
    )


def build_dependencies() -> HttpApiDependencies:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _create_dependencies()
        return _DEPENDENCIES


def reset_dependencies() -> None:
    """Drop the cached wiring so the next request re-reads settings."""
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = None


def build_quote_session(
    session_key: str,
    *,
    clock: Optional[Clock] = None,
    scheduler: Optional[Scheduler] = None,
    cache_alias: str = "default",
) -> QuoteSession:
    """A QuoteSession persisting to the Django cache under `session_key`."""
    quote_config = load_quote_config()
    clock = clock or SystemClock()
    persistence = PersistenceController(
        store=DjangoCacheKeyValueStore(prefix=f"quote:{session_key}", alias=cache_alias),
        scheduler=scheduler or TimerScheduler(),
        clock=clock,
        policy=quote_config.persistence,
    )
    return QuoteSession(persistence, clock=clock, config=quote_config)
