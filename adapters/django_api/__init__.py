"""
HarborQuote Django HTTP adapter.
Thin framework glue over core/http_api handlers.
"""

from adapters.django_api.storage import DjangoCacheKeyValueStore
from adapters.django_api.wiring import (
    build_dependencies,
    build_quote_session,
    load_quote_config,
    reset_dependencies,
)

__all__ = [
    "DjangoCacheKeyValueStore",
    "build_dependencies",
    "build_quote_session",
    "load_quote_config",
    "reset_dependencies",
]
