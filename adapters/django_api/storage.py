"""
HarborQuote Django Adapter - Cache-Backed Key/Value Store
=========================================================
KeyValueStore over a django.core.cache alias, so a server-side
QuoteSession can persist through whatever cache backend the
deployment configures.
"""

from __future__ import annotations

from typing import Optional

from django.core.cache import caches

from core.storage import StorageUnavailableError


class DjangoCacheKeyValueStore:
    """
    Keys are namespaced with `prefix` (one namespace per shopper
    session). Entries never expire on the cache side; the persistence
    controller owns expiry.
    """

    def __init__(self, prefix: str, alias: str = "default"):
        if not prefix:
            raise ValueError("prefix must be non-empty.")
        self._prefix = prefix
        self._alias = alias

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def _cache(self):
        return caches[self._alias]

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._cache().get(self._key(key))
        except Exception as exc:
            raise StorageUnavailableError(f"Cache read failed: {exc}") from exc
        if value is not None and not isinstance(value, str):
            raise StorageUnavailableError("Cache returned a non-string value.")
        return value

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("KeyValueStore values must be strings.")
        try:
            self._cache().set(self._key(key), value, timeout=None)
        except Exception as exc:
            raise StorageUnavailableError(f"Cache write failed: {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            self._cache().delete(self._key(key))
        except Exception as exc:
            raise StorageUnavailableError(f"Cache delete failed: {exc}") from exc
