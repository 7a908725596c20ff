"""
HarborQuote Core Storage — Durable Key/Value Port
==================================================
The wizard persists itself through a three-method contract:
get / set / remove of string values. Browsers back it with
localStorage, servers with a cache or table; the core only ever
sees this protocol.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol


# ══════════════════════════════════════════════════════════════
# ERRORS
# ══════════════════════════════════════════════════════════════

class StorageError(Exception):
    """Base error for key/value store failures."""


class StorageUnavailableError(StorageError):
    """The backing store cannot be reached or refuses the operation."""


# ══════════════════════════════════════════════════════════════
# PROTOCOL
# ══════════════════════════════════════════════════════════════

class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        """Return the stored string, or None if the key is absent."""
        ...  # pragma: no cover

    def set(self, key: str, value: str) -> None:
        ...  # pragma: no cover

    def remove(self, key: str) -> None:
        """Delete the key. Removing a missing key is not an error."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IN-MEMORY IMPLEMENTATION
# ══════════════════════════════════════════════════════════════

class InMemoryKeyValueStore:
    """
    Dict-backed store.

    Set `unavailable = True` to make every call raise
    StorageUnavailableError (simulates a disabled browser store).
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})
        self.unavailable = False
        self.write_count = 0

    def _check(self) -> None:
        if self.unavailable:
            raise StorageUnavailableError("Key/value store is unavailable.")

    def get(self, key: str) -> Optional[str]:
        self._check()
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._check()
        if not isinstance(value, str):
            raise TypeError("KeyValueStore values must be strings.")
        self._data[key] = value
        self.write_count += 1

    def remove(self, key: str) -> None:
        self._check()
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


__all__ = [
    "StorageError",
    "StorageUnavailableError",
    "KeyValueStore",
    "InMemoryKeyValueStore",
]
