"""In-memory key-value store, for tests and embedding."""

import copy
from typing import Any, Optional

from pocketledger.services.storage.interface import KeyValueStore


class InMemoryStore(KeyValueStore):
    """
    Dict-backed store.

    Values are deep-copied in and out so callers can never mutate what
    is "on disk" by accident.
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self.save_count = 0

    def load(self, key: str, default: Any) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def save(self, key: str, value: Any) -> bool:
        self._data[key] = copy.deepcopy(value)
        self.save_count += 1
        return True

    def exists(self, key: str) -> bool:
        return key in self._data

    def raw(self, key: str) -> Any:
        """Peek at the stored value without copying."""
        return self._data.get(key)
