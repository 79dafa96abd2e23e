"""
Abstract Storage Interface

DESIGN DECISION: The ledger talks to persistence through a tiny
key-value port. This allows us to:
1. Keep the ledger core testable without touching the disk
2. Use in-memory storage for testing
3. Swap the JSON files for another backend later

The port is intentionally minimal: one `load` at startup per
collection, one `save` after every mutation.
"""

from abc import ABC, abstractmethod
from typing import Any


class KeyValueStore(ABC):
    """
    Abstract interface for collection persistence.

    Values are JSON-compatible structures (lists of dicts for the
    ledger collections).
    """

    @abstractmethod
    def load(self, key: str, default: Any) -> Any:
        """
        Load the value stored under a key.

        Args:
            key: Collection name
            default: Returned when nothing usable is stored

        Returns:
            The stored value, or `default` if missing or unreadable.
            Read failures are logged, not raised.
        """
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> bool:
        """
        Persist a value under a key, replacing what was there.

        Args:
            key: Collection name
            value: JSON-compatible value

        Returns:
            True if saved successfully, False if the write failed.
            Write failures are logged, not raised.
        """
        pass

    def exists(self, key: str) -> bool:
        """Check whether anything is stored under a key."""
        sentinel = object()
        return self.load(key, sentinel) is not sentinel


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceWriteError(StorageError):
    """A write to the backing store did not complete."""
    pass


class CorruptDataError(StorageError):
    """Stored data could not be decoded."""
    pass
