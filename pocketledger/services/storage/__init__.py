"""
Storage Services Package

Provides the key-value persistence port and its implementations.
The JSON file store is the default backend; the in-memory store backs
tests and embedders.
"""

from pocketledger.services.storage.interface import (
    CorruptDataError,
    KeyValueStore,
    PersistenceWriteError,
    StorageError,
)
from pocketledger.services.storage.json_file import JsonFileStore
from pocketledger.services.storage.memory import InMemoryStore

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "CorruptDataError",
    "PersistenceWriteError",
    "StorageError",
    # Implementations
    "InMemoryStore",
    "JsonFileStore",
]
