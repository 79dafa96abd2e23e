"""Services package."""

from pocketledger.services.backup import (
    BackupPayload,
    MalformedImportFileError,
    backup_filename,
    build_backup,
    dumps_backup,
    parse_backup,
)
from pocketledger.services.storage import (
    CorruptDataError,
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    PersistenceWriteError,
    StorageError,
)

__all__ = [
    # Backup
    "BackupPayload",
    "MalformedImportFileError",
    "backup_filename",
    "build_backup",
    "dumps_backup",
    "parse_backup",
    # Storage
    "CorruptDataError",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "PersistenceWriteError",
    "StorageError",
]
