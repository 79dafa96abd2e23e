"""Backup export/import package."""

from pocketledger.services.backup.archive import (
    BACKUP_ARRAY_FIELDS,
    BackupPayload,
    MalformedImportFileError,
    backup_filename,
    build_backup,
    dumps_backup,
    parse_backup,
)

__all__ = [
    "BACKUP_ARRAY_FIELDS",
    "BackupPayload",
    "MalformedImportFileError",
    "backup_filename",
    "build_backup",
    "dumps_backup",
    "parse_backup",
]
