"""
JSON File Storage Implementation

DESIGN DECISION: Each key is stored as one JSON file in a data
directory (`<data_dir>/<key>.json`) because:
1. Users can open and read their data directly
2. No database setup required
3. Backups are just file copies

TRADEOFFS:
- Whole-collection rewrites on every save (fine at personal scale)
- No locking (single user, single process)

Writes go to a temporary file first and are then moved into place, so
a crash mid-write never leaves a half-written collection behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Union

import structlog

from pocketledger.services.storage.interface import (
    CorruptDataError,
    KeyValueStore,
    PersistenceWriteError,
)

logger = structlog.get_logger(__name__)


class JsonFileStore(KeyValueStore):
    """
    Key-value store backed by one JSON file per key.

    Read and write failures are logged and reported through return
    values; they never propagate to the ledger.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        """Get the file path used for a key."""
        return self._data_dir / f"{key}.json"

    def _read(self, key: str) -> Any:
        path = self.path_for(key)
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Invalid JSON in {path}: {e}") from e
        except OSError as e:
            raise CorruptDataError(f"Could not read {path}: {e}") from e

    def _write(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        tmp_name = None
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir,
                prefix=f".{key}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceWriteError(f"Could not write {path}: {e}") from e

    def load(self, key: str, default: Any) -> Any:
        """Load a key, falling back to `default` when missing or unreadable."""
        if not self.path_for(key).exists():
            return default

        try:
            return self._read(key)
        except CorruptDataError as e:
            logger.error("storage_read_failed", key=key, error=str(e))
            return default

    def save(self, key: str, value: Any) -> bool:
        """Save a key. Returns False (and logs) if the write failed."""
        try:
            self._write(key, value)
        except PersistenceWriteError as e:
            logger.error("storage_write_failed", key=key, error=str(e))
            return False

        logger.debug("storage_saved", key=key, path=str(self.path_for(key)))
        return True

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()
