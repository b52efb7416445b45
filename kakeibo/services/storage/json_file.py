"""
JSON File Storage Implementation

DESIGN DECISION: Each blob lives in its own `<key>.json` file inside one
data directory. This is the desktop stand-in for browser local storage:
1. Users can open and back up the file directly
2. No database setup required
3. A write is a single atomic file replace

TRADEOFFS:
- The whole collection is rewritten on every change (fine for a
  household ledger of a few thousand rows)
- No locking; one client acts on the data at a time

Audit events go to an append-only JSON-lines file next to the blobs.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from kakeibo.models.audit import AuditEvent
from kakeibo.services.storage.interface import (
    AuditStorageInterface,
    BlobStoreInterface,
    StorageConnectionError,
    StorageError,
)


class JsonFileBlobStore(BlobStoreInterface):
    """
    Blob store writing one UTF-8 file per key.

    Writes go to a temporary file in the same directory which is then
    moved over the target, so readers never see half a blob.
    """

    def __init__(self, directory: Path):
        self._directory = Path(directory)
        if self._directory.exists() and not self._directory.is_dir():
            raise StorageConnectionError(
                f"Data path exists but is not a directory: {self._directory}"
            )
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageConnectionError(
                f"Cannot create data directory {self._directory}: {e}"
            )

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

    def write(self, key: str, blob: str) -> None:
        path = self.path_for(key)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory, prefix=f".{key}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to write {path}: {e}")

    def delete(self, key: str) -> bool:
        try:
            self.path_for(key).unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}")


class JsonLinesAuditStorage(AuditStorageInterface):
    """Append-only audit log, one JSON object per line."""

    def __init__(self, path: Path):
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append_event(self, event: AuditEvent) -> bool:
        try:
            with self._path.open("a", encoding="utf-8") as f:
                f.write(event.to_json_line() + "\n")
            return True
        except OSError as e:
            raise StorageError(f"Failed to append audit event: {e}")

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        if not self._path.exists():
            return []

        events = []
        with self._path.open(encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                events.append(AuditEvent.model_validate(json.loads(line)))

        events.reverse()
        return events[:limit]
