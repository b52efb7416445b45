"""
In-Memory Storage Implementations

Used by tests and by the app when no data directory is configured.
Nothing survives the process.
"""

from typing import Optional

from kakeibo.models.audit import AuditEvent
from kakeibo.services.storage.interface import (
    AuditStorageInterface,
    BlobStoreInterface,
)


class InMemoryBlobStore(BlobStoreInterface):
    """Blob store backed by a dict."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._blobs: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def write(self, key: str, blob: str) -> None:
        self._blobs[key] = blob

    def delete(self, key: str) -> bool:
        return self._blobs.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._blobs)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]

    @property
    def events(self) -> list[AuditEvent]:
        """All events in the order they were appended."""
        return list(self._events)
