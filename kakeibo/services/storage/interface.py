"""
Abstract Storage Interface

DESIGN DECISION: The ledger is persisted as one named blob, rewritten in
full after every mutation. The storage layer therefore only has to know
how to read, write and delete a string under a key. This allows us to:
1. Keep data in memory for tests
2. Write JSON files on disk for a desktop install
3. Swap in any other key-value backend without touching the store

Audit events use a separate append-only interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from kakeibo.models.audit import AuditEvent


class BlobStoreInterface(ABC):
    """
    Abstract interface for a key-value blob store.

    Writes replace the whole value for a key (last writer wins).
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the blob stored under key.

        Args:
            key: Blob name

        Returns:
            The stored text, or None if nothing is stored under key

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, blob: str) -> None:
        """
        Replace the blob stored under key.

        Args:
            key: Blob name
            blob: Full new value

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove the blob stored under key.

        Returns:
            True if something was removed
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
