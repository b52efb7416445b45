"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
JSON files on disk are the default backend; in-memory stores back the tests.
"""

from kakeibo.services.storage.interface import (
    AuditStorageInterface,
    BlobStoreInterface,
    DuplicateError,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)
from kakeibo.services.storage.json_file import (
    JsonFileBlobStore,
    JsonLinesAuditStorage,
)
from kakeibo.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryBlobStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BlobStoreInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryBlobStore",
    "JsonFileBlobStore",
    "JsonLinesAuditStorage",
]
