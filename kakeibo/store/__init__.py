"""Record collection store."""

from kakeibo.store.record_store import DEFAULT_STORAGE_KEY, RecordStore

__all__ = ["DEFAULT_STORAGE_KEY", "RecordStore"]
