"""
Record Store

DESIGN DECISION: Exactly one object owns the record collection.
Every mutation goes through it, and every mutation rewrites the whole
collection to the blob store before the in-memory list changes. If the
write fails the in-memory list is left as it was.

Ordering is newest-first: manual entries and imported batches are
prepended.
"""

import json
from collections.abc import Iterable, Iterator
from datetime import date
from typing import Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from kakeibo.audit import AuditLogger
from kakeibo.models.record import Record, RecordDraft
from kakeibo.services.storage import (
    BlobStoreInterface,
    DuplicateError,
    NotFoundError,
    StorageError,
)


DEFAULT_STORAGE_KEY = "kakeibo-entries"

RecordId = Union[UUID, str]

logger = structlog.get_logger(__name__)


def _as_uuid(record_id: RecordId) -> UUID:
    if isinstance(record_id, UUID):
        return record_id
    try:
        return UUID(str(record_id))
    except ValueError:
        raise NotFoundError(f"Record not found: {record_id}")


class RecordStore:
    """
    Owner of the ordered record collection.

    Loads once from the blob store and writes the full collection
    back after each create/update/delete/import/replace.
    """

    def __init__(
        self,
        blob_store: BlobStoreInterface,
        storage_key: str = DEFAULT_STORAGE_KEY,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._blob_store = blob_store
        self._storage_key = storage_key
        self._audit_logger = audit_logger
        self._records: list[Record] = []

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def records(self) -> tuple[Record, ...]:
        """Immutable snapshot of the collection, newest first."""
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(tuple(self._records))

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> int:
        """
        Load the collection from the blob store.

        Never raises for bad data: a missing blob is an empty ledger, an
        unreadable or non-array blob falls back to an empty ledger, and
        single entries that fail validation are skipped.

        Returns the number of records loaded.
        """
        try:
            blob = self._blob_store.read(self._storage_key)
        except StorageError as e:
            return self._fall_back_to_empty(str(e))

        if blob is None or not blob.strip():
            self._records = []
            logger.info("store_empty", storage_key=self._storage_key)
            return 0

        try:
            data = json.loads(blob)
        except json.JSONDecodeError as e:
            return self._fall_back_to_empty(f"Invalid JSON: {e}")

        if not isinstance(data, list):
            return self._fall_back_to_empty(
                f"Expected a JSON array, got {type(data).__name__}"
            )

        records: list[Record] = []
        seen: set[UUID] = set()
        skipped = 0
        for index, item in enumerate(data):
            try:
                record = Record.model_validate(item)
            except ValidationError as e:
                skipped += 1
                logger.warning(
                    "stored_record_invalid",
                    index=index,
                    error_count=e.error_count(),
                    errors=[err["msg"] for err in e.errors()],
                )
                continue
            if record.id in seen:
                skipped += 1
                logger.warning("stored_record_duplicate_id", index=index, record_id=str(record.id))
                continue
            seen.add(record.id)
            records.append(record)

        self._records = records
        if self._audit_logger:
            self._audit_logger.log_store_loaded(
                storage_key=self._storage_key,
                record_count=len(records),
                skipped=skipped,
            )
        return len(records)

    def _fall_back_to_empty(self, reason: str) -> int:
        self._records = []
        logger.warning("store_load_fallback", storage_key=self._storage_key, reason=reason)
        if self._audit_logger:
            self._audit_logger.log_store_load_fallback(
                storage_key=self._storage_key,
                error_message=reason,
            )
        return 0

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, record_id: RecordId) -> Optional[Record]:
        """Return the record with this id, or None."""
        try:
            wanted = _as_uuid(record_id)
        except NotFoundError:
            return None
        for record in self._records:
            if record.id == wanted:
                return record
        return None

    def _index_of(self, record_id: UUID) -> int:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        raise NotFoundError(f"Record not found: {record_id}")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, draft: RecordDraft) -> Record:
        """Give the draft a fresh id and put it at the front."""
        record = draft.to_record()
        self._commit([record, *self._records])
        return record

    def update(self, record_id: RecordId, draft: RecordDraft) -> Record:
        """
        Replace the record with this id by the draft's values.

        Raises:
            NotFoundError: If no record has this id
        """
        wanted = _as_uuid(record_id)
        index = self._index_of(wanted)
        record = draft.to_record(record_id=wanted)
        updated = list(self._records)
        updated[index] = record
        self._commit(updated)
        return record

    def delete(self, record_id: RecordId) -> bool:
        """
        Remove the record with this id.

        Raises:
            NotFoundError: If no record has this id
        """
        wanted = _as_uuid(record_id)
        index = self._index_of(wanted)
        remaining = self._records[:index] + self._records[index + 1:]
        self._commit(remaining)
        return True

    def add_many(self, records: Iterable[Record]) -> int:
        """
        Prepend a batch (an import), keeping the batch's own order.

        Raises:
            DuplicateError: If an id is already present or repeated
        """
        batch = list(records)
        if not batch:
            return 0
        self._check_unique([*batch, *self._records])
        self._commit([*batch, *self._records])
        return len(batch)

    def replace_all(self, records: Iterable[Record]) -> None:
        """Overwrite the whole collection."""
        new_records = list(records)
        self._check_unique(new_records)
        self._commit(new_records)

    def copy_draft(self, record_id: RecordId, on: Optional[date] = None) -> RecordDraft:
        """
        Start a new entry from an existing one.

        The copy keeps category, amount, memo and payer and is dated
        today unless `on` is given. It is not saved.
        """
        source = self.get(record_id)
        if source is None:
            raise NotFoundError(f"Record not found: {record_id}")
        return source.to_draft().model_copy(
            update={"date": (on or date.today()).isoformat()}
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @staticmethod
    def _check_unique(records: list[Record]) -> None:
        seen: set[UUID] = set()
        for record in records:
            if record.id in seen:
                raise DuplicateError(f"Duplicate record id: {record.id}")
            seen.add(record.id)

    def serialize(self, records: Optional[list[Record]] = None) -> str:
        """JSON array of the collection as written to the blob store."""
        records = self._records if records is None else records
        return json.dumps(
            [record.to_storage_dict() for record in records],
            ensure_ascii=False,
        )

    def _commit(self, records: list[Record]) -> None:
        self._blob_store.write(self._storage_key, self.serialize(records))
        self._records = records
        if self._audit_logger:
            self._audit_logger.log_store_saved(
                storage_key=self._storage_key,
                record_count=len(records),
            )
