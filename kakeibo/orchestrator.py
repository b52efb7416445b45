"""
Main Orchestrator for Kakeibo

This module ties together all the components and defines the
end-to-end flows for:
1. Manual entry (add → edit → delete, copy as a new draft)
2. Import (text or file → parse → validate rows → prepend → save)

DESIGN DECISION: The orchestrator enforces the boundaries:
- A header problem aborts the import before anything is stored
- Accepted rows of one import are stored in a single write
- Every user action is audited

Paste and file upload go through the same parser with the same policy
(empty payer cell -> default payer, blank header cells ignored).
"""

from datetime import date
from pathlib import Path
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from kakeibo.audit import AuditLogger, configure_logging, create_correlation_id
from kakeibo.config import KakeiboSettings, get_settings
from kakeibo.importer import (
    REQUIRED_FIELDS,
    MissingRequiredHeadersError,
    RecordImportError,
    parse_delimited_text,
)
from kakeibo.models.record import ImportResult, Record, RecordDraft
from kakeibo.services.storage import (
    BlobStoreInterface,
    InMemoryBlobStore,
    JsonFileBlobStore,
    JsonLinesAuditStorage,
    StorageError,
)
from kakeibo.store import RecordStore


class ImportOutcome(BaseModel):
    """What the user sees after an import attempt."""

    success: bool = Field(
        ...,
        description="True when at least one record was stored"
    )
    message: str = Field(
        ...,
        description="Single user-facing message"
    )
    result: Optional[ImportResult] = Field(
        default=None,
        description="Parse result; None when the header check failed"
    )
    error_type: Optional[str] = Field(
        default=None,
        description="Exception class name for a structural failure"
    )
    missing_fields: list[str] = Field(
        default_factory=list,
        description="Required columns absent from the header"
    )
    correlation_id: Optional[UUID] = None

    @property
    def imported_count(self) -> int:
        return self.result.accepted_count if self.result else 0


class EntryFlow:
    """
    Orchestrates manual entry.

    Each action is one store mutation followed by one audit event.
    """

    def __init__(
        self,
        store: RecordStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()

    def add(self, draft: RecordDraft) -> Record:
        record = self._store.create(draft)
        self._audit_logger.log_record_created(
            record_id=record.id,
            category=record.category.value,
            amount=record.amount,
        )
        return record

    def edit(self, record_id: UUID, draft: RecordDraft) -> Record:
        """
        Replace a record with the draft's values, keeping its id.

        Raises:
            NotFoundError: If the record does not exist
        """
        previous = self._store.get(record_id)
        record = self._store.update(record_id, draft)

        changed = []
        if previous is not None:
            before = previous.to_draft().model_dump()
            after = draft.model_dump()
            changed = [name for name in after if before.get(name) != after[name]]

        self._audit_logger.log_record_updated(
            record_id=record.id,
            changed_fields=changed,
        )
        return record

    def remove(self, record_id: UUID) -> bool:
        """
        Raises:
            NotFoundError: If the record does not exist
        """
        removed = self._store.delete(record_id)
        self._audit_logger.log_record_deleted(record_id=UUID(str(record_id)))
        return removed

    def copy(self, record_id: UUID, on: Optional[date] = None) -> RecordDraft:
        """Draft a new entry from an existing one, dated today (or `on`)."""
        draft = self._store.copy_draft(record_id, on=on)
        self._audit_logger.log_record_copied(
            source_id=UUID(str(record_id)),
            new_date=draft.date,
        )
        return draft


class ImportFlow:
    """
    Orchestrates bulk import.

    Flow:
    1. Parse → header checks may abort the whole import
    2. Validate → bad rows are skipped and reported
    3. Store → accepted rows are prepended in one write
    4. Report → one message for the user
    """

    def __init__(
        self,
        store: RecordStore,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[KakeiboSettings] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings()

    def import_text(
        self,
        text: str,
        source: str = "paste",
        correlation_id: Optional[UUID] = None,
    ) -> ImportOutcome:
        """
        Import pasted or uploaded delimited text.

        Returns an ImportOutcome; header problems are reported in it
        rather than raised.

        Raises:
            StorageError: If the accepted records cannot be saved
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            result = parse_delimited_text(
                text,
                required_fields=REQUIRED_FIELDS,
                default_payer=self._settings.default_payer,
            )
        except RecordImportError as e:
            missing = e.missing if isinstance(e, MissingRequiredHeadersError) else []
            self._audit_logger.log_import_failed(
                error_type=type(e).__name__,
                error_message=str(e),
                source=source,
                correlation_id=correlation_id,
                details={"missing_fields": missing} if missing else None,
            )
            return ImportOutcome(
                success=False,
                message=str(e),
                error_type=type(e).__name__,
                missing_fields=missing,
                correlation_id=correlation_id,
            )

        for issue in result.issues:
            self._audit_logger.log_import_row_rejected(
                row_number=issue.row_number,
                issue_type=issue.issue_type,
                message=issue.message,
                correlation_id=correlation_id,
            )

        if result.accepted:
            try:
                self._store.add_many(result.accepted)
            except StorageError as e:
                self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"source": source, "accepted": result.accepted_count},
                    correlation_id=correlation_id,
                )
                raise

        self._audit_logger.log_import_completed(
            accepted=result.accepted_count,
            rejected=result.rejected_count,
            source=source,
            correlation_id=correlation_id,
        )

        return ImportOutcome(
            success=result.has_accepted,
            message=result.summary(),
            result=result,
            correlation_id=correlation_id,
        )

    def import_file(
        self,
        path: Path,
        correlation_id: Optional[UUID] = None,
    ) -> ImportOutcome:
        """
        Import a CSV/TSV file from disk.

        The file is read as UTF-8 (a leading BOM is tolerated). A file
        that cannot be read or decoded fails the whole import.
        """
        path = Path(path)
        correlation_id = correlation_id or create_correlation_id()
        source = f"file:{path.name}"

        try:
            text = path.read_bytes().decode("utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            message = f"Could not read {path.name}: {e}"
            self._audit_logger.log_import_failed(
                error_type=type(e).__name__,
                error_message=message,
                source=source,
                correlation_id=correlation_id,
            )
            return ImportOutcome(
                success=False,
                message=message,
                error_type=type(e).__name__,
                correlation_id=correlation_id,
            )

        return self.import_text(text, source=source, correlation_id=correlation_id)


def create_app_components(
    settings: Optional[KakeiboSettings] = None,
    blob_store: Optional[BlobStoreInterface] = None,
) -> tuple[EntryFlow, ImportFlow, RecordStore]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (defaults to get_settings())
        blob_store: Blob store override. When omitted a JSON file store
                   under settings.data_dir is used, or an in-memory
                   store if no data_dir is configured.

    Returns:
        (entry_flow, import_flow, store) with the store already loaded
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)

    audit_storage = None
    if blob_store is None:
        if settings.data_dir is not None:
            blob_store = JsonFileBlobStore(settings.data_dir)
            audit_storage = JsonLinesAuditStorage(settings.data_dir / "audit.jsonl")
        else:
            blob_store = InMemoryBlobStore()

    audit_logger = AuditLogger(audit_storage)

    store = RecordStore(
        blob_store,
        storage_key=settings.storage_key,
        audit_logger=audit_logger,
    )
    store.load()

    entry_flow = EntryFlow(store, audit_logger=audit_logger)
    import_flow = ImportFlow(store, audit_logger=audit_logger, settings=settings)

    return entry_flow, import_flow, store
