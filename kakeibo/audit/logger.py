"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged.
This provides:
1. Complete traceability of adds, edits, deletes and imports
2. Debugging capability when an import skips rows
3. The user can see the history of their ledger

The audit logger:
- Always writes a structured local log line
- Gracefully handles sink failures (never breaks a user action)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from kakeibo.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from kakeibo.services.storage import AuditStorageInterface


def configure_structlog(json_logs: bool = True) -> None:
    """Configure structlog to render through the stdlib logging module."""
    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    Set up root logging and structlog for the application.

    Handlers already on the root logger are kept; a stderr handler is
    only added when there is none.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))
    configure_structlog(json_logs=json_logs)


configure_structlog()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit sink (for persistence and user visibility), if configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Sink for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to the sink if available.

        Returns True if the sink write succeeded (or no sink configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_record_created(
        self,
        record_id: UUID,
        category: str,
        amount: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_created(
            record_id=record_id,
            category=category,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_record_updated(
        self,
        record_id: UUID,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_updated(
            record_id=record_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        ))

    def log_record_deleted(
        self,
        record_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_deleted(
            record_id=record_id,
            correlation_id=correlation_id,
        ))

    def log_record_copied(
        self,
        source_id: UUID,
        new_date: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_copied(
            source_id=source_id,
            new_date=new_date,
            correlation_id=correlation_id,
        ))

    def log_import_completed(
        self,
        accepted: int,
        rejected: int,
        source: str,
        correlation_id: UUID,
    ) -> None:
        """Log the outcome of an import that got past the header checks."""
        self.log(AuditEventBuilder.import_completed(
            accepted=accepted,
            rejected=rejected,
            source=source,
            correlation_id=correlation_id,
        ))

    def log_import_row_rejected(
        self,
        row_number: int,
        issue_type: str,
        message: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.import_row_rejected(
            row_number=row_number,
            issue_type=issue_type,
            message=message,
            correlation_id=correlation_id,
        ))

    def log_import_failed(
        self,
        error_type: str,
        error_message: str,
        source: str,
        correlation_id: UUID,
        details: Optional[dict] = None,
    ) -> None:
        """Log an import aborted before any row was read."""
        self.log(AuditEventBuilder.import_failed(
            error_type=error_type,
            error_message=error_message,
            source=source,
            correlation_id=correlation_id,
            details=details,
        ))

    def log_store_loaded(
        self,
        storage_key: str,
        record_count: int,
        skipped: int,
    ) -> None:
        self.log(AuditEventBuilder.store_loaded(
            storage_key=storage_key,
            record_count=record_count,
            skipped=skipped,
        ))

    def log_store_load_fallback(
        self,
        storage_key: str,
        error_message: str,
    ) -> None:
        self.log(AuditEventBuilder.store_load_fallback(
            storage_key=storage_key,
            error_message=error_message,
        ))

    def log_store_saved(
        self,
        storage_key: str,
        record_count: int,
    ) -> None:
        self.log(AuditEventBuilder.store_saved(
            storage_key=storage_key,
            record_count=record_count,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., an import).
    Pass it through all subsequent operations.
    """
    return uuid4()
