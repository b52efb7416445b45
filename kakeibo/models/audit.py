"""
Audit Models for Kakeibo

Every change to the record collection is logged for audit purposes.
This provides:
1. Traceability of what was added, edited, imported or deleted
2. Debugging information when an import goes wrong
3. Ability to reconstruct how the ledger got to its current state

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Manual entry
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    RECORD_COPIED = "record_copied"

    # Import
    IMPORT_COMPLETED = "import_completed"
    IMPORT_ROW_REJECTED = "import_row_rejected"
    IMPORT_FAILED = "import_failed"

    # Persistence
    STORE_LOADED = "store_loaded"
    STORE_LOAD_FALLBACK = "store_load_fallback"
    STORE_SAVED = "store_saved"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'record', 'import', 'store')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one import)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """One JSON line, used by append-only file sinks."""
        return json.dumps(self.to_log_dict(), ensure_ascii=False)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_created(record_id, "食費", 1500)
        event = AuditEventBuilder.import_completed(3, 1, "paste", correlation_id)
    """

    @staticmethod
    def record_created(
        record_id: UUID,
        category: str,
        amount: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record added: {category} ¥{amount:,}",
            details={
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_updated(
        record_id: UUID,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record edited ({len(changed_fields)} field(s) changed)",
            details={
                "changed_fields": changed_fields,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(
        record_id: UUID,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description="Record deleted",
            is_user_action=True,
        )

    @staticmethod
    def record_copied(
        source_id: UUID,
        new_date: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_COPIED,
            entity_type="record",
            entity_id=source_id,
            correlation_id=correlation_id,
            description=f"Record copied to a new draft dated {new_date}",
            details={
                "new_date": new_date,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_completed(
        accepted: int,
        rejected: int,
        source: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_COMPLETED,
            severity=AuditSeverity.INFO if accepted else AuditSeverity.WARNING,
            entity_type="import",
            entity_id=correlation_id,
            correlation_id=correlation_id,
            description=f"Import from {source}: {accepted} accepted, {rejected} skipped",
            details={
                "source": source,
                "accepted": accepted,
                "rejected": rejected,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_row_rejected(
        row_number: int,
        issue_type: str,
        message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_ROW_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="import",
            entity_id=correlation_id,
            correlation_id=correlation_id,
            description=f"Row {row_number} skipped: {issue_type}",
            details={
                "row_number": row_number,
                "issue_type": issue_type,
                "message": message,
            },
        )

    @staticmethod
    def import_failed(
        error_type: str,
        error_message: str,
        source: str,
        correlation_id: UUID,
        details: Optional[dict] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="import",
            entity_id=correlation_id,
            correlation_id=correlation_id,
            description=f"Import from {source} aborted: {error_type}",
            error_code=error_type,
            error_message=error_message,
            details={"source": source, **(details or {})},
            is_user_action=True,
        )

    @staticmethod
    def store_loaded(
        storage_key: str,
        record_count: int,
        skipped: int
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_LOADED,
            severity=AuditSeverity.WARNING if skipped else AuditSeverity.INFO,
            entity_type="store",
            description=f"Loaded {record_count} record(s) from '{storage_key}'",
            details={
                "storage_key": storage_key,
                "record_count": record_count,
                "skipped": skipped,
            },
        )

    @staticmethod
    def store_load_fallback(
        storage_key: str,
        error_message: str
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_LOAD_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            description=f"Blob '{storage_key}' unreadable, starting with an empty ledger",
            error_message=error_message,
            details={
                "storage_key": storage_key,
            },
        )

    @staticmethod
    def store_saved(
        storage_key: str,
        record_count: int
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="store",
            description=f"Saved {record_count} record(s) to '{storage_key}'",
            details={
                "storage_key": storage_key,
                "record_count": record_count,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_code=error_type,
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
