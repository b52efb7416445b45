"""Tests for the audit logger and its sinks."""

import logging
from uuid import uuid4

from kakeibo.audit import (
    AuditLogger,
    configure_logging,
    configure_structlog,
    create_correlation_id,
)
from kakeibo.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity
from kakeibo.services.storage import (
    InMemoryAuditStorage,
    JsonLinesAuditStorage,
    StorageError,
)


class BrokenAuditStorage(InMemoryAuditStorage):
    def append_event(self, event):
        raise StorageError("sink unavailable")


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_log_without_storage(self):
        """Test local-only logging reports success."""
        logger = AuditLogger()
        assert logger.storage is None
        assert logger.log(AuditEventBuilder.record_deleted(uuid4())) is True

    def test_log_persists_to_storage(self):
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        record_id = uuid4()

        logger.log_record_created(record_id=record_id, category="食費", amount=1500)
        logger.log_record_updated(record_id=record_id, changed_fields=["amount"])

        events = storage.events
        assert [e.event_type for e in events] == [
            AuditEventType.RECORD_CREATED,
            AuditEventType.RECORD_UPDATED,
        ]
        assert events[0].entity_id == record_id
        assert events[1].details == {"changed_fields": ["amount"]}
        assert storage.get_recent_events(limit=1)[0].event_type == AuditEventType.RECORD_UPDATED

    def test_sink_failure_does_not_raise(self):
        """Test a failing sink is reported as False, never raised."""
        logger = AuditLogger(BrokenAuditStorage())
        assert logger.log(AuditEventBuilder.record_deleted(uuid4())) is False

    def test_log_error(self):
        storage = InMemoryAuditStorage()
        AuditLogger(storage).log_error(
            error_type="StorageError",
            error_message="disk full",
            details={"source": "paste"},
        )
        event = storage.events[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.severity == AuditSeverity.ERROR
        assert event.error_code == "StorageError"

    def test_correlation_ids_unique(self):
        assert create_correlation_id() != create_correlation_id()


class TestJsonLinesAuditStorage:
    """Tests for the JSON-lines audit file."""

    def test_append_and_read_back(self, tmp_path):
        storage = JsonLinesAuditStorage(tmp_path / "logs" / "audit.jsonl")
        assert storage.get_recent_events() == []

        correlation_id = uuid4()
        storage.append_event(AuditEventBuilder.import_completed(2, 1, "paste", correlation_id))
        storage.append_event(AuditEventBuilder.record_copied(uuid4(), "2024-06-01"))

        recent = storage.get_recent_events()
        assert [e.event_type for e in recent] == [
            AuditEventType.RECORD_COPIED,
            AuditEventType.IMPORT_COMPLETED,
        ]
        assert recent[1].correlation_id == correlation_id
        assert len(storage.get_recent_events(limit=1)) == 1

        lines = (tmp_path / "logs" / "audit.jsonl").read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2


class TestConfigureLogging:
    """Tests for logging setup."""

    def test_existing_root_handlers_kept(self):
        """Test setup never removes handlers the host installed."""
        root = logging.getLogger()
        marker = logging.NullHandler()
        previous_level = root.level
        root.addHandler(marker)
        try:
            configure_structlog(json_logs=False)
            configure_logging(level="debug", json_logs=True)

            assert marker in root.handlers
            assert root.level == logging.DEBUG
        finally:
            root.removeHandler(marker)
            root.setLevel(previous_level)
