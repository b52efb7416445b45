"""
Data Models Package

This package contains all Pydantic models used in Kakeibo.
All data flowing through the system must conform to these schemas.
"""

from kakeibo.models.record import (
    MAX_AMOUNT,
    Category,
    ImportResult,
    Payer,
    Record,
    RecordDraft,
    RowIssue,
    is_canonical_date,
)
from kakeibo.models.summary import (
    CategoryMatrix,
    CategoryMonthRow,
    CategoryStatistics,
    CategoryTotal,
    MonthlyTotal,
)
from kakeibo.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "MAX_AMOUNT",
    "Category",
    "ImportResult",
    "Payer",
    "Record",
    "RecordDraft",
    "RowIssue",
    "is_canonical_date",
    # Summary models
    "CategoryMatrix",
    "CategoryMonthRow",
    "CategoryStatistics",
    "CategoryTotal",
    "MonthlyTotal",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
