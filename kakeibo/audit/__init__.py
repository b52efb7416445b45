"""Audit logging package."""

from kakeibo.audit.logger import (
    AuditLogger,
    configure_logging,
    configure_structlog,
    create_correlation_id,
)

__all__ = [
    "AuditLogger",
    "configure_logging",
    "configure_structlog",
    "create_correlation_id",
]
