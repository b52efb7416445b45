"""
Import Errors

Two tiers:
- RecordImportError subclasses abort the whole import (bad header).
- RowRejectedError subclasses skip one data row; the parser catches
  them and turns them into RowIssue entries.
"""

from typing import Optional


class RecordImportError(Exception):
    """Base exception for imports that cannot proceed at all."""
    pass


class MissingHeaderError(RecordImportError):
    """The text has no header line or no data line."""

    def __init__(self, message: str = "A header line and at least one data line are required"):
        super().__init__(message)


class MissingRequiredHeadersError(RecordImportError):
    """The header line lacks one or more required column names."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")


class RowRejectedError(Exception):
    """Base exception for a single data row that cannot be accepted."""

    issue_type = "rejected"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class RowTooShortError(RowRejectedError):
    issue_type = "row_too_short"


class MissingFieldError(RowRejectedError):
    issue_type = "missing_field"


class InvalidDateError(RowRejectedError):
    issue_type = "invalid_date"


class InvalidAmountError(RowRejectedError):
    issue_type = "invalid_amount"


class UnknownCategoryError(RowRejectedError):
    issue_type = "unknown_category"


class UnknownPayerError(RowRejectedError):
    issue_type = "unknown_payer"
