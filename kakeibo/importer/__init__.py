"""Delimited text import package."""

from kakeibo.importer.errors import (
    InvalidAmountError,
    InvalidDateError,
    MissingFieldError,
    MissingHeaderError,
    MissingRequiredHeadersError,
    RecordImportError,
    RowRejectedError,
    RowTooShortError,
    UnknownCategoryError,
    UnknownPayerError,
)
from kakeibo.importer.parser import (
    OPTIONAL_FIELDS,
    REQUIRED_FIELDS,
    RawRow,
    detect_delimiter,
    normalize_date,
    parse_amount,
    parse_delimited_text,
)

__all__ = [
    # Parsing
    "OPTIONAL_FIELDS",
    "REQUIRED_FIELDS",
    "RawRow",
    "detect_delimiter",
    "normalize_date",
    "parse_amount",
    "parse_delimited_text",
    # Exceptions
    "InvalidAmountError",
    "InvalidDateError",
    "MissingFieldError",
    "MissingHeaderError",
    "MissingRequiredHeadersError",
    "RecordImportError",
    "RowRejectedError",
    "RowTooShortError",
    "UnknownCategoryError",
    "UnknownPayerError",
]
