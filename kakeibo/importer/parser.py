"""
Delimited Text Import

Turns text pasted from a spreadsheet (tab separated) or read from a CSV
file (comma separated) into validated Records.

PIPELINE:
1. Split into lines, drop blank lines, keep physical line numbers
2. Detect the delimiter from the header line
3. Map header names to column positions (blank header cells are ignored)
4. Check the required column names are all present
5. Per data row: build a raw name -> cell mapping, then validate each
   field into a Record

IMPORTANT: Only header problems abort the import. A bad data row is
skipped and reported, it never stops the rows after it.

KNOWN LIMITATION: cells are split on the delimiter with no quoting or
escaping, so a cell cannot contain the delimiter.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence
from uuid import uuid4

import structlog
from pydantic import ValidationError

from kakeibo.config import get_settings
from kakeibo.importer.errors import (
    InvalidAmountError,
    InvalidDateError,
    MissingFieldError,
    MissingHeaderError,
    MissingRequiredHeadersError,
    RowRejectedError,
    RowTooShortError,
    UnknownCategoryError,
    UnknownPayerError,
)
from kakeibo.models.record import (
    MAX_AMOUNT,
    Category,
    ImportResult,
    Payer,
    Record,
    RowIssue,
    is_canonical_date,
)


REQUIRED_FIELDS: tuple[str, ...] = ("date", "category", "amount", "payer")
OPTIONAL_FIELDS: tuple[str, ...] = ("memo",)

# Payer is required as a column but an empty payer cell falls back to
# the default payer instead of rejecting the row.
NON_EMPTY_FIELDS: tuple[str, ...] = ("date", "category", "amount")

# Column name -> trimmed cell text for one data row.
RawRow = dict[str, str]

_LINE_BREAK = re.compile(r"\r?\n")

logger = structlog.get_logger(__name__)


def split_lines(text: str) -> list[tuple[int, str]]:
    """Non-blank lines paired with their 1-based line number."""
    if text.startswith("\ufeff"):
        text = text[1:]
    return [
        (number, line)
        for number, line in enumerate(_LINE_BREAK.split(text), start=1)
        if line.strip()
    ]


def detect_delimiter(header_line: str) -> str:
    """Tab when the header line has one, comma otherwise."""
    return "\t" if "\t" in header_line else ","


def read_header(
    header_line: str,
    delimiter: str,
    required_fields: Sequence[str] = REQUIRED_FIELDS,
) -> list[tuple[int, str]]:
    """
    Map column positions to header names.

    Blank header cells are left out, so their positions are skipped
    when rows are read.

    Raises:
        MissingRequiredHeadersError: If a required name is absent
    """
    columns = [
        (index, name.strip())
        for index, name in enumerate(header_line.split(delimiter))
        if name.strip()
    ]
    present = {name for _, name in columns}
    missing = [field for field in required_fields if field not in present]
    if missing:
        raise MissingRequiredHeadersError(missing)
    return columns


def normalize_date(value: str) -> str:
    """
    Bring a date cell into YYYY-MM-DD form.

    Slash dates (2024/3/5) must have exactly three parts and are
    zero-padded; anything else is checked as-is.

    Raises:
        InvalidDateError: If the result is not a real YYYY-MM-DD date
    """
    value = value.strip()
    if "/" in value:
        parts = [part.strip() for part in value.split("/")]
        if len(parts) != 3:
            raise InvalidDateError(
                f"Date {value!r} must have year/month/day", field="date"
            )
        year, month, day = parts
        value = f"{year.zfill(4)}-{month.zfill(2)}-{day.zfill(2)}"

    if not is_canonical_date(value):
        raise InvalidDateError(
            f"Date {value!r} is not a valid YYYY-MM-DD date", field="date"
        )
    return value


def parse_amount(value: str) -> int:
    """
    Parse an amount cell as a positive whole number of yen, at most
    MAX_AMOUNT.

    Raises:
        InvalidAmountError: If not a finite, positive, whole number within range
    """
    try:
        amount = Decimal(value.strip())
    except InvalidOperation:
        raise InvalidAmountError(f"Amount {value!r} is not a number", field="amount")

    if not amount.is_finite():
        raise InvalidAmountError(f"Amount {value!r} is not a finite number", field="amount")
    if amount <= 0:
        raise InvalidAmountError(f"Amount {value!r} must be greater than zero", field="amount")
    if amount > MAX_AMOUNT:
        raise InvalidAmountError(
            f"Amount {value!r} exceeds the maximum of {MAX_AMOUNT:,}", field="amount"
        )
    if amount != amount.to_integral_value():
        raise InvalidAmountError(f"Amount {value!r} must be a whole number", field="amount")
    return int(amount)


def parse_category(value: str) -> Category:
    try:
        return Category(value)
    except ValueError:
        raise UnknownCategoryError(f"Unknown category {value!r}", field="category")


def parse_payer(value: str, default_payer: Payer) -> Payer:
    """Empty cell -> default payer; unknown names are rejected."""
    if not value:
        return default_payer
    try:
        return Payer(value)
    except ValueError:
        raise UnknownPayerError(f"Unknown payer {value!r}", field="payer")


def build_raw_row(
    line: str,
    delimiter: str,
    columns: list[tuple[int, str]],
) -> RawRow:
    """
    Zip a data line with the header columns.

    Raises:
        RowTooShortError: If the line has fewer cells than the header needs
    """
    cells = line.split(delimiter)
    width = columns[-1][0] + 1 if columns else 0
    if len(cells) < width:
        raise RowTooShortError(
            f"Expected {width} columns but found {len(cells)}"
        )
    return {name: cells[index].strip() for index, name in columns}


def record_from_raw_row(raw: RawRow, default_payer: Payer) -> Record:
    """
    Validate a raw row field by field into a Record with a fresh id.

    Raises:
        RowRejectedError: For the first field that fails
    """
    for field in NON_EMPTY_FIELDS:
        if not raw.get(field):
            raise MissingFieldError(f"Missing value for '{field}'", field=field)

    date = normalize_date(raw["date"])
    amount = parse_amount(raw["amount"])
    category = parse_category(raw["category"])
    payer = parse_payer(raw.get("payer", ""), default_payer)

    try:
        return Record(
            id=uuid4(),
            date=date,
            category=category,
            amount=amount,
            memo=raw.get("memo", ""),
            payer=payer,
        )
    except ValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first.get("loc") else None
        raise RowRejectedError(first["msg"], field=field)


def parse_delimited_text(
    text: str,
    required_fields: Sequence[str] = REQUIRED_FIELDS,
    default_payer: Optional[Payer] = None,
) -> ImportResult:
    """
    Parse CSV or tab-separated text into Records.

    Args:
        text: Raw pasted or uploaded text, header line first
        required_fields: Column names that must appear in the header
        default_payer: Payer for rows with an empty payer cell
                      (defaults to the configured default payer)

    Returns:
        ImportResult with accepted records in row order and one
        RowIssue per skipped row

    Raises:
        MissingHeaderError: If there is no header or no data line
        MissingRequiredHeadersError: If required columns are missing
    """
    if default_payer is None:
        default_payer = get_settings().default_payer

    lines = split_lines(text)
    if len(lines) < 2:
        raise MissingHeaderError()

    _, header_line = lines[0]
    delimiter = detect_delimiter(header_line)
    columns = read_header(header_line, delimiter, required_fields)

    accepted: list[Record] = []
    issues: list[RowIssue] = []

    for row_number, line in lines[1:]:
        try:
            raw = build_raw_row(line, delimiter, columns)
            accepted.append(record_from_raw_row(raw, default_payer))
        except RowRejectedError as e:
            issue = RowIssue(
                row_number=row_number,
                field=e.field,
                issue_type=e.issue_type,
                message=str(e),
            )
            issues.append(issue)
            logger.debug("import_row_skipped", reason=issue.reason, issue_type=issue.issue_type)

    logger.info(
        "import_parsed",
        delimiter="tab" if delimiter == "\t" else "comma",
        accepted=len(accepted),
        rejected=len(issues),
    )

    return ImportResult(accepted=accepted, issues=issues, delimiter=delimiter)
