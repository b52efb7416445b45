"""
Core Data Models for Kakeibo

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for the persisted record blob
4. Carry import problems back to the user instead of hiding them

DESIGN DECISION: A Record is frozen. Edits never patch a field in place;
they build a new Record with the same id and replace the old one.
"""

import re
from datetime import date
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Largest amount accepted, in yen. Below 2**53 so stored amounts stay exact
# for double-precision readers of the blob.
MAX_AMOUNT = 10**15

CANONICAL_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


def is_canonical_date(value: str) -> bool:
    """True when value is a zero-padded YYYY-MM-DD string naming a real day."""
    if not CANONICAL_DATE_PATTERN.fullmatch(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Category(str, Enum):
    """
    Expense categories.

    The values are the labels stored in the record blob and used in
    import files, so they must never be renamed.
    """
    FOOD = "食費"
    DAILY_GOODS = "日用品"
    TRANSPORT = "交通費"
    ENTERTAINMENT = "娯楽"
    SOCIAL = "交際費"
    MEDICAL = "医療・保険"
    EDUCATION = "教育・教養"
    SPECIAL = "特別支出"
    OTHER = "その他"


class Payer(str, Enum):
    """Which partner paid."""
    HUSBAND = "夫"
    WIFE = "妻"


# =============================================================================
# CORE RECORD MODELS
# =============================================================================

class RecordDraft(BaseModel):
    """
    An expense entry that has not been given an id yet.

    This is what a form submission or a "copy entry" action produces.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    date: str = Field(
        ...,
        description="Spending date as YYYY-MM-DD"
    )
    category: Category = Field(
        ...,
        description="Expense category"
    )
    amount: int = Field(
        ...,
        gt=0,
        le=MAX_AMOUNT,
        description="Amount in whole yen"
    )
    memo: str = Field(
        default="",
        description="Free-form note"
    )
    payer: Payer = Field(
        ...,
        description="Who paid"
    )

    @field_validator('date')
    @classmethod
    def validate_date(cls, v: str) -> str:
        """Only canonical, real calendar dates are stored."""
        if not is_canonical_date(v):
            raise ValueError(f"Date must be a valid YYYY-MM-DD date, got {v!r}")
        return v

    def to_record(self, record_id: Optional[UUID] = None) -> "Record":
        """Attach an id (fresh unless given) and return the full Record."""
        return Record(id=record_id or uuid4(), **self.model_dump(exclude={"id"}))


class Record(RecordDraft):
    """
    One persisted expense entry.

    CRITICAL: `id` is assigned once at creation and never changes.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique record ID"
    )

    @property
    def month(self) -> str:
        """The YYYY-MM part of the date."""
        return self.date[:7]

    def to_draft(self) -> RecordDraft:
        return RecordDraft(**self.model_dump(exclude={"id"}))

    def to_storage_dict(self) -> dict:
        """Plain JSON-ready dict in the persisted field order."""
        return {
            "id": str(self.id),
            "date": self.date,
            "category": self.category.value,
            "amount": self.amount,
            "memo": self.memo,
            "payer": self.payer.value,
        }


# =============================================================================
# IMPORT RESULT MODELS
# =============================================================================

class RowIssue(BaseModel):
    """A single data row that was skipped during import."""

    row_number: int = Field(
        ...,
        ge=1,
        description="1-based line number in the pasted or uploaded text"
    )
    field: Optional[str] = Field(
        default=None,
        description="Column that caused the rejection, if any"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'row_too_short', 'invalid_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )

    @property
    def reason(self) -> str:
        return f"Row {self.row_number}: {self.message}"


class ImportResult(BaseModel):
    """
    Outcome of parsing one block of delimited text.

    Accepted records keep the order of their rows. Rejected rows are
    counted and explained, never fatal.
    """

    accepted: list[Record] = Field(
        default_factory=list,
        description="Validated records in row order"
    )
    issues: list[RowIssue] = Field(
        default_factory=list,
        description="One entry per skipped row"
    )
    delimiter: str = Field(
        default=",",
        description="Delimiter that was detected from the header line"
    )

    @property
    def rejected_count(self) -> int:
        return len(self.issues)

    @property
    def reasons(self) -> list[str]:
        return [issue.reason for issue in self.issues]

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)

    @property
    def has_accepted(self) -> bool:
        return bool(self.accepted)

    def summary(self) -> str:
        """
        One message for the user.

        When nothing was accepted a single message replaces the
        per-row reasons.
        """
        if not self.accepted:
            return "No valid rows were found to import."

        message = f"Imported {self.accepted_count} record(s)."
        if self.issues:
            message += f" Skipped {self.rejected_count} row(s):\n"
            message += "\n".join(f"  - {reason}" for reason in self.reasons)
        return message
