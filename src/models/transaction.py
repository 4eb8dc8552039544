"""
Ledger Data Models

These models define the strict schemas for ledger data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable to and from spreadsheet rows

DESIGN DECISION: The ledger is append-only. A TransactionRecord is frozen
once created; reports are derived from the records on every request and
never stored.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)


# Timestamp format used in the ledger's date column
LEDGER_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """Direction of money for a ledger entry."""
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def label(self) -> str:
        """Human-facing label used in confirmations."""
        return self.value.capitalize()


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class TransactionRecord(BaseModel):
    """
    A single income or expense entry in the ledger.

    CRITICAL: Records are never mutated or deleted by this system.
    The timestamp is assigned when the record is written.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    timestamp: datetime = Field(
        ...,
        description="When the transaction was recorded (local time)"
    )
    kind: TransactionKind = Field(
        ...,
        description="Income or expense"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Non-negative amount"
    )
    description: str = Field(
        ...,
        min_length=1,
        description="Free-text description supplied by the user"
    )

    @property
    def record_date(self) -> date:
        """Calendar date component used for window filtering."""
        return self.timestamp.date()

    def to_row(self) -> list[str]:
        """
        Convert to a ledger row.

        Returns columns in order: [date, kind, amount, description]
        """
        return [
            self.timestamp.strftime(LEDGER_TIMESTAMP_FORMAT),
            self.kind.value,
            format(self.amount, "f"),
            self.description,
        ]


class DateWindow(BaseModel):
    """
    Inclusive calendar-date window for a report.

    An inverted window (end before start) is rejected rather than swapped.
    """
    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @model_validator(mode='after')
    def validate_order(self) -> 'DateWindow':
        if self.end < self.start:
            raise ValueError("Window end cannot be before start")
        return self

    @classmethod
    def single_day(cls, day: date) -> 'DateWindow':
        return cls(start=day, end=day)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def is_single_day(self) -> bool:
        return self.start == self.end

    @property
    def days(self) -> int:
        return (self.end - self.start + timedelta(days=1)).days


class ReportSummary(BaseModel):
    """
    Aggregated view of the ledger over a window.

    Computed on demand for each report request, never persisted.
    matching_records holds every record in the window in storage order;
    trimming for display is left to the reply formatter.
    """

    window: DateWindow
    total_income: Decimal = Field(default=Decimal("0"))
    total_expense: Decimal = Field(default=Decimal("0"))
    matching_records: list[TransactionRecord] = Field(default_factory=list)
    skipped_rows: int = Field(
        default=0,
        ge=0,
        description="Rows excluded because they could not be parsed"
    )

    @computed_field
    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense

    @property
    def record_count(self) -> int:
        return len(self.matching_records)

    @property
    def is_empty(self) -> bool:
        return not self.matching_records

    def preview(self, limit: Optional[int] = 5) -> list[TransactionRecord]:
        """First records for display; None means all."""
        if limit is None:
            return list(self.matching_records)
        return self.matching_records[:limit]
