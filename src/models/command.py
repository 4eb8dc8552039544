"""
Command Models

Every inbound chat line is classified into exactly one of these variants.
The `type` literal acts as the tag, so a Command can be matched on
`command.type` or with isinstance checks.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from src.models.transaction import DateWindow, TransactionKind


class CommandErrorCode(str, Enum):
    """Why a line could not be turned into a usable command."""
    INVALID_AMOUNT = "invalid_amount"
    MISSING_DESCRIPTION = "missing_description"
    INVALID_DATE_FORMAT = "invalid_date_format"
    INVALID_CHOICE = "invalid_choice"
    UNKNOWN_COMMAND = "unknown_command"


class _CommandBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class RecordTransaction(_CommandBase):
    """`!in <amount> <description>` or `!out <amount> <description>`."""
    type: Literal["record_transaction"] = "record_transaction"
    kind: TransactionKind
    amount: Decimal = Field(..., ge=0)
    description: str = Field(..., min_length=1)


class RequestReport(_CommandBase):
    """`!report` - opens the interactive report flow."""
    type: Literal["request_report"] = "request_report"


class ReportChoiceToday(_CommandBase):
    type: Literal["report_choice_today"] = "report_choice_today"


class ReportChoiceCustom(_CommandBase):
    type: Literal["report_choice_custom"] = "report_choice_custom"


class ReportDateRange(_CommandBase):
    type: Literal["report_date_range"] = "report_date_range"
    start: date
    end: date

    def to_window(self) -> DateWindow:
        return DateWindow(start=self.start, end=self.end)


class Help(_CommandBase):
    type: Literal["help"] = "help"


class Unrecognized(_CommandBase):
    """
    A line that is not a usable command.

    error is None for text that is simply not a command (ignored by the
    dispatcher); otherwise it names the parse failure and hint carries the
    corrective message for the user.
    """
    type: Literal["unrecognized"] = "unrecognized"
    raw: str
    error: Optional[CommandErrorCode] = None
    hint: Optional[str] = None

    @property
    def is_unknown_command(self) -> bool:
        return self.error is None or self.error == CommandErrorCode.UNKNOWN_COMMAND


Command = Union[
    RecordTransaction,
    RequestReport,
    ReportChoiceToday,
    ReportChoiceCustom,
    ReportDateRange,
    Help,
    Unrecognized,
]
