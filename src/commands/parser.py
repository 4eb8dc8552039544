"""
Command Parser

Turns one raw chat line into a typed Command. Pure functions only: no I/O,
no clock, no state.

Grammar:
    !in <amount> <description>
    !out <amount> <description>
    !report
    !help

Amounts accept "." and "," as digit-group separators, which are simply
removed ("5.000.000" and "5,000,000" both mean 5000000).

Inside the report flow two more inputs are understood: the menu choice
("1" / "2") and a date range "DD-MM-YYYY DD-MM-YYYY".
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from src.formatting.replies import (
    INVALID_AMOUNT_MESSAGE,
    INVALID_CHOICE_MESSAGE,
    INVALID_DATE_MESSAGE,
    INVERTED_DATE_RANGE_MESSAGE,
    MISSING_DESCRIPTION_MESSAGE,
    WRONG_DATE_TOKEN_COUNT_MESSAGE,
)
from src.models.command import (
    Command,
    CommandErrorCode,
    Help,
    RecordTransaction,
    ReportChoiceCustom,
    ReportChoiceToday,
    ReportDateRange,
    RequestReport,
    Unrecognized,
)
from src.models.transaction import TransactionKind


DATE_INPUT_FORMAT = "%d-%m-%Y"

TRANSACTION_COMMANDS = {
    "!in": TransactionKind.INCOME,
    "!out": TransactionKind.EXPENSE,
}
REPORT_COMMAND = "!report"
HELP_COMMAND = "!help"


class CommandParseError(ValueError):
    """Base class for input the user can correct and resend."""

    code: CommandErrorCode = CommandErrorCode.UNKNOWN_COMMAND

    def __init__(self, hint: str):
        super().__init__(hint)
        self.hint = hint


class InvalidAmountError(CommandParseError):
    code = CommandErrorCode.INVALID_AMOUNT


class MissingDescriptionError(CommandParseError):
    code = CommandErrorCode.MISSING_DESCRIPTION


class InvalidDateFormatError(CommandParseError):
    code = CommandErrorCode.INVALID_DATE_FORMAT


class InvalidDateRangeError(InvalidDateFormatError):
    """Both dates parse but the range ends before it starts."""
    pass


class InvalidChoiceError(CommandParseError):
    code = CommandErrorCode.INVALID_CHOICE


def parse_amount(token: str) -> Decimal:
    """
    Parse an amount token, ignoring "." and "," group separators.

    Raises:
        InvalidAmountError: If the token is not a finite non-negative number
    """
    cleaned = token.replace(".", "").replace(",", "")
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise InvalidAmountError(INVALID_AMOUNT_MESSAGE)
    if not amount.is_finite() or amount < 0:
        raise InvalidAmountError(INVALID_AMOUNT_MESSAGE)
    return amount


def _parse_transaction(kind: TransactionKind, tokens: list[str]) -> RecordTransaction:
    if len(tokens) < 2:
        raise InvalidAmountError(INVALID_AMOUNT_MESSAGE)

    amount = parse_amount(tokens[1])

    description = " ".join(tokens[2:]).strip()
    if not description:
        raise MissingDescriptionError(MISSING_DESCRIPTION_MESSAGE)

    return RecordTransaction(kind=kind, amount=amount, description=description)


def parse_command(text: str) -> Command:
    """
    Classify a fresh inbound line.

    Never raises: parse failures come back as Unrecognized with an error
    code and a hint for the user.
    """
    stripped = text.strip()
    tokens = stripped.split()
    if not tokens:
        return Unrecognized(raw=stripped)

    head = tokens[0].lower()

    if head in TRANSACTION_COMMANDS:
        try:
            return _parse_transaction(TRANSACTION_COMMANDS[head], tokens)
        except CommandParseError as e:
            return Unrecognized(raw=stripped, error=e.code, hint=e.hint)

    if head == REPORT_COMMAND:
        return RequestReport()

    if stripped.lower() == HELP_COMMAND:
        return Help()

    return Unrecognized(raw=stripped)


def parse_report_choice(text: str) -> Command:
    """
    Parse the answer to the report menu.

    Raises:
        InvalidChoiceError: For anything but "1" or "2"
    """
    choice = text.strip()
    if choice == "1":
        return ReportChoiceToday()
    if choice == "2":
        return ReportChoiceCustom()
    raise InvalidChoiceError(INVALID_CHOICE_MESSAGE)


def _parse_date(token: str) -> date:
    try:
        return datetime.strptime(token, DATE_INPUT_FORMAT).date()
    except ValueError:
        raise InvalidDateFormatError(INVALID_DATE_MESSAGE)


def parse_date_range(text: str) -> ReportDateRange:
    """
    Parse "DD-MM-YYYY DD-MM-YYYY" into an inclusive range.

    Raises:
        InvalidDateFormatError: Wrong token count or an invalid date
        InvalidDateRangeError: The end date is before the start date
    """
    tokens = text.split()
    if len(tokens) != 2:
        raise InvalidDateFormatError(WRONG_DATE_TOKEN_COUNT_MESSAGE)

    start = _parse_date(tokens[0])
    end = _parse_date(tokens[1])
    if end < start:
        raise InvalidDateRangeError(INVERTED_DATE_RANGE_MESSAGE)

    return ReportDateRange(start=start, end=end)
