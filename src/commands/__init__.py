"""Command parsing package."""

from src.commands.parser import (
    CommandParseError,
    InvalidAmountError,
    InvalidChoiceError,
    InvalidDateFormatError,
    InvalidDateRangeError,
    MissingDescriptionError,
    parse_amount,
    parse_command,
    parse_date_range,
    parse_report_choice,
)

__all__ = [
    "CommandParseError",
    "InvalidAmountError",
    "InvalidChoiceError",
    "InvalidDateFormatError",
    "InvalidDateRangeError",
    "MissingDescriptionError",
    "parse_amount",
    "parse_command",
    "parse_date_range",
    "parse_report_choice",
]
