"""Reply formatting package."""

from src.formatting.replies import (
    DATE_RANGE_PROMPT,
    GENERIC_ERROR_MESSAGE,
    HELP_MESSAGE,
    INVALID_AMOUNT_MESSAGE,
    INVALID_CHOICE_MESSAGE,
    INVALID_DATE_MESSAGE,
    INVERTED_DATE_RANGE_MESSAGE,
    MISSING_DESCRIPTION_MESSAGE,
    REPORT_FAILED_MESSAGE,
    REPORT_OPTIONS_MESSAGE,
    TRANSACTION_FAILED_MESSAGE,
    UNKNOWN_COMMAND_MESSAGE,
    WRONG_DATE_TOKEN_COUNT_MESSAGE,
    format_amount,
    format_period,
    format_report,
    format_transaction_confirmation,
)

__all__ = [
    "DATE_RANGE_PROMPT",
    "GENERIC_ERROR_MESSAGE",
    "HELP_MESSAGE",
    "INVALID_AMOUNT_MESSAGE",
    "INVALID_CHOICE_MESSAGE",
    "INVALID_DATE_MESSAGE",
    "INVERTED_DATE_RANGE_MESSAGE",
    "MISSING_DESCRIPTION_MESSAGE",
    "REPORT_FAILED_MESSAGE",
    "REPORT_OPTIONS_MESSAGE",
    "TRANSACTION_FAILED_MESSAGE",
    "UNKNOWN_COMMAND_MESSAGE",
    "WRONG_DATE_TOKEN_COUNT_MESSAGE",
    "format_amount",
    "format_period",
    "format_report",
    "format_transaction_confirmation",
]
