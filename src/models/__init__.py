"""
Data Models Package

This package contains all Pydantic models used in the Chat Finance Tracker.
All data flowing through the system must conform to these schemas.
"""

from src.models.transaction import (
    LEDGER_TIMESTAMP_FORMAT,
    DateWindow,
    ReportSummary,
    TransactionKind,
    TransactionRecord,
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
from src.models.session import (
    ReportTarget,
    SessionState,
    SessionStep,
    Transition,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "LEDGER_TIMESTAMP_FORMAT",
    "DateWindow",
    "ReportSummary",
    "TransactionKind",
    "TransactionRecord",
    # Commands
    "Command",
    "CommandErrorCode",
    "Help",
    "RecordTransaction",
    "ReportChoiceCustom",
    "ReportChoiceToday",
    "ReportDateRange",
    "RequestReport",
    "Unrecognized",
    # Sessions
    "ReportTarget",
    "SessionState",
    "SessionStep",
    "Transition",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
