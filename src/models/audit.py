"""
Audit Models for Chat Finance Tracker

Every significant action in the bot is logged for audit purposes.
This provides:
1. Traceability of what each sender did and what the bot answered
2. Debugging information when the store misbehaves
3. A record of malformed ledger rows that reports skipped

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger writes
    TRANSACTION_RECORDED = "transaction_recorded"
    TRANSACTION_REJECTED = "transaction_rejected"

    # Reports
    REPORT_REQUESTED = "report_requested"
    REPORT_GENERATED = "report_generated"
    MALFORMED_ROW_SKIPPED = "malformed_row_skipped"

    # Conversation sessions
    SESSION_STARTED = "session_started"
    SESSION_ENDED = "session_ended"
    SESSION_EXPIRED = "session_expired"
    SESSION_RESET = "session_reset"

    # Inbound messages
    UNKNOWN_COMMAND_IGNORED = "unknown_command_ignored"

    # Failures
    STORE_ERROR = "store_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who triggered it
    sender_id: Optional[str] = Field(
        default=None,
        description="Chat sender the event relates to"
    )

    # Correlation - one id per inbound message
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate events caused by the same inbound message"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user message?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "sender_id": self.sender_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, sender_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.sender_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_recorded(sender_id, "income", "5000", cid)
        event = AuditEventBuilder.session_changed(
            AuditEventType.SESSION_EXPIRED, sender_id, "awaiting_date_range"
        )
    """

    @staticmethod
    def transaction_recorded(
        sender_id: str,
        kind: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            sender_id=sender_id,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} recorded: {amount}",
            details={
                "kind": kind,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_rejected(
        sender_id: str,
        error_code: str,
        raw: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            sender_id=sender_id,
            correlation_id=correlation_id,
            description=f"Transaction command rejected: {error_code}",
            details={
                "error_code": error_code,
                "raw": raw,
            },
            is_user_action=True,
        )

    @staticmethod
    def report_requested(
        sender_id: str,
        target: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_REQUESTED,
            sender_id=sender_id,
            correlation_id=correlation_id,
            description=f"Report requested: {target}",
            details={"target": target},
            is_user_action=True,
        )

    @staticmethod
    def report_generated(
        sender_id: str,
        start: str,
        end: str,
        record_count: int,
        skipped_rows: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            sender_id=sender_id,
            correlation_id=correlation_id,
            description=f"Report {start}..{end} returned {record_count} records",
            details={
                "start": start,
                "end": end,
                "record_count": record_count,
                "skipped_rows": skipped_rows,
            },
        )

    @staticmethod
    def malformed_row_skipped(
        row_number: int,
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MALFORMED_ROW_SKIPPED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Ledger row {row_number} skipped",
            details={
                "row_number": row_number,
                "reason": reason,
            },
        )

    @staticmethod
    def session_changed(
        event_type: AuditEventType,
        sender_id: str,
        step: Optional[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        severity = (
            AuditSeverity.WARNING
            if event_type == AuditEventType.SESSION_RESET
            else AuditSeverity.INFO
        )
        return AuditEvent(
            event_type=event_type,
            severity=severity,
            sender_id=sender_id,
            correlation_id=correlation_id,
            description=f"Session {event_type.value.removeprefix('session_')}",
            details={"step": step} if step else {},
            is_user_action=event_type == AuditEventType.SESSION_STARTED,
        )

    @staticmethod
    def unknown_command_ignored(
        sender_id: str,
        raw: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNKNOWN_COMMAND_IGNORED,
            severity=AuditSeverity.DEBUG,
            sender_id=sender_id,
            correlation_id=correlation_id,
            description="Message is not a command",
            details={"raw": raw[:100]},
            is_user_action=True,
        )

    @staticmethod
    def store_error(
        operation: str,
        error_message: str,
        sender_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_ERROR,
            severity=AuditSeverity.ERROR,
            sender_id=sender_id,
            correlation_id=correlation_id,
            description=f"Ledger store failed during {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        sender_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            sender_id=sender_id,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
