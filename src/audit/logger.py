"""
Audit Logger

DESIGN DECISION: Every significant action in the bot is logged.
This provides:
1. Traceability of every command a sender issued
2. Debugging capability when the ledger store fails
3. A record of ledger rows that reports had to skip

The audit logger:
- Is async to not block message handling
- Gracefully handles failures (doesn't crash the bot if logging fails)
- Supports correlation IDs to trace events caused by one inbound message
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from src.services.storage import AuditStorageInterface


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog on top of the standard library logger.

    Call once at startup; safe to call again (the latest level wins).
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Google Sheets audit worksheet (when storage is configured)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_transaction_recorded(
        self,
        sender_id: str,
        kind: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_recorded(
            sender_id=sender_id,
            kind=kind,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_transaction_rejected(
        self,
        sender_id: str,
        error_code: str,
        raw: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_rejected(
            sender_id=sender_id,
            error_code=error_code,
            raw=raw,
            correlation_id=correlation_id,
        ))

    async def log_report_requested(
        self,
        sender_id: str,
        target: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.report_requested(
            sender_id=sender_id,
            target=target,
            correlation_id=correlation_id,
        ))

    async def log_report_generated(
        self,
        sender_id: str,
        start: str,
        end: str,
        record_count: int,
        skipped_rows: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.report_generated(
            sender_id=sender_id,
            start=start,
            end=end,
            record_count=record_count,
            skipped_rows=skipped_rows,
            correlation_id=correlation_id,
        ))

    async def log_session(
        self,
        event_type: AuditEventType,
        sender_id: str,
        step: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a session lifecycle change (started, ended, expired, reset)."""
        await self.log(AuditEventBuilder.session_changed(
            event_type=event_type,
            sender_id=sender_id,
            step=step,
            correlation_id=correlation_id,
        ))

    async def log_malformed_row(
        self,
        row_number: int,
        reason: str,
    ) -> None:
        await self.log(AuditEventBuilder.malformed_row_skipped(
            row_number=row_number,
            reason=reason,
        ))

    async def log_unknown_command(
        self,
        sender_id: str,
        raw: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.unknown_command_ignored(
            sender_id=sender_id,
            raw=raw,
            correlation_id=correlation_id,
        ))

    async def log_store_error(
        self,
        operation: str,
        error_message: str,
        sender_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.store_error(
            operation=operation,
            error_message=error_message,
            sender_id=sender_id,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        sender_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            sender_id=sender_id,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this when an inbound message arrives and pass it through
    everything that handles that message.
    """
    return uuid4()
