"""
Report Flow Runner

Connects the pure state machine to the ledger engine: it stores each
transition's next state in the registry and, when a transition asks for a
report, runs the query and formats the answer.

Failure policy: if anything goes wrong while a session is active (a store
error while reading the ledger included) the sender gets a generic error
reply and the session is removed, so nobody is left stuck mid-flow.
"""

from typing import Optional
from uuid import UUID

import structlog

from src.audit import AuditLogger
from src.formatting.replies import REPORT_FAILED_MESSAGE, format_period, format_report
from src.ledger import LedgerEngine
from src.models.audit import AuditEventType
from src.models.session import ReportTarget, SessionState, Transition
from src.services.storage import StoreError
from src.sessions.machine import advance, start_flow
from src.sessions.registry import SessionRegistry


logger = structlog.get_logger(__name__)


class ReportFlow:
    """Drives the interactive `!report` conversation for every sender."""

    def __init__(
        self,
        engine: LedgerEngine,
        registry: SessionRegistry,
        audit_logger: Optional[AuditLogger] = None,
        preview_limit: int = 5,
    ):
        self._engine = engine
        self._registry = registry
        self._audit_logger = audit_logger
        self._preview_limit = preview_limit

    async def begin(self, sender_id: str, correlation_id: Optional[UUID] = None) -> str:
        """Start the flow for a sender with no active session."""
        transition = start_flow(sender_id, self._registry.now())
        self._registry.apply(sender_id, transition.next_state)

        if self._audit_logger:
            await self._audit_logger.log_session(
                AuditEventType.SESSION_STARTED,
                sender_id=sender_id,
                step=transition.next_state.step.value,
                correlation_id=correlation_id,
            )
        return transition.reply

    async def handle(
        self,
        state: SessionState,
        text: str,
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """Feed one message to an active session and return the reply."""
        sender_id = state.sender_id
        try:
            transition = advance(state, text, self._registry.now())
            if transition.report is not None:
                reply = await self._run_report(sender_id, transition, correlation_id)
            else:
                reply = transition.reply
        except Exception as e:
            self._registry.remove(sender_id)
            await self._log_failure(sender_id, state, e, correlation_id)
            return REPORT_FAILED_MESSAGE

        self._registry.apply(sender_id, transition.next_state)
        if transition.ends_session and self._audit_logger:
            await self._audit_logger.log_session(
                AuditEventType.SESSION_ENDED,
                sender_id=sender_id,
                step=state.step.value,
                correlation_id=correlation_id,
            )
        return reply

    async def _run_report(
        self,
        sender_id: str,
        transition: Transition,
        correlation_id: Optional[UUID],
    ) -> str:
        is_today = transition.report == ReportTarget.TODAY
        if self._audit_logger:
            await self._audit_logger.log_report_requested(
                sender_id=sender_id,
                target=transition.report.value,
                correlation_id=correlation_id,
            )
        summary = await self._engine.query(None if is_today else transition.window)

        if self._audit_logger:
            await self._audit_logger.log_report_generated(
                sender_id=sender_id,
                start=summary.window.start.isoformat(),
                end=summary.window.end.isoformat(),
                record_count=summary.record_count,
                skipped_rows=summary.skipped_rows,
                correlation_id=correlation_id,
            )

        return format_report(
            summary,
            format_period(summary.window, is_today=is_today),
            preview_limit=self._preview_limit,
        )

    async def _log_failure(
        self,
        sender_id: str,
        state: SessionState,
        error: Exception,
        correlation_id: Optional[UUID],
    ) -> None:
        logger.error(
            "report_flow_failed",
            sender_id=sender_id,
            step=state.step.value,
            error=str(error),
            exc_info=not isinstance(error, StoreError),
        )
        if not self._audit_logger:
            return
        if isinstance(error, StoreError):
            await self._audit_logger.log_store_error(
                operation="read rows",
                error_message=str(error),
                sender_id=sender_id,
                correlation_id=correlation_id,
            )
        else:
            await self._audit_logger.log_error(
                error_type=type(error).__name__,
                error_message=str(error),
                sender_id=sender_id,
                correlation_id=correlation_id,
            )
        await self._audit_logger.log_session(
            AuditEventType.SESSION_RESET,
            sender_id=sender_id,
            step=state.step.value,
            correlation_id=correlation_id,
        )
