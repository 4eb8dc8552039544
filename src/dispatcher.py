"""
Message Dispatcher for Chat Finance Tracker

This module ties together all the components and defines the
end-to-end handling of one inbound chat message:

    (sender, text)
      -> sender lock
      -> active session?  yes -> report flow
                          no  -> command parser -> handler
      -> reply

DESIGN DECISION: Every inbound message gets exactly one reply, errors
included. The one deliberate exception is text that is not a command at
all: it is ignored (no reply) unless reply_to_unknown_commands is on.
"""

from datetime import timedelta
from typing import Optional
from uuid import UUID

import structlog

from src.audit import AuditLogger, configure_logging, create_correlation_id
from src.commands import parse_command
from src.config import get_settings
from src.formatting.replies import (
    GENERIC_ERROR_MESSAGE,
    HELP_MESSAGE,
    TRANSACTION_FAILED_MESSAGE,
    UNKNOWN_COMMAND_MESSAGE,
    format_amount,
    format_transaction_confirmation,
)
from src.ledger import LedgerEngine
from src.models.audit import AuditEventType
from src.models.command import Help, RecordTransaction, RequestReport, Unrecognized
from src.models.session import SessionState
from src.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
    InMemoryLedgerStore,
    LedgerStoreInterface,
    StoreError,
)
from src.sessions import ReportFlow, SessionRegistry


logger = structlog.get_logger(__name__)


class Dispatcher:
    """
    Routes inbound messages to the report flow or to command handlers.

    Messages from the same sender are handled one at a time; different
    senders are handled concurrently.
    """

    def __init__(
        self,
        engine: LedgerEngine,
        sessions: Optional[SessionRegistry] = None,
        audit_logger: Optional[AuditLogger] = None,
        report_flow: Optional[ReportFlow] = None,
        reply_to_unknown_commands: bool = False,
        preview_limit: int = 5,
    ):
        self._engine = engine
        self._sessions = sessions if sessions is not None else SessionRegistry()
        self._audit_logger = audit_logger
        self._report_flow = report_flow if report_flow is not None else ReportFlow(
            engine,
            self._sessions,
            audit_logger=audit_logger,
            preview_limit=preview_limit,
        )
        self._reply_to_unknown_commands = reply_to_unknown_commands

    @property
    def sessions(self) -> SessionRegistry:
        return self._sessions

    async def startup(self) -> bool:
        """
        Prepare the ledger table.

        A store failure here is logged, not raised: the bot keeps serving and
        individual commands report their own errors.
        """
        try:
            await self._engine.ensure_schema()
            logger.info("ledger_ready")
            return True
        except StoreError as e:
            logger.error("ledger_init_failed", error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_store_error(
                    operation="ensure schema",
                    error_message=str(e),
                )
            return False

    async def handle_message(self, sender_id: str, text: str) -> Optional[str]:
        """
        Handle one inbound message.

        Returns:
            The reply text, or None when the message is deliberately ignored
        """
        correlation_id = create_correlation_id()
        async with self._sessions.lock(sender_id):
            try:
                return await self._dispatch(sender_id, text, correlation_id)
            except Exception as e:
                logger.exception(
                    "message_handling_failed",
                    sender_id=sender_id,
                    correlation_id=str(correlation_id),
                )
                dropped = self._sessions.remove(sender_id)
                if self._audit_logger:
                    await self._audit_logger.log_error(
                        error_type=type(e).__name__,
                        error_message=str(e),
                        sender_id=sender_id,
                        correlation_id=correlation_id,
                    )
                    if dropped:
                        await self._audit_logger.log_session(
                            AuditEventType.SESSION_RESET,
                            sender_id=sender_id,
                            step=dropped.step.value,
                            correlation_id=correlation_id,
                        )
                return GENERIC_ERROR_MESSAGE

    async def _dispatch(
        self,
        sender_id: str,
        text: str,
        correlation_id: UUID,
    ) -> Optional[str]:
        expired = self._sessions.expire_if_idle(sender_id)
        if expired:
            await self._log_expired(expired, correlation_id)

        # Abandoned sessions of other senders; this sender's lock is held so it is skipped
        for stale in self._sessions.purge_expired():
            await self._log_expired(stale, correlation_id)

        state = self._sessions.get(sender_id)
        if state is not None:
            return await self._report_flow.handle(state, text, correlation_id)

        command = parse_command(text)

        if isinstance(command, RecordTransaction):
            return await self._record_transaction(sender_id, command, correlation_id)
        if isinstance(command, RequestReport):
            return await self._report_flow.begin(sender_id, correlation_id)
        if isinstance(command, Help):
            return HELP_MESSAGE
        if isinstance(command, Unrecognized) and not command.is_unknown_command:
            if self._audit_logger:
                await self._audit_logger.log_transaction_rejected(
                    sender_id=sender_id,
                    error_code=command.error.value,
                    raw=command.raw,
                    correlation_id=correlation_id,
                )
            return command.hint

        if self._audit_logger:
            await self._audit_logger.log_unknown_command(
                sender_id=sender_id,
                raw=text,
                correlation_id=correlation_id,
            )
        return UNKNOWN_COMMAND_MESSAGE if self._reply_to_unknown_commands else None

    async def _log_expired(self, state: SessionState, correlation_id: UUID) -> None:
        logger.info("session_expired", sender_id=state.sender_id, step=state.step.value)
        if self._audit_logger:
            await self._audit_logger.log_session(
                AuditEventType.SESSION_EXPIRED,
                sender_id=state.sender_id,
                step=state.step.value,
                correlation_id=correlation_id,
            )

    async def _record_transaction(
        self,
        sender_id: str,
        command: RecordTransaction,
        correlation_id: UUID,
    ) -> str:
        try:
            record = await self._engine.record_transaction(
                kind=command.kind,
                amount=command.amount,
                description=command.description,
            )
        except StoreError as e:
            logger.error(
                "transaction_write_failed",
                sender_id=sender_id,
                error=str(e),
            )
            if self._audit_logger:
                await self._audit_logger.log_store_error(
                    operation="append row",
                    error_message=str(e),
                    sender_id=sender_id,
                    correlation_id=correlation_id,
                )
            return TRANSACTION_FAILED_MESSAGE

        if self._audit_logger:
            await self._audit_logger.log_transaction_recorded(
                sender_id=sender_id,
                kind=record.kind.value,
                amount=format_amount(record.amount),
                correlation_id=correlation_id,
            )
        return format_transaction_confirmation(record)


def create_app_components(
    use_storage: bool = True,
) -> tuple[Dispatcher, LedgerStoreInterface]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use Google Sheets as the ledger.
                    Set to False (or leave Sheets unconfigured) to run on
                    the in-memory ledger.

    Returns:
        (dispatcher, ledger_store)
    """
    settings = get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level)

    store: LedgerStoreInterface
    audit_logger = AuditLogger()  # Local-only logging

    if use_storage:
        try:
            sheets_settings = settings.google_sheets
            sheets_client = GoogleSheetsClient(sheets_settings)
            store = GoogleSheetsLedgerStore(sheets_client)
            if sheets_settings.persist_audit_events:
                audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Sheets not configured - continue on the in-memory ledger
            logger.warning("storage_not_configured", error=str(e))
            store = InMemoryLedgerStore()
    else:
        store = InMemoryLedgerStore()

    engine = LedgerEngine(store, audit_logger=audit_logger)
    sessions = SessionRegistry(
        timeout=timedelta(minutes=app_settings.session_timeout_minutes),
    )
    dispatcher = Dispatcher(
        engine,
        sessions=sessions,
        audit_logger=audit_logger,
        reply_to_unknown_commands=app_settings.reply_to_unknown_commands,
        preview_limit=app_settings.report_preview_limit,
    )
    return dispatcher, store
