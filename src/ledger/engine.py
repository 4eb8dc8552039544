"""
Ledger Engine

DESIGN DECISION: Reports are a deterministic fold over the whole ledger.
Every query reads all rows, parses them, filters by the date window and
sums by kind. Nothing is cached or indexed: the ledger is small and
append-only, so re-reading it is both simple and always correct.

A malformed row never aborts a report. It is logged and left out of both
the totals and the returned records.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Sequence

import structlog
from pydantic import ValidationError

from src.audit import AuditLogger
from src.models.transaction import (
    LEDGER_TIMESTAMP_FORMAT,
    DateWindow,
    ReportSummary,
    TransactionKind,
    TransactionRecord,
)
from src.services.storage import LEDGER_COLUMNS, LedgerStoreInterface


logger = structlog.get_logger(__name__)


class MalformedRowError(ValueError):
    """A stored row could not be turned into a TransactionRecord."""
    pass


def _parse_timestamp(value: str) -> datetime:
    value = value.strip()
    try:
        return datetime.strptime(value, LEDGER_TIMESTAMP_FORMAT)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise MalformedRowError(f"unreadable date: {value!r}")
    # Compare on the wall-clock date the row was written with
    return parsed.replace(tzinfo=None)


def _parse_amount(value: str) -> Decimal:
    try:
        amount = Decimal(value.strip())
    except InvalidOperation:
        raise MalformedRowError(f"unreadable amount: {value!r}")
    if not amount.is_finite() or amount < 0:
        raise MalformedRowError(f"invalid amount: {value!r}")
    return amount


def row_to_record(row: Sequence[str]) -> TransactionRecord:
    """
    Convert a ledger row to a TransactionRecord.

    Raises:
        MalformedRowError: If any column is missing or invalid
    """
    if len(row) < len(LEDGER_COLUMNS):
        raise MalformedRowError(f"expected {len(LEDGER_COLUMNS)} columns, got {len(row)}")

    raw_date, raw_kind, raw_amount, raw_description = (str(cell) for cell in row[:4])

    try:
        kind = TransactionKind(raw_kind.strip().lower())
    except ValueError:
        raise MalformedRowError(f"unknown kind: {raw_kind!r}")

    try:
        return TransactionRecord(
            timestamp=_parse_timestamp(raw_date),
            kind=kind,
            amount=_parse_amount(raw_amount),
            description=raw_description,
        )
    except ValidationError as e:
        raise MalformedRowError(str(e.errors()[0]["msg"]))


# Sheets started by older versions of the bot name the kind column "type"
HEADER_ALIASES = {"type": "kind"}


def _is_header(row: Sequence[str]) -> bool:
    names = [str(cell).strip().lower() for cell in row[:len(LEDGER_COLUMNS)]]
    return [HEADER_ALIASES.get(name, name) for name in names] == LEDGER_COLUMNS


def _is_blank(row: Sequence[str]) -> bool:
    return not any(str(cell).strip() for cell in row)


class LedgerEngine:
    """
    Reads and writes the ledger through a LedgerStoreInterface.

    GUARANTEES:
    - Store failures propagate unchanged (no retry here)
    - Reports only contain records actually read from the store
    - Records are returned in storage order
    """

    def __init__(
        self,
        store: LedgerStoreInterface,
        clock: Callable[[], datetime] = datetime.now,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            store: Backing ledger store
            clock: Returns the current local time; decides timestamps and "today"
            audit_logger: Receives one event per skipped malformed row
        """
        self._store = store
        self._clock = clock
        self._audit_logger = audit_logger

    def today(self) -> date:
        return self._clock().date()

    async def ensure_schema(self) -> None:
        await self._store.ensure_schema()

    async def append(self, record: TransactionRecord) -> TransactionRecord:
        """Append a record; raises StoreUnavailable/StoreError on failure."""
        await self._store.append_row(record.to_row())
        logger.info(
            "transaction_appended",
            kind=record.kind.value,
            amount=str(record.amount),
        )
        return record

    async def record_transaction(
        self,
        kind: TransactionKind,
        amount: Decimal,
        description: str,
    ) -> TransactionRecord:
        """Stamp a new record with the current time and append it."""
        record = TransactionRecord(
            timestamp=self._clock().replace(microsecond=0),
            kind=kind,
            amount=amount,
            description=description,
        )
        return await self.append(record)

    async def load_records(self) -> tuple[list[TransactionRecord], int]:
        """
        Read and parse every ledger row.

        Returns:
            (records in storage order, number of malformed rows skipped)
        """
        rows = await self._store.read_all_rows()

        records = []
        skipped = 0
        for row_number, row in enumerate(rows, start=1):
            if _is_blank(row):
                continue
            if row_number == 1 and _is_header(row):
                continue
            try:
                records.append(row_to_record(row))
            except MalformedRowError as e:
                skipped += 1
                logger.warning(
                    "malformed_row_skipped",
                    row_number=row_number,
                    reason=str(e),
                )
                if self._audit_logger:
                    await self._audit_logger.log_malformed_row(row_number, str(e))
        return records, skipped

    async def query(self, window: Optional[DateWindow] = None) -> ReportSummary:
        """
        Summarize the ledger over a window.

        Args:
            window: Inclusive date window. Defaults to today.

        Returns:
            ReportSummary with every matching record (not truncated)
        """
        if window is None:
            window = DateWindow.single_day(self.today())

        records, skipped = await self.load_records()

        matching = [r for r in records if window.contains(r.record_date)]
        total_income = sum(
            (r.amount for r in matching if r.kind == TransactionKind.INCOME),
            Decimal("0"),
        )
        total_expense = sum(
            (r.amount for r in matching if r.kind == TransactionKind.EXPENSE),
            Decimal("0"),
        )

        return ReportSummary(
            window=window,
            total_income=total_income,
            total_expense=total_expense,
            matching_records=matching,
            skipped_rows=skipped,
        )
