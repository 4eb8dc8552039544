"""Tests for the ledger engine (append, parse, filter, aggregate)."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from src.audit import AuditLogger
from src.ledger import LedgerEngine, MalformedRowError, row_to_record
from src.models.audit import AuditEventType
from src.models.transaction import DateWindow, TransactionKind, TransactionRecord
from src.services.storage import (
    LEDGER_COLUMNS,
    AuditStorageInterface,
    InMemoryLedgerStore,
    StoreUnavailable,
)


JUNE_1 = DateWindow.single_day(date(2024, 6, 1))


class TestRowParsing:

    def test_valid_row(self):
        record = row_to_record(["2024-06-01 10:00:00", "Income", "5000000", "gaji"])
        assert record.kind == TransactionKind.INCOME
        assert record.amount == Decimal("5000000")
        assert record.timestamp == datetime(2024, 6, 1, 10, 0, 0)

    def test_iso_timestamp_accepted(self):
        record = row_to_record(["2024-06-01T10:00:00", "expense", "1.5", "parkir"])
        assert record.record_date == date(2024, 6, 1)
        assert record.amount == Decimal("1.5")

    def test_non_string_cells(self):
        record = row_to_record(["2024-06-01 10:00:00", "income", 5000, "gaji"])
        assert record.amount == Decimal("5000")

    def test_long_description(self):
        record = row_to_record(["2024-06-01 10:00:00", "expense", "1", "y" * 800])
        assert len(record.description) == 800

    @pytest.mark.parametrize(
        "row",
        [
            ["2024-06-01 10:00:00", "income", "5000000"],
            ["2024-06-01 10:00:00", 7, "5000000", "gaji"],
            ["not a date", "income", "5000000", "gaji"],
            ["2024-06-01 10:00:00", "transfer", "100", "pindah"],
            ["2024-06-01 10:00:00", "income", "lima", "gaji"],
            ["2024-06-01 10:00:00", "expense", "-5", "refund"],
            ["2024-06-01 10:00:00", "expense", "5", "   "],
        ],
    )
    def test_malformed_rows(self, row):
        with pytest.raises(MalformedRowError):
            row_to_record(row)


class TestQuery:

    @pytest.mark.asyncio
    async def test_scenario_window(self, scenario_store, clock):
        """Two rows on 1 June: totals, balance and record order."""
        engine = LedgerEngine(scenario_store, clock=clock)
        summary = await engine.query(
            DateWindow(start=date(2024, 6, 1), end=date(2024, 6, 1))
        )
        assert summary.total_income == Decimal("5000000")
        assert summary.total_expense == Decimal("50000")
        assert summary.balance == Decimal("4950000")
        assert [r.description for r in summary.matching_records] == ["gaji", "makan"]

    @pytest.mark.asyncio
    async def test_default_window_is_today(self, scenario_store, clock):
        engine = LedgerEngine(scenario_store, clock=clock)
        summary = await engine.query()
        assert summary.window == JUNE_1
        assert summary.record_count == 2

        clock.advance(days=1)
        summary = await engine.query()
        assert summary.window == DateWindow.single_day(date(2024, 6, 2))
        assert summary.is_empty

    @pytest.mark.asyncio
    async def test_empty_store(self, engine):
        """Header only: zero totals and no records, no error."""
        summary = await engine.query(JUNE_1)
        assert summary.total_income == Decimal("0")
        assert summary.total_expense == Decimal("0")
        assert summary.matching_records == []

    @pytest.mark.asyncio
    async def test_store_without_header(self, clock):
        engine = LedgerEngine(InMemoryLedgerStore(), clock=clock)
        summary = await engine.query(JUNE_1)
        assert summary.is_empty
        assert summary.skipped_rows == 0

    @pytest.mark.asyncio
    async def test_window_boundaries_inclusive(self, clock):
        store = InMemoryLedgerStore([
            list(LEDGER_COLUMNS),
            ["2024-05-31 23:59:59", "expense", "1", "before"],
            ["2024-06-01 00:00:00", "expense", "2", "first day"],
            ["2024-06-03 23:59:59", "expense", "3", "last day"],
            ["2024-06-04 00:00:00", "expense", "4", "after"],
        ])
        engine = LedgerEngine(store, clock=clock)
        summary = await engine.query(DateWindow(start=date(2024, 6, 1), end=date(2024, 6, 3)))
        assert [r.description for r in summary.matching_records] == ["first day", "last day"]
        assert summary.total_expense == Decimal("5")

    @pytest.mark.asyncio
    async def test_malformed_rows_do_not_abort_report(self, clock):
        store = InMemoryLedgerStore([
            list(LEDGER_COLUMNS),
            ["2024-06-01 09:00:00", "income", "100", "ok"],
            ["garbage"],
            ["2024-06-01 09:30:00", "refund", "50", "unknown kind"],
            ["", "", "", ""],
            ["2024-06-01 10:00:00", "expense", "40", "ok too"],
        ])
        engine = LedgerEngine(store, clock=clock)
        summary = await engine.query(JUNE_1)
        assert summary.total_income == Decimal("100")
        assert summary.total_expense == Decimal("40")
        assert summary.record_count == 2
        assert summary.skipped_rows == 2

    @pytest.mark.asyncio
    async def test_legacy_header_is_not_a_malformed_row(self, clock):
        store = InMemoryLedgerStore([
            ["Date", "Type", "Amount", "Description"],
            ["2024-06-01 09:00:00", "income", "100", "ok"],
        ])
        summary = await LedgerEngine(store, clock=clock).query(JUNE_1)
        assert summary.record_count == 1
        assert summary.skipped_rows == 0

    @pytest.mark.asyncio
    async def test_seeded_non_string_cells(self, clock):
        store = InMemoryLedgerStore([
            list(LEDGER_COLUMNS),
            ["2024-06-01 09:00:00", "income", 100, "ok"],
            ["2024-06-01 09:30:00", None, 5, "no kind"],
        ])
        summary = await LedgerEngine(store, clock=clock).query(JUNE_1)
        assert summary.total_income == Decimal("100")
        assert summary.skipped_rows == 1

    @pytest.mark.asyncio
    async def test_malformed_rows_are_audited(self, clock):
        events = []

        class Capture(AuditStorageInterface):
            async def append_event(self, event):
                events.append(event)
                return True

        store = InMemoryLedgerStore([
            list(LEDGER_COLUMNS),
            ["2024-06-01 09:00:00", "income", "abc", "bad amount"],
        ])
        engine = LedgerEngine(store, clock=clock, audit_logger=AuditLogger(Capture()))
        await engine.query(JUNE_1)

        assert [e.event_type for e in events] == [AuditEventType.MALFORMED_ROW_SKIPPED]
        assert events[0].details["row_number"] == 2

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, clock):
        store = InMemoryLedgerStore()
        store.available = False
        engine = LedgerEngine(store, clock=clock)
        with pytest.raises(StoreUnavailable):
            await engine.query(JUNE_1)


class TestAppend:

    @pytest.mark.asyncio
    async def test_record_transaction_stamps_clock(self, engine, store, clock):
        record = await engine.record_transaction(
            TransactionKind.EXPENSE, Decimal("50000"), "makan"
        )
        assert record.timestamp == clock.now
        rows = await store.read_all_rows()
        assert rows[-1] == ["2024-06-01 18:30:00", "expense", "50000", "makan"]

    @pytest.mark.asyncio
    async def test_append_then_query_covers_everything(self, engine, clock):
        """N appended records come back with totals partitioned by kind."""
        amounts = [
            (TransactionKind.INCOME, Decimal("1000")),
            (TransactionKind.EXPENSE, Decimal("250")),
            (TransactionKind.INCOME, Decimal("75")),
            (TransactionKind.EXPENSE, Decimal("10")),
        ]
        for i, (kind, amount) in enumerate(amounts):
            await engine.append(TransactionRecord(
                timestamp=datetime(2024, 6, 1 + i, 8, 0),
                kind=kind,
                amount=amount,
                description=f"entry {i}",
            ))

        summary = await engine.query(DateWindow(start=date(2024, 6, 1), end=date(2024, 6, 30)))
        assert summary.record_count == len(amounts)
        assert summary.total_income == Decimal("1075")
        assert summary.total_expense == Decimal("260")
        assert summary.total_income + summary.total_expense == sum(a for _, a in amounts)

    @pytest.mark.asyncio
    async def test_append_failure_propagates(self, engine, store):
        store.available = False
        with pytest.raises(StoreUnavailable):
            await engine.record_transaction(TransactionKind.INCOME, Decimal("1"), "x")

    @pytest.mark.asyncio
    async def test_ensure_schema_is_idempotent(self, clock):
        store = InMemoryLedgerStore()
        engine = LedgerEngine(store, clock=clock)
        await engine.ensure_schema()
        await engine.ensure_schema()
        assert await store.read_all_rows() == [LEDGER_COLUMNS]
