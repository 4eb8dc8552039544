"""
Tests for the Google Sheets ledger store against fake gspread objects.

The client's spreadsheet is replaced with a FakeSpreadsheet, so nothing
here needs credentials or network access.
"""

import pytest
from datetime import datetime

from conftest import FakeSpreadsheet, FakeWorksheet
from src.config import GoogleSheetsSettings
from src.models.audit import AuditEventBuilder
from src.services.storage import (
    LEDGER_COLUMNS,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
    StoreError,
    StoreUnavailable,
)
from src.services.storage.google_sheets import AUDIT_COLUMNS


@pytest.fixture
def sheets_settings(tmp_path):
    credentials = tmp_path / "credentials.json"
    credentials.write_text("{}")
    return GoogleSheetsSettings(
        credentials_path=str(credentials),
        spreadsheet_id="test-spreadsheet",
    )


def make_client(settings, spreadsheet):
    client = GoogleSheetsClient(settings)
    client._spreadsheet = spreadsheet
    return client


class BrokenWorksheet(FakeWorksheet):
    """Worksheet whose reads and writes fail with the given error."""

    def __init__(self, title, rows, error):
        super().__init__(title, rows)
        self._error = error

    def append_row(self, values, value_input_option=None):
        raise self._error

    def get_all_values(self):
        raise self._error


class TestEnsureSchema:

    @pytest.mark.asyncio
    async def test_creates_sheet_and_header_once(self, sheets_settings):
        spreadsheet = FakeSpreadsheet()
        store = GoogleSheetsLedgerStore(make_client(sheets_settings, spreadsheet))

        await store.ensure_schema()
        await store.ensure_schema()

        assert spreadsheet.added == ["Transactions"]
        assert spreadsheet.worksheets["Transactions"].rows == [LEDGER_COLUMNS]

    @pytest.mark.asyncio
    async def test_existing_sheet_is_reused(self, sheets_settings):
        sheet = FakeWorksheet("Transactions", [LEDGER_COLUMNS, ["2024-06-01 10:00:00", "income", "1", "a"]])
        spreadsheet = FakeSpreadsheet({"Transactions": sheet})

        # A fresh client, as after a restart
        store = GoogleSheetsLedgerStore(make_client(sheets_settings, spreadsheet))
        await store.ensure_schema()

        assert spreadsheet.added == []
        assert sheet.append_calls == 0
        assert len(sheet.rows) == 2

    @pytest.mark.asyncio
    async def test_empty_existing_sheet_gets_header(self, sheets_settings):
        sheet = FakeWorksheet("Transactions")
        spreadsheet = FakeSpreadsheet({"Transactions": sheet})
        store = GoogleSheetsLedgerStore(make_client(sheets_settings, spreadsheet))
        await store.ensure_schema()
        assert sheet.rows == [LEDGER_COLUMNS]

    @pytest.mark.asyncio
    async def test_custom_sheet_name(self, tmp_path):
        credentials = tmp_path / "credentials.json"
        credentials.write_text("{}")
        settings = GoogleSheetsSettings(
            credentials_path=str(credentials),
            spreadsheet_id="x",
            transactions_sheet_name="Keuangan",
        )
        spreadsheet = FakeSpreadsheet()
        await GoogleSheetsLedgerStore(make_client(settings, spreadsheet)).ensure_schema()
        assert spreadsheet.added == ["Keuangan"]


class TestRows:

    @pytest.mark.asyncio
    async def test_append_then_read(self, sheets_settings):
        spreadsheet = FakeSpreadsheet()
        store = GoogleSheetsLedgerStore(make_client(sheets_settings, spreadsheet))

        await store.append_row(["2024-06-01 10:00:00", "income", "5000000", "gaji"])
        rows = await store.read_all_rows()

        assert rows == [
            LEDGER_COLUMNS,
            ["2024-06-01 10:00:00", "income", "5000000", "gaji"],
        ]

    @pytest.mark.asyncio
    async def test_read_failure_is_unavailable(self, sheets_settings):
        sheet = BrokenWorksheet("Transactions", [LEDGER_COLUMNS], ConnectionError("reset"))
        store = GoogleSheetsLedgerStore(
            make_client(sheets_settings, FakeSpreadsheet({"Transactions": sheet}))
        )
        with pytest.raises(StoreUnavailable):
            await store.read_all_rows()

    @pytest.mark.asyncio
    async def test_unexpected_write_failure_is_store_error(self, sheets_settings):
        sheet = BrokenWorksheet("Transactions", [LEDGER_COLUMNS], RuntimeError("quota"))
        store = GoogleSheetsLedgerStore(
            make_client(sheets_settings, FakeSpreadsheet({"Transactions": sheet}))
        )
        with pytest.raises(StoreError) as exc_info:
            await store.append_row(["2024-06-01 10:00:00", "income", "1", "a"])
        assert not isinstance(exc_info.value, StoreUnavailable)


class TestConnect:

    def test_missing_credentials_file(self, tmp_path):
        with pytest.warns(UserWarning):
            settings = GoogleSheetsSettings(
                credentials_path=str(tmp_path / "missing.json"),
                spreadsheet_id="x",
            )
        with pytest.raises(StoreError):
            GoogleSheetsClient(settings).connect()

    def test_invalid_credentials_file(self, tmp_path):
        credentials = tmp_path / "credentials.json"
        credentials.write_text("not json")
        settings = GoogleSheetsSettings(credentials_path=str(credentials), spreadsheet_id="x")
        with pytest.raises(StoreError):
            GoogleSheetsClient(settings).connect()


class TestAuditStorage:

    @pytest.mark.asyncio
    async def test_event_is_appended(self, sheets_settings):
        spreadsheet = FakeSpreadsheet()
        storage = GoogleSheetsAuditStorage(make_client(sheets_settings, spreadsheet))
        event = AuditEventBuilder.transaction_recorded(sender_id="a", kind="income", amount="1")

        assert await storage.append_event(event) is True

        sheet = spreadsheet.worksheets["AuditLog"]
        assert sheet.rows[0] == AUDIT_COLUMNS
        assert sheet.rows[1][2] == "transaction_recorded"

    @pytest.mark.asyncio
    async def test_failure_returns_false(self, sheets_settings):
        sheet = BrokenWorksheet("AuditLog", [AUDIT_COLUMNS], RuntimeError("quota"))
        storage = GoogleSheetsAuditStorage(
            make_client(sheets_settings, FakeSpreadsheet({"AuditLog": sheet}))
        )
        event = AuditEventBuilder.system_error(error_type="X", error_message="y")
        assert await storage.append_event(event) is False
