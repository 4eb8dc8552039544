"""
Shared fixtures.

No test talks to Google: the ledger is either the in-memory store or a
fake gspread worksheet, and time comes from a FixedClock.
"""

from datetime import datetime, timedelta

import gspread
import pytest

from src.dispatcher import Dispatcher
from src.ledger import LedgerEngine
from src.services.storage import LEDGER_COLUMNS, InMemoryLedgerStore
from src.sessions import SessionRegistry


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeWorksheet:
    """The slice of gspread.Worksheet the Sheets store uses."""

    def __init__(self, title: str, rows=None):
        self.title = title
        self.rows = [list(r) for r in rows] if rows else []
        self.append_calls = 0

    def row_values(self, index: int) -> list[str]:
        if len(self.rows) < index:
            return []
        return list(self.rows[index - 1])

    def append_row(self, values, value_input_option=None):
        self.append_calls += 1
        self.rows.append([str(v) for v in values])

    def get_all_values(self) -> list[list[str]]:
        return [list(r) for r in self.rows]


class FakeSpreadsheet:
    """The slice of gspread.Spreadsheet the Sheets client uses."""

    def __init__(self, worksheets=None):
        self.worksheets = dict(worksheets or {})
        self.added = []

    def worksheet(self, title: str) -> FakeWorksheet:
        if title not in self.worksheets:
            raise gspread.WorksheetNotFound(title)
        return self.worksheets[title]

    def add_worksheet(self, title: str, rows: int, cols: int) -> FakeWorksheet:
        sheet = FakeWorksheet(title)
        self.worksheets[title] = sheet
        self.added.append(title)
        return sheet


SCENARIO_ROWS = [
    list(LEDGER_COLUMNS),
    ["2024-06-01 10:00:00", "income", "5000000", "gaji"],
    ["2024-06-01 12:00:00", "expense", "50000", "makan"],
]


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 6, 1, 18, 30, 0))


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore([list(LEDGER_COLUMNS)])


@pytest.fixture
def scenario_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore(SCENARIO_ROWS)


@pytest.fixture
def engine(store, clock) -> LedgerEngine:
    return LedgerEngine(store, clock=clock)


@pytest.fixture
def registry(clock) -> SessionRegistry:
    return SessionRegistry(timeout=timedelta(minutes=10), clock=clock)


@pytest.fixture
def dispatcher(engine, registry) -> Dispatcher:
    return Dispatcher(engine, sessions=registry)
