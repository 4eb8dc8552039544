"""
In-Memory Ledger Store

Keeps rows in a list. Used by the tests and as the fallback ledger when
Google Sheets is not configured (data is lost on restart).
"""

import asyncio
from typing import Optional, Sequence

from src.services.storage.interface import (
    LEDGER_COLUMNS,
    LedgerStoreInterface,
    StoreUnavailable,
)


class InMemoryLedgerStore(LedgerStoreInterface):
    """List-backed ledger table with the same contract as the Sheets store."""

    def __init__(self, rows: Optional[list[list[str]]] = None):
        self._rows: list[list[str]] = [[str(cell) for cell in row] for row in rows] if rows else []
        self._lock = asyncio.Lock()
        self.available = True

    def _check_available(self) -> None:
        if not self.available:
            raise StoreUnavailable("In-memory ledger marked unavailable")

    async def ensure_schema(self) -> None:
        self._check_available()
        async with self._lock:
            if not self._rows or not any(cell.strip() for cell in self._rows[0]):
                self._rows[:1] = [list(LEDGER_COLUMNS)]

    async def append_row(self, row: Sequence[str]) -> None:
        self._check_available()
        async with self._lock:
            self._rows.append([str(cell) for cell in row])

    async def read_all_rows(self) -> list[list[str]]:
        self._check_available()
        async with self._lock:
            return [list(row) for row in self._rows]

    @property
    def row_count(self) -> int:
        """Rows stored, header included."""
        return len(self._rows)
