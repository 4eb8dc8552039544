"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep the ledger engine decoupled from the storage implementation

The ledger store deals in raw rows only. Turning rows into records,
filtering and summing is the ledger engine's job.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from src.models.audit import AuditEvent


# Header row of the ledger table
LEDGER_COLUMNS = ["date", "kind", "amount", "description"]


class LedgerStoreInterface(ABC):
    """
    Abstract interface for the append-only ledger table.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def ensure_schema(self) -> None:
        """
        Make sure the ledger table exists with its header row.

        Idempotent: calling it again never duplicates the table or header.

        Raises:
            StoreUnavailable: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def append_row(self, row: Sequence[str]) -> None:
        """
        Append one row after the last row of the table.

        Args:
            row: [date, kind, amount, description]

        Raises:
            StoreUnavailable: If the backend cannot be reached
            StoreError: If the backend rejected the write
        """
        pass

    @abstractmethod
    async def read_all_rows(self) -> list[list[str]]:
        """
        Read every row, header included, in storage order.

        Returns:
            List of rows; an empty table returns [] or [header]

        Raises:
            StoreUnavailable: If the backend cannot be reached
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass


class StoreError(Exception):
    """Base exception for ledger store operations."""
    pass


class StoreUnavailable(StoreError):
    """Could not reach the storage backend."""
    pass
