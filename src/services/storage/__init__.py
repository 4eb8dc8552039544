"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Google Sheets is the production backend; the in-memory store backs tests
and runs without credentials.
"""

from src.services.storage.interface import (
    LEDGER_COLUMNS,
    AuditStorageInterface,
    LedgerStoreInterface,
    StoreError,
    StoreUnavailable,
)
from src.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
)
from src.services.storage.memory import InMemoryLedgerStore

__all__ = [
    # Interfaces
    "LEDGER_COLUMNS",
    "AuditStorageInterface",
    "LedgerStoreInterface",
    # Exceptions
    "StoreError",
    "StoreUnavailable",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStore",
    # In-memory implementation
    "InMemoryLedgerStore",
]
