"""Services package."""

from src.services.storage import (
    LEDGER_COLUMNS,
    AuditStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStore,
    InMemoryLedgerStore,
    LedgerStoreInterface,
    StoreError,
    StoreUnavailable,
)

__all__ = [
    # Storage services
    "LEDGER_COLUMNS",
    "AuditStorageInterface",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStore",
    "InMemoryLedgerStore",
    "LedgerStoreInterface",
    "StoreError",
    "StoreUnavailable",
]
