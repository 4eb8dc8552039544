"""Ledger engine package."""

from src.ledger.engine import LedgerEngine, MalformedRowError, row_to_record

__all__ = ["LedgerEngine", "MalformedRowError", "row_to_record"]
