"""
Chat Finance Tracker - Source Package

A chat bot that records income and expenses sent as short text commands
and answers with reports over a chosen date range.

DESIGN PRINCIPLES:
1. The ledger is append-only
2. Every inbound message gets exactly one reply (non-commands excepted)
3. A failed flow resets the conversation instead of leaving it stuck
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Chat Finance Tracker Team"
