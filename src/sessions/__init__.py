"""Conversation session package."""

from src.sessions.machine import advance, start_flow
from src.sessions.registry import SessionRegistry
from src.sessions.flow import ReportFlow

__all__ = ["ReportFlow", "SessionRegistry", "advance", "start_flow"]
