"""
Conversation Session Models

A SessionState exists only while a sender is inside a multi-step flow.
No entry for a sender means "no active flow".
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.models.transaction import DateWindow


class SessionStep(str, Enum):
    """Where a sender is in the report flow."""
    AWAITING_REPORT_CHOICE = "awaiting_report_choice"
    AWAITING_DATE_RANGE = "awaiting_date_range"


class SessionState(BaseModel):
    """Per-sender flow state. Replaced, never edited in place."""
    model_config = ConfigDict(frozen=True)

    sender_id: str = Field(..., min_length=1)
    step: SessionStep
    started_at: datetime
    last_activity_at: datetime

    @classmethod
    def start(cls, sender_id: str, now: datetime) -> 'SessionState':
        return cls(
            sender_id=sender_id,
            step=SessionStep.AWAITING_REPORT_CHOICE,
            started_at=now,
            last_activity_at=now,
        )

    def move_to(self, step: SessionStep, now: datetime) -> 'SessionState':
        return self.model_copy(update={"step": step, "last_activity_at": now})

    def touch(self, now: datetime) -> 'SessionState':
        return self.model_copy(update={"last_activity_at": now})

    def is_expired(self, now: datetime, timeout: timedelta) -> bool:
        return now - self.last_activity_at > timeout


class ReportTarget(str, Enum):
    TODAY = "today"
    WINDOW = "window"


class Transition(BaseModel):
    """
    Result of feeding one line of input to the report flow.

    next_state None ends the flow (the registry drops the entry).
    When report is set the caller must run the report and use its text
    as the reply; otherwise reply is sent as-is.
    """
    model_config = ConfigDict(frozen=True)

    next_state: Optional[SessionState] = None
    reply: Optional[str] = None
    report: Optional[ReportTarget] = None
    window: Optional[DateWindow] = None

    @property
    def ends_session(self) -> bool:
        return self.next_state is None
