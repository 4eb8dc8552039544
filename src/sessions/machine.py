"""
Report Flow State Machine

The report conversation:

    (no session) --!report--> AWAITING_REPORT_CHOICE
    AWAITING_REPORT_CHOICE --"1"--> today's report, session ends
    AWAITING_REPORT_CHOICE --"2"--> AWAITING_DATE_RANGE
    AWAITING_REPORT_CHOICE --other--> stays, "invalid choice"
    AWAITING_DATE_RANGE --"DD-MM-YYYY DD-MM-YYYY"--> range report, session ends
    AWAITING_DATE_RANGE --malformed/inverted--> stays, format hint

start_flow() and advance() are pure: they take the current state and the
input and return a Transition. Whoever holds the session map stores
Transition.next_state as-is, so ending a session is just returning None.
"""

from datetime import datetime

from src.commands.parser import (
    InvalidChoiceError,
    InvalidDateFormatError,
    parse_date_range,
    parse_report_choice,
)
from src.formatting.replies import DATE_RANGE_PROMPT, REPORT_OPTIONS_MESSAGE
from src.models.command import ReportChoiceToday
from src.models.session import ReportTarget, SessionState, SessionStep, Transition


def start_flow(sender_id: str, now: datetime) -> Transition:
    """Open the report flow; the only way into AWAITING_REPORT_CHOICE."""
    return Transition(
        next_state=SessionState.start(sender_id, now),
        reply=REPORT_OPTIONS_MESSAGE,
    )


def advance(state: SessionState, text: str, now: datetime) -> Transition:
    """Feed one line of input to an active session."""
    if state.step == SessionStep.AWAITING_REPORT_CHOICE:
        try:
            choice = parse_report_choice(text)
        except InvalidChoiceError as e:
            return Transition(next_state=state.touch(now), reply=e.hint)

        if isinstance(choice, ReportChoiceToday):
            return Transition(next_state=None, report=ReportTarget.TODAY)
        return Transition(
            next_state=state.move_to(SessionStep.AWAITING_DATE_RANGE, now),
            reply=DATE_RANGE_PROMPT,
        )

    if state.step == SessionStep.AWAITING_DATE_RANGE:
        try:
            date_range = parse_date_range(text)
        except InvalidDateFormatError as e:
            return Transition(next_state=state.touch(now), reply=e.hint)

        return Transition(
            next_state=None,
            report=ReportTarget.WINDOW,
            window=date_range.to_window(),
        )

    raise ValueError(f"Unhandled session step: {state.step}")
