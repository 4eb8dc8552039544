"""
Session Registry

Owns the per-sender session map. It is the only place sessions are
stored, looked up or removed.

Concurrency: every message from one sender is handled inside
`async with registry.lock(sender_id)`, so reads and writes of that
sender's entry never interleave. Different senders use different locks
and run in parallel. A lock object is dropped once nobody holds or
waits for it, so the lock table does not grow with every sender ever seen.

Expiry: a session idle for longer than the timeout is treated as absent
and removed the next time it is looked up (or by purge_expired()).
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncIterator, Callable, Optional

from src.models.session import SessionState


class SessionRegistry:
    """In-memory map of sender id -> SessionState with per-sender locks."""

    def __init__(
        self,
        timeout: timedelta = timedelta(minutes=10),
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._timeout = timeout
        self._clock = clock
        self._sessions: dict[str, SessionState] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @property
    def timeout(self) -> timedelta:
        return self._timeout

    def now(self) -> datetime:
        return self._clock()

    @asynccontextmanager
    async def lock(self, sender_id: str) -> AsyncIterator[None]:
        """Serialize handling of one sender's messages."""
        lock = self._locks.get(sender_id)
        if lock is None:
            lock = self._locks[sender_id] = asyncio.Lock()
        self._lock_users[sender_id] = self._lock_users.get(sender_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[sender_id] -= 1
            if self._lock_users[sender_id] == 0:
                del self._lock_users[sender_id]
                del self._locks[sender_id]

    def expire_if_idle(self, sender_id: str, now: Optional[datetime] = None) -> Optional[SessionState]:
        """
        Drop the sender's session if it has been idle too long.

        Returns:
            The expired session, or None if nothing was removed
        """
        state = self._sessions.get(sender_id)
        if state is None:
            return None
        if state.is_expired(now or self.now(), self._timeout):
            del self._sessions[sender_id]
            return state
        return None

    def get(self, sender_id: str) -> Optional[SessionState]:
        return self._sessions.get(sender_id)

    def apply(self, sender_id: str, next_state: Optional[SessionState]) -> None:
        """Store the state a transition produced; None removes the entry."""
        if next_state is None:
            self._sessions.pop(sender_id, None)
        else:
            if next_state.sender_id != sender_id:
                raise ValueError(
                    f"Session for {next_state.sender_id} cannot be stored under {sender_id}"
                )
            self._sessions[sender_id] = next_state

    def remove(self, sender_id: str) -> Optional[SessionState]:
        return self._sessions.pop(sender_id, None)

    def purge_expired(self, now: Optional[datetime] = None) -> list[SessionState]:
        """
        Remove every idle session.

        Senders whose lock is currently held are skipped; their own message
        handling will deal with expiry.
        """
        now = now or self.now()
        expired = [
            state for sender_id, state in self._sessions.items()
            if sender_id not in self._lock_users and state.is_expired(now, self._timeout)
        ]
        for state in expired:
            del self._sessions[state.sender_id]
        return expired

    def __contains__(self, sender_id: str) -> bool:
        return sender_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
