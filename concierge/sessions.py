"""Per-visitor conversation sessions and their bounded in-memory store."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field

from concierge.booking.state import BookingState
from concierge.services.cache import BoundedCache

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_MAX_MESSAGES = 20
DEFAULT_MAX_SESSIONS = 1000


@dataclass(frozen=True)
class Turn:
    role: str  # "user" | "assistant"
    content: str


@dataclass
class ConversationSession:
    """One visitor's conversation: recent turns and at most one booking."""

    session_id: str
    history: deque[Turn] = field(
        default_factory=lambda: deque(maxlen=DEFAULT_HISTORY_MAX_MESSAGES),
    )
    booking: BookingState | None = None

    @property
    def has_active_booking(self) -> bool:
        return self.booking is not None and not self.booking.is_complete

    def record(self, user_message: str, reply: str) -> None:
        """Append a user/assistant exchange; the oldest turns fall off."""
        self.history.append(Turn("user", user_message))
        self.history.append(Turn("assistant", reply))


class SessionStore:
    """Bounded session map with least-recently-used eviction.

    Thread-safe; evicting a session forgets its history and any booking in
    progress.
    """

    def __init__(
        self,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        history_max_messages: int = DEFAULT_HISTORY_MAX_MESSAGES,
    ) -> None:
        self._sessions = BoundedCache(max_sessions, promote_on_read=True)
        self._history_max_messages = history_max_messages

    def get_or_create(self, session_id: str) -> ConversationSession:
        return self._sessions.get_or_create(
            session_id,
            lambda: ConversationSession(
                session_id=session_id,
                history=deque(maxlen=self._history_max_messages),
            ),
        )

    def get(self, session_id: str) -> ConversationSession | None:
        return self._sessions.get(session_id)

    def forget(self, session_id: str) -> bool:
        forgotten = self._sessions.invalidate(session_id)
        if forgotten:
            logger.debug("Forgot session %s", session_id)
        return forgotten

    def __len__(self) -> int:
        return self._sessions.entry_count
