"""Tests for conversation sessions and the session store."""

from __future__ import annotations

from concierge.booking.state import BookingState, BookingStep
from concierge.sessions import ConversationSession, SessionStore, Turn


class TestConversationSession:
    def test_record_appends_user_then_assistant(self):
        session = ConversationSession("s1")
        session.record("Hi", "Hello, how may I assist you?")
        assert list(session.history) == [
            Turn("user", "Hi"),
            Turn("assistant", "Hello, how may I assist you?"),
        ]

    def test_history_keeps_latest_twenty_messages(self):
        session = ConversationSession("s1")
        for i in range(15):
            session.record(f"q{i}", f"a{i}")
        assert len(session.history) == 20
        assert session.history[0] == Turn("user", "q5")
        assert session.history[-1] == Turn("assistant", "a14")

    def test_active_booking(self):
        session = ConversationSession("s1")
        assert session.has_active_booking is False
        session.booking = BookingState()
        assert session.has_active_booking is True
        session.booking.step = BookingStep.COMPLETE
        assert session.has_active_booking is False


class TestSessionStore:
    def test_get_or_create_returns_same_session(self):
        store = SessionStore()
        first = store.get_or_create("abc")
        first.record("hi", "hello")
        assert store.get_or_create("abc") is first
        assert len(store) == 1

    def test_get_missing_returns_none(self):
        assert SessionStore().get("nope") is None

    def test_history_limit_applies_to_new_sessions(self):
        store = SessionStore(history_max_messages=4)
        session = store.get_or_create("abc")
        for i in range(5):
            session.record(f"q{i}", f"a{i}")
        assert len(session.history) == 4

    def test_evicts_least_recently_used(self):
        store = SessionStore(max_sessions=2)
        store.get_or_create("a")
        store.get_or_create("b")
        store.get("a")
        store.get_or_create("c")
        assert store.get("b") is None
        assert store.get("a") is not None
        assert store.get("c") is not None

    def test_eviction_forgets_booking(self):
        store = SessionStore(max_sessions=1)
        store.get_or_create("a").booking = BookingState(name="Jo")
        store.get_or_create("b")
        assert store.get_or_create("a").booking is None

    def test_forget(self):
        store = SessionStore()
        store.get_or_create("a")
        assert store.forget("a") is True
        assert store.forget("a") is False
        assert len(store) == 0
