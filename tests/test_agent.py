"""Tests for the concierge graph routing.

Covers:
  - Router decisions (booking intent, active booking, knowledge questions)
  - Retrieve and compose nodes
  - End-to-end graph runs with a mocked composer and scheduler
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from concierge.agent import (
    ConciergeState,
    _make_compose_node,
    _make_retrieve_node,
    _make_router_node,
    create_concierge_agent,
    route_by_intent,
)
from concierge.booking.engine import START_PROMPT, BookingEngine
from concierge.booking.state import BookingState, BookingStep
from concierge.knowledge_base import build_chunks
from concierge.retrieval.retriever import KnowledgeRetriever
from concierge.sessions import SessionStore

# ── Helpers ──────────────────────────────────────────────────────────


def _make_mock_composer(reply: str = "Wings9 is a multi-domain professional services firm."):
    composer = MagicMock()
    composer.compose.return_value = reply
    return composer


@pytest.fixture
def sessions():
    return SessionStore()


@pytest.fixture
def engine(fake_scheduler, fixed_now):
    return BookingEngine(fake_scheduler, now=fixed_now)


@pytest.fixture
def retriever():
    return KnowledgeRetriever(build_chunks())


@pytest.fixture
def agent(retriever, engine, sessions):
    return create_concierge_agent(
        retriever=retriever, engine=engine, composer=_make_mock_composer(), sessions=sessions,
    )


# ── TestRouter ───────────────────────────────────────────────────────


class TestRouter:
    def test_booking_intent_routes_to_booking(self, sessions, engine):
        router = _make_router_node(sessions, engine)
        state: ConciergeState = {"session_id": "s1", "message": "Can I book a consultation?"}
        assert router(state) == {"route": "booking"}

    def test_question_routes_to_knowledge(self, sessions, engine):
        router = _make_router_node(sessions, engine)
        state: ConciergeState = {"session_id": "s1", "message": "What does Prime Realty do?"}
        assert router(state) == {"route": "knowledge"}

    def test_active_booking_captures_every_message(self, sessions, engine):
        sessions.get_or_create("s1").booking = BookingState(step=BookingStep.EMAIL, name="Jo")
        router = _make_router_node(sessions, engine)
        state: ConciergeState = {"session_id": "s1", "message": "What is Wings9?"}
        assert router(state) == {"route": "booking"}

    def test_router_creates_session(self, sessions, engine):
        _make_router_node(sessions, engine)({"session_id": "new", "message": "hi"})
        assert sessions.get("new") is not None


class TestRouteByIntent:
    def test_booking(self):
        assert route_by_intent({"route": "booking"}) == "booking"

    def test_knowledge(self):
        assert route_by_intent({"route": "knowledge"}) == "retrieve"

    def test_defaults_to_retrieve(self):
        assert route_by_intent({}) == "retrieve"


# ── TestKnowledgeNodes ───────────────────────────────────────────────


class TestKnowledgeNodes:
    def test_retrieve_flags_relevant_context(self, retriever):
        node = _make_retrieve_node(retriever, 5)
        result = node({"session_id": "s1", "message": "golden visa"})
        assert result["chunks"]
        assert result["relevant_context"] is True

    def test_retrieve_without_matches(self, retriever):
        node = _make_retrieve_node(retriever, 5)
        result = node({"session_id": "s1", "message": "zxqv"})
        assert result == {"chunks": [], "relevant_context": False}

    def test_compose_passes_context_and_prior_history(self, sessions, retriever):
        session = sessions.get_or_create("s1")
        session.record("Hello", "Good day. How may I assist you?")
        composer = _make_mock_composer("Prime Realty handles property investment.")
        chunks = retriever.search("prime realty", 2)

        result = _make_compose_node(sessions, composer)(
            {"session_id": "s1", "message": "Tell me about Prime Realty", "chunks": chunks},
        )

        system_prompt, context, history, message = composer.compose.call_args[0]
        assert "[SERVICE]" in context
        assert context in system_prompt
        assert [t.content for t in history] == ["Hello", "Good day. How may I assist you?"]
        assert message == "Tell me about Prime Realty"
        assert result["reply"] == "Prime Realty handles property investment."
        assert session.history[-1].content == "Prime Realty handles property investment."
        assert len(session.history) == 4


# ── TestGraph ────────────────────────────────────────────────────────


class TestGraph:
    def test_knowledge_question_uses_composer(self, agent, sessions):
        result = agent.invoke({"session_id": "s1", "message": "What is Wings9?"})
        assert result["reply"] == "Wings9 is a multi-domain professional services firm."
        assert result["booking"] is None
        assert len(sessions.get("s1").history) == 2

    def test_booking_flow_through_graph(self, agent, fake_scheduler):
        first = agent.invoke({"session_id": "s2", "message": "I'd like to schedule a consultation"})
        assert first["reply"] == START_PROMPT
        assert first["booking"].step is BookingStep.NAME
        assert first["relevant_context"] is False

        for message in [
            "Jordan Lee", "jordan@example.com", "+1 415 555 0100",
            "2030-03-15", "14:00", "PST", "skip",
        ]:
            result = agent.invoke({"session_id": "s2", "message": message})

        assert result["booking"].step is BookingStep.COMPLETE
        fake_scheduler.schedule_meeting.assert_called_once()

        # Booking done: questions go back to the knowledge path
        after = agent.invoke({"session_id": "s2", "message": "What is Wings9?"})
        assert after["reply"] == "Wings9 is a multi-domain professional services firm."
        assert after["booking"].step is BookingStep.COMPLETE

    def test_sessions_are_isolated(self, agent):
        agent.invoke({"session_id": "a", "message": "book a call"})
        other = agent.invoke({"session_id": "b", "message": "Jordan Lee"})
        assert other["booking"] is None

    def test_knowledge_question_mid_booking_is_treated_as_an_answer(self, agent):
        agent.invoke({"session_id": "s3", "message": "book a call"})
        result = agent.invoke({"session_id": "s3", "message": "What is Wings9?"})
        # A name of two or more characters is accepted verbatim
        assert result["booking"].step is BookingStep.EMAIL
