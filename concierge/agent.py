"""LangGraph-based concierge agent for Prakash Bhambhani and Wings9.

Architecture:
  The agent is a LangGraph StateGraph with four nodes:

    1. **router**    — looks up the visitor's session and decides whether the
                       message belongs to the booking dialogue
    2. **booking**   — advances the slot-filling booking engine one step
    3. **retrieve**  — hybrid keyword / embedding search over the knowledge base
    4. **compose**   — Anthropic LLM answers from the retrieved context

  Routing:
    router → (booking)   → booking → END
    router → (knowledge) → retrieve → compose → END

  The router is deterministic (keyword intent + session state), so no LLM
  call is spent on classification.  Only knowledge questions reach the LLM.

  Memory:
    Conversation history and booking progress live in an injected
    ``SessionStore`` (bounded, LRU-evicted) rather than a LangGraph
    checkpointer, so booking state survives independently of the graph.
"""

from __future__ import annotations

import logging
import time

from langgraph.graph import END, StateGraph
from typing_extensions import TypedDict

from concierge.booking.engine import BookingEngine
from concierge.booking.state import BookingState
from concierge.composer import AnswerComposer
from concierge.config import (
    CAL_COM_API_KEY,
    CAL_COM_BASE_URL,
    CAL_COM_EVENT_TYPE_ID,
    EMBEDDING_MODEL,
    N8N_WEBHOOK_URL,
    OPENAI_API_KEY,
    OPENAI_BASE_URL,
    QUERY_EMBEDDING_CACHE_SIZE,
    RAG_SIMILARITY_THRESHOLD,
    RAG_TOP_K,
    SESSION_HISTORY_MAX_MESSAGES,
    SESSION_STORE_MAX_SESSIONS,
)
from concierge.knowledge_base import build_chunks
from concierge.prompts import build_system_prompt
from concierge.retrieval.chunks import KnowledgeChunk, build_context
from concierge.retrieval.retriever import KnowledgeRetriever
from concierge.services.calcom_client import CalComClient
from concierge.services.embeddings import OpenAIEmbeddingClient
from concierge.services.metrics import metrics
from concierge.services.n8n_client import N8NWebhookClient
from concierge.services.scheduler import SchedulingService
from concierge.sessions import SessionStore

logger = logging.getLogger(__name__)

ROUTE_BOOKING = "booking"
ROUTE_KNOWLEDGE = "knowledge"


# ── State schema ─────────────────────────────────────────────────────


class ConciergeState(TypedDict, total=False):
    """The state that flows through the graph for a single visitor message.

    ``session_id`` and ``message`` are the inputs.  ``route`` is set by the
    router and read by the conditional edge; ``chunks`` is handed from
    retrieve to compose.  ``reply``, ``booking`` and ``relevant_context``
    are the outputs returned to the caller.
    """

    session_id: str
    message: str
    route: str
    chunks: list[KnowledgeChunk]
    reply: str
    booking: BookingState | None
    relevant_context: bool


# ── Collaborator builders (from config) ─────────────────────────────


def build_webhook_client() -> N8NWebhookClient | None:
    """Build the n8n webhook client, or ``None`` when no URL is configured."""
    if not N8N_WEBHOOK_URL:
        return None
    return N8NWebhookClient(N8N_WEBHOOK_URL)


def build_scheduler(webhook: N8NWebhookClient | None = None) -> SchedulingService:
    """Build the scheduling service from whichever channels are configured."""
    calcom = None
    if CAL_COM_API_KEY and CAL_COM_EVENT_TYPE_ID:
        calcom = CalComClient(CAL_COM_API_KEY, CAL_COM_EVENT_TYPE_ID, base_url=CAL_COM_BASE_URL)
    if webhook is None:
        webhook = build_webhook_client()
    return SchedulingService(calcom=calcom, webhook=webhook)


def build_retriever() -> KnowledgeRetriever:
    """Build the retriever over the static knowledge base.

    Raises ``KnowledgeBaseError`` when the knowledge base is malformed.
    Without ``OPENAI_API_KEY`` retrieval is keyword-only.
    """
    provider = None
    if OPENAI_API_KEY:
        provider = OpenAIEmbeddingClient(
            OPENAI_API_KEY, model=EMBEDDING_MODEL, base_url=OPENAI_BASE_URL,
        )
    else:
        logger.info("OPENAI_API_KEY not set; knowledge retrieval is keyword-only")
    return KnowledgeRetriever(
        build_chunks(),
        provider,
        similarity_threshold=RAG_SIMILARITY_THRESHOLD,
        query_cache_size=QUERY_EMBEDDING_CACHE_SIZE,
    )


# ── Nodes ────────────────────────────────────────────────────────────


def _make_router_node(sessions: SessionStore, engine: BookingEngine):
    """Create the router node.

    A message goes to the booking path when the session has a booking in
    progress, or when it shows booking intent and no booking is active.
    """

    def router_node(state: ConciergeState) -> dict:
        session = sessions.get_or_create(state["session_id"])
        route = ROUTE_BOOKING if engine.should_handle(session, state["message"]) else ROUTE_KNOWLEDGE
        logger.debug("Router sent session %s to %s", state["session_id"], route)
        return {"route": route}

    return router_node


def _make_booking_node(sessions: SessionStore, engine: BookingEngine):
    """Create the booking node that advances the slot-filling dialogue."""

    def booking_node(state: ConciergeState) -> dict:
        session = sessions.get_or_create(state["session_id"])
        turn = engine.advance(session, state["message"])
        return {"reply": turn.reply, "booking": turn.state, "relevant_context": False}

    return booking_node


def _make_retrieve_node(retriever: KnowledgeRetriever, top_k: int):
    """Create the retrieve node that grounds the answer in the knowledge base."""

    def retrieve_node(state: ConciergeState) -> dict:
        t0 = time.perf_counter()
        chunks = retriever.search(state["message"], top_k)
        elapsed = (time.perf_counter() - t0) * 1000
        metrics.record_success("retriever", "search", latency_ms=elapsed)
        logger.debug(
            "Retrieved %d chunks in %.0fms: %s",
            len(chunks), elapsed, [chunk.id for chunk in chunks],
        )
        return {"chunks": chunks, "relevant_context": bool(chunks)}

    return retrieve_node


def _make_compose_node(sessions: SessionStore, composer: AnswerComposer):
    """Create the compose node.

    The composer sees the history as it was before this message; the
    exchange is recorded in the session afterwards.
    """

    def compose_node(state: ConciergeState) -> dict:
        session = sessions.get_or_create(state["session_id"])
        message = state["message"]
        context = build_context(state.get("chunks") or [])
        reply = composer.compose(
            build_system_prompt(context), context, list(session.history), message,
        )
        session.record(message, reply)
        return {"reply": reply, "booking": session.booking}

    return compose_node


# ── Conditional edges ────────────────────────────────────────────────


def route_by_intent(state: ConciergeState) -> str:
    """Route to the booking node or the retrieval path based on the router."""
    if state.get("route") == ROUTE_BOOKING:
        return "booking"
    return "retrieve"


# ── Graph assembly ───────────────────────────────────────────────────


def create_concierge_agent(
    *,
    retriever: KnowledgeRetriever | None = None,
    engine: BookingEngine | None = None,
    composer: AnswerComposer | None = None,
    sessions: SessionStore | None = None,
    scheduler: SchedulingService | None = None,
    top_k: int = RAG_TOP_K,
):
    """Build and compile the concierge LangGraph agent.

    Collaborators not passed in are built from configuration.  Returns a
    compiled graph that can be invoked with:
        graph.invoke({"session_id": "session-123", "message": "..."})
    and returns ``reply``, ``booking`` and ``relevant_context``.
    """
    if retriever is None:
        retriever = build_retriever()
    if engine is None:
        engine = BookingEngine(scheduler or build_scheduler())
    if composer is None:
        composer = AnswerComposer()
    if sessions is None:
        sessions = SessionStore(
            max_sessions=SESSION_STORE_MAX_SESSIONS,
            history_max_messages=SESSION_HISTORY_MAX_MESSAGES,
        )

    graph = StateGraph(ConciergeState)

    graph.add_node("router", _make_router_node(sessions, engine))
    graph.add_node("booking", _make_booking_node(sessions, engine))
    graph.add_node("retrieve", _make_retrieve_node(retriever, top_k))
    graph.add_node("compose", _make_compose_node(sessions, composer))

    graph.set_entry_point("router")
    graph.add_conditional_edges(
        "router",
        route_by_intent,
        {"booking": "booking", "retrieve": "retrieve"},
    )
    graph.add_edge("booking", END)
    graph.add_edge("retrieve", "compose")
    graph.add_edge("compose", END)

    compiled = graph.compile()
    logger.debug(
        "Concierge agent compiled — chunks: %d, embeddings: %s, top_k: %d",
        len(retriever.chunks), "off" if retriever.embeddings_disabled else "on", top_k,
    )
    return compiled
