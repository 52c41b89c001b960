"""Wings9 Concierge — an executive-assistant chat service for Prakash Bhambhani and Wings9.

Architecture Overview
=====================

The concierge is a **LangGraph** state machine with two paths:

1. **Knowledge path** — ``retrieve`` runs a hybrid keyword / embedding
   search over a static knowledge base, then ``compose`` asks an Anthropic
   model to answer from the retrieved context.

2. **Booking path** — a deterministic slot-filling dialogue collects name,
   email, phone, date, time, timezone and an optional purpose, one field
   per turn, then hands the record to a scheduling collaborator.

Routing: router → booking → END, or router → retrieve → compose → END.

Key Design Decisions
--------------------
- **Retrieval**: keyword scoring pre-filters candidates, OpenAI embeddings
  rank them by cosine similarity.  A quota error trips a one-way breaker
  and retrieval stays keyword-only until restart.
- **Booking**: no LLM in the loop, so the dialogue is testable and never
  skips a field.  Scheduling failures are logged and counted, and the
  visitor is told a member of the team will follow up.
- **Scheduling**: Cal.com when configured, n8n webhook as fallback.  The
  webhook client retries timeouts and 5xx with exponential backoff.
- **Memory**: a bounded, LRU-evicted session store keeps recent history
  and booking progress per session.
- **Dual Interface**: FastAPI server (production) + CLI chat loop (development).

Package Structure
-----------------
- ``concierge/agent.py`` — LangGraph StateGraph definition
- ``concierge/config.py`` — Centralized configuration from environment variables
- ``concierge/knowledge_base.py`` — Static knowledge base and chunk builder
- ``concierge/retrieval/`` — Keyword scoring, cosine similarity, hybrid retriever
- ``concierge/booking/`` — Booking state, field validators, dialogue engine
- ``concierge/sessions.py`` — Conversation sessions and their store
- ``concierge/composer.py`` / ``concierge/prompts.py`` — LLM answer composition
- ``concierge/services/`` — External API clients (OpenAI, n8n, Cal.com), cache, metrics
- ``concierge/server.py`` / ``concierge/api/`` — FastAPI application, routes, schemas
- ``concierge/main.py`` — CLI chat interface
"""
