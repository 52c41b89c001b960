"""FastAPI server for the Wings9 concierge.

Run with:
    uvicorn concierge.server:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from concierge.agent import build_scheduler, build_webhook_client, create_concierge_agent
from concierge.api.routes import router
from concierge.config import CORS_ORIGINS, SERVER_HOST, SERVER_PORT
from concierge.services.metrics import metrics

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: initialise / tear-down shared resources ────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Start-up: build the scheduling channels and compile the agent once.

    A malformed knowledge base raises here, so the server never starts
    with an incomplete chunk pool.
    """
    logger.info("Compiling concierge agent…")
    webhook = build_webhook_client()
    scheduler = build_scheduler(webhook)
    application.state.webhook = webhook
    application.state.scheduler = scheduler
    application.state.agent = create_concierge_agent(scheduler=scheduler)
    logger.info("Agent ready.")
    yield
    metrics.flush()


# ── FastAPI application ──────────────────────────────────────────────
app = FastAPI(
    title="Wings9 Concierge",
    description=(
        "Executive-assistant chat for Prakash Bhambhani and Wings9: answers "
        "questions from the knowledge base and books consultations."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS (website widget) ───────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request-ID middleware ────────────────────────────────────────────
@app.middleware("http")
async def add_request_id(request: Request, call_next) -> Response:
    """Attach a unique request ID to every request for log correlation.

    The ID is echoed in the ``X-Request-ID`` response header.
    """
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id
    logger.info(
        "[%s] %s %s", request_id, request.method, request.url.path,
    )
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# ── Register routes ──────────────────────────────────────────────────
app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "Wings9 Concierge",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }


# ── CLI entry point ──────────────────────────────────────────────────

if __name__ == "__main__":
    logger.info("Starting Wings9 Concierge API server on %s:%d", SERVER_HOST, SERVER_PORT)
    uvicorn.run(
        "concierge.server:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True,
    )
