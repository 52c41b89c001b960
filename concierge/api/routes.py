"""FastAPI route definitions for the Wings9 concierge API."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Request

from concierge.api.schemas import (
    ChatRequest,
    ChatResponse,
    ContactRequest,
    ContactResponse,
    HealthResponse,
    ScheduleMeetingRequest,
    ScheduleMeetingResponse,
)
from concierge.booking import validators
from concierge.services.n8n_client import WebhookError

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_state(request: Request, name: str):
    """Retrieve a collaborator built during the FastAPI lifespan (see ``server.py``)."""
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(
            status_code=503,
            detail="The concierge is still starting up. Please try again in a moment.",
        )
    return value


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=400, detail=detail)


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse()


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, http_request: Request):
    """Send a message to the concierge and get a response.

    The session_id keys the conversation history and any booking in
    progress.  ``agent.invoke()`` blocks on the embedding, LLM and
    scheduling calls, so it runs in the default thread pool.
    """
    agent = _get_state(http_request, "agent")
    request_id = getattr(http_request.state, "request_id", "?")

    try:
        result = await asyncio.to_thread(
            agent.invoke,
            {"session_id": request.session_id, "message": request.message},
        )
    except Exception as e:
        # Full traceback stays server-side
        logger.exception("[%s] Error processing chat request", request_id)
        raise HTTPException(
            status_code=500,
            detail="An internal error occurred. Please try again.",
        ) from e

    reply = result.get("reply")
    if not reply:
        logger.error("[%s] Agent returned no reply", request_id)
        raise HTTPException(status_code=500, detail="The concierge produced no response.")

    booking = result.get("booking")
    return ChatResponse(
        reply=reply,
        session_id=request.session_id,
        booking=booking.to_dict() if booking is not None else None,
        relevant_context=bool(result.get("relevant_context")),
    )


@router.post("/schedule-meeting", response_model=ScheduleMeetingResponse)
async def schedule_meeting(request: ScheduleMeetingRequest, http_request: Request):
    """Book a consultation in one request (used by the voice widget).

    Fields go through the same validators as the chat booking dialogue.
    """
    scheduler = _get_state(http_request, "scheduler")
    request_id = getattr(http_request.state, "request_id", "?")

    name = validators.parse_name(request.name)
    if name is None:
        raise _bad_request("Name is required")
    email = validators.parse_email(request.email)
    if email is None:
        raise _bad_request("Invalid email address")
    phone = validators.parse_phone(request.phone)
    if phone is None:
        raise _bad_request("Invalid phone number")
    date = validators.parse_date(request.date, now=datetime.now)
    if date is None:
        raise _bad_request("Date must be a future date in YYYY-MM-DD format")
    time = validators.parse_time(request.time)
    if time is None:
        raise _bad_request("Time must be in 24-hour HH:MM format")
    timezone = validators.parse_timezone(request.timezone or "IST")
    if timezone is None:
        raise _bad_request("Invalid timezone")
    purpose = validators.parse_purpose(request.purpose or "")

    logger.info("[%s] Scheduling meeting via voice widget for %s", request_id, email)
    result = await asyncio.to_thread(
        scheduler.schedule_meeting,
        name=name, email=email, phone=phone, date=date, time=time,
        timezone=timezone, purpose=purpose,
    )
    if not result.success:
        logger.error("[%s] No scheduling channel accepted the meeting request", request_id)
        raise HTTPException(status_code=500, detail="Failed to schedule meeting")

    return ScheduleMeetingResponse(
        message="Meeting scheduled successfully", reference=result.reference,
    )


@router.post("/contact", response_model=ContactResponse)
async def contact(request: ContactRequest, http_request: Request):
    """Relay a contact-form submission to n8n.

    Delivery failures are logged only: the visitor is always thanked once
    the fields are valid.
    """
    request_id = getattr(http_request.state, "request_id", "?")

    email = validators.parse_email(request.email)
    if email is None:
        raise _bad_request("Invalid email address")
    phone = validators.parse_phone(request.phone)
    if phone is None:
        raise _bad_request("Invalid phone number")

    webhook = getattr(http_request.app.state, "webhook", None)
    if webhook is None:
        logger.warning("[%s] N8N_WEBHOOK_URL not configured; contact form not relayed", request_id)
    else:
        try:
            await asyncio.to_thread(
                webhook.send_contact_form,
                name=request.name.strip(), email=email, phone=phone,
                message=request.message.strip(),
            )
            logger.info("[%s] Contact form relayed to n8n", request_id)
        except WebhookError:
            logger.exception("[%s] Failed to relay contact form to n8n", request_id)

    return ContactResponse(message="Thank you for your message! We will get back to you soon.")
