"""Slot-filling dialogue that books a consultation one field per turn.

Flow (forward only, no step revisited):

    idle ─[booking intent]→ name → email → phone → date → time → timezone
         → purpose (optional) → complete

A rejected answer returns the step's re-prompt and leaves the state
untouched.  On completion the record goes to the scheduling collaborator;
if that fails the visitor is still told the request was noted, with a
manual follow-up notice.  Only logs and metrics tell the two apart.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from concierge.booking import validators
from concierge.booking.state import BookingState, BookingStep
from concierge.services.metrics import metrics
from concierge.sessions import ConversationSession

logger = logging.getLogger(__name__)


START_PROMPT = (
    "I'd be happy to schedule a consultation with Prakash. "
    "May I have your full name?"
)

# Asked once the previous step has been accepted
PROMPTS: dict[BookingStep, str] = {
    BookingStep.EMAIL: "Thank you, {name}. What is the best email address to reach you?",
    BookingStep.PHONE: "Got it. Could you share your mobile number with country code (e.g., +91 1234567890)?",
    BookingStep.DATE: "Which date would suit you? Please use the format YYYY-MM-DD (e.g., 2030-03-15).",
    BookingStep.TIME: "What time works for you? Please use 24-hour HH:MM format (e.g., 14:00).",
    BookingStep.TIMEZONE: "Which timezone are you in? (e.g., IST, GST, EST, PST, GMT)",
    BookingStep.PURPOSE: (
        "Finally, is there anything specific you would like to discuss? "
        "You can type \"skip\" if you prefer not to say."
    ),
}

REPROMPTS: dict[BookingStep, str] = {
    BookingStep.NAME: "I need your name to proceed. Could you please tell me your full name?",
    BookingStep.EMAIL: "That doesn't look like a valid email address. Please provide an email such as name@example.com.",
    BookingStep.PHONE: (
        "I need a valid mobile number to proceed. Please provide your mobile number "
        "with country code (e.g., +91 1234567890)."
    ),
    BookingStep.DATE: (
        "Please provide a future date in the format YYYY-MM-DD (e.g., 2030-03-15)."
    ),
    BookingStep.TIME: "Please provide the time in 24-hour HH:MM format (e.g., 09:30 or 14:00).",
    BookingStep.TIMEZONE: "Please provide a valid timezone (e.g., IST, GST, EST, PST, GMT, UTC).",
}

MANUAL_FOLLOW_UP_NOTICE = (
    "Our scheduling system could not confirm this slot automatically, so a member of "
    "Prakash's team will follow up with you manually to confirm the consultation."
)


class SchedulingCollaborator(Protocol):
    def schedule_meeting(
        self,
        name: str,
        email: str,
        phone: str,
        date: str,
        time: str,
        timezone: str,
        purpose: str | None = None,
    ) -> Any: ...


@dataclass(frozen=True)
class BookingTurn:
    """Outcome of one message; ``reply`` is ``None`` when the engine did not take it."""

    reply: str | None
    state: BookingState | None


class BookingEngine:
    """Drives a visitor through the consultation checklist."""

    def __init__(
        self,
        scheduler: SchedulingCollaborator,
        *,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._scheduler = scheduler
        self._now = now
        self._parsers: dict[BookingStep, Callable[[str], str | None]] = {
            BookingStep.NAME: validators.parse_name,
            BookingStep.EMAIL: validators.parse_email,
            BookingStep.PHONE: validators.parse_phone,
            BookingStep.DATE: lambda message: validators.parse_date(message, now=self._now),
            BookingStep.TIME: validators.parse_time,
            BookingStep.TIMEZONE: validators.parse_timezone,
        }

    def should_handle(self, session: ConversationSession, message: str) -> bool:
        """True when *message* belongs to the booking dialogue.

        A completed booking is kept as a terminal record and is not active,
        so fresh booking intent in the same session starts a new booking.
        """
        if session.has_active_booking:
            return True
        return validators.has_booking_intent(message)

    def advance(self, session: ConversationSession, message: str) -> BookingTurn:
        """Consume one visitor message and return the reply plus the new state.

        Starts a booking when the session has none in progress and the
        message shows booking intent.  Without intent the message is left
        alone: no reply, nothing recorded, the session's booking untouched.
        Otherwise both the message and the reply are recorded in the session
        history, including rejected answers.
        """
        if not session.has_active_booking:
            if not validators.has_booking_intent(message):
                return BookingTurn(reply=None, state=session.booking)
            session.booking = BookingState()
            logger.info("Booking started for session %s", session.session_id)
            reply = START_PROMPT
        elif session.booking.step is BookingStep.PURPOSE:
            reply = self._complete(session, message)
        else:
            reply = self._collect(session.booking, message)

        session.record(message, reply)
        return BookingTurn(reply=reply, state=session.booking)

    # ── Steps ────────────────────────────────────────────────────────

    def _collect(self, state: BookingState, message: str) -> str:
        step = state.step
        value = self._parsers[step](message)
        if value is None:
            logger.debug("Booking step %s rejected input", step.value)
            return REPROMPTS[step]

        setattr(state, step.value, value)
        state.step = step.next()
        logger.debug("Booking step %s accepted, next: %s", step.value, state.step.value)
        return PROMPTS[state.step].format(name=state.name)

    def _complete(self, session: ConversationSession, message: str) -> str:
        state = session.booking
        purpose = validators.parse_purpose(message)
        succeeded, reference = self._schedule(session.session_id, state, purpose)

        # Advance only once the scheduling call has finished
        state.purpose = purpose
        state.step = BookingStep.COMPLETE
        logger.info(
            "Booking complete for session %s (scheduled=%s)", session.session_id, succeeded,
        )

        reply = _summary(state)
        if succeeded:
            if reference:
                reply += f"\n\nYour booking reference is {reference}."
        else:
            reply += f"\n\n{MANUAL_FOLLOW_UP_NOTICE}"
        return reply + "\n\nIs there anything else I can help you with?"

    def _schedule(
        self, session_id: str, state: BookingState, purpose: str | None,
    ) -> tuple[bool, str | None]:
        try:
            result = self._scheduler.schedule_meeting(
                name=state.name,
                email=state.email,
                phone=state.phone,
                date=state.date,
                time=state.time,
                timezone=state.timezone,
                purpose=purpose,
            )
        except Exception:
            logger.exception("Scheduling failed for session %s", session_id)
            metrics.record_event("Booking/ManualFollowUp", reason="exception")
            return False, None

        if not getattr(result, "success", False):
            logger.warning(
                "Scheduling collaborator reported failure for session %s; manual follow-up required",
                session_id,
            )
            metrics.record_event("Booking/ManualFollowUp", reason="rejected")
            return False, None
        return True, getattr(result, "reference", None)


def _summary(state: BookingState) -> str:
    lines = [
        f"Perfect, {state.name}! I've noted your consultation request:",
        f"- Email: {state.email}",
        f"- Mobile: {state.phone}",
        f"- Date: {state.date} at {state.time} ({state.timezone})",
    ]
    if state.purpose:
        lines.append(f"- Purpose: {state.purpose}")
    lines.append("")
    lines.append("Prakash's team will be in touch to confirm the consultation.")
    return "\n".join(lines)
