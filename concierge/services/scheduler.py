"""Scheduling collaborator used by the booking engine and the voice widget.

Tries Cal.com first when it is configured and falls back to the n8n
webhook.  Provider errors never propagate: the caller gets a
``ScheduleResult`` with ``success=False`` and decides how to tell the
visitor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from concierge.services.calcom_client import CalComClient, CalComError
from concierge.services.n8n_client import N8NWebhookClient, WebhookError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleResult:
    success: bool
    reference: str | None = None
    channel: str | None = None  # "calcom" | "n8n"


class SchedulingService:
    """Hands a completed consultation request to the first channel that accepts it."""

    def __init__(
        self,
        *,
        calcom: CalComClient | None = None,
        webhook: N8NWebhookClient | None = None,
    ) -> None:
        self._calcom = calcom
        self._webhook = webhook
        if calcom is None and webhook is None:
            logger.warning("No scheduling channel configured; bookings need manual follow-up")

    def schedule_meeting(
        self,
        name: str,
        email: str,
        phone: str,
        date: str,
        time: str,
        timezone: str,
        purpose: str | None = None,
    ) -> ScheduleResult:
        if self._calcom is not None:
            try:
                booking = self._calcom.create_booking(
                    name=name, email=email, date=date, time=time,
                    timezone=timezone, notes=_notes(phone, purpose),
                )
                reference = booking.get("uid") or booking.get("id")
                logger.info("Consultation booked via Cal.com for %s", email)
                return ScheduleResult(
                    success=True,
                    reference=str(reference) if reference is not None else None,
                    channel="calcom",
                )
            except CalComError as exc:
                logger.warning("Cal.com booking failed, falling back to n8n: %s", exc)

        if self._webhook is not None:
            try:
                body = self._webhook.schedule_meeting(
                    name=name, email=email, phone=phone, date=date, time=time,
                    timezone=timezone, purpose=purpose,
                )
                reference = body.get("reference") or body.get("id")
                logger.info("Consultation request sent to n8n for %s", email)
                return ScheduleResult(
                    success=True,
                    reference=str(reference) if reference is not None else None,
                    channel="n8n",
                )
            except WebhookError as exc:
                logger.error("n8n meeting request failed: %s", exc)

        return ScheduleResult(success=False)


def _notes(phone: str, purpose: str | None) -> str:
    notes = f"Phone: {phone}"
    if purpose:
        notes += f"\nPurpose: {purpose}"
    return notes
