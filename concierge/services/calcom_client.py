"""HTTP client for the Cal.com bookings API (v1).

Cal.com API docs: https://cal.com/docs/api-reference/v1
Authentication is a Bearer API key.  One call, no retries: the scheduling
service falls back to the n8n webhook when Cal.com refuses a booking.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from time import perf_counter
from typing import Any

import httpx

from concierge.services.metrics import metrics

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.cal.com"
REQUEST_TIMEOUT_SECONDS = 15.0
MEETING_DURATION = timedelta(minutes=30)

# Abbreviations visitors type → IANA names Cal.com understands
TIMEZONE_ALIASES: dict[str, str] = {
    "IST": "Asia/Kolkata",
    "GST": "Asia/Dubai",
    "GMT": "Europe/London",
    "BST": "Europe/London",
    "WET": "Europe/Lisbon",
    "CET": "Europe/Paris",
    "EET": "Europe/Athens",
    "EST": "America/New_York",
    "EDT": "America/New_York",
    "CST": "America/Chicago",
    "CDT": "America/Chicago",
    "MST": "America/Denver",
    "MDT": "America/Denver",
    "PST": "America/Los_Angeles",
    "PDT": "America/Los_Angeles",
    "JST": "Asia/Tokyo",
    "AEST": "Australia/Sydney",
    "AEDT": "Australia/Sydney",
    "ACST": "Australia/Adelaide",
    "ACDT": "Australia/Adelaide",
    "AWST": "Australia/Perth",
    "NZST": "Pacific/Auckland",
    "NZDT": "Pacific/Auckland",
    "UTC": "UTC",
}


class CalComError(Exception):
    """Raised when Cal.com rejects or cannot process a booking."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


def to_iana_timezone(value: str) -> str:
    """Map a timezone abbreviation to an IANA name (``UTC`` when unknown)."""
    if "/" in value:
        return value
    return TIMEZONE_ALIASES.get(value.strip().upper(), "UTC")


class CalComClient:
    """Creates bookings against a single Cal.com event type."""

    def __init__(
        self,
        api_key: str,
        event_type_id: int | str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self._event_type_id = int(event_type_id)
        self._client = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    def create_booking(
        self,
        *,
        name: str,
        email: str,
        date: str,
        time: str,
        timezone: str,
        notes: str | None = None,
    ) -> dict[str, Any]:
        """Book a 30-minute slot starting at *date* *time* in *timezone*.

        Returns the booking resource from the Cal.com API.
        """
        try:
            start = datetime.fromisoformat(f"{date}T{time}")
        except ValueError as exc:
            raise CalComError(f"Invalid start time {date} {time}: {exc}") from exc
        end = start + MEETING_DURATION

        payload = {
            "eventTypeId": self._event_type_id,
            "start": start.isoformat(),
            "end": end.isoformat(),
            "responses": {"name": name, "email": email},
            "timeZone": to_iana_timezone(timezone),
            "language": "en",
            "metadata": {"source": "ai_chat", "notes": notes or ""},
        }

        t0 = perf_counter()
        try:
            response = self._client.post("/v1/bookings", json=payload)
        except httpx.HTTPError as exc:
            elapsed = (perf_counter() - t0) * 1000
            metrics.record_failure(
                "calcom", "POST /v1/bookings", error_type=type(exc).__name__, latency_ms=elapsed,
            )
            raise CalComError(f"Cal.com request failed: {exc}") from exc

        elapsed = (perf_counter() - t0) * 1000
        if response.status_code >= 400:
            metrics.record_failure(
                "calcom", "POST /v1/bookings",
                error_type=f"{response.status_code // 100}xx", latency_ms=elapsed,
            )
            raise CalComError(
                f"Cal.com booking error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            booking = response.json()
        except ValueError:
            booking = None
        if not isinstance(booking, dict):
            metrics.record_failure(
                "calcom", "POST /v1/bookings", error_type="InvalidBody", latency_ms=elapsed,
            )
            raise CalComError(
                f"Cal.com returned an unreadable booking body: {response.text[:200]}",
                status_code=response.status_code,
            )

        metrics.record_success("calcom", "POST /v1/bookings", latency_ms=elapsed)
        return booking
