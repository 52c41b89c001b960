"""HTTP client for the n8n automation webhook with retry logic.

Every event is POSTed as JSON to a single webhook URL; the n8n workflow
branches on the ``type`` field.  Timeouts, connection errors and 5xx
responses are retried with exponential backoff; 4xx responses are not.
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

import httpx

from concierge.services.metrics import metrics

logger = logging.getLogger(__name__)

# ── Retry configuration ─────────────────────────────────────────────
MAX_RETRIES = 3
INITIAL_BACKOFF_SECONDS = 1.0
REQUEST_TIMEOUT_SECONDS = 15.0

SOURCE_CHAT = "ai_chat"
SOURCE_CONTACT_FORM = "contact_form"


class WebhookError(Exception):
    """Raised when a webhook delivery fails after all retries."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class N8NWebhookClient:
    """Delivers meeting requests and contact-form submissions to n8n."""

    def __init__(self, webhook_url: str, *, timeout: float = REQUEST_TIMEOUT_SECONDS):
        self._webhook_url = webhook_url
        self._client = httpx.Client(
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )

    # ── Internal helpers ─────────────────────────────────────────────

    def _post(self, event_type: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST one event, retrying transient failures."""
        last_error: Exception | None = None
        for attempt in range(1, MAX_RETRIES + 1):
            t0 = time.perf_counter()
            try:
                response = self._client.post(self._webhook_url, json=payload)
                elapsed = (time.perf_counter() - t0) * 1000
                if response.status_code >= 400:
                    metrics.record_failure(
                        "n8n", event_type,
                        error_type=f"{response.status_code // 100}xx", latency_ms=elapsed,
                    )
                    raise WebhookError(
                        f"Webhook error {response.status_code}: {response.text}",
                        status_code=response.status_code,
                    )
                metrics.record_success("n8n", event_type, latency_ms=elapsed)
                try:
                    body = response.json()
                except ValueError:
                    body = {}
                return body if isinstance(body, dict) else {"data": body}

            except (httpx.TimeoutException, httpx.ConnectError) as exc:
                last_error = exc
                metrics.record_failure("n8n", event_type, error_type=type(exc).__name__)
                logger.warning(
                    "n8n webhook attempt %d/%d failed (%s). Retrying in %.1fs…",
                    attempt, MAX_RETRIES, type(exc).__name__,
                    INITIAL_BACKOFF_SECONDS * (2 ** (attempt - 1)),
                )
            except WebhookError as exc:
                if exc.status_code and exc.status_code >= 500:
                    last_error = exc
                    logger.warning(
                        "n8n webhook server error on attempt %d/%d. Retrying…",
                        attempt, MAX_RETRIES,
                    )
                else:
                    raise  # 4xx errors are not retried

            if attempt < MAX_RETRIES:
                time.sleep(INITIAL_BACKOFF_SECONDS * (2 ** (attempt - 1)))

        raise WebhookError(
            f"n8n webhook delivery failed after {MAX_RETRIES} attempts: {last_error}"
        )

    @staticmethod
    def _envelope(event_type: str, source: str, **fields: Any) -> dict[str, Any]:
        return {
            "type": event_type,
            **fields,
            "timestamp": datetime.now(UTC).isoformat(),
            "source": source,
        }

    # ── Public API ───────────────────────────────────────────────────

    def schedule_meeting(
        self,
        *,
        name: str,
        email: str,
        phone: str,
        date: str,
        time: str,
        timezone: str,
        purpose: str | None = None,
        session_id: str | None = None,
    ) -> dict[str, Any]:
        """Send a consultation request to the scheduling workflow."""
        payload = self._envelope(
            "meeting_request", SOURCE_CHAT,
            name=name, email=email, phone=phone, date=date, time=time,
            timezone=timezone, purpose=purpose, sessionId=session_id,
        )
        return self._post("meeting_request", payload)

    def send_contact_form(
        self, *, name: str, email: str, phone: str, message: str,
    ) -> dict[str, Any]:
        """Relay a website contact-form submission."""
        payload = self._envelope(
            "contact_form", SOURCE_CONTACT_FORM,
            name=name, email=email, phone=phone, message=message,
        )
        return self._post("contact_form", payload)
