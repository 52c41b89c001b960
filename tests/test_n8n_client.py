"""Tests for the n8n webhook client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx
import pytest

from concierge.services.n8n_client import (
    INITIAL_BACKOFF_SECONDS,
    MAX_RETRIES,
    N8NWebhookClient,
    WebhookError,
)

WEBHOOK_URL = "https://n8n.example.com/webhook/wings9"

# ── Helpers ──────────────────────────────────────────────────────────


def _mock_response(data, status_code: int = 200) -> MagicMock:
    mock = MagicMock()
    mock.status_code = status_code
    mock.json.return_value = data
    mock.text = str(data)
    return mock


MEETING = {
    "name": "Jordan Lee",
    "email": "jordan@example.com",
    "phone": "+14155550100",
    "date": "2030-03-15",
    "time": "14:00",
    "timezone": "PST",
}


# ── Tests: payloads ──────────────────────────────────────────────────


class TestPayloads:
    def test_meeting_request_envelope(self):
        client = N8NWebhookClient(WEBHOOK_URL)
        with patch.object(client._client, "post", return_value=_mock_response({"ok": True})) as mock_post:
            body = client.schedule_meeting(**MEETING, purpose="Tax", session_id="sess-1")

        assert body == {"ok": True}
        url = mock_post.call_args[0][0]
        payload = mock_post.call_args[1]["json"]
        assert url == WEBHOOK_URL
        assert payload["type"] == "meeting_request"
        assert payload["source"] == "ai_chat"
        assert payload["sessionId"] == "sess-1"
        assert payload["purpose"] == "Tax"
        assert payload["timestamp"]
        for key, value in MEETING.items():
            assert payload[key] == value

    def test_contact_form_envelope(self):
        client = N8NWebhookClient(WEBHOOK_URL)
        with patch.object(client._client, "post", return_value=_mock_response({})) as mock_post:
            client.send_contact_form(
                name="Ana", email="ana@example.com", phone="+971567609898", message="Hello",
            )
        payload = mock_post.call_args[1]["json"]
        assert payload["type"] == "contact_form"
        assert payload["source"] == "contact_form"
        assert payload["message"] == "Hello"

    def test_non_json_body_is_tolerated(self):
        client = N8NWebhookClient(WEBHOOK_URL)
        response = _mock_response(None)
        response.json.side_effect = ValueError("not json")
        with patch.object(client._client, "post", return_value=response):
            assert client.schedule_meeting(**MEETING) == {}

    def test_list_body_is_wrapped(self):
        client = N8NWebhookClient(WEBHOOK_URL)
        with patch.object(client._client, "post", return_value=_mock_response([1, 2])):
            assert client.schedule_meeting(**MEETING) == {"data": [1, 2]}


# ── Tests: retry logic ───────────────────────────────────────────────


class TestRetryLogic:
    @patch("concierge.services.n8n_client.time.sleep")
    def test_retries_on_timeout(self, mock_sleep):
        client = N8NWebhookClient(WEBHOOK_URL)
        with patch.object(
            client._client,
            "post",
            side_effect=[httpx.TimeoutException("timeout"), _mock_response({"ok": True})],
        ):
            assert client.schedule_meeting(**MEETING) == {"ok": True}
        mock_sleep.assert_called_once_with(INITIAL_BACKOFF_SECONDS)

    @patch("concierge.services.n8n_client.time.sleep")
    def test_retries_on_500_error(self, mock_sleep):
        client = N8NWebhookClient(WEBHOOK_URL)
        with patch.object(
            client._client,
            "post",
            side_effect=[_mock_response({"error": "boom"}, 502), _mock_response({"ok": True})],
        ):
            assert client.schedule_meeting(**MEETING) == {"ok": True}

    @patch("concierge.services.n8n_client.time.sleep")
    def test_does_not_retry_on_400_error(self, mock_sleep):
        client = N8NWebhookClient(WEBHOOK_URL)
        with patch.object(client._client, "post", return_value=_mock_response({"error": "bad"}, 400)):
            with pytest.raises(WebhookError) as exc_info:
                client.schedule_meeting(**MEETING)
        assert exc_info.value.status_code == 400
        mock_sleep.assert_not_called()

    @patch("concierge.services.n8n_client.time.sleep")
    def test_raises_after_max_retries(self, mock_sleep):
        client = N8NWebhookClient(WEBHOOK_URL)
        with patch.object(
            client._client, "post", side_effect=httpx.ConnectError("refused"),
        ) as mock_post:
            with pytest.raises(WebhookError) as exc_info:
                client.schedule_meeting(**MEETING)
        assert "after" in str(exc_info.value).lower()
        assert mock_post.call_count == MAX_RETRIES
        # No sleep after the final attempt
        assert mock_sleep.call_count == MAX_RETRIES - 1

    @patch("concierge.services.n8n_client.time.sleep")
    def test_backoff_doubles(self, mock_sleep):
        client = N8NWebhookClient(WEBHOOK_URL)
        with patch.object(client._client, "post", side_effect=httpx.TimeoutException("timeout")):
            with pytest.raises(WebhookError):
                client.schedule_meeting(**MEETING)
        delays = [c.args[0] for c in mock_sleep.call_args_list]
        assert delays == [INITIAL_BACKOFF_SECONDS * (2 ** i) for i in range(MAX_RETRIES - 1)]
