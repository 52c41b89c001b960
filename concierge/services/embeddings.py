"""HTTP client for the OpenAI Embeddings API.

Only two outcomes matter to the retriever: a vector, or "unavailable".
Unavailability comes in two flavours, kept apart by the exception type:

* ``EmbeddingQuotaExceeded`` — HTTP 429 or an ``insufficient_quota`` error
  body.  The retriever treats this as permanent for the process lifetime.
* ``EmbeddingUnavailable`` — anything else (timeouts, connection errors,
  other non-2xx responses).  Transient; only the current call degrades.

No retries happen here: a failed call falls back to keyword search.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from concierge.services.metrics import metrics

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "text-embedding-3-small"
DEFAULT_BASE_URL = "https://api.openai.com/v1"
REQUEST_TIMEOUT_SECONDS = 10.0

_QUOTA_CODES = {"insufficient_quota"}


class EmbeddingUnavailable(Exception):
    """Raised when the embedding provider cannot produce a vector."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class EmbeddingQuotaExceeded(EmbeddingUnavailable):
    """Raised when the provider reports a quota or rate-limit error."""


def _is_quota_error(status_code: int, body: Any) -> bool:
    if status_code == 429:
        return True
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return False
    return error.get("code") in _QUOTA_CODES or error.get("type") in _QUOTA_CODES


class OpenAIEmbeddingClient:
    """Embed text via ``POST /embeddings``."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self.model = model
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    def embed(self, text: str) -> list[float]:
        """Embed a single string."""
        return self.embed_many([text])[0]

    def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of strings in one request, preserving input order."""
        if not texts:
            return []

        t0 = time.perf_counter()
        try:
            response = self._client.post(
                "/embeddings", json={"model": self.model, "input": texts},
            )
        except httpx.HTTPError as exc:
            elapsed = (time.perf_counter() - t0) * 1000
            metrics.record_failure(
                "openai", "embeddings", error_type=type(exc).__name__, latency_ms=elapsed,
            )
            raise EmbeddingUnavailable(f"Embedding request failed: {exc}") from exc

        elapsed = (time.perf_counter() - t0) * 1000
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            if _is_quota_error(response.status_code, body):
                metrics.record_failure(
                    "openai", "embeddings", error_type="quota", latency_ms=elapsed,
                )
                raise EmbeddingQuotaExceeded(
                    f"Embedding quota exceeded ({response.status_code})",
                    status_code=response.status_code,
                )
            metrics.record_failure(
                "openai", "embeddings",
                error_type=f"{response.status_code // 100}xx", latency_ms=elapsed,
            )
            raise EmbeddingUnavailable(
                f"Embedding provider error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        data = response.json().get("data", [])
        if len(data) != len(texts):
            raise EmbeddingUnavailable(
                f"Embedding provider returned {len(data)} vectors for {len(texts)} inputs"
            )
        metrics.record_success("openai", "embeddings", latency_ms=elapsed)
        return [item["embedding"] for item in sorted(data, key=lambda item: item["index"])]
