"""Shared test fixtures for the Wings9 concierge test suite."""

from __future__ import annotations

import os
from datetime import datetime
from unittest.mock import MagicMock

import pytest


def pytest_configure(config):
    """Set test environment variables BEFORE collection starts.

    This runs before any imports, so config.py won't fail on module load.
    """
    os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key-123")
    os.environ.setdefault("METRICS_ENABLED", "false")


FIXED_NOW = datetime(2026, 3, 10, 9, 30)


class FakeEmbeddingProvider:
    """Deterministic embedding provider.

    Texts listed in ``vectors`` get that vector; anything else gets
    ``default``.  Set ``error`` to make every call raise it.
    """

    def __init__(self, vectors=None, default=None, error=None):
        self.vectors = dict(vectors or {})
        self.default = default if default is not None else [0.0, 0.0, 1.0]
        self.error = error
        self.calls: list[list[str]] = []

    def embed_many(self, texts):
        self.calls.append(list(texts))
        if self.error is not None:
            raise self.error
        return [list(self.vectors.get(text, self.default)) for text in texts]

    @property
    def embedded_texts(self) -> list[str]:
        return [text for call in self.calls for text in call]


@pytest.fixture
def fixed_now():
    """A clock pinned to ``FIXED_NOW``."""
    return lambda: FIXED_NOW


@pytest.fixture
def make_provider():
    """Factory fixture for ``FakeEmbeddingProvider`` instances."""
    return FakeEmbeddingProvider


@pytest.fixture
def fake_scheduler():
    """Scheduling collaborator that accepts every request."""
    scheduler = MagicMock()
    scheduler.schedule_meeting.return_value = MagicMock(success=True, reference="BK-1001")
    return scheduler


@pytest.fixture
def mock_http_response():
    """Factory fixture for creating mock httpx responses."""

    def _make(data, status_code: int = 200):
        mock = MagicMock()
        mock.status_code = status_code
        mock.json.return_value = data
        mock.text = str(data)
        return mock

    return _make
