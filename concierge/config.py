"""Centralized configuration for the Wings9 concierge.

Secret resolution order (per variable):
  1. Environment variable / ``.env`` file  (local dev)
  2. AWS SSM Parameter Store SecureString  (when ``AWS_EXECUTION_ENV`` is set)

The SSM paths follow the convention ``/wings9-concierge/<VARIABLE_NAME>``.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# ── Feature flag: running on AWS? ────────────────────────────────────
_ON_AWS = bool(os.getenv("AWS_EXECUTION_ENV"))


# ── Secret resolution ────────────────────────────────────────────────

def _get_ssm_parameter(name: str) -> str | None:
    """Fetch a SecureString from SSM Parameter Store.

    Returns ``None`` if the parameter does not exist or boto3 is
    unavailable.  Errors are logged but never raised so that local-dev
    fallback still works.
    """
    try:
        import boto3  # noqa: PLC0415 — lazy import to avoid boto3 dep in tests

        ssm = boto3.client("ssm")
        resp = ssm.get_parameter(Name=f"/wings9-concierge/{name}", WithDecryption=True)
        return resp["Parameter"]["Value"]
    except Exception:
        logger.debug("SSM lookup for %s failed (expected locally)", name)
        return None


def _optional_env(name: str) -> str | None:
    """Return a config value from env-var or SSM, or ``None`` if unset."""
    value = os.getenv(name)
    if value and not value.startswith("your_"):
        return value

    if _ON_AWS:
        return _get_ssm_parameter(name)
    return None


def _require_env(name: str) -> str:
    """Return a config value from env-var or SSM, or raise a clear error."""
    value = _optional_env(name)
    if value:
        return value

    raise OSError(
        f"Missing required configuration: {name}. "
        f"Set it in .env (local) or SSM Parameter Store /wings9-concierge/{name} (AWS)."
    )


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid integer for {name}: {raw!r}") from None


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid float for {name}: {raw!r}") from None


def _list_env(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


# ── LLM answer composer ─────────────────────────────────────────────
ANTHROPIC_API_KEY: str = _require_env("ANTHROPIC_API_KEY")
MODEL_NAME: str = os.getenv("MODEL_NAME", "claude-haiku-4-5")
# Tried in order when the primary model is unavailable
FALLBACK_MODEL_NAMES: list[str] = _list_env(
    "FALLBACK_MODEL_NAMES", "claude-sonnet-4-5,claude-3-5-haiku-latest",
)
LLM_TEMPERATURE: float = _float_env("LLM_TEMPERATURE", "0.7")
LLM_MAX_TOKENS: int = _int_env("LLM_MAX_TOKENS", "300")

# ── Embeddings (optional: keyword-only retrieval without a key) ─────
OPENAI_API_KEY: str | None = _optional_env("OPENAI_API_KEY")
OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
EMBEDDING_MODEL: str = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")

# ── Retrieval ───────────────────────────────────────────────────────
RAG_TOP_K: int = _int_env("RAG_TOP_K", "5")
RAG_SIMILARITY_THRESHOLD: float = _float_env("RAG_SIMILARITY_THRESHOLD", "0.25")
QUERY_EMBEDDING_CACHE_SIZE: int = _int_env("QUERY_EMBEDDING_CACHE_SIZE", "100")

# ── Sessions ────────────────────────────────────────────────────────
SESSION_STORE_MAX_SESSIONS: int = _int_env("SESSION_STORE_MAX_SESSIONS", "1000")
SESSION_HISTORY_MAX_MESSAGES: int = _int_env("SESSION_HISTORY_MAX_MESSAGES", "20")

# ── Scheduling collaborators ────────────────────────────────────────
N8N_WEBHOOK_URL: str | None = _optional_env("N8N_WEBHOOK_URL")
CAL_COM_API_KEY: str | None = _optional_env("CAL_COM_API_KEY")
CAL_COM_EVENT_TYPE_ID: str | None = os.getenv("CAL_COM_EVENT_TYPE_ID")
CAL_COM_BASE_URL: str = "https://api.cal.com"

# ── Server ──────────────────────────────────────────────────────────
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = _int_env("SERVER_PORT", "8000")
CORS_ORIGINS: list[str] = _list_env(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173",
)

if not 0.0 <= RAG_SIMILARITY_THRESHOLD <= 1.0:
    raise ValueError(
        f"RAG_SIMILARITY_THRESHOLD must be between 0.0 and 1.0, got {RAG_SIMILARITY_THRESHOLD}"
    )
if RAG_TOP_K < 1:
    raise ValueError(f"RAG_TOP_K must be >= 1, got {RAG_TOP_K}")
