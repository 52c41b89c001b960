"""LLM answer composer for knowledge questions.

Wraps one or more Anthropic chat models behind a single ``compose`` call.
Models are tried in order; when every one of them fails the visitor still
gets a grounded answer built from the retrieved context (or the fixed
out-of-scope reply when there is none).  ``compose`` never raises.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from concierge.config import (
    ANTHROPIC_API_KEY,
    FALLBACK_MODEL_NAMES,
    LLM_MAX_TOKENS,
    LLM_TEMPERATURE,
    MODEL_NAME,
)
from concierge.prompts import OUT_OF_SCOPE_RESPONSE
from concierge.services.metrics import metrics
from concierge.sessions import Turn

logger = logging.getLogger(__name__)

HISTORY_WINDOW = 10
CONTEXT_SUMMARY_CHARS = 500
CONTEXT_SUMMARY_SUFFIX = "... How may I assist you further?"


def _build_llm(model_name: str) -> BaseChatModel:
    return ChatAnthropic(
        model=model_name,
        api_key=ANTHROPIC_API_KEY,
        temperature=LLM_TEMPERATURE,
        max_tokens=LLM_MAX_TOKENS,
    )


def _to_message(turn: Turn) -> BaseMessage:
    if turn.role == "assistant":
        return AIMessage(content=turn.content)
    return HumanMessage(content=turn.content)


def _text_of(response: BaseMessage) -> str:
    content = response.content
    if isinstance(content, str):
        return content.strip()
    # Anthropic may return a list of content blocks
    parts = [
        block.get("text", "") if isinstance(block, dict) else str(block)
        for block in content
    ]
    return "".join(parts).strip()


def context_fallback(context: str) -> str:
    """Answer without an LLM: a prefix of the retrieved context, or the out-of-scope reply."""
    if not context.strip():
        return OUT_OF_SCOPE_RESPONSE
    return context[:CONTEXT_SUMMARY_CHARS] + CONTEXT_SUMMARY_SUFFIX


class AnswerComposer:
    """Turns retrieved context plus conversation history into a reply."""

    def __init__(
        self,
        model_names: Sequence[str] | None = None,
        *,
        llm_factory: Callable[[str], BaseChatModel] = _build_llm,
    ) -> None:
        if model_names is None:
            model_names = [MODEL_NAME, *FALLBACK_MODEL_NAMES]
        # Keep order, drop duplicates
        self._model_names = list(dict.fromkeys(model_names))
        self._llm_factory = llm_factory
        self._llms: dict[str, BaseChatModel] = {}

    @property
    def model_names(self) -> list[str]:
        return list(self._model_names)

    def compose(
        self,
        system_prompt: str,
        context: str,
        history: Iterable[Turn],
        message: str,
    ) -> str:
        """Return a natural-language answer to *message*.

        *system_prompt* should already carry the retrieved context; *context*
        itself is only used for the no-LLM fallback.
        """
        messages: list[BaseMessage] = [SystemMessage(content=system_prompt)]
        messages.extend(_to_message(turn) for turn in list(history)[-HISTORY_WINDOW:])
        messages.append(HumanMessage(content=message))

        for model_name in self._model_names:
            t0 = time.perf_counter()
            try:
                response = self._llm(model_name).invoke(messages)
                elapsed = (time.perf_counter() - t0) * 1000
            except Exception as exc:
                elapsed = (time.perf_counter() - t0) * 1000
                metrics.record_failure(
                    "anthropic", "compose",
                    error_type=type(exc).__name__, latency_ms=elapsed,
                )
                logger.warning("Model %s failed (%s), trying next", model_name, exc)
                continue

            reply = _text_of(response)
            if not reply:
                logger.warning("Model %s returned an empty reply, trying next", model_name)
                continue
            metrics.record_success("anthropic", "compose", latency_ms=elapsed)
            logger.debug("Composed reply with %s in %.0fms", model_name, elapsed)
            return reply

        logger.error("All %d models failed; answering from retrieved context", len(self._model_names))
        return context_fallback(context)

    def _llm(self, model_name: str) -> BaseChatModel:
        llm = self._llms.get(model_name)
        if llm is None:
            llm = self._llms[model_name] = self._llm_factory(model_name)
        return llm
