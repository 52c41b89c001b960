"""Hybrid keyword / embedding retrieval over the static knowledge chunks.

Search strategy
───────────────
1. If embeddings are disabled (no provider, or the quota breaker tripped),
   return a plain keyword search.
2. Keyword pre-filter to ``3 × top_k`` candidates (the whole pool if the
   pre-filter finds nothing).
3. Embed the query (bounded FIFO cache) and every candidate lacking a
   cached vector (one batched call; chunk vectors are cached for good).
4. Rank candidates by cosine similarity, keeping those above the threshold.
5. Nothing above the threshold, or no query vector → keyword results.

All caches and the breaker live on the instance, so tests can build
isolated retrievers.  Every shared structure is guarded for use from the
server's thread pool.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import Protocol

from concierge.retrieval.chunks import KnowledgeChunk
from concierge.retrieval.keyword import DEFAULT_WEIGHTS, KeywordWeights, keyword_search
from concierge.retrieval.similarity import cosine_similarity
from concierge.services.cache import BoundedCache
from concierge.services.embeddings import EmbeddingQuotaExceeded, EmbeddingUnavailable
from concierge.services.metrics import metrics

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3
DEFAULT_SIMILARITY_THRESHOLD = 0.25
DEFAULT_QUERY_CACHE_SIZE = 100
PREFILTER_FACTOR = 3


class EmbeddingProvider(Protocol):
    def embed_many(self, texts: list[str]) -> list[list[float]]: ...


class KnowledgeRetriever:
    """Return the chunks most relevant to a free-text query."""

    def __init__(
        self,
        chunks: Sequence[KnowledgeChunk],
        provider: EmbeddingProvider | None = None,
        *,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        weights: KeywordWeights = DEFAULT_WEIGHTS,
        query_cache_size: int = DEFAULT_QUERY_CACHE_SIZE,
    ) -> None:
        self._chunks = tuple(chunks)
        self._provider = provider
        self._threshold = similarity_threshold
        self._weights = weights
        self._query_cache = BoundedCache(query_cache_size, promote_on_read=False)
        self._chunk_vectors: dict[str, list[float]] = {}
        self._chunk_lock = threading.Lock()
        # One-way latch: once set, embeddings stay off until restart
        self._quota_exceeded = threading.Event()

    # ── Introspection ────────────────────────────────────────────────

    @property
    def chunks(self) -> tuple[KnowledgeChunk, ...]:
        return self._chunks

    @property
    def embeddings_disabled(self) -> bool:
        return self._provider is None or self._quota_exceeded.is_set()

    def chunk_embedding(self, chunk_id: str) -> list[float] | None:
        """Return the cached embedding for *chunk_id*, if one was computed."""
        with self._chunk_lock:
            return self._chunk_vectors.get(chunk_id)

    # ── Search ───────────────────────────────────────────────────────

    def search(
        self,
        query: str,
        top_k: int = DEFAULT_TOP_K,
        chunks: Sequence[KnowledgeChunk] | None = None,
    ) -> list[KnowledgeChunk]:
        """Return up to *top_k* relevant chunks, best first.

        *chunks* defaults to the retriever's own pool.  An empty list is a
        normal "nothing relevant" answer, not an error.
        """
        pool = list(self._chunks if chunks is None else chunks)
        if top_k <= 0 or not query.strip():
            return []

        if self.embeddings_disabled:
            return keyword_search(query, pool, top_k, self._weights)

        prefiltered = keyword_search(query, pool, top_k * PREFILTER_FACTOR, self._weights)
        candidates = prefiltered or pool

        query_vector = self._query_embedding(query)
        if query_vector is None:
            return self._keyword_fallback(query, pool, prefiltered, top_k, "no query embedding")

        chunk_vectors = self._chunk_embeddings(candidates)
        scored: list[tuple[float, KnowledgeChunk]] = []
        for chunk in candidates:
            vector = chunk_vectors.get(chunk.id)
            if vector is None:
                continue
            similarity = cosine_similarity(query_vector, vector)
            if similarity > self._threshold:
                scored.append((similarity, chunk))

        if not scored:
            return self._keyword_fallback(
                query, pool, prefiltered, top_k, "no chunk above similarity threshold",
            )

        scored.sort(key=lambda item: item[0], reverse=True)
        logger.debug(
            "Embedding search returned %d/%d candidates (best=%.3f)",
            min(top_k, len(scored)), len(candidates), scored[0][0],
        )
        return [chunk for _, chunk in scored[:top_k]]

    # ── Internal ─────────────────────────────────────────────────────

    def _keyword_fallback(
        self,
        query: str,
        pool: list[KnowledgeChunk],
        prefiltered: list[KnowledgeChunk],
        top_k: int,
        reason: str,
    ) -> list[KnowledgeChunk]:
        logger.info("Falling back to keyword search: %s", reason)
        metrics.record_event("Retrieval/KeywordFallback")
        if prefiltered:
            return prefiltered[:top_k]
        return keyword_search(query, pool, top_k, self._weights)

    def _query_embedding(self, query: str) -> list[float] | None:
        cached = self._query_cache.get(query)
        if cached is not None:
            return cached
        vectors = self._embed([query])
        if not vectors:
            return None
        self._query_cache.put(query, vectors[0])
        return vectors[0]

    def _chunk_embeddings(self, candidates: list[KnowledgeChunk]) -> dict[str, list[float]]:
        with self._chunk_lock:
            missing = [c for c in candidates if c.id not in self._chunk_vectors]

        if missing and not self.embeddings_disabled:
            vectors = self._embed([c.text for c in missing])
            if vectors:
                with self._chunk_lock:
                    for chunk, vector in zip(missing, vectors):
                        # First successful write wins; never recomputed
                        self._chunk_vectors.setdefault(chunk.id, vector)

        with self._chunk_lock:
            return {
                c.id: self._chunk_vectors[c.id]
                for c in candidates if c.id in self._chunk_vectors
            }

    def _embed(self, texts: list[str]) -> list[list[float]] | None:
        if self.embeddings_disabled:
            return None
        try:
            vectors = self._provider.embed_many(texts)
        except EmbeddingQuotaExceeded as exc:
            self._trip_breaker(exc)
            return None
        except EmbeddingUnavailable as exc:
            logger.warning("Embedding provider unavailable, using keyword search: %s", exc)
            return None
        except Exception:
            logger.exception("Unexpected embedding provider error, using keyword search")
            return None

        if len(vectors) != len(texts) or any(not v for v in vectors):
            logger.warning(
                "Embedding provider returned %d usable vectors for %d texts",
                sum(1 for v in vectors if v), len(texts),
            )
            return None
        return vectors

    def _trip_breaker(self, exc: Exception) -> None:
        if self._quota_exceeded.is_set():
            return
        self._quota_exceeded.set()
        metrics.record_event("Retrieval/EmbeddingBreakerTripped")
        logger.warning(
            "Embedding quota exceeded (%s); embeddings disabled for the rest of this process",
            exc,
        )
