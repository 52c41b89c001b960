"""Keyword scoring over knowledge chunks.

Used both as the coarse pre-filter ahead of embedding search and as the
full fallback when embeddings are unavailable.  Score per chunk:

* ``phrase`` if the whole lowercased query appears in the chunk text;
* +1 per occurrence of each query token (tokens shorter than
  ``min_token_length`` are ignored);
* ``name`` if the chunk's name and the query contain one another;
* ``metadata`` for every metadata value that contains the query.

Zero-score chunks are dropped; the rest are sorted by descending score with
ties kept in pool order.
"""

from __future__ import annotations

from dataclasses import dataclass

from concierge.retrieval.chunks import KnowledgeChunk, metadata_text


@dataclass(frozen=True)
class KeywordWeights:
    phrase: int = 10
    name: int = 5
    metadata: int = 3
    min_token_length: int = 3


DEFAULT_WEIGHTS = KeywordWeights()


def score_chunk(
    query: str,
    chunk: KnowledgeChunk,
    weights: KeywordWeights = DEFAULT_WEIGHTS,
) -> int:
    if not query.strip():
        return 0
    query_lower = query.lower()

    text_lower = chunk.text.lower()
    score = 0

    if query_lower in text_lower:
        score += weights.phrase

    for token in query_lower.split():
        if len(token) >= weights.min_token_length:
            score += text_lower.count(token)

    name = chunk.name
    if name:
        name_lower = name.lower()
        if name_lower in query_lower or query_lower in name_lower:
            score += weights.name

    for value in chunk.metadata.values():
        if query_lower in metadata_text(value).lower():
            score += weights.metadata

    return score


def keyword_search(
    query: str,
    chunks: list[KnowledgeChunk],
    top_k: int,
    weights: KeywordWeights = DEFAULT_WEIGHTS,
) -> list[KnowledgeChunk]:
    """Return up to *top_k* chunks with a positive keyword score, best first."""
    if top_k <= 0:
        return []
    scored = [(score_chunk(query, chunk, weights), chunk) for chunk in chunks]
    ranked = sorted(
        (item for item in scored if item[0] > 0),
        key=lambda item: item[0],
        reverse=True,
    )
    return [chunk for _, chunk in ranked[:top_k]]
