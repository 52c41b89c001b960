"""Tests for keyword scoring and keyword search."""

from __future__ import annotations

from concierge.retrieval.chunks import ChunkCategory, KnowledgeChunk, build_context
from concierge.retrieval.keyword import KeywordWeights, keyword_search, score_chunk


def _chunk(chunk_id: str, text: str, **metadata) -> KnowledgeChunk:
    return KnowledgeChunk(id=chunk_id, text=text, category=ChunkCategory.SERVICE, metadata=metadata)


SETUP = _chunk(
    "setup", "Wings9 offers business setup services in Dubai free zones.",
    name="Venture Launch Hub",
)
TAX = _chunk(
    "tax", "VAT registration, corporate tax filing and accounting for SMEs.",
    name="Accounting and Tax Services", related_services=["Legal and Embassy Guidance"],
)
RENTAL = _chunk("rental", "Rental dispute resolution for landlords and tenants.")
POOL = [SETUP, TAX, RENTAL]


class TestScoreChunk:
    def test_exact_phrase_earns_phrase_weight_plus_tokens(self):
        # phrase 10 + "business" 1 + "setup" 1
        assert score_chunk("business setup", SETUP) == 12

    def test_short_tokens_are_ignored(self):
        chunk = _chunk("c", "an in at on")
        assert score_chunk("xx in", chunk) == 0

    def test_token_counts_every_occurrence(self):
        chunk = _chunk("c", "Tax advice. Tax filing. Tax planning.")
        assert score_chunk("tax", chunk) == 10 + 3

    def test_name_bonus_when_query_contains_name(self):
        chunk = _chunk("c", "Something unrelated.", name="Prime Realty")
        assert score_chunk("tell me about prime realty please", chunk) == 5

    def test_name_bonus_when_name_contains_query(self):
        chunk = _chunk("c", "Something unrelated.", name="Prime Realty")
        assert score_chunk("realty", chunk) == 5 + 3  # name bonus + name metadata value

    def test_metadata_bonus_per_matching_value(self):
        assert score_chunk("embassy guidance", TAX) == 3

    def test_case_insensitive(self):
        assert score_chunk("BUSINESS SETUP", SETUP) == score_chunk("business setup", SETUP)

    def test_blank_query_scores_zero(self):
        assert score_chunk("   ", SETUP) == 0

    def test_phrase_match_uses_query_as_typed(self):
        # Padding is part of the phrase: "zones. " never appears in the text
        assert score_chunk("free zones. ", SETUP) == 2
        assert score_chunk("setup ", SETUP) == 10 + 1

    def test_custom_weights(self):
        weights = KeywordWeights(phrase=100, name=0, metadata=0, min_token_length=3)
        assert score_chunk("business setup", SETUP, weights) == 102

    def test_appending_query_strictly_increases_score(self):
        for query in ("dubai", "rental dispute", "what is wings9", "zzz"):
            base = _chunk("a", "Wings9 helps with rental matters in Dubai.")
            boosted = _chunk("b", base.text + " " + query)
            assert score_chunk(query, boosted) > score_chunk(query, base)


class TestKeywordSearch:
    def test_returns_best_first(self):
        results = keyword_search("tax", POOL, 3)
        assert results[0] is TAX

    def test_drops_zero_score_chunks(self):
        results = keyword_search("rental", POOL, 3)
        assert results == [RENTAL]

    def test_respects_top_k(self):
        results = keyword_search("and", [TAX, RENTAL, SETUP], 1)
        assert len(results) <= 1

    def test_non_positive_top_k_returns_empty(self):
        assert keyword_search("tax", POOL, 0) == []

    def test_no_match_returns_empty(self):
        assert keyword_search("helicopter", POOL, 3) == []

    def test_ties_keep_pool_order(self):
        a = _chunk("a", "dubai")
        b = _chunk("b", "dubai")
        assert keyword_search("dubai", [a, b], 2) == [a, b]
        assert keyword_search("dubai", [b, a], 2) == [b, a]


class TestBuildContext:
    def test_labels_chunks_with_category(self):
        context = build_context([SETUP, RENTAL])
        assert context.startswith("[SERVICE] Wings9 offers business setup")
        assert "\n\n[SERVICE] Rental dispute" in context

    def test_empty(self):
        assert build_context([]) == ""
