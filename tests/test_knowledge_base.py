"""Tests for the static knowledge base and chunk builder."""

from __future__ import annotations

import copy

import pytest

from concierge.knowledge_base import KNOWLEDGE_BASE, KnowledgeBaseError, build_chunks
from concierge.retrieval.chunks import ChunkCategory
from concierge.retrieval.retriever import KnowledgeRetriever


class TestBuildChunks:
    def test_ids_are_unique(self):
        chunks = build_chunks()
        ids = [chunk.id for chunk in chunks]
        assert len(ids) == len(set(ids))

    def test_is_deterministic(self):
        assert [c.id for c in build_chunks()] == [c.id for c in build_chunks()]
        assert [c.text for c in build_chunks()] == [c.text for c in build_chunks()]

    def test_expected_sections_present(self):
        ids = {chunk.id for chunk in build_chunks()}
        assert {"principal-profile", "firm-overview", "firm-objective", "contact-info"} <= ids
        assert "service-accounting-tax-services" in ids
        assert "business-unit-0" in ids

    def test_one_chunk_per_service_and_business_unit(self):
        chunks = build_chunks()
        services = [c for c in chunks if c.category is ChunkCategory.SERVICE]
        units = [c for c in chunks if c.category is ChunkCategory.BUSINESS_UNIT]
        assert len(services) == len(KNOWLEDGE_BASE["services"])
        assert len(units) == len(KNOWLEDGE_BASE["business_units"])

    def test_services_carry_name_metadata(self):
        chunks = {c.id: c for c in build_chunks()}
        assert chunks["service-prime-realty"].name == "Prime Realty"
        assert chunks["principal-profile"].name == "Prakash Bhambhani"

    def test_contact_chunk_mentions_phone(self):
        contact = next(c for c in build_chunks() if c.id == "contact-info")
        assert contact.category is ChunkCategory.CONTACT_INFO
        assert KNOWLEDGE_BASE["contact"]["phone"] in contact.text

    def test_metadata_is_read_only(self):
        chunk = build_chunks()[0]
        with pytest.raises(TypeError):
            chunk.metadata["name"] = "Someone else"


class TestMalformedKnowledgeBase:
    def test_missing_section_raises(self):
        kb = copy.deepcopy(KNOWLEDGE_BASE)
        del kb["contact"]
        with pytest.raises(KnowledgeBaseError, match="contact"):
            build_chunks(kb)

    def test_missing_service_name_raises(self):
        kb = copy.deepcopy(KNOWLEDGE_BASE)
        del kb["services"][0]["name"]
        with pytest.raises(KnowledgeBaseError, match=r"services\[0\]\.name"):
            build_chunks(kb)

    def test_empty_required_field_raises(self):
        kb = copy.deepcopy(KNOWLEDGE_BASE)
        kb["principal"]["name"] = ""
        with pytest.raises(KnowledgeBaseError, match="empty"):
            build_chunks(kb)

    def test_duplicate_service_id_raises(self):
        kb = copy.deepcopy(KNOWLEDGE_BASE)
        kb["services"].append(copy.deepcopy(kb["services"][0]))
        with pytest.raises(KnowledgeBaseError, match="Duplicate"):
            build_chunks(kb)

    def test_non_mapping_raises(self):
        with pytest.raises(KnowledgeBaseError):
            build_chunks(["not", "a", "mapping"])


class TestKeywordRetrievalOverKnowledgeBase:
    """Keyword-only retrieval over the real chunks answers the obvious questions."""

    def test_golden_visa_question(self):
        retriever = KnowledgeRetriever(build_chunks())
        results = retriever.search("golden visa", 5)
        assert results
        assert "golden visa" in results[0].text.lower()

    def test_contact_question(self):
        retriever = KnowledgeRetriever(build_chunks())
        ids = [c.id for c in retriever.search("whatsapp", 5)]
        assert "contact-info" in ids
