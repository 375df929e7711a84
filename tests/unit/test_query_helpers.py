"""Unit tests for query classification, expansion and context assembly."""

import pytest

from statement_rag.models.chunk import Chunk, RetrievedChunk
from statement_rag.models.enums import ChunkType, QueryType
from statement_rag.retrieval.context import (
    MAX_CHUNK_CHARS,
    TRUNCATION_MARKER,
    build_context,
    order_chunk_types,
    section_title,
)
from statement_rag.retrieval.query_classifier import PREFERRED_CHUNK_TYPES, QueryClassifier
from statement_rag.retrieval.query_enhancer import MAX_EXTRA_TERMS, QueryEnhancer


class TestQueryClassifier:
    @pytest.mark.parametrize("query,expected", [
        ("What is my total expense?", QueryType.CALCULATION),
        ("How much did I spend on food", QueryType.CALCULATION),
        ("Which month had higher spending", QueryType.COMPARISON),
        ("List my top merchants", QueryType.LISTING),
        ("How has spending changed over time", QueryType.TREND),
        ("Did I pay Landlord in January", QueryType.SPECIFIC),
    ])
    def test_classify(self, query, expected):
        assert QueryClassifier().classify(query) == expected

    def test_calculation_wins_over_listing(self):
        assert QueryClassifier().classify("show me the total") == QueryType.CALCULATION

    def test_optimal_top_k(self):
        classifier = QueryClassifier()
        assert classifier.optimal_top_k(QueryType.CALCULATION, 5) == 3
        assert classifier.optimal_top_k(QueryType.TREND, 5) == 7
        assert classifier.optimal_top_k(QueryType.LISTING, 9) == 5


class TestQueryEnhancer:
    def test_no_match_returns_query_unchanged(self):
        assert QueryEnhancer().enhance("did I pay Landlord") == "did I pay Landlord"

    def test_appends_synonyms(self):
        enhanced = QueryEnhancer().enhance("total expense")
        assert enhanced.startswith("total expense ")
        assert "total spending" in enhanced

    def test_caps_extra_terms(self):
        enhancer = QueryEnhancer()
        query = "income expense balance merchant"
        enhanced = enhancer.enhance(query)
        extra = enhanced[len(query):]
        synonyms = ["salary", "credit", "deposit", "inflow", "earnings", "spending"]
        assert sum(1 for s in synonyms if f" {s}" in extra) == MAX_EXTRA_TERMS

    def test_skips_terms_already_present(self):
        enhanced = QueryEnhancer().enhance("income salary")
        assert enhanced.count("salary") == 1

    def test_history_adds_salient_terms(self):
        enhanced = QueryEnhancer().enhance_with_history(
            "and the month before?",
            ["old message", "I spent ₹4,500 at Swiggy during January", "January groceries were high"],
        )
        assert enhanced.endswith("₹4,500 swiggy during")
        assert "message" not in enhanced

    def test_history_empty(self):
        assert QueryEnhancer().enhance_with_history("did I pay rent", []) == "did I pay rent"

    def test_extract_important_terms(self):
        terms = QueryEnhancer().extract_important_terms("The salary of 50,000 was credited, the salary")
        assert terms == ["salary", "50,000", "credited"]


def retrieved(chunk_id, chunk_type, score, content=None):
    chunk = Chunk(
        id=chunk_id,
        source_id="s",
        content=content or f"{chunk_id} content",
        metadata={"type": chunk_type} if chunk_type else {},
    )
    return RetrievedChunk(chunk=chunk, score=score)


class TestBuildContext:
    def test_structure(self):
        context = build_context([retrieved("a", "account_summary", 0.82)], QueryType.CALCULATION)
        assert context.startswith("=== BANK STATEMENT CONTEXT ===\n")
        assert "--- Account Summary ---\n[1] Relevance: 82.0%\na content\n" in context
        assert context.endswith("=== END OF CONTEXT ===\n")

    def test_every_chunk_appears_once(self):
        results = [
            retrieved("t1", "transactions", 0.6),
            retrieved("s1", "account_summary", 0.5),
            retrieved("t2", "transactions", 0.4),
            retrieved("x1", None, 0.3),
        ]
        context = build_context(results, QueryType.SPECIFIC)
        for name in ("t1", "s1", "t2", "x1"):
            assert context.count(f"{name} content") == 1
        assert "[4] Relevance" in context
        assert "--- Information ---" in context

    def test_preferred_types_come_first(self):
        results = [
            retrieved("t1", "transactions", 0.9),
            retrieved("m1", "monthly_summary", 0.4),
        ]
        context = build_context(results, QueryType.TREND)
        assert context.index("--- Monthly Summary ---") < context.index("--- Transactions ---")

    def test_long_chunks_are_truncated(self):
        context = build_context([retrieved("a", "transactions", 0.5, content="x" * (MAX_CHUNK_CHARS + 50))])
        assert TRUNCATION_MARKER in context
        assert "x" * (MAX_CHUNK_CHARS + 1) not in context

    def test_empty(self):
        context = build_context([])
        assert "BANK STATEMENT CONTEXT" in context
        assert "Relevance" not in context


class TestContextHelpers:
    def test_section_title(self):
        assert section_title("top_beneficiaries") == "Top Beneficiaries"
        assert section_title("custom_notes") == "Custom Notes"

    def test_order_by_mean_score_when_no_preference(self):
        grouped = {
            "top_expenses": [retrieved("e1", "top_expenses", 0.2)],
            "category_summary": [retrieved("c1", "category_summary", 0.7)],
        }
        assert order_chunk_types(grouped, QueryType.SPECIFIC) == ["category_summary", "top_expenses"]

    @pytest.mark.parametrize("query_type", list(QueryType))
    def test_preferred_order_follows_classifier_table(self, query_type):
        grouped = {t.value: [retrieved(t.value, t.value, 0.5)] for t in ChunkType}
        preferred = [t.value for t in PREFERRED_CHUNK_TYPES[query_type]]
        assert order_chunk_types(grouped, query_type)[:len(preferred)] == preferred
