"""Keyword-based query classification for retrieval tuning."""

from statement_rag.models.enums import ChunkType, QueryType

# Checked in this order; the first family with a hit wins
KEYWORDS: list[tuple[QueryType, list[str]]] = [
    (QueryType.CALCULATION, ["what is", "calculate", "total", "sum", "how much", "net", "what was", "what were"]),
    (QueryType.COMPARISON, ["which", "compare", "more", "less", "higher", "lower", "better", "worse", "greater", "smaller"]),
    (QueryType.LISTING, ["list", "what are", "show me", "all", "top", "bottom", "name", "tell me"]),
    (QueryType.TREND, ["trend", "change", "increase", "decrease", "over time", "pattern", "fluctuation", "variation"]),
]

# Context section order per query type, most useful sections first
PREFERRED_CHUNK_TYPES: dict[QueryType, list[ChunkType]] = {
    QueryType.CALCULATION: [
        ChunkType.ACCOUNT_SUMMARY,
        ChunkType.TRANSACTION_BREAKDOWN,
        ChunkType.MONTHLY_SUMMARY,
        ChunkType.CATEGORY_SUMMARY,
        ChunkType.TRANSACTIONS,
    ],
    QueryType.COMPARISON: [
        ChunkType.MONTHLY_SUMMARY,
        ChunkType.CATEGORY_SUMMARY,
        ChunkType.TRANSACTIONS,
        ChunkType.ACCOUNT_SUMMARY,
    ],
    QueryType.LISTING: [
        ChunkType.TOP_EXPENSES,
        ChunkType.TOP_BENEFICIARIES,
        ChunkType.CATEGORY_SUMMARY,
        ChunkType.TRANSACTIONS,
    ],
    QueryType.TREND: [
        ChunkType.MONTHLY_SUMMARY,
        ChunkType.TRANSACTIONS,
        ChunkType.CATEGORY_SUMMARY,
        ChunkType.ACCOUNT_SUMMARY,
    ],
    QueryType.SPECIFIC: [
        ChunkType.ACCOUNT_SUMMARY,
        ChunkType.TRANSACTIONS,
    ],
}

OPTIMAL_TOP_K = {
    QueryType.CALCULATION: 3,
    QueryType.SPECIFIC: 3,
    QueryType.COMPARISON: 7,
    QueryType.TREND: 7,
    QueryType.LISTING: 5,
}


class QueryClassifier:
    """Classifies a question so retrieval and context assembly can adapt."""

    def classify(self, query: str) -> QueryType:
        """Return the query type; SPECIFIC when no keyword family matches."""
        lowered = query.lower()
        for query_type, keywords in KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return query_type
        return QueryType.SPECIFIC

    def optimal_top_k(self, query_type: QueryType, default_top_k: int) -> int:
        return OPTIMAL_TOP_K.get(query_type, default_top_k)
