"""Query-time retrieval: embed, search, sort, threshold-filter."""

import logging

from statement_rag.embedding.client import EmbeddingClient
from statement_rag.errors import EmbeddingError, RetrievalError, StorageError
from statement_rag.models.chunk import Chunk, RetrievedChunk
from statement_rag.retrieval.query_enhancer import QueryEnhancer
from statement_rag.vectorstore.base import VectorStore

logger = logging.getLogger(__name__)


def apply_threshold(results: list[RetrievedChunk], threshold: float) -> list[RetrievedChunk]:
    """Drop results scoring below threshold, always keeping the best one.

    Expects results sorted by score, highest first. Never returns an empty
    list for non-empty input.
    """
    kept = [r for r in results if r.score >= threshold]
    if kept or not results:
        return kept
    logger.warning(
        "All %d chunks below similarity threshold %.2f, keeping top chunk %s (%.3f)",
        len(results),
        threshold,
        results[0].chunk.id,
        results[0].score,
    )
    return results[:1]


class Retriever:
    """Finds the chunks of one statement most relevant to a question.

    Errors are raised as RetrievalError tagged with the failing stage; the
    retriever never decides on a fallback itself.
    """

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        vector_store: VectorStore,
        top_k: int = 5,
        similarity_threshold: float = 0.3,
        query_enhancer: QueryEnhancer | None = None,
    ):
        self.embedding_client = embedding_client
        self.vector_store = vector_store
        self.top_k = top_k
        self.similarity_threshold = similarity_threshold
        self.query_enhancer = query_enhancer

    def retrieve(self, query: str, source_id: str, top_k: int | None = None) -> list[Chunk]:
        return [r.chunk for r in self.retrieve_with_scores(query, source_id, top_k=top_k)]

    def retrieve_with_scores(
        self,
        query: str,
        source_id: str,
        top_k: int | None = None,
        history: list[str] | None = None,
    ) -> list[RetrievedChunk]:
        """Return (chunk, score) pairs for source_id, most relevant first.

        Args:
            query: The user question.
            source_id: Statement to search within.
            top_k: Overrides the configured top-k for this call.
            history: Earlier messages of the conversation, oldest first. Only
                used when a query enhancer is configured.

        Raises:
            ValueError: If the query is empty.
            RetrievalError: If embedding the query or searching fails.
        """
        if not query or not query.strip():
            raise ValueError("query must not be empty")

        search_text = query
        if self.query_enhancer is not None:
            search_text = self.query_enhancer.enhance_with_history(query, history or [])

        try:
            query_embedding = self.embedding_client.generate_embedding(search_text)
        except EmbeddingError as e:
            raise RetrievalError(f"Failed to generate query embedding: {e}", stage="embedding") from e

        try:
            results = self.vector_store.search(query_embedding, top_k or self.top_k, source_id)
        except StorageError as e:
            raise RetrievalError(f"Failed to search vector store: {e}", stage="search") from e

        # The store already sorts; re-asserted here because callers rely on it
        results = sorted(results, key=lambda r: r.score, reverse=True)
        filtered = apply_threshold(results, self.similarity_threshold)
        logger.info(
            "Retrieved %d chunks for %s (%d above threshold)",
            len(filtered),
            source_id,
            sum(1 for r in results if r.score >= self.similarity_threshold),
        )
        return filtered
