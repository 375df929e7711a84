"""RAG manager: the orchestration and idempotency boundary.

Wires together: chunker → embedding client → vector store → retriever.
"""

import logging
from typing import Any

from statement_rag.embedding.client import EmbeddingClient
from statement_rag.embedding.factory import create_embedding_provider
from statement_rag.errors import ChunkingError
from statement_rag.ingestion.chunker import StatementChunker
from statement_rag.models.chunk import Chunk, RetrievedChunk
from statement_rag.models.results import IndexResult
from statement_rag.retrieval.context import build_context
from statement_rag.retrieval.query_classifier import QueryClassifier
from statement_rag.retrieval.query_enhancer import QueryEnhancer
from statement_rag.retrieval.retriever import Retriever
from statement_rag.utils.locks import ReadWriteLock
from statement_rag.vectorstore.base import VectorStore
from statement_rag.vectorstore.factory import create_vector_store

logger = logging.getLogger(__name__)


class StatementRAGManager:
    """Entry point for indexing statements and retrieving their chunks.

    Build one per service and share it between request threads. Index and
    delete take the exclusive lock; retrieval, has_chunks and count take the
    shared lock, so concurrent questions never block each other.

    Lock discipline: public methods never call each other while holding a
    lock. An exclusive path is only entered after any shared lock taken in
    the same call has been released (the lock is not reentrant).
    """

    def __init__(
        self,
        settings=None,
        *,
        chunker: StatementChunker | None = None,
        embedding_client: EmbeddingClient | None = None,
        vector_store: VectorStore | None = None,
    ):
        if settings is None:
            from config.settings import get_settings
            settings = get_settings()
        self.settings = settings

        self.chunker = chunker or StatementChunker.from_settings(settings)
        self.embedding_client = embedding_client or EmbeddingClient(
            create_embedding_provider(settings),
            max_concurrency=settings.rag_embedding_concurrency,
        )
        self.vector_store = vector_store or create_vector_store(settings)
        self.classifier = QueryClassifier()
        self.retriever = Retriever(
            self.embedding_client,
            self.vector_store,
            top_k=settings.rag_top_k,
            similarity_threshold=settings.rag_similarity_threshold,
            query_enhancer=QueryEnhancer() if settings.rag_query_expansion else None,
        )
        self._lock = ReadWriteLock()
        logger.info("RAG manager ready (backend=%s)", self.backend)

    @property
    def backend(self) -> str:
        return self.vector_store.backend_name

    def has_chunks(self, source_id: str) -> bool:
        with self._lock.read_locked():
            return self.vector_store.has_chunks(source_id)

    def index_statement_data(self, statement_data: Any, source_id: str) -> IndexResult:
        """Chunk, embed and store a statement unless it is already indexed.

        Cheap to call on every request: a statement whose chunks already
        exist is skipped without any embedding or storage work.

        Raises:
            ChunkingError: If the statement yields no chunks.
            EmbeddingError: If every chunk failed to embed.
            StorageError: If the store rejects the batch.
        """
        # Shared lock is released before the exclusive one is requested
        if self.has_chunks(source_id):
            logger.info("Using existing chunks for source %s", source_id)
            return IndexResult(source_id=source_id, skipped=True)

        with self._lock.write_locked():
            # Another thread may have indexed it while we waited
            if self.vector_store.has_chunks(source_id):
                logger.info("Chunks for source %s were indexed concurrently", source_id)
                return IndexResult(source_id=source_id, skipped=True)
            return self._run_pipeline(statement_data, source_id)

    def reindex_statement_data(self, statement_data: Any, source_id: str) -> IndexResult:
        """Replace a source's chunks. Use when the statement behind it changed."""
        with self._lock.write_locked():
            removed = self.vector_store.delete_by_source_id(source_id)
            if removed:
                logger.info("Deleted %d old chunks for source %s", removed, source_id)
            return self._run_pipeline(statement_data, source_id)

    def _run_pipeline(self, statement_data: Any, source_id: str) -> IndexResult:
        # Caller holds the exclusive lock
        logger.info("Chunking statement data for source %s", source_id)
        chunks: list[Chunk] = self.chunker.chunk_statement_data(statement_data, source_id)
        if not chunks:
            raise ChunkingError(f"No chunks created from statement data for {source_id}")
        logger.info("Created %d chunks", len(chunks))

        embedded = self.embedding_client.embed_chunks(chunks)
        stored = self.vector_store.store_batch(embedded.chunks)

        logger.info(
            "Indexed source %s: %d chunks stored, %d dropped",
            source_id,
            stored,
            embedded.dropped,
        )
        return IndexResult(
            source_id=source_id,
            chunks_created=len(chunks),
            chunks_stored=stored,
            chunks_dropped=embedded.dropped,
        )

    def retrieve_relevant_chunks(self, query: str, source_id: str) -> list[Chunk]:
        with self._lock.read_locked():
            return self.retriever.retrieve(query, source_id)

    def retrieve_relevant_chunks_with_scores(self, query: str, source_id: str) -> list[RetrievedChunk]:
        with self._lock.read_locked():
            return self.retriever.retrieve_with_scores(query, source_id)

    def retrieve_context(self, query: str, source_id: str, history: list[str] | None = None) -> str:
        """Retrieve chunks for a question and assemble the LLM context block.

        ``history`` holds earlier messages of the conversation; with query
        expansion enabled its salient terms help follow-up questions.
        """
        query_type = self.classifier.classify(query)
        top_k = None
        if self.settings.rag_adaptive_top_k:
            top_k = self.classifier.optimal_top_k(query_type, self.settings.rag_top_k)
        with self._lock.read_locked():
            results = self.retriever.retrieve_with_scores(query, source_id, top_k=top_k, history=history)
        return build_context(results, query_type)

    def delete_statement_data(self, source_id: str) -> int:
        with self._lock.write_locked():
            return self.vector_store.delete_by_source_id(source_id)

    def count(self) -> int:
        with self._lock.read_locked():
            return self.vector_store.count()

    def close(self) -> None:
        with self._lock.write_locked():
            self.vector_store.close()
