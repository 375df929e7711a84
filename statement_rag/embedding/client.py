"""Embedding client with bounded-concurrency batch generation.

Wraps an EmbeddingProvider. Batch calls fan out over a small worker pool,
and a client-wide semaphore caps in-flight requests across every batch
running through the same client.
"""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor

from statement_rag.embedding.provider import EmbeddingProvider
from statement_rag.errors import EmbeddingError
from statement_rag.models.chunk import Chunk
from statement_rag.models.results import BatchEmbeddingResult, EmbedChunksResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 5


class EmbeddingClient:
    """Converts chunk text or query strings into embedding vectors."""

    def __init__(self, provider: EmbeddingProvider, max_concurrency: int = DEFAULT_MAX_CONCURRENCY):
        if max_concurrency <= 0:
            raise ValueError("max_concurrency must be > 0")
        self.provider = provider
        self.max_concurrency = max_concurrency
        self._tickets = threading.BoundedSemaphore(max_concurrency)

    def generate_embedding(self, text: str) -> list[float]:
        """Embed a single text with one backend call.

        Raises:
            EmbeddingError: On empty input, transport failure, timeout or a
                malformed response.
        """
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")
        try:
            embedding = self.provider.embed(text)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding provider failed: {e}") from e
        if not embedding:
            raise EmbeddingError("Embedding provider returned an empty vector")
        if not all(math.isfinite(v) for v in embedding):
            raise EmbeddingError("Embedding provider returned NaN or infinite values")
        return embedding

    def generate_embeddings_batch(self, texts: list[str]) -> BatchEmbeddingResult:
        """Embed many texts with at most ``max_concurrency`` requests in flight.

        One item's failure never cancels the others. The result keeps the
        input order: ``embeddings[i]`` / ``errors[i]`` belong to ``texts[i]``.

        Raises:
            EmbeddingError: Only when every item failed.
        """
        embeddings: list[list[float] | None] = [None] * len(texts)
        errors: list[EmbeddingError | None] = [None] * len(texts)
        if not texts:
            return BatchEmbeddingResult(embeddings=embeddings, errors=errors)

        def work(index: int, text: str) -> None:
            with self._tickets:
                try:
                    embeddings[index] = self.generate_embedding(text)
                except EmbeddingError as e:
                    logger.warning("Failed to generate embedding %d/%d: %s", index + 1, len(texts), e)
                    errors[index] = e

        workers = min(self.max_concurrency, len(texts))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="embed") as executor:
            futures = [executor.submit(work, i, text) for i, text in enumerate(texts)]
            for future in futures:
                future.result()

        result = BatchEmbeddingResult(embeddings=embeddings, errors=errors)
        if result.success_count == 0:
            raise EmbeddingError(f"Failed to generate any of {len(texts)} embeddings") from errors[0]

        logger.info("Generated %d/%d embeddings", result.success_count, len(texts))
        return result

    def embed_chunks(self, chunks: list[Chunk]) -> EmbedChunksResult:
        """Attach embeddings to chunks in place.

        Chunks whose embedding failed are left out of the returned list and
        counted as dropped.

        Raises:
            EmbeddingError: Only when every chunk failed.
        """
        if not chunks:
            return EmbedChunksResult(chunks=[])

        batch = self.generate_embeddings_batch([chunk.content for chunk in chunks])

        embedded: list[Chunk] = []
        errors: dict[str, EmbeddingError] = {}
        for chunk, embedding, error in zip(chunks, batch.embeddings, batch.errors):
            if embedding is None:
                errors[chunk.id] = error
                continue
            chunk.embedding = embedding
            embedded.append(chunk)

        dropped = len(chunks) - len(embedded)
        if dropped:
            logger.warning("Dropped %d of %d chunks without embeddings", dropped, len(chunks))
        return EmbedChunksResult(chunks=embedded, dropped=dropped, errors=errors)
