"""Vector store interface shared by the durable and in-process backends."""

from abc import ABC, abstractmethod

import numpy as np

from statement_rag.errors import StorageError
from statement_rag.models.chunk import Chunk, RetrievedChunk


class VectorStore(ABC):
    """Similarity-search store for embedded chunks, partitioned by source ID.

    Every store instance is bound to one embedding dimensionality; vectors
    of any other length are rejected rather than scored as zero.
    """

    backend_name: str = "base"

    def __init__(self, dimensions: int):
        if dimensions <= 0:
            raise ValueError("dimensions must be > 0")
        self.dimensions = dimensions

    @abstractmethod
    def store(self, chunk: Chunk) -> None:
        """Upsert one chunk keyed by its ID.

        Raises:
            StorageError: If the chunk has no ID or embedding, the embedding
                has the wrong dimensionality, or the backend fails.
        """
        ...

    @abstractmethod
    def store_batch(self, chunks: list[Chunk]) -> int:
        """Upsert many chunks, skipping those without an embedding.

        The batch is validated before anything is written.

        Returns:
            Number of chunks stored.

        Raises:
            StorageError: On a dimensionality mismatch or backend failure.
        """
        ...

    @abstractmethod
    def search(
        self,
        query_embedding: list[float],
        top_k: int,
        source_id: str | None,
    ) -> list[RetrievedChunk]:
        """Return up to top_k chunks of source_id, most similar first.

        ``source_id=None`` searches every source. Returned chunks are copies
        that carry their stored embedding.

        Raises:
            StorageError: If the query has the wrong dimensionality or the
                backend fails.
        """
        ...

    @abstractmethod
    def delete_by_source_id(self, source_id: str) -> int:
        """Delete every chunk of a source. Returns how many were removed."""
        ...

    @abstractmethod
    def has_chunks(self, source_id: str) -> bool:
        ...

    @abstractmethod
    def count(self) -> int:
        """Total stored chunks across all sources (diagnostic only)."""
        ...

    def close(self) -> None:
        """Release backend resources."""

    def validate_embedding(self, embedding: list[float], what: str) -> None:
        if len(embedding) != self.dimensions:
            raise StorageError(
                f"{what} has dimension {len(embedding)}, store expects {self.dimensions}"
            )
        if not np.isfinite(np.asarray(embedding, dtype=np.float64)).all():
            raise StorageError(f"{what} contains NaN or infinite values")

    def validate_chunk(self, chunk: Chunk) -> None:
        if not chunk.id:
            raise StorageError("chunk ID cannot be empty")
        if not chunk.has_embedding:
            raise StorageError(f"chunk {chunk.id} has no embedding")
        self.validate_embedding(chunk.embedding, f"chunk {chunk.id} embedding")

    def storable(self, chunks: list[Chunk]) -> list[Chunk]:
        """Filter a batch down to chunks that may be written.

        Chunks without an embedding are dropped; anything else invalid fails
        the whole batch.
        """
        valid = []
        for chunk in chunks:
            if not chunk.has_embedding:
                continue
            self.validate_chunk(chunk)
            valid.append(chunk)
        return valid


def clamp_score(score: float) -> float:
    return min(1.0, max(0.0, float(score)))
