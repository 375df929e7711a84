"""In-process vector store, used when the durable backend is unavailable."""

import logging

import numpy as np

from statement_rag.errors import StorageError
from statement_rag.models.chunk import Chunk, RetrievedChunk
from statement_rag.utils.locks import ReadWriteLock
from statement_rag.vectorstore.base import VectorStore, clamp_score

logger = logging.getLogger(__name__)


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity of two equal-length vectors.

    Defined as 0.0 when either vector has zero magnitude.

    Raises:
        ValueError: If the dimensions differ or a component is NaN or infinite.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"vector dimensions differ: {va.shape[0]} != {vb.shape[0]}")
    if not (np.isfinite(va).all() and np.isfinite(vb).all()):
        raise ValueError("vectors must be finite")
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    similarity = float(np.dot(va, vb) / (norm_a * norm_b))
    return max(-1.0, min(1.0, similarity))


class InMemoryVectorStore(VectorStore):
    """Chunk map guarded by a reader/writer lock.

    Searches run in parallel; stores and deletes are exclusive. Search is a
    linear scan over the chunks of one source, which is fine up to roughly
    10^4 chunks. Nothing survives the process.
    """

    backend_name = "memory"

    def __init__(self, dimensions: int):
        super().__init__(dimensions)
        self._chunks: dict[str, Chunk] = {}
        self._lock = ReadWriteLock()

    def store(self, chunk: Chunk) -> None:
        self.validate_chunk(chunk)
        with self._lock.write_locked():
            self._chunks[chunk.id] = chunk.copy()

    def store_batch(self, chunks: list[Chunk]) -> int:
        valid = self.storable(chunks)
        skipped = len(chunks) - len(valid)
        if skipped:
            logger.warning("Skipped %d chunks without embeddings", skipped)
        with self._lock.write_locked():
            for chunk in valid:
                self._chunks[chunk.id] = chunk.copy()
        return len(valid)

    def search(
        self,
        query_embedding: list[float],
        top_k: int,
        source_id: str | None,
    ) -> list[RetrievedChunk]:
        self.validate_embedding(query_embedding, "query embedding")
        if top_k <= 0:
            return []

        with self._lock.read_locked():
            candidates = [
                chunk for chunk in self._chunks.values()
                if source_id is None or chunk.source_id == source_id
            ]
            scored = []
            for chunk in candidates:
                try:
                    score = cosine_similarity(query_embedding, chunk.embedding)
                except ValueError as e:
                    raise StorageError(f"Cannot score chunk {chunk.id}: {e}") from e
                scored.append((clamp_score(score), chunk))

        # stable: ties keep insertion order
        scored.sort(key=lambda item: item[0], reverse=True)
        return [
            RetrievedChunk(chunk=chunk.copy(), score=score)
            for score, chunk in scored[:top_k]
        ]

    def delete_by_source_id(self, source_id: str) -> int:
        with self._lock.write_locked():
            doomed = [cid for cid, chunk in self._chunks.items() if chunk.source_id == source_id]
            for cid in doomed:
                del self._chunks[cid]
        return len(doomed)

    def has_chunks(self, source_id: str) -> bool:
        with self._lock.read_locked():
            return any(chunk.source_id == source_id for chunk in self._chunks.values())

    def count(self) -> int:
        with self._lock.read_locked():
            return len(self._chunks)
