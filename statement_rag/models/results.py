"""Result records returned by the embedding client and the manager."""

from dataclasses import dataclass, field

from statement_rag.errors import EmbeddingError
from statement_rag.models.chunk import Chunk


@dataclass
class BatchEmbeddingResult:
    """Per-index outcome of a batch embedding call.

    ``embeddings[i]`` is the vector for ``texts[i]`` or ``None`` when that
    item failed, in which case ``errors[i]`` holds the reason.
    """

    embeddings: list[list[float] | None]
    errors: list[EmbeddingError | None]

    @property
    def success_count(self) -> int:
        return sum(1 for e in self.embeddings if e is not None)

    @property
    def failure_count(self) -> int:
        return len(self.embeddings) - self.success_count


@dataclass
class EmbedChunksResult:
    """Chunks that received an embedding, plus what was dropped."""

    chunks: list[Chunk]
    dropped: int = 0
    errors: dict[str, EmbeddingError] = field(default_factory=dict)


@dataclass
class IndexResult:
    """Summary of one manager indexing call."""

    source_id: str
    chunks_created: int = 0
    chunks_stored: int = 0
    chunks_dropped: int = 0
    skipped: bool = False
