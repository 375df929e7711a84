"""Chunk data models shared by every pipeline stage."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Chunk:
    """A semantically complete, independently retrievable fragment of a statement."""

    id: str
    source_id: str
    content: str
    embedding: list[float] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.id:
            raise ValueError("id must not be empty")
        if not self.source_id:
            raise ValueError("source_id must not be empty")
        if not self.content:
            raise ValueError("content must not be empty")

    @property
    def chunk_type(self) -> str | None:
        return self.metadata.get("type")

    @property
    def has_embedding(self) -> bool:
        return len(self.embedding) > 0

    def copy(self) -> "Chunk":
        """Return an independent copy; the embedding and metadata are not shared."""
        return Chunk(
            id=self.id,
            source_id=self.source_id,
            content=self.content,
            embedding=list(self.embedding),
            metadata=dict(self.metadata),
        )


@dataclass
class RetrievedChunk:
    """A chunk paired with its similarity to a query. Never persisted."""

    chunk: Chunk
    score: float

    def __post_init__(self):
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"score must be in [0, 1], got {self.score}")
