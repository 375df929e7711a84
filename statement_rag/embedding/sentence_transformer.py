"""Sentence Transformer embedding provider implementation."""

import contextlib
import os

from sentence_transformers import SentenceTransformer

from statement_rag.embedding.provider import EmbeddingProvider
from statement_rag.errors import EmbeddingError


@contextlib.contextmanager
def _quiet_transformers():
    """Silence transformers warnings and progress output while a model loads."""
    old_verbosity = os.environ.get("TRANSFORMERS_VERBOSITY")
    os.environ["TRANSFORMERS_VERBOSITY"] = "error"
    try:
        yield
    finally:
        if old_verbosity is None:
            os.environ.pop("TRANSFORMERS_VERBOSITY", None)
        else:
            os.environ["TRANSFORMERS_VERBOSITY"] = old_verbosity


class SentenceTransformerEmbeddingProvider(EmbeddingProvider):
    """Embedding provider wrapping a local sentence-transformers model.

    Useful for offline runs. Default model: all-MiniLM-L6-v2 (384 dimensions),
    so ``RAG_EMBEDDING_DIMS`` must be set to match.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self._model_name = model_name
        with _quiet_transformers():
            try:
                self._model = SentenceTransformer(model_name, local_files_only=True)
            except OSError:
                self._model = SentenceTransformer(model_name)
        self._dimension = self._model.get_sentence_embedding_dimension()

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> list[float]:
        try:
            vectors = self._model.encode([text], show_progress_bar=False)
        except Exception as e:
            raise EmbeddingError(f"Local embedding failed: {e}") from e
        return [float(v) for v in vectors[0]]
