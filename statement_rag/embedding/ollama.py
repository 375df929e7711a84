"""Ollama embedding provider over HTTP."""

import logging
import math
import numbers

import requests

from statement_rag.embedding.provider import EmbeddingProvider
from statement_rag.errors import EmbeddingError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Embedding provider calling Ollama's ``/api/embeddings`` endpoint.

    Each call sends ``{"model": ..., "prompt": ...}`` and expects
    ``{"embedding": [...]}`` back. Every request carries a fixed timeout so
    a hung server cannot block the caller indefinitely.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._model = model
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def embeddings_url(self) -> str:
        return f"{self.base_url}/api/embeddings"

    def embed(self, text: str) -> list[float]:
        payload = {"model": self._model, "prompt": text}
        try:
            response = self._session.post(self.embeddings_url, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            raise EmbeddingError(
                f"Embedding request timed out after {self.timeout}s"
            ) from e
        except requests.RequestException as e:
            raise EmbeddingError(f"Failed to call Ollama embeddings API: {e}") from e

        if response.status_code != 200:
            raise EmbeddingError(
                f"Ollama embeddings API returned status {response.status_code}: "
                f"{response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise EmbeddingError("Failed to decode embedding response") from e

        return _parse_embedding(data)

    def health_check(self) -> bool:
        """Check that Ollama is reachable and the embedding model is pulled."""
        try:
            response = self._session.get(f"{self.base_url}/api/tags", timeout=10)
            response.raise_for_status()
            models = response.json().get("models", [])
        except (requests.RequestException, ValueError) as e:
            logger.warning("Ollama health check failed: %s", e)
            return False

        names = {m.get("name", "") for m in models}
        base_names = {name.split(":")[0] for name in names}
        if self._model in names or self._model.split(":")[0] in base_names:
            return True
        logger.warning("Embedding model %s not found. Available: %s", self._model, sorted(names))
        return False


def _parse_embedding(data) -> list[float]:
    if not isinstance(data, dict):
        raise EmbeddingError("Embedding response is not a JSON object")
    embedding = data.get("embedding")
    if not isinstance(embedding, list) or not embedding:
        raise EmbeddingError("Embedding response has no embedding vector")
    if not all(isinstance(v, numbers.Real) and not isinstance(v, bool) for v in embedding):
        raise EmbeddingError("Embedding vector contains non-numeric values")
    if not all(math.isfinite(v) for v in embedding):
        raise EmbeddingError("Embedding vector contains NaN or infinite values")
    return [float(v) for v in embedding]
