"""Abstract embedding provider interface."""

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Interface for text embedding generation.

    Implementations wrap a specific backend (an Ollama server, a local
    sentence-transformers model). Swap backends by changing the provider
    in configuration.
    """

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Generate the embedding for a single text.

        Args:
            text: Non-empty text to embed.

        Returns:
            Embedding vector whose dimension is fixed by the model.

        Raises:
            EmbeddingError: If the backend fails or returns a malformed vector.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        ...

    @property
    def dimension(self) -> int | None:
        """Vector length, or None when only known after the first call."""
        return None

    def health_check(self) -> bool:
        """Return True if the backend looks usable. Default assumes it is."""
        return True
