"""Embedding provider selection from configuration."""

import logging

from statement_rag.embedding.ollama import OllamaEmbeddingProvider
from statement_rag.embedding.provider import EmbeddingProvider

logger = logging.getLogger(__name__)


def create_embedding_provider(settings) -> EmbeddingProvider:
    """Create the embedding provider named by ``rag_embedding_provider``.

    The provider is checked once here: a known vector length must match
    ``rag_embedding_dims``, and a failed health check is logged so a missing
    model shows up at startup rather than on the first statement.

    Raises:
        ValueError: If the provider name is not supported or its vector
            length does not match the configured dimensionality.
    """
    provider = _build_provider(settings)

    if provider.dimension is not None and provider.dimension != settings.rag_embedding_dims:
        raise ValueError(
            f"Embedding model {provider.model_name} produces {provider.dimension}-dimensional "
            f"vectors but RAG_EMBEDDING_DIMS is {settings.rag_embedding_dims}"
        )
    if not provider.health_check():
        logger.warning("Embedding provider %s failed its health check", provider.model_name)
    return provider


def _build_provider(settings) -> EmbeddingProvider:
    provider = settings.rag_embedding_provider.lower()

    if provider == "ollama":
        logger.info(
            "Using Ollama embeddings: %s (model=%s)",
            settings.rag_ollama_url,
            settings.rag_embedding_model,
        )
        return OllamaEmbeddingProvider(
            base_url=settings.rag_ollama_url,
            model=settings.rag_embedding_model,
            timeout=settings.rag_embedding_timeout,
        )
    elif provider == "sentence-transformers":
        from statement_rag.embedding.sentence_transformer import SentenceTransformerEmbeddingProvider

        logger.info("Using local sentence-transformers model %s", settings.rag_embedding_model)
        return SentenceTransformerEmbeddingProvider(settings.rag_embedding_model)
    else:
        raise ValueError(
            f"Unsupported embedding provider: {provider}. "
            "Supported: 'ollama', 'sentence-transformers'"
        )
