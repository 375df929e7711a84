"""Vector store selection: durable Chroma backend with in-process fallback.

Selection happens once, when the manager is built. The chosen backend is
kept for the lifetime of the process.
"""

import logging

from statement_rag.errors import StorageError
from statement_rag.vectorstore.base import VectorStore
from statement_rag.vectorstore.chroma_store import ChromaVectorStore
from statement_rag.vectorstore.memory_store import InMemoryVectorStore

logger = logging.getLogger(__name__)


def create_vector_store(settings) -> VectorStore:
    """Probe the durable backend and fall back to the in-process store.

    Returns:
        ChromaVectorStore when ``rag_vector_store_url`` is set and usable,
        otherwise InMemoryVectorStore.
    """
    dimensions = settings.rag_embedding_dims
    location = settings.rag_vector_store_url.strip()

    if not location:
        logger.info("No vector store URL configured, using in-memory vector store")
        return InMemoryVectorStore(dimensions)

    try:
        store = ChromaVectorStore(
            location=location,
            dimensions=dimensions,
            collection_name=settings.rag_collection_name,
            timeout=settings.rag_store_timeout,
        )
    except StorageError as e:
        logger.warning("Durable vector store not available, falling back to in-memory store: %s", e)
        return InMemoryVectorStore(dimensions)

    logger.info("Using Chroma vector store at %s", location)
    return store
