"""Application configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Statement RAG settings loaded from environment variables.

    Settings are frozen: they are read once when the manager is built and
    never change for the lifetime of the process.
    """

    # Embedding
    rag_embedding_provider: str = "ollama"
    rag_ollama_url: str = "http://localhost:11434"
    rag_embedding_model: str = "llama3"
    rag_embedding_dims: int = Field(default=4096, gt=0)
    rag_embedding_timeout: float = Field(default=60.0, gt=0)
    rag_embedding_concurrency: int = Field(default=5, gt=0)

    # Chunking
    rag_chunk_size: int = Field(default=400, gt=0)
    rag_chunk_overlap: float = Field(default=0.12, ge=0.0, lt=1.0)
    rag_max_transactions_per_chunk: int = Field(default=6, gt=0)

    # Retrieval
    rag_top_k: int = Field(default=5, gt=0)
    rag_similarity_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    rag_query_expansion: bool = False
    rag_adaptive_top_k: bool = False

    # Storage: a Chroma path, an http(s) URL or ":memory:". Empty selects
    # the in-process store.
    rag_vector_store_url: str = ""
    rag_collection_name: str = "statement_chunks"
    # Bounds every call to a remote Chroma server, the startup heartbeat included
    rag_store_timeout: float = Field(default=10.0, gt=0)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "frozen": True}


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
