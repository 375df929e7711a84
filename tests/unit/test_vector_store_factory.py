"""Unit tests for vector store selection."""

import uuid
from unittest.mock import patch

from config.settings import Settings
from statement_rag.errors import StorageError
from statement_rag.vectorstore.chroma_store import ChromaVectorStore
from statement_rag.vectorstore.factory import create_vector_store
from statement_rag.vectorstore.memory_store import InMemoryVectorStore


class TestCreateVectorStore:
    def test_no_url_selects_memory(self):
        store = create_vector_store(Settings(rag_vector_store_url="", rag_embedding_dims=8))
        assert isinstance(store, InMemoryVectorStore)
        assert store.dimensions == 8

    def test_durable_backend_when_available(self):
        settings = Settings(
            rag_vector_store_url=":memory:",
            rag_embedding_dims=8,
            rag_collection_name=f"factory_{uuid.uuid4().hex}",
        )
        store = create_vector_store(settings)
        assert isinstance(store, ChromaVectorStore)
        assert store.backend_name == "chroma"

    @patch("statement_rag.vectorstore.factory.ChromaVectorStore")
    def test_falls_back_when_heartbeat_fails(self, mock_chroma):
        mock_chroma.side_effect = StorageError("connection refused")
        settings = Settings(rag_vector_store_url="http://chroma:8000", rag_embedding_dims=8)
        store = create_vector_store(settings)
        assert isinstance(store, InMemoryVectorStore)
        assert store.backend_name == "memory"
        mock_chroma.assert_called_once_with(
            location="http://chroma:8000",
            dimensions=8,
            collection_name=settings.rag_collection_name,
            timeout=settings.rag_store_timeout,
        )
