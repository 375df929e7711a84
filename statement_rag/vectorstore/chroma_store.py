"""ChromaDB vector store for statement chunks (the durable backend)."""

import json
import logging
import threading
from datetime import datetime, timezone
from urllib.parse import urlparse

import chromadb
from chromadb.config import Settings as ChromaSettings

from statement_rag.errors import StorageError
from statement_rag.models.chunk import Chunk, RetrievedChunk
from statement_rag.vectorstore.base import VectorStore, clamp_score

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_NAME = "statement_chunks"
DEFAULT_TIMEOUT_SECONDS = 10.0


def is_remote_location(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


def _create_client(location: str):
    """Build a chromadb client from a store location.

    ``:memory:`` gives an ephemeral client, ``http(s)://host:port`` a client
    for a Chroma server, anything else a persistent on-disk client.
    """
    if location == ":memory:":
        return chromadb.Client(ChromaSettings(anonymized_telemetry=False))

    if is_remote_location(location):
        parsed = urlparse(location)
        return chromadb.HttpClient(
            host=parsed.hostname or "localhost",
            port=parsed.port or 8000,
            ssl=parsed.scheme == "https",
            settings=ChromaSettings(anonymized_telemetry=False),
        )

    return chromadb.PersistentClient(
        path=location,
        settings=ChromaSettings(anonymized_telemetry=False),
    )


def call_with_timeout(fn, timeout: float, *args, **kwargs):
    """Run fn on a daemon thread and wait at most timeout seconds for it.

    The chromadb HTTP client has no request timeout of its own. A call that
    outlives the deadline is abandoned, not cancelled: its thread keeps
    waiting on the socket but no caller is blocked on it.

    Raises:
        TimeoutError: If fn has not returned in time.
    """
    outcome = {}

    def target():
        try:
            outcome["value"] = fn(*args, **kwargs)
        except Exception as e:
            outcome["error"] = e

    worker = threading.Thread(target=target, name="chroma-call", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        raise TimeoutError(f"no reply from Chroma within {timeout}s")
    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


class ChromaVectorStore(VectorStore):
    """ChromaDB-backed vector store for statement chunks.

    Manages a single collection with cosine distance, indexed by Chroma's
    HNSW approximate nearest-neighbour index. Each record carries the chunk
    ID, source ID, content, embedding, metadata and creation timestamp;
    ``source_id`` is the metadata key used for scoped filtering.

    Against a Chroma server every call, the startup heartbeat included, is
    bounded by ``timeout`` and fails with StorageError when it expires.
    Local clients make no network calls and run unbounded.
    """

    backend_name = "chroma"

    def __init__(
        self,
        location: str,
        dimensions: int,
        collection_name: str = DEFAULT_COLLECTION_NAME,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(dimensions)
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        self.location = location
        self.collection_name = collection_name
        self.timeout = timeout if is_remote_location(location) else None
        try:
            self._client = self._call(_create_client, location)
            # Heartbeat fails fast when the server or path is unusable
            self._call(self._client.heartbeat)
        except Exception as e:
            raise StorageError(f"Chroma store at {location!r} is unavailable: {e}") from e
        self._collection = self._open_collection()

    def _call(self, fn, *args, **kwargs):
        if self.timeout is None:
            return fn(*args, **kwargs)
        return call_with_timeout(fn, self.timeout, *args, **kwargs)

    def _open_collection(self):
        """Open the collection, creating it for this store's dimensionality.

        An existing collection built for another dimensionality is refused;
        its HNSW index could never hold our vectors.
        """
        try:
            collection = self._call(self._client.get_collection, name=self.collection_name)
        except TimeoutError as e:
            raise StorageError(f"Cannot open collection {self.collection_name}: {e}") from e
        except Exception:
            logger.info("Creating Chroma collection %s", self.collection_name)
            try:
                return self._call(
                    self._client.create_collection,
                    name=self.collection_name,
                    metadata={"hnsw:space": "cosine", "dimensions": self.dimensions},
                )
            except Exception as e:
                raise StorageError(f"Cannot create collection {self.collection_name}: {e}") from e

        existing = (collection.metadata or {}).get("dimensions")
        if existing is not None and int(existing) != self.dimensions:
            raise StorageError(
                f"Collection {self.collection_name} was created for {existing}-dimensional "
                f"embeddings, store expects {self.dimensions}"
            )
        return collection

    def store(self, chunk: Chunk) -> None:
        self.validate_chunk(chunk)
        self._upsert([chunk])

    def store_batch(self, chunks: list[Chunk]) -> int:
        valid = self.storable(chunks)
        skipped = len(chunks) - len(valid)
        if skipped:
            logger.warning("Skipped %d chunks without embeddings", skipped)
        if valid:
            self._upsert(valid)
        return len(valid)

    def _upsert(self, chunks: list[Chunk]) -> None:
        created_at = datetime.now(timezone.utc).isoformat()
        ids = []
        embeddings = []
        documents = []
        metadatas = []

        for chunk in chunks:
            ids.append(chunk.id)
            embeddings.append(chunk.embedding)
            documents.append(chunk.content)
            metadatas.append({
                "source_id": chunk.source_id,
                "chunk_type": chunk.chunk_type or "",
                "created_at": created_at,
                "metadata_json": json.dumps(chunk.metadata, sort_keys=True, default=str),
            })

        try:
            self._call(
                self._collection.upsert,
                ids=ids,
                embeddings=embeddings,
                documents=documents,
                metadatas=metadatas,
            )
        except Exception as e:
            raise StorageError(f"Failed to store {len(ids)} chunks: {e}") from e

    def search(
        self,
        query_embedding: list[float],
        top_k: int,
        source_id: str | None,
    ) -> list[RetrievedChunk]:
        self.validate_embedding(query_embedding, "query embedding")
        if top_k <= 0:
            return []

        where = {"source_id": source_id} if source_id is not None else None
        try:
            # HNSW cannot return more neighbours than the filter matches
            available = self._matching_count(where)
            if available == 0:
                return []
            kwargs = {
                "query_embeddings": [query_embedding],
                "n_results": min(top_k, available),
                "include": ["documents", "metadatas", "distances", "embeddings"],
            }
            if where is not None:
                kwargs["where"] = where
            results = self._call(self._collection.query, **kwargs)
        except Exception as e:
            raise StorageError(f"Search failed: {e}") from e

        output = []
        if results["ids"] and results["ids"][0]:
            embeddings = results.get("embeddings")
            for i in range(len(results["ids"][0])):
                metadata = results["metadatas"][0][i] if results["metadatas"] else {}
                distance = results["distances"][0][i] if results["distances"] else 1.0
                chunk = Chunk(
                    id=results["ids"][0][i],
                    source_id=metadata.get("source_id", source_id or ""),
                    content=results["documents"][0][i] if results["documents"] else "",
                    embedding=[float(v) for v in embeddings[0][i]] if embeddings is not None else [],
                    metadata=json.loads(metadata.get("metadata_json") or "{}"),
                )
                output.append(RetrievedChunk(chunk=chunk, score=clamp_score(1.0 - distance)))

        output.sort(key=lambda r: r.score, reverse=True)
        return output

    def _matching_count(self, where: dict | None) -> int:
        if where is None:
            return self._call(self._collection.count)
        return len(self._call(self._collection.get, where=where, include=[])["ids"])

    def delete_by_source_id(self, source_id: str) -> int:
        where = {"source_id": source_id}
        try:
            ids = self._call(self._collection.get, where=where, include=[])["ids"]
            if ids:
                self._call(self._collection.delete, ids=ids)
        except Exception as e:
            raise StorageError(f"Failed to delete chunks for {source_id}: {e}") from e
        return len(ids)

    def has_chunks(self, source_id: str) -> bool:
        """Check if any chunk with the given source_id already exists."""
        try:
            results = self._call(
                self._collection.get,
                where={"source_id": source_id},
                limit=1,
                include=[],
            )
        except Exception as e:
            raise StorageError(f"Failed to look up chunks for {source_id}: {e}") from e
        return len(results["ids"]) > 0

    def count(self) -> int:
        try:
            return self._call(self._collection.count)
        except Exception as e:
            raise StorageError(f"Failed to count chunks: {e}") from e
