"""Error taxonomy for the statement retrieval pipeline."""


class StatementRAGError(Exception):
    """Base class for all pipeline errors."""


class ChunkingError(StatementRAGError):
    """Statement data could not be turned into chunks."""


class EmbeddingError(StatementRAGError):
    """The embedding backend failed, timed out or returned a malformed response."""


class StorageError(StatementRAGError):
    """The vector store rejected an operation or could not be reached.

    Fatal for the operation only; later calls may succeed.
    """


class RetrievalError(StatementRAGError):
    """A query-time failure while embedding the query or searching the store.

    ``stage`` is ``"embedding"`` or ``"search"`` so callers can pick a
    fallback path without inspecting the chained cause.
    """

    def __init__(self, message: str, stage: str):
        super().__init__(message)
        self.stage = stage

    @property
    def is_embedding_failure(self) -> bool:
        return self.stage == "embedding"

    @property
    def is_storage_failure(self) -> bool:
        return self.stage == "search"
