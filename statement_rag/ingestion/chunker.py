"""Semantic chunker for structured bank statement data.

Chunks by statement entity, never by raw character count: one chunk per
summary-style section and token-budgeted batches of whole transaction
records for the transaction list.
"""

import logging
from typing import Any, Callable

from statement_rag.errors import ChunkingError
from statement_rag.ingestion.formatters import (
    format_account_summary,
    format_category_summary,
    format_monthly_summary,
    format_top_beneficiaries,
    format_top_expenses,
    format_transaction,
    format_transaction_breakdown,
)
from statement_rag.models.chunk import Chunk
from statement_rag.models.enums import ChunkType
from statement_rag.models.statement import as_statement_mapping

logger = logging.getLogger(__name__)

TRANSACTION_SEPARATOR = "\n\n"

# (statement key, chunk type, formatter) in emission order.
# Transactions have no single-chunk formatter; they are batched.
SECTIONS: list[tuple[str, ChunkType, Callable[[Any], str | None] | None]] = [
    ("accountSummary", ChunkType.ACCOUNT_SUMMARY, format_account_summary),
    ("transactionBreakdown", ChunkType.TRANSACTION_BREAKDOWN, format_transaction_breakdown),
    ("transactions", ChunkType.TRANSACTIONS, None),
    ("topExpenses", ChunkType.TOP_EXPENSES, format_top_expenses),
    ("monthlySummary", ChunkType.MONTHLY_SUMMARY, format_monthly_summary),
    ("categorySummary", ChunkType.CATEGORY_SUMMARY, format_category_summary),
    ("topBeneficiaries", ChunkType.TOP_BENEFICIARIES, format_top_beneficiaries),
]


def _estimate_tokens(text: str) -> int:
    """Rough token count estimate (~4 chars per token for English)."""
    return max(1, len(text) // 4)


def build_chunk_id(source_id: str, chunk_type: ChunkType, ordinal: int) -> str:
    return f"{source_id}_{chunk_type.id_kind}_{ordinal}"


class StatementChunker:
    """Turns one statement into an ordered list of chunks.

    Output is deterministic for identical input: same IDs, same content,
    same order. No network calls are made.
    """

    def __init__(
        self,
        chunk_size: int = 400,
        chunk_overlap: float = 0.12,
        max_transactions_per_chunk: int = 6,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if not 0.0 <= chunk_overlap < 1.0:
            raise ValueError("chunk_overlap must be in [0, 1)")
        if max_transactions_per_chunk <= 0:
            raise ValueError("max_transactions_per_chunk must be > 0")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.max_transactions_per_chunk = max_transactions_per_chunk

    @classmethod
    def from_settings(cls, settings) -> "StatementChunker":
        return cls(
            chunk_size=settings.rag_chunk_size,
            chunk_overlap=settings.rag_chunk_overlap,
            max_transactions_per_chunk=settings.rag_max_transactions_per_chunk,
        )

    @property
    def overlap_tokens(self) -> int:
        return int(self.chunk_size * self.chunk_overlap)

    def chunk_statement_data(self, statement_data: Any, source_id: str) -> list[Chunk]:
        """Split statement data into semantic chunks.

        Empty or malformed sections are skipped. Returns an empty list when
        nothing usable was found; deciding whether that is fatal is left to
        the caller.

        Raises:
            ChunkingError: If the statement is not a mapping-like object or
                source_id is empty.
        """
        if not source_id:
            raise ChunkingError("source_id must not be empty")
        data = as_statement_mapping(statement_data)

        chunks: list[Chunk] = []
        for key, chunk_type, formatter in SECTIONS:
            section = data.get(key)
            if section is None:
                continue

            if formatter is None:
                for content, metadata in self._batch_transactions(section):
                    chunks.append(self._make_chunk(source_id, chunk_type, len(chunks), content, metadata))
                continue

            content = formatter(section)
            if content is None:
                logger.debug("Skipping empty or malformed section %s for %s", key, source_id)
                continue
            chunks.append(self._make_chunk(source_id, chunk_type, len(chunks), content, {}))

        return chunks

    def _make_chunk(
        self,
        source_id: str,
        chunk_type: ChunkType,
        ordinal: int,
        content: str,
        metadata: dict,
    ) -> Chunk:
        return Chunk(
            id=build_chunk_id(source_id, chunk_type, ordinal),
            source_id=source_id,
            content=content,
            metadata={"type": chunk_type.value, **metadata},
        )

    def _batch_transactions(self, transactions: Any) -> list[tuple[str, dict]]:
        """Group whole transaction records into token-budgeted batches.

        A batch is closed before the next record when it already holds
        ``max_transactions_per_chunk`` new records or when the record would
        push it past ``chunk_size`` tokens. The next batch opens with the
        tail of the previous one (whole records only, within the overlap
        budget).
        """
        if not isinstance(transactions, list):
            logger.debug("Skipping malformed transactions section")
            return []

        records: list[tuple[int, str]] = []
        for index, transaction in enumerate(transactions):
            text = format_transaction(transaction)
            if text is None:
                logger.debug("Skipping malformed transaction at index %d", index)
                continue
            records.append((index, text))

        batches: list[tuple[list[tuple[int, str]], int]] = []
        current: list[tuple[int, str]] = []
        carried = 0
        new_records = 0

        for record in records:
            if new_records > 0 and (
                new_records >= self.max_transactions_per_chunk
                or _estimate_tokens(self._join(current + [record])) > self.chunk_size
            ):
                batches.append((current, carried))
                current = self._overlap_tail(current)
                carried = len(current)
                new_records = 0
            current.append(record)
            new_records += 1

        if new_records > 0:
            batches.append((current, carried))

        result = []
        for batch, overlap in batches:
            metadata = {
                "count": len(batch),
                "first_index": batch[0][0],
                "last_index": batch[-1][0],
                "overlap": overlap,
            }
            result.append((self._join(batch), metadata))
        return result

    def _overlap_tail(self, batch: list[tuple[int, str]]) -> list[tuple[int, str]]:
        budget = self.overlap_tokens
        if budget <= 0:
            return []
        tail: list[tuple[int, str]] = []
        used = 0
        # never repeat the whole batch
        for record in reversed(batch[1:]):
            cost = _estimate_tokens(record[1])
            if used + cost > budget:
                break
            tail.insert(0, record)
            used += cost
        return tail

    @staticmethod
    def _join(records: list[tuple[int, str]]) -> str:
        return TRANSACTION_SEPARATOR.join(text for _, text in records)
