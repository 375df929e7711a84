"""Unit tests for chunk models and statement helpers."""

from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel, ConfigDict, Field

from statement_rag.errors import ChunkingError
from statement_rag.models.chunk import Chunk, RetrievedChunk
from statement_rag.models.enums import ChunkType
from statement_rag.models.results import BatchEmbeddingResult
from statement_rag.models.statement import as_statement_mapping, generate_source_id


class TestChunk:
    def test_requires_id_source_and_content(self):
        with pytest.raises(ValueError, match="id"):
            Chunk(id="", source_id="s", content="c")
        with pytest.raises(ValueError, match="source_id"):
            Chunk(id="c1", source_id="", content="c")
        with pytest.raises(ValueError, match="content"):
            Chunk(id="c1", source_id="s", content="")

    def test_chunk_type_comes_from_metadata(self):
        chunk = Chunk(id="c1", source_id="s", content="x", metadata={"type": "account_summary"})
        assert chunk.chunk_type == "account_summary"
        assert Chunk(id="c2", source_id="s", content="x").chunk_type is None

    def test_has_embedding(self):
        chunk = Chunk(id="c1", source_id="s", content="x")
        assert not chunk.has_embedding
        chunk.embedding = [0.1, 0.2]
        assert chunk.has_embedding

    def test_copy_is_independent(self):
        chunk = Chunk(id="c1", source_id="s", content="x", embedding=[1.0], metadata={"type": "t"})
        clone = chunk.copy()
        clone.embedding.append(2.0)
        clone.metadata["type"] = "other"
        assert chunk.embedding == [1.0]
        assert chunk.metadata == {"type": "t"}


class TestRetrievedChunk:
    def test_score_bounds(self):
        chunk = Chunk(id="c1", source_id="s", content="x")
        assert RetrievedChunk(chunk=chunk, score=0.0).score == 0.0
        assert RetrievedChunk(chunk=chunk, score=1.0).score == 1.0
        with pytest.raises(ValueError):
            RetrievedChunk(chunk=chunk, score=1.01)
        with pytest.raises(ValueError):
            RetrievedChunk(chunk=chunk, score=-0.1)


class TestChunkType:
    def test_id_kinds(self):
        assert ChunkType.ACCOUNT_SUMMARY.id_kind == "summary"
        assert ChunkType.TRANSACTION_BREAKDOWN.id_kind == "breakdown"
        assert ChunkType.MONTHLY_SUMMARY.id_kind == "monthly"
        assert ChunkType.CATEGORY_SUMMARY.id_kind == "categories"
        assert ChunkType.TOP_BENEFICIARIES.id_kind == "beneficiaries"

    def test_every_type_has_a_display_name(self):
        for chunk_type in ChunkType:
            assert chunk_type.display_name


class TestBatchEmbeddingResult:
    def test_counts(self):
        result = BatchEmbeddingResult(embeddings=[[1.0], None, [2.0]], errors=[None, None, None])
        assert result.success_count == 2
        assert result.failure_count == 1


class StatementModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    account_summary: dict = Field(default_factory=dict, alias="accountSummary")


@dataclass
class StatementRecord:
    categorySummary: dict = field(default_factory=dict)


class TestStatementMapping:
    def test_accepts_mapping(self):
        assert as_statement_mapping({"a": 1}) == {"a": 1}

    def test_accepts_pydantic_model_by_alias(self):
        model = StatementModel(account_summary={"totalIncome": 10})
        assert as_statement_mapping(model) == {"accountSummary": {"totalIncome": 10}}

    def test_accepts_dataclass(self):
        assert as_statement_mapping(StatementRecord({"Food": 1})) == {"categorySummary": {"Food": 1}}

    def test_rejects_other_types(self):
        with pytest.raises(ChunkingError):
            as_statement_mapping(["not", "a", "statement"])


class TestGenerateSourceId:
    def test_format(self):
        source_id = generate_source_id({"accountSummary": {"totalIncome": 1}})
        assert source_id.startswith("stmt_")
        assert len(source_id) == len("stmt_") + 32

    def test_stable_across_key_order(self):
        a = {"accountSummary": {"totalIncome": 1, "totalExpense": 2}, "categorySummary": {}}
        b = {"categorySummary": {}, "accountSummary": {"totalExpense": 2, "totalIncome": 1}}
        assert generate_source_id(a) == generate_source_id(b)

    def test_changes_with_content(self):
        assert generate_source_id({"x": 1}) != generate_source_id({"x": 2})
