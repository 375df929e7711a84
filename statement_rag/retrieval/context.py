"""Assembles retrieved chunks into a context block for the language model."""

from collections import defaultdict

from statement_rag.models.chunk import RetrievedChunk
from statement_rag.models.enums import ChunkType, QueryType
from statement_rag.retrieval.query_classifier import PREFERRED_CHUNK_TYPES

MAX_CHUNK_CHARS = 600
TRUNCATION_MARKER = "\n[... content truncated for brevity ...]"

FALLBACK_TYPE = "information"


def section_title(chunk_type: str) -> str:
    try:
        return ChunkType(chunk_type).display_name
    except ValueError:
        return chunk_type.replace("_", " ").title()


def order_chunk_types(
    grouped: dict[str, list[RetrievedChunk]],
    query_type: QueryType,
) -> list[str]:
    """Order the present chunk types: preferred ones first, rest by mean score."""
    preferred = [t.value for t in PREFERRED_CHUNK_TYPES.get(query_type, []) if t.value in grouped]

    def mean_score(chunk_type: str) -> float:
        results = grouped[chunk_type]
        return sum(r.score for r in results) / len(results)

    rest = sorted(
        (t for t in grouped if t not in preferred),
        key=mean_score,
        reverse=True,
    )
    return preferred + rest


def build_context(results: list[RetrievedChunk], query_type: QueryType = QueryType.SPECIFIC) -> str:
    """Render retrieved chunks as an LLM-ready context block.

    Chunks are grouped under a heading per chunk type and numbered with
    their relevance. Every retrieved chunk appears exactly once.
    """
    grouped: dict[str, list[RetrievedChunk]] = defaultdict(list)
    for result in results:
        grouped[result.chunk.chunk_type or FALLBACK_TYPE].append(result)

    lines = [
        "=== BANK STATEMENT CONTEXT ===",
        "",
        "The following information is extracted from the bank statement:",
        "",
    ]
    number = 0
    for chunk_type in order_chunk_types(grouped, query_type):
        lines.append(f"--- {section_title(chunk_type)} ---")
        for result in grouped[chunk_type]:
            number += 1
            content = result.chunk.content
            if len(content) > MAX_CHUNK_CHARS:
                content = content[:MAX_CHUNK_CHARS] + TRUNCATION_MARKER
            lines.append(f"[{number}] Relevance: {result.score * 100:.1f}%")
            lines.append(content)
            lines.append("")
    lines.append("=== END OF CONTEXT ===")
    return "\n".join(lines) + "\n"
