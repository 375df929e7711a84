"""Helpers for the structured statement object handed in by the extraction layer."""

import dataclasses
import hashlib
import json
from collections.abc import Mapping
from typing import Any

from statement_rag.errors import ChunkingError


def as_statement_mapping(statement_data: Any) -> dict[str, Any]:
    """Coerce statement data into a plain dict keyed like the extraction JSON.

    Accepts mappings, pydantic models and dataclass instances.
    """
    if isinstance(statement_data, Mapping):
        return dict(statement_data)
    if hasattr(statement_data, "model_dump"):
        return statement_data.model_dump(by_alias=True)
    if dataclasses.is_dataclass(statement_data) and not isinstance(statement_data, type):
        return dataclasses.asdict(statement_data)
    raise ChunkingError(
        f"statement data must be a mapping, got {type(statement_data).__name__}"
    )


def generate_source_id(statement_data: Any) -> str:
    """Derive a stable source ID from the statement content.

    Identical statements always map to the same ID, so chunks indexed for
    one request are reused by later questions about the same statement.
    """
    data = as_statement_mapping(statement_data)
    payload = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return f"stmt_{digest[:32]}"
