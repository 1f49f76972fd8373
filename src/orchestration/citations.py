from __future__ import annotations

"""Citation extraction from orchestration grounding results."""

from typing import Any, Callable, Mapping

from src.orchestration.coerce import parse_float, parse_int
from src.orchestration.probes import lookup
from src.orchestration.types import Citation

DEFAULT_SOURCE_TYPE = "object-store-document"

GROUNDING_PATH = ("orchestration_result", "module_results", "grounding")
CHUNK_LIST_FIELDS = ("grounding_chunks", "result", "chunks")

# Ordered (scope, key) aliases per logical field; "item" is the chunk root.
FIELD_ALIASES: dict[str, tuple[tuple[str, str], ...]] = {
    "document_id": (
        ("item", "documentId"),
        ("item", "document_id"),
        ("metadata", "documentId"),
        ("metadata", "document_id"),
    ),
    "chunk_id": (
        ("item", "chunkId"),
        ("item", "chunk_id"),
        ("metadata", "chunkId"),
        ("metadata", "chunk_id"),
    ),
    "page": (
        ("item", "page"),
        ("metadata", "page"),
        ("metadata", "page_number"),
        ("metadata", "pageNumber"),
    ),
    "score": (
        ("item", "score"),
        ("metadata", "score"),
    ),
    "uri": (
        ("item", "url"),
        ("item", "uri"),
        ("metadata", "url"),
        ("metadata", "uri"),
    ),
    "title": (
        ("item", "title"),
        ("metadata", "title"),
        ("metadata", "file_name"),
        ("metadata", "fileName"),
        ("metadata", "name"),
    ),
    "source_type": (
        ("item", "sourceType"),
        ("item", "source_type"),
        ("metadata", "sourceType"),
        ("metadata", "source_type"),
    ),
}


def resolve_field(
    scopes: Mapping[str, Mapping[str, Any]],
    field_name: str,
    accept: Callable[[Any], bool] = bool,
) -> Any:
    """Return the first accepted value for a logical field across its aliases."""
    for scope, key in FIELD_ALIASES[field_name]:
        value = scopes[scope].get(key)
        if accept(value):
            return value
    return None


def find_chunk_list(raw: Any) -> list[Any]:
    """Return the first non-empty grounding chunk list, or an empty list."""
    grounding = lookup(raw, GROUNDING_PATH)
    if not grounding:
        return []
    candidates: list[Any] = []
    if isinstance(grounding, Mapping):
        candidates.extend(grounding.get(name) for name in CHUNK_LIST_FIELDS)
    elif isinstance(grounding, list):
        candidates.append(grounding)
    for candidate in candidates:
        if isinstance(candidate, list) and candidate:
            return candidate
    return []


def extract_citations(
    raw: Any, default_source_type: str = DEFAULT_SOURCE_TYPE
) -> list[Citation]:
    """Extract deduplicated citations from a raw orchestration response.

    Chunks that are not objects are skipped. Each remaining chunk is keyed by
    chunk id, then "document_id:page", then document id, then uri, then its
    position; later chunks with an already seen key are dropped.
    """
    citations: list[Citation] = []
    seen: set[str] = set()
    for idx, item in enumerate(find_chunk_list(raw)):
        if not isinstance(item, Mapping):
            continue
        metadata = item.get("metadata")
        scopes = {
            "item": item,
            "metadata": metadata if isinstance(metadata, Mapping) else {},
        }
        document_id = _text(resolve_field(scopes, "document_id"))
        chunk_id = _text(resolve_field(scopes, "chunk_id"))
        page = parse_int(resolve_field(scopes, "page", _is_set))
        score = parse_float(resolve_field(scopes, "score", _is_set))
        uri = _text(resolve_field(scopes, "uri"))
        title = _text(resolve_field(scopes, "title"))
        source_type = _text(resolve_field(scopes, "source_type")) or default_source_type

        key = dedup_key(idx, document_id, chunk_id, page, uri)
        if key in seen:
            continue
        seen.add(key)
        citations.append(
            Citation(
                id=f"cit-{len(citations) + 1}",
                title=title,
                source_type=source_type,
                document_id=document_id,
                chunk_id=chunk_id,
                page=page,
                uri=uri,
                score=score,
            )
        )
    return citations


def dedup_key(
    idx: int,
    document_id: str | None,
    chunk_id: str | None,
    page: int | None,
    uri: str | None,
) -> str:
    """Return the deduplication key for one chunk."""
    if chunk_id:
        return chunk_id
    if document_id and page is not None:
        return f"{document_id}:{page}"
    if document_id:
        return document_id
    if uri:
        return uri
    return f"idx_{idx}"


def _is_set(value: Any) -> bool:
    return value is not None


def _text(value: Any) -> str | None:
    if not value:
        return None
    return str(value)
