# esdump/core/query.py
"""Turn command-line style inputs into a QueryDescriptor."""

from __future__ import annotations

import json
from typing import Iterable, List, Optional, Tuple

from .config import DEFAULT_SCROLL
from .cursor_base import QueryDescriptor
from .errors import QueryError

ALL_INDICES = "_all"


def _split(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [v for v in value.split(",") if v]


def parse_indices(value: Optional[str]) -> List[str]:
    """Comma-separated index names; `_all` anywhere wins over the rest."""
    indices = _split(value)
    if not indices or ALL_INDICES in indices:
        return [ALL_INDICES]
    return indices


def parse_fields(value: Optional[str]) -> List[str]:
    return _split(value) or ["*"]


def parse_auth(value: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """`user:pass` -> (user, pass). Anything else means no auth."""
    if not value or ":" not in value:
        return (None, None)
    parts = value.split(":")
    if len(parts) != 2:
        return (None, None)
    return (parts[0], parts[1])


def build_descriptor(
    q: str = "",
    raw_query: bool = False,
    indices: Iterable[str] = (ALL_INDICES,),
    doc_type: Optional[str] = None,
    fields: Iterable[str] = ("*",),
    sort: Iterable[str] = (),
    size: int = 1000,
    max_results: int = 0,
    scroll: str = DEFAULT_SCROLL,
) -> QueryDescriptor:
    """
    With raw_query the text of `q` is query DSL and becomes the request body;
    otherwise it is sent as a Lucene query string.
    """
    if size < 1:
        raise QueryError(f"page size must be positive, got {size}")
    if max_results < 0:
        raise QueryError(f"max results cannot be negative, got {max_results}")

    body = None
    if raw_query and q:
        try:
            body = json.loads(q)
        except json.JSONDecodeError as e:
            raise QueryError(f"query is not valid JSON: {e}") from e
        if not isinstance(body, dict):
            raise QueryError("query DSL must be a JSON object")
        q = ""

    return QueryDescriptor(
        query_string=q,
        body=body,
        indices=tuple(indices),
        doc_type=doc_type,
        fields=tuple(fields),
        sort=tuple(sort),
        size=size,
        max_results=max_results,
        scroll=scroll,
    )


__all__ = ["build_descriptor", "parse_auth", "parse_fields", "parse_indices"]
