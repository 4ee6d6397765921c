# esdump/core/cursor_base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .base_stage import Stage
from .config import DEFAULT_SCROLL

Record = Any


@dataclass(frozen=True)
class QueryDescriptor:
    """
    Everything the cluster needs to open a scroll cursor.
    - query_string: Lucene-syntax query (the `q` parameter), empty for match-all
    - body: structured query DSL; when set it takes precedence over query_string
    - max_results: cap on emitted records, 0 means no cap
    - scroll: how long the cluster keeps cursor state alive between fetches
    """

    query_string: str = ""
    body: Optional[Dict[str, Any]] = None
    indices: Tuple[str, ...] = ("_all",)
    doc_type: Optional[str] = None
    fields: Tuple[str, ...] = ("*",)
    sort: Tuple[str, ...] = ()
    size: int = 1000
    max_results: int = 0
    scroll: str = DEFAULT_SCROLL


@dataclass(frozen=True)
class Page:
    """
    One fetch result. `total` is None when the response carried no total;
    `cursor` is None when the cluster returned no scroll id.
    """

    records: List[Record] = field(default_factory=list)
    total: Optional[int] = None
    cursor: Optional[str] = None

    def __len__(self) -> int:
        return len(self.records)


class CursorClient(Stage, ABC):
    """
    Abstract base for cursor-protocol clients.
    Issues the initial search, pages through the cursor and releases it.
    Implementations raise ClusterError for error responses and ProtocolError
    for bodies they cannot decode.
    """

    @abstractmethod
    def initial_fetch(self, descriptor: QueryDescriptor) -> Page:
        """Run the search that opens the cursor and return its first page."""
        ...

    @abstractmethod
    def continuation_fetch(self, token: str, ttl: str) -> Page:
        """Return the page after `token`, extending the cursor TTL."""
        ...

    @abstractmethod
    def release_cursors(self, tokens: Iterable[str]) -> None:
        """
        Free server-side state for every token.
        Empty input and already-released tokens are not errors.
        """
        ...


__all__ = ["CursorClient", "Page", "QueryDescriptor", "Record"]
