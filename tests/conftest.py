"""Shared doubles for export tests: a scripted cursor source and an in-memory sink."""

from __future__ import annotations

import json
from typing import Any, Iterable, List, Optional

import pytest

from esdump.core.cursor_base import CursorClient, Page, QueryDescriptor
from esdump.core.sink_base import SinkWriter


class FakeCursorClient(CursorClient):
    """
    Serves `count` records {"n": i} in pages of `page_size`, rotating the
    scroll id on every page. Once exhausted it keeps returning empty pages.
    """

    def __init__(
        self,
        count: int,
        page_size: int = 1000,
        total: Optional[int] = None,
        records: Optional[List[Any]] = None,
        release_error: Optional[Exception] = None,
    ) -> None:
        self.records = records if records is not None else [{"n": i} for i in range(count)]
        self.page_size = page_size
        self.total = len(self.records) if total is None else total
        self.release_error = release_error
        self.offset = 0
        self.initial_calls: List[QueryDescriptor] = []
        self.continuation_calls: List[tuple] = []
        self.released: List[List[str]] = []
        self.opened = False
        self.closed = False

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.closed = True

    def _next_page(self, total: Optional[int]) -> Page:
        chunk = self.records[self.offset : self.offset + self.page_size]
        self.offset += len(chunk)
        page_no = len(self.initial_calls) + len(self.continuation_calls)
        return Page(records=list(chunk), total=total, cursor=f"scroll-{page_no}")

    def initial_fetch(self, descriptor: QueryDescriptor) -> Page:
        self.initial_calls.append(descriptor)
        return self._next_page(self.total)

    def continuation_fetch(self, token: str, ttl: str) -> Page:
        self.continuation_calls.append((token, ttl))
        # later pages leave the total out
        return self._next_page(None)

    def release_cursors(self, tokens: Iterable[str]) -> None:
        self.released.append(list(tokens))
        if self.release_error is not None:
            raise self.release_error


class MemorySink(SinkWriter):
    """Keeps every write() call separately so tests can count flushes."""

    def __init__(self, fail_with: Optional[Exception] = None) -> None:
        self.writes: List[bytes] = []
        self.fail_with = fail_with
        self.opened = False
        self.closed = False

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.closed = True

    def write(self, data: bytes) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.writes.append(data)

    def lines(self) -> List[Any]:
        out = b"".join(self.writes).decode("utf-8").splitlines()
        return [json.loads(line) for line in out]

    def lines_per_write(self) -> List[int]:
        return [w.count(b"\n") for w in self.writes]


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def make_client():
    def _make(count: int, page_size: int = 1000, **kwargs: Any) -> FakeCursorClient:
        return FakeCursorClient(count, page_size=page_size, **kwargs)

    return _make
