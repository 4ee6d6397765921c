# esdump/core/export_driver.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional

from .config import ExportConfig
from .cursor_base import CursorClient, Page, QueryDescriptor
from .errors import ExportCancelled, ProtocolError
from .page_buffer import PageBuffer
from .sink_base import SinkWriter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportSummary:
    """
    Final counts of one run.
    - total_matched: total reported by the first page
    - emitted_count: records handed to the sink (including dropped ones)
    - dropped_count: records skipped because they could not be serialized
    """

    total_matched: int
    emitted_count: int
    limit_hit: bool = False
    dropped_count: int = 0
    pages_fetched: int = 0
    flush_count: int = 0

    @property
    def written_count(self) -> int:
        return self.emitted_count - self.dropped_count


class ExportDriver:
    """
    Drives one scroll export:
      initial fetch -> [buffer page, flush at threshold, next page]* -> flush -> release
    Single-shot: all counters live on the instance and a driver runs once.
    Fetches and flushes happen on the calling thread, one at a time.
    """

    def __init__(self, cfg: ExportConfig, client: CursorClient, sink: SinkWriter) -> None:
        self.cfg = cfg
        self.client = client
        self.sink = sink
        self.buffer = PageBuffer(
            sink, threshold=cfg.flush_threshold, strict=cfg.strict_serialization
        )

        self.total_matched = 0
        self.result_limit = 0
        self.emitted_count = 0
        self.pages_fetched = 0
        self.limit_hit = False
        # insertion-ordered set of every cursor token seen
        self.seen_tokens: Dict[str, None] = {}
        self._started = False

    # ---------------------- public entry point ----------------------

    def run(
        self,
        descriptor: QueryDescriptor,
        cancel: Optional[threading.Event] = None,
    ) -> ExportSummary:
        """Export every record matching `descriptor`, or the first max_results of them."""
        if self._started:
            raise RuntimeError("ExportDriver instances are single-use")
        self._started = True
        self.result_limit = max(0, descriptor.max_results)

        self.client.open()
        try:
            self.sink.open()
            try:
                self._export(descriptor, cancel)
            finally:
                try:
                    self._release()
                finally:
                    self.sink.close()
        finally:
            self.client.close()

        summary = ExportSummary(
            total_matched=self.total_matched,
            emitted_count=self.emitted_count,
            limit_hit=self.limit_hit,
            dropped_count=self.buffer.dropped_count,
            pages_fetched=self.pages_fetched,
            flush_count=self.buffer.flush_count,
        )
        if summary.dropped_count:
            logger.warning("%d records were dropped during serialization", summary.dropped_count)
        return summary

    # ---------------------- internals ----------------------

    def _export(self, descriptor: QueryDescriptor, cancel: Optional[threading.Event]) -> None:
        if cancel is not None and cancel.is_set():
            raise ExportCancelled(0)
        page = self._fetch_first(descriptor)
        target = self._target()
        logger.info(
            "Query matched %d records, exporting %d (page size %d)",
            self.total_matched,
            target,
            descriptor.size,
        )

        while self.emitted_count < target and len(page) > 0:
            self._track(page.cursor)

            for rec in page.records:
                self.emitted_count += 1
                self.buffer.append(rec)

                if self.buffer.full():
                    self.buffer.flush()

                if self.result_limit and self.emitted_count == self.result_limit:
                    self.buffer.flush()
                    self.limit_hit = True
                    logger.info("Hit max result limit: %d records", self.result_limit)
                    break

            if self.limit_hit:
                break

            if cancel is not None and cancel.is_set():
                self.buffer.flush()
                logger.info("Export cancelled after %d records", self.emitted_count)
                raise ExportCancelled(self.emitted_count)

            if page.cursor is None:
                if self.emitted_count >= target:
                    break
                raise ProtocolError("response carried no scroll id, cannot fetch the next page")
            page = self._fetch_next(page.cursor, descriptor.scroll)

        # residual records when the loop ends mid-buffer
        self.buffer.flush()
        self.sink.flush()

    def _fetch_first(self, descriptor: QueryDescriptor) -> Page:
        page = self.client.initial_fetch(descriptor)
        self.pages_fetched += 1
        self.total_matched = page.total or 0
        self._track(page.cursor)
        return page

    def _fetch_next(self, token: str, ttl: str) -> Page:
        page = self.client.continuation_fetch(token, ttl)
        self.pages_fetched += 1
        self._track(page.cursor)
        logger.debug(
            "Fetched page %d with %d records (%d emitted so far)",
            self.pages_fetched,
            len(page),
            self.emitted_count,
        )
        return page

    def _target(self) -> int:
        if self.result_limit:
            return min(self.result_limit, self.total_matched)
        return self.total_matched

    def _track(self, token: Optional[str]) -> None:
        if token:
            self.seen_tokens.setdefault(token, None)

    def _release(self) -> None:
        """Best-effort release of every cursor seen; never fails the run."""
        if not self.seen_tokens:
            return
        try:
            self.client.release_cursors(list(self.seen_tokens))
        except Exception as e:  # noqa: BLE001
            logger.warning("Failed to release %d scroll cursor(s): %s", len(self.seen_tokens), e)


__all__ = ["ExportDriver", "ExportSummary"]
