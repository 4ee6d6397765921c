# esdump/core/page_buffer.py
from __future__ import annotations

import io
import json
import logging
import threading
from typing import List

from .config import FLUSH_THRESHOLD
from .cursor_base import Record
from .errors import SerializationError, SinkError
from .sink_base import SinkWriter

logger = logging.getLogger(__name__)


class _BufferPool:
    """Reusable scratch buffers, so each flush does not grow a fresh one."""

    def __init__(self) -> None:
        self._free: List[io.BytesIO] = []
        self._lock = threading.Lock()

    def get(self) -> io.BytesIO:
        with self._lock:
            buf = self._free.pop() if self._free else io.BytesIO()
        buf.seek(0)
        buf.truncate()
        return buf

    def put(self, buf: io.BytesIO) -> None:
        with self._lock:
            self._free.append(buf)


def encode_record(record: Record) -> bytes:
    """One compact JSON value, UTF-8, no trailing newline."""
    text = json.dumps(record, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    return text.encode("utf-8")


class PageBuffer:
    """
    Bounded accumulator between page fetches and sink writes.
    Holds at most `threshold` records; the driver flushes when full() turns true.
    Each flush is one write() call on the sink.
    """

    def __init__(
        self,
        sink: SinkWriter,
        threshold: int = FLUSH_THRESHOLD,
        strict: bool = False,
    ) -> None:
        if threshold < 1:
            raise ValueError("flush threshold must be at least 1")
        self.sink = sink
        self.threshold = threshold
        self.strict = strict
        self.flush_count = 0
        self.dropped_count = 0
        self._records: List[Record] = []
        self._lock = threading.Lock()
        self._pool = _BufferPool()

    def __len__(self) -> int:
        return len(self._records)

    def append(self, record: Record) -> None:
        self._records.append(record)

    def full(self) -> bool:
        return len(self._records) >= self.threshold

    def flush(self) -> int:
        """
        Serialize and write the pending records, then clear them.
        Returns the number of lines written. An empty buffer writes nothing.
        """
        if not self._records:
            return 0
        records, self._records = self._records, []

        with self._lock:
            buf = self._pool.get()
            try:
                written = 0
                for rec in records:
                    try:
                        line = encode_record(rec)
                    except (TypeError, ValueError) as e:
                        if self.strict:
                            raise SerializationError(f"cannot serialize record: {e}") from e
                        self.dropped_count += 1
                        logger.warning("Skipping record that cannot be serialized: %s", e)
                        continue
                    buf.write(line)
                    buf.write(b"\n")
                    written += 1

                if written:
                    try:
                        self.sink.write(buf.getvalue())
                    except SinkError:
                        raise
                    except OSError as e:
                        raise SinkError(f"write to sink failed: {e}") from e
                self.flush_count += 1
                return written
            finally:
                self._pool.put(buf)


__all__ = ["PageBuffer", "encode_record"]
