# esdump/sinks/stream.py
from __future__ import annotations

import logging
import os
import sys
from typing import BinaryIO, Optional

from esdump.core.config import SinkConfig
from esdump.core.errors import SinkError
from esdump.core.sink_base import SinkWriter

logger = logging.getLogger(__name__)


class StreamSink(SinkWriter):
    """Writes to an already-open binary stream it does not own."""

    def __init__(self, stream: Optional[BinaryIO] = None) -> None:
        self.stream = stream
        self.bytes_written = 0

    def write(self, data: bytes) -> None:
        assert self.stream is not None, "Sink not opened. Call .open() first."
        try:
            self.stream.write(data)
        except OSError as e:
            raise SinkError(f"write failed: {e}") from e
        self.bytes_written += len(data)

    def flush(self) -> None:
        if self.stream is None:
            return
        try:
            self.stream.flush()
        except OSError as e:
            raise SinkError(f"flush failed: {e}") from e


class ConsoleSink(StreamSink):
    """Standard output. Logging goes to stderr so the two never interleave."""

    def open(self) -> None:
        if self.stream is None:
            self.stream = sys.stdout.buffer


class FileSink(StreamSink):
    """
    Appends to a file, creating it when missing.
    Existing content is kept; an export run only ever adds lines.
    """

    def __init__(self, path: str) -> None:
        super().__init__()
        self.path = path

    def open(self) -> None:
        try:
            self.stream = open(self.path, "ab")
        except OSError as e:
            raise SinkError(f"cannot open {self.path}: {e}") from e
        logger.info("Writing records to %s", os.path.abspath(self.path))

    def close(self) -> None:
        if self.stream is not None:
            try:
                self.stream.close()
            finally:
                self.stream = None


def make_sink(cfg: SinkConfig) -> SinkWriter:
    """Pick the sink for the config. The returned sink is not opened yet."""
    if cfg.to_stdout:
        return ConsoleSink()
    return FileSink(cfg.path)


__all__ = ["ConsoleSink", "FileSink", "StreamSink", "make_sink"]
