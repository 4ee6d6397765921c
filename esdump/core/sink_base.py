# esdump/core/sink_base.py
from __future__ import annotations

from abc import ABC, abstractmethod

from .base_stage import Stage


class SinkWriter(Stage, ABC):
    """
    Append-only byte sink for serialized records.
    write() receives whole flushes (many lines at once); implementations must
    not reorder or split them. Failures surface as SinkError.
    """

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Append `data` to the output."""
        ...

    def flush(self) -> None:  # noqa: B027
        """Push buffered bytes down to the OS (optional)."""
        pass


__all__ = ["SinkWriter"]
