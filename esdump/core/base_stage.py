# esdump/core/base_stage.py
from __future__ import annotations

from abc import ABC


class Stage(ABC):  # noqa: B024
    """
    Lifecycle base shared by cursor clients and sinks.
    The export driver opens every stage before the first fetch and closes them
    in reverse order once the run ends, whether it succeeded or not.
    """

    def open(self) -> None:  # noqa: B027
        """Acquire the connection or stream. Called once per export run."""
        pass

    def close(self) -> None:  # noqa: B027
        """Release whatever open() acquired. Must be safe to call after a failed open()."""
        pass

    def __enter__(self) -> "Stage":
        self.open()
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


__all__ = ["Stage"]
