# esdump/core/errors.py
"""Error taxonomy for an export run.

Every fatal condition derives from ExportError so callers can stop the run
with a single except clause. Non-fatal conditions (a failed cursor release, a
record that cannot be serialized in lenient mode) are logged, not raised.
"""

from __future__ import annotations

from typing import Optional


class ExportError(Exception):
    """Base error for anything that aborts an export run."""


class ClusterError(ExportError):
    """The cluster answered with an application-level error."""

    def __init__(
        self,
        reason: str,
        error_type: str = "unknown",
        status: Optional[int] = None,
    ) -> None:
        self.reason = reason
        self.error_type = error_type
        self.status = status
        prefix = f"[{status}] " if status is not None else ""
        super().__init__(f"{prefix}{error_type}: {reason}")


class ProtocolError(ExportError):
    """A response body did not decode into the expected page shape."""


class SinkError(ExportError):
    """Writing to the output sink failed."""


class SerializationError(ExportError):
    """A record could not be encoded as JSON (strict mode only)."""


class QueryError(ExportError):
    """The query text could not be turned into a query descriptor."""


class ExportCancelled(ExportError):
    """The run was stopped through its cancellation event."""

    def __init__(self, emitted_count: int) -> None:
        self.emitted_count = emitted_count
        super().__init__(f"export cancelled after {emitted_count} records")


__all__ = [
    "ExportError",
    "ClusterError",
    "ProtocolError",
    "SinkError",
    "SerializationError",
    "QueryError",
    "ExportCancelled",
]
