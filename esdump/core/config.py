# esdump/core/config.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

FLUSH_THRESHOLD = 1000
DEFAULT_SCROLL = "30m"
DEFAULT_OUTPUT = "./es.export.log"


@dataclass
class ClientConfig:
    """Connection knobs for the Elasticsearch cursor client."""

    hosts: List[str] = field(default_factory=lambda: ["http://localhost:9200"])
    username: Optional[str] = None
    password: Optional[str] = None
    request_timeout: float = 60.0
    # transport-level retries; 0 keeps the no-retry contract of the driver
    max_retries: int = 0
    retry_on_timeout: bool = False
    verify_certs: bool = True

    @property
    def basic_auth(self) -> Optional[tuple[str, str]]:
        if self.username is None or self.password is None:
            return None
        return (self.username, self.password)


@dataclass
class SinkConfig:
    """Where records go. Files are appended to, never truncated."""

    path: str = DEFAULT_OUTPUT
    to_stdout: bool = False


@dataclass
class ExportConfig:
    """
    Behavior knobs for one export run.
    The query itself travels separately as a QueryDescriptor; this only says how
    the driver buffers, serializes and where it connects.
    """

    flush_threshold: int = FLUSH_THRESHOLD
    # Raise on an unserializable record instead of skipping it
    strict_serialization: bool = False
    client: ClientConfig = field(default_factory=ClientConfig)
    sink: SinkConfig = field(default_factory=SinkConfig)
