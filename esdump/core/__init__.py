# esdump/core/__init__.py
from .config import ClientConfig, ExportConfig, SinkConfig
from .cursor_base import CursorClient, Page, QueryDescriptor
from .errors import (
    ClusterError,
    ExportCancelled,
    ExportError,
    ProtocolError,
    QueryError,
    SerializationError,
    SinkError,
)
from .export_driver import ExportDriver, ExportSummary
from .page_buffer import PageBuffer
from .sink_base import SinkWriter

__all__ = [
    "ClientConfig",
    "ClusterError",
    "CursorClient",
    "ExportCancelled",
    "ExportConfig",
    "ExportDriver",
    "ExportError",
    "ExportSummary",
    "Page",
    "PageBuffer",
    "ProtocolError",
    "QueryDescriptor",
    "QueryError",
    "SerializationError",
    "SinkConfig",
    "SinkError",
    "SinkWriter",
]
