# esdump/sinks/__init__.py
from .stream import ConsoleSink, FileSink, StreamSink, make_sink

__all__ = ["ConsoleSink", "FileSink", "StreamSink", "make_sink"]
