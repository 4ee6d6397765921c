from __future__ import annotations

import io

import pytest

from esdump.core.config import SinkConfig
from esdump.core.errors import SinkError
from esdump.sinks import ConsoleSink, FileSink, make_sink


def test_file_sink_appends(tmp_path):
    path = tmp_path / "out.ndjson"
    path.write_bytes(b'{"old":true}\n')

    sink = FileSink(str(path))
    sink.open()
    sink.write(b'{"n":1}\n')
    sink.close()

    assert path.read_bytes() == b'{"old":true}\n{"n":1}\n'
    assert sink.bytes_written == 8


def test_file_sink_creates_missing_file(tmp_path):
    path = tmp_path / "new.ndjson"
    with FileSink(str(path)) as sink:
        sink.write(b"{}\n")

    assert path.read_bytes() == b"{}\n"


def test_file_sink_open_failure(tmp_path):
    sink = FileSink(str(tmp_path / "missing-dir" / "out.ndjson"))
    with pytest.raises(SinkError):
        sink.open()


def test_console_sink_writes_bytes_to_stdout(monkeypatch):
    raw = io.BytesIO()
    monkeypatch.setattr("sys.stdout", io.TextIOWrapper(raw, encoding="utf-8"))

    sink = ConsoleSink()
    sink.open()
    sink.write(b'{"n":1}\n')
    sink.flush()

    assert raw.getvalue() == b'{"n":1}\n'


def test_make_sink_picks_by_config(tmp_path):
    assert isinstance(make_sink(SinkConfig(to_stdout=True)), ConsoleSink)
    sink = make_sink(SinkConfig(path=str(tmp_path / "x")))
    assert isinstance(sink, FileSink)
    assert sink.path == str(tmp_path / "x")
