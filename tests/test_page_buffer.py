from __future__ import annotations

import pytest

from esdump.core.errors import SerializationError, SinkError
from esdump.core.page_buffer import PageBuffer, encode_record
from tests.conftest import MemorySink


def test_encode_is_compact_and_keeps_key_order():
    assert encode_record({"b": 1, "a": [1, 2], "c": {"d": None}}) == b'{"b":1,"a":[1,2],"c":{"d":null}}'


def test_encode_keeps_unicode_unescaped():
    assert encode_record({"name": "Zoë ✓"}) == '{"name":"Zoë ✓"}'.encode("utf-8")


def test_flush_writes_one_line_per_record_in_one_call():
    sink = MemorySink()
    buf = PageBuffer(sink, threshold=10)
    for i in range(3):
        buf.append({"n": i})

    assert buf.flush() == 3
    assert sink.writes == [b'{"n":0}\n{"n":1}\n{"n":2}\n']
    assert len(buf) == 0


def test_flush_of_empty_buffer_writes_nothing():
    sink = MemorySink()
    buf = PageBuffer(sink)

    assert buf.flush() == 0
    assert sink.writes == []
    assert buf.flush_count == 0


def test_full_at_threshold():
    buf = PageBuffer(MemorySink(), threshold=2)
    buf.append(1)
    assert not buf.full()
    buf.append(2)
    assert buf.full()


def test_nan_is_dropped_not_written():
    sink = MemorySink()
    buf = PageBuffer(sink)
    buf.append({"x": float("nan")})
    buf.append({"x": 1.5})

    assert buf.flush() == 1
    assert buf.dropped_count == 1
    assert sink.lines() == [{"x": 1.5}]


def test_all_records_dropped_skips_the_write():
    sink = MemorySink()
    buf = PageBuffer(sink)
    buf.append({"x": object()})

    assert buf.flush() == 0
    assert sink.writes == []
    assert buf.dropped_count == 1


def test_strict_mode_raises():
    buf = PageBuffer(MemorySink(), strict=True)
    buf.append({"x": object()})

    with pytest.raises(SerializationError):
        buf.flush()


def test_os_error_from_sink_becomes_sink_error():
    buf = PageBuffer(MemorySink(fail_with=OSError("No space left on device")))
    buf.append({"n": 1})

    with pytest.raises(SinkError):
        buf.flush()


def test_scratch_buffer_is_reused_and_reset():
    sink = MemorySink()
    buf = PageBuffer(sink)
    buf.append({"n": 1})
    buf.flush()
    buf.append({"n": 2})
    buf.flush()

    assert sink.writes == [b'{"n":1}\n', b'{"n":2}\n']


def test_threshold_must_be_positive():
    with pytest.raises(ValueError):
        PageBuffer(MemorySink(), threshold=0)
