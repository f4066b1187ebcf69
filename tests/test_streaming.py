"""Tests for StreamingBuffer."""

import pytest
from django.utils.safestring import mark_safe

from django_output_buffers import StreamingBuffer, TypeConversionError

from .escaping import shouting_escape
from .test_buffers import BadStr


class TestStreamingBuffer:
    def test_writes_reach_sink_in_order(self, sink):
        buf = StreamingBuffer(sink)
        buf.write("a")
        buf.write("<b>")
        buf.write(mark_safe("<i>"))
        buf.write(5)
        assert sink.chunks == ["a", "&lt;b&gt;", "<i>", "5"]

    def test_safe_write_is_verbatim(self, sink):
        buf = StreamingBuffer(sink)
        buf.safe_write("<b>")
        assert sink.chunks == ["<b>"]

    def test_none_is_sent_as_empty_text(self, sink):
        buf = StreamingBuffer(sink)
        buf.write("a")
        buf.write(None)
        buf.safe_write(None)
        assert sink.chunks == ["a", "", ""]

    def test_aliases(self, sink):
        buf = StreamingBuffer(sink)
        buf.append("<")
        buf.concat("<")
        buf.safe_append("<")
        buf.safe_concat("<")
        assert sink.chunks == ["&lt;", "&lt;", "<", "<"]

    def test_always_safe(self, sink):
        assert StreamingBuffer(sink).html_safe is True

    def test_keeps_nothing(self, sink):
        buf = StreamingBuffer(sink)
        buf.write("a")
        assert not hasattr(buf, "push")
        assert not hasattr(buf, "pop")
        assert buf.sink is sink

    def test_injected_escape(self, sink):
        buf = StreamingBuffer(sink, escape=shouting_escape)
        buf.write("<b>")
        assert sink.chunks == ["&LT;B&GT;"]

    def test_sink_errors_propagate(self):
        def _closed(text):
            raise ConnectionResetError("client went away")

        buf = StreamingBuffer(_closed)
        with pytest.raises(ConnectionResetError):
            buf.write("a")

    def test_conversion_error(self, sink):
        buf = StreamingBuffer(sink)
        with pytest.raises(TypeConversionError):
            buf.write(BadStr())
        assert sink.chunks == []
