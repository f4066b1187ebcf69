"""
Per-render view state: the output buffer of the render pass and the named
regions (layout, sidebars, ...) that templates hand to each other.
"""

from contextlib import contextmanager

from .buffers import OutputBuffer, StreamingBuffer
from .html import conditional_escape, escape
from .safestring import SafeString, mark_safe

__all__ = ["OutputFlow", "ViewContext"]


class OutputFlow:
    """Named store of safe content, filled by content_for and read by layouts."""

    def __init__(self):
        self.content = {}

    def get(self, key):
        return self.content.get(key)

    def set(self, key, value):
        self.content[key] = SafeString(conditional_escape(value))

    def append(self, key, value):
        existing = self.content.get(key, SafeString(""))
        self.content[key] = existing + SafeString(conditional_escape(value))

    def safe_append(self, key, value):
        existing = self.content.get(key, SafeString(""))
        self.content[key] = existing + SafeString(value)

    def keys(self):
        return self.content.keys()

    def __contains__(self, key):
        return key in self.content


class ViewContext:
    """
    The state a template render pass shares between templates.

    Assigning output_buffer after one is bound repoints the existing buffer
    object at the new buffer's frames, so references held elsewhere keep
    seeing the active output.
    """

    def __init__(self, output_buffer=None, escape=escape):
        self.view_flow = OutputFlow()
        self.escape = escape
        self._output_buffer = output_buffer

    @property
    def output_buffer(self):
        if self._output_buffer is None:
            self._output_buffer = OutputBuffer(escape=self.escape)
        return self._output_buffer

    @output_buffer.setter
    def output_buffer(self, other_buffer):
        if isinstance(self._output_buffer, OutputBuffer) and isinstance(
            other_buffer, OutputBuffer
        ):
            self._output_buffer.replace(other_buffer)
        else:
            self._output_buffer = other_buffer

    def layout_for(self, name=None):
        return mark_safe(self.view_flow.get(name or "layout") or "")

    def capture(self, func, *args, **kwargs):
        """
        Capture what func writes to output_buffer. A StreamingBuffer cannot
        nest, so while streaming the region is built in a transient
        OutputBuffer and the stream is restored afterwards.
        """
        buffer = self.output_buffer
        if not isinstance(buffer, StreamingBuffer):
            return buffer.capture(func, *args, **kwargs)
        self._output_buffer = OutputBuffer(escape=self.escape)
        try:
            return self._output_buffer.capture(func, *args, **kwargs)
        finally:
            self._output_buffer = buffer

    @contextmanager
    def with_output_buffer(self, frame=None):
        """
        Route writes to a fresh frame (or ``frame``) for the block. While
        streaming, the frame sits on a transient OutputBuffer and the stream
        is restored on exit.
        """
        buffer = self.output_buffer
        if isinstance(buffer, StreamingBuffer):
            self._output_buffer = OutputBuffer(escape=self.escape)
            try:
                with self.with_output_buffer(frame) as pushed:
                    yield pushed
            finally:
                self._output_buffer = buffer
            return
        depth = buffer.depth
        frame = buffer.push(frame)
        try:
            yield frame
        finally:
            del buffer.stack[depth:]

    def content_for(self, name, content=None, func=None, flush=False):
        """
        Store content under name for retrieval with layout_for(). func, when
        given, is captured and used instead of content. flush=True replaces
        what was stored before instead of appending to it.
        """
        if func is not None:
            content = self.capture(func)
        if content is None:
            return None
        if flush:
            self.view_flow.set(name, content)
        else:
            self.view_flow.append(name, content)
        return None

    def provide(self, name, content):
        self.view_flow.set(name, content)

    def has_content_for(self, name):
        return name in self.view_flow
