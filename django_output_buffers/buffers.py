"""
Output buffers for incremental HTML generation.

An OutputBuffer is a stack of OutputBufferFrame objects. Writes always go to
the top frame, so a nested region can be captured by pushing a frame,
rendering into it and popping it again. StreamingBuffer hands every fragment
to a sink callable instead of keeping it.
"""

import cython
from typing import Protocol, runtime_checkable

from .exceptions import StackUnderflowError, TypeConversionError
from .html import escape
from .safestring import SafeData, SafeString, is_safe

__all__ = ["OutputBuffer", "OutputBufferFrame", "StreamingBuffer", "TextSink"]


@runtime_checkable
class TextSink(Protocol):
    """Operations shared by frames and buffers."""

    def append(self, value): ...

    def safe_append(self, value): ...

    def presence(self): ...

    @property
    def html_safe(self): ...

    def __len__(self): ...

    def __str__(self): ...

    def __html__(self): ...

    def __bool__(self): ...


@cython.cfunc
def _coerce(value):
    """
    Return (text, safe) for a non-None value. Objects implementing __html__
    are rendered through it and count as safe.
    """
    try:
        if not is_safe(value):
            return str(value), False
        if isinstance(value, SafeData):
            return str(value), True
        text = value.__html__()
        if not isinstance(text, str):
            raise TypeError(
                "__html__ returned non-string (type %s)" % type(text).__name__
            )
        return text, True
    except (TypeError, ValueError) as exc:
        raise TypeConversionError(
            "%s value cannot be converted to a string" % type(value).__name__
        ) from exc


@cython.cclass
class OutputBufferFrame:
    """
    A single accumulation unit of an OutputBuffer.

    Unlike a bare SafeString, appending None is a no-op and any other value
    is converted with str() first:

        frame = OutputBufferFrame("hello")
        frame.append(5).append(None).append("<b>")
        str(frame)  # 'hello5&lt;b&gt;'

    A frame created with safe=False stores appended text verbatim until
    something is appended through safe_append(), which escapes what the
    frame holds at that point and marks it safe.
    """

    _parts = cython.declare(list)
    _length = cython.declare(cython.Py_ssize_t)
    _safe = cython.declare(cython.bint)
    _escape = cython.declare(object)

    def __init__(self, value=None, safe=True, escape=escape):
        self._parts = []
        self._length = 0
        self._safe = safe
        self._escape = escape
        if value is not None:
            self._write(_coerce(value)[0])

    @cython.cfunc
    def _write(self, text):
        if text:
            self._parts.append(text)
            self._length += len(text)

    @cython.cfunc
    def _content(self):
        parts: list = self._parts
        if not parts:
            return ""
        if len(parts) > 1:
            joined = "".join(parts)
            self._parts = [joined]
            return joined
        return parts[0]

    @cython.ccall
    def append(self, value):
        if value is None:
            return self
        text, safe = _coerce(value)
        if self._safe and not safe:
            text = self._escape(text)
        self._write(text)
        return self

    def concat(self, value):
        return self.append(value)

    @cython.ccall
    def safe_append(self, value):
        """
        Append already-escaped content verbatim and mark the frame safe.
        Content an unsafe frame held so far is escaped first.
        """
        if value is None:
            return self
        text = _coerce(value)[0]
        if not self._safe:
            content = self._content()
            self._parts = []
            self._length = 0
            self._write(self._escape(content))
            self._safe = True
        self._write(text)
        return self

    def safe_concat(self, value):
        return self.safe_append(value)

    @property
    def html_safe(self):
        return self._safe

    def presence(self):
        return self if self._length else None

    def __len__(self):
        return self._length

    def __bool__(self):
        return self._length > 0

    def __str__(self):
        content = self._content()
        if self._safe:
            return SafeString(content)
        return content

    def __html__(self):
        content = self._content()
        if self._safe:
            return SafeString(content)
        return SafeString(self._escape(content))

    def __eq__(self, other):
        return str(self) == other

    def __ne__(self, other):
        return not self.__eq__(other)

    def __repr__(self):
        return "<%s %r>" % (type(self).__name__, self._content())


@cython.cclass
class OutputBuffer:
    """
    A stack of OutputBufferFrame objects, writing to the top one.

        buf = OutputBuffer()
        buf.append("hello")
        buf.push()
        buf.append(" world")
        inner = buf.pop()
        buf.append("!")
        str(buf), str(inner)  # ('hello!', ' world')

    The initial value may be a string (seeds the root frame), a frame (which
    becomes the root frame and stays shared with whoever else holds it) or
    another OutputBuffer (its current content is copied into a fresh root
    frame; its lower frames are not).
    """

    _stack = cython.declare(list)
    _escape = cython.declare(object)

    def __init__(self, initial=None, escape=escape):
        self._escape = escape
        if isinstance(initial, OutputBuffer):
            current = initial.current
            frame = OutputBufferFrame(str(current), current.html_safe, escape)
        elif isinstance(initial, OutputBufferFrame):
            frame = initial
        else:
            frame = OutputBufferFrame(initial, True, escape)
        self._stack = [frame]

    @property
    def current(self):
        return self._stack[-1]

    @property
    def stack(self):
        return self._stack

    @property
    def depth(self):
        return len(self._stack)

    def make_frame(self, value=None):
        """Return a new safe frame using this buffer's escape function."""
        return OutputBufferFrame(value, True, self._escape)

    def push(self, frame=None):
        """Start a nested region. Writes go to the new frame until pop()."""
        if frame is None:
            frame = self.make_frame()
        self._stack.append(frame)
        return frame

    def pop(self):
        """Remove and return the top frame. The root frame is never popped."""
        if len(self._stack) < 2:
            raise StackUnderflowError("Cannot pop the root frame of an OutputBuffer.")
        return self._stack.pop()

    def replace(self, other):
        """Adopt the frame stack of another buffer."""
        if other is self:
            return
        self._stack = other.stack

    def capture(self, func, *args, **kwargs):
        """
        Call func with a fresh frame on top of the stack and return what it
        wrote as a SafeString. When nothing was written, a string returned by
        func is escaped and used instead; any other return value gives None.
        """
        depth: cython.Py_ssize_t = len(self._stack)
        self.push()
        try:
            value = func(*args, **kwargs)
        finally:
            # Frames func left pushed are discarded along with its own.
            frame = self._stack[depth]
            del self._stack[depth:]
        if frame:
            return frame.__html__()
        if isinstance(value, SafeData):
            return value
        if isinstance(value, str):
            return SafeString(self._escape(value))
        return None

    @cython.ccall
    def append(self, value):
        self._stack[-1].append(value)
        return self

    def concat(self, value):
        return self.append(value)

    @cython.ccall
    def safe_append(self, value):
        self._stack[-1].safe_append(value)
        return self

    def safe_concat(self, value):
        return self.safe_append(value)

    @property
    def html_safe(self):
        return self._stack[-1].html_safe

    def presence(self):
        return self if len(self._stack[-1]) else None

    def __len__(self):
        return len(self._stack[-1])

    def __bool__(self):
        return len(self._stack[-1]) > 0

    def __str__(self):
        return str(self._stack[-1])

    def __html__(self):
        return self._stack[-1].__html__()

    def __eq__(self, other):
        return str(self) == other

    def __ne__(self, other):
        return not self.__eq__(other)

    def __repr__(self):
        return "<%s depth=%d %r>" % (type(self).__name__, len(self._stack), str(self))


@cython.cclass
class StreamingBuffer:
    """
    Buffer that keeps nothing: every write is passed to sink(text) in call
    order, escaped unless it is already safe. It cannot capture nested
    regions; use a transient OutputBuffer for those.
    """

    _sink = cython.declare(object)
    _escape = cython.declare(object)

    def __init__(self, sink, escape=escape):
        self._sink = sink
        self._escape = escape

    @property
    def sink(self):
        return self._sink

    @cython.ccall
    def write(self, value):
        if value is None:
            value = ""
        text, safe = _coerce(value)
        if not safe:
            text = self._escape(text)
        self._sink(text)

    def append(self, value):
        self.write(value)

    def concat(self, value):
        self.write(value)

    @cython.ccall
    def safe_write(self, value):
        if value is None:
            value = ""
        self._sink(_coerce(value)[0])

    def safe_append(self, value):
        self.safe_write(value)

    def safe_concat(self, value):
        self.safe_write(value)

    @property
    def html_safe(self):
        return True
