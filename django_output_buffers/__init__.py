from .buffers import OutputBuffer, OutputBufferFrame, StreamingBuffer, TextSink
from .exceptions import OutputBufferError, StackUnderflowError, TypeConversionError

__all__ = [
    "OutputBuffer",
    "OutputBufferError",
    "OutputBufferFrame",
    "StackUnderflowError",
    "StreamingBuffer",
    "TextSink",
    "TypeConversionError",
]
