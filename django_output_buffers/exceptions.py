"""Exceptions raised by the output buffers."""

__all__ = ["OutputBufferError", "StackUnderflowError", "TypeConversionError"]


class OutputBufferError(Exception):
    pass


class TypeConversionError(OutputBufferError, TypeError):
    """A value could not be converted to its display string."""


class StackUnderflowError(OutputBufferError, IndexError):
    """pop() was called on a buffer holding only its root frame."""
