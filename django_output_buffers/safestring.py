"""
Safe string utilities for output buffers.

Re-exports Django's SafeData/SafeString types so that isinstance checks agree
with the template engine. A plain ``str`` is unsafe text, a ``SafeString`` is
text that may be emitted verbatim.
"""

import cython

from django.utils.safestring import SafeData, SafeString

__all__ = ["SafeData", "SafeString", "is_safe", "mark_safe"]


@cython.ccall
def mark_safe(s):
    """Mark a string as safe for HTML output."""
    if hasattr(s, "__html__"):
        return s
    return SafeString(s)


@cython.ccall
def is_safe(value) -> cython.bint:
    """Return True if value can be emitted without escaping."""
    if isinstance(value, SafeData):
        return True
    return hasattr(value, "__html__")
