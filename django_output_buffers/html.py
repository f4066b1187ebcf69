"""
HTML escaping used by the output buffers.

Provides escape() and conditional_escape() with C-level character scanning
that skips html.escape() entirely when no special chars are present.
"""

import cython
import html as _html

from django.utils.safestring import SafeData, SafeString

__all__ = ["conditional_escape", "escape"]


@cython.cfunc
def _fast_escape_str(s: str):
    """
    C-level HTML escape: scan string chars for <, >, &, ", '.
    If none found, return the original string unchanged (zero allocation).
    Only calls html.escape when actually needed.
    """
    c: cython.Py_UCS4
    for c in s:
        if c == '<' or c == '>' or c == '&' or c == '"' or c == "'":
            return _html.escape(s)
    return s


@cython.ccall
def escape(text):
    """
    Return the given text with ampersands, quotes and angle brackets encoded
    for use in HTML. Always escape input, even if already marked safe.
    """
    return SafeString(_fast_escape_str(str(text)))


@cython.ccall
def conditional_escape(text):
    """
    Similar to escape(), except that it doesn't operate on pre-escaped strings.
    """
    if isinstance(text, SafeData):
        return text
    if hasattr(text, "__html__"):
        return text.__html__()
    return SafeString(_fast_escape_str(str(text)))
