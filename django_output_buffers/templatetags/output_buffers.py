"""
Template tags for capturing regions into the render's output buffer.

capture and content_for write each child node's output into the pushed
frame as soon as it renders, so a tag that writes straight to
view_context(context).output_buffer lands in order among its siblings.
Stock block tags such as {% if %} or {% for %} return their output as one
string; direct writes nested inside them end up ahead of that string.
"""

import warnings

from django import template
from django.conf import settings
from django.utils.safestring import SafeString

from django_output_buffers.context import ViewContext

register = template.Library()


def view_context(context):
    """Return the ViewContext attached to a template Context, creating it on first use."""
    view = getattr(context, "view_context", None)
    if view is None:
        view = ViewContext()
        context.view_context = view
    return view


def _write_nodelist(view, nodelist, context):
    # Node output is already escaped by the nodes themselves.
    for node in nodelist:
        view.output_buffer.safe_append(node.render_annotated(context))


def _region_name(bits, tag_name):
    if len(bits) != 2:
        raise template.TemplateSyntaxError(
            f"'{tag_name}' tag requires exactly one argument, got {len(bits) - 1}"
        )
    name = bits[1]
    if len(name) >= 2 and name[0] == name[-1] and name[0] in "\"'":
        name = name[1:-1]
    return name


class CaptureNode(template.Node):
    """{% capture var %}...{% endcapture %} binds the rendered block to var."""

    def __init__(self, varname, nodelist):
        self.varname = varname
        self.nodelist = nodelist

    def render(self, context):
        view = view_context(context)
        captured = view.capture(
            lambda: _write_nodelist(view, self.nodelist, context)
        )
        context[self.varname] = SafeString("") if captured is None else captured
        return ""


class ContentForNode(template.Node):
    """{% content_for name %}...{% endcontent_for %} adds to a named region."""

    def __init__(self, name, nodelist):
        self.name = name
        self.nodelist = nodelist

    def render(self, context):
        view = view_context(context)
        view.content_for(
            self.name, func=lambda: _write_nodelist(view, self.nodelist, context)
        )
        return ""


class YieldContentNode(template.Node):
    child_nodelists = ()

    def __init__(self, name):
        self.name = name

    def render(self, context):
        view = view_context(context)
        name = self.name or "layout"
        if settings.DEBUG and not view.has_content_for(name):
            warnings.warn(
                f"{{% yield_content {name} %}} was used, but no content was "
                "provided for that region.",
                RuntimeWarning,
            )
        return view.layout_for(name)


@register.tag("capture")
def do_capture(parser, token):
    bits = token.split_contents()
    varname = _region_name(bits, "capture")
    nodelist = parser.parse(("endcapture",))
    parser.delete_first_token()
    return CaptureNode(varname, nodelist)


@register.tag("content_for")
def do_content_for(parser, token):
    bits = token.split_contents()
    name = _region_name(bits, "content_for")
    nodelist = parser.parse(("endcontent_for",))
    parser.delete_first_token()
    return ContentForNode(name, nodelist)


@register.tag("yield_content")
def do_yield_content(parser, token):
    bits = token.split_contents()
    if len(bits) == 1:
        return YieldContentNode(None)
    return YieldContentNode(_region_name(bits, "yield_content"))
