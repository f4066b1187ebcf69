from django.template import TemplateDoesNotExist
from django.template.backends.django import DjangoTemplates, reraise
from django.template.context import make_context
from django.utils.module_loading import import_string

from .buffers import OutputBuffer, StreamingBuffer
from .context import ViewContext

DEFAULT_ESCAPE = "django_output_buffers.html.escape"
TAG_LIBRARY = "django_output_buffers.templatetags.output_buffers"


class BufferedTemplates(DjangoTemplates):
    """DjangoTemplates backend that renders through an OutputBuffer.

    Extra OPTIONS:
        escape: dotted path of the escape function used by the buffers.

    The output_buffers tag library is always installed as a builtin.
    """

    def __init__(self, params):
        params = params.copy()
        options = params.pop("OPTIONS").copy()
        self.escape = import_string(options.pop("escape", DEFAULT_ESCAPE))
        builtins = list(options.get("builtins", []))
        if TAG_LIBRARY not in builtins:
            builtins.append(TAG_LIBRARY)
        options["builtins"] = builtins
        params["OPTIONS"] = options
        super().__init__(params)
        self._template_cache = {}

    def from_string(self, template_code):
        return _Template(self.engine.from_string(template_code), self)

    def get_template(self, template_name):
        cached = self._template_cache.get(template_name)
        if cached is not None:
            return cached
        try:
            result = _Template(self.engine.get_template(template_name), self)
        except TemplateDoesNotExist as exc:
            reraise(exc, self)
        self._template_cache[template_name] = result
        return result


def _write_nodes(template, context, buffer):
    """
    Render the top-level nodes of template into buffer one at a time,
    yielding after each node. Node output is already escaped by the nodes
    themselves, so it goes through safe_append.
    """
    with context.render_context.push_state(template):
        if context.template is None:
            with context.bind_template(template):
                context.template_name = template.name
                for node in template.nodelist:
                    buffer.safe_append(node.render_annotated(context))
                    yield
        else:
            for node in template.nodelist:
                buffer.safe_append(node.render_annotated(context))
                yield


class _Template:
    """Backend template wrapper that writes into buffers."""

    __slots__ = ("template", "backend")

    def __init__(self, template, backend):
        self.template = template
        self.backend = backend

    @property
    def origin(self):
        return self.template.origin

    def _make_context(self, context, request):
        ctx = make_context(
            context, request, autoescape=self.backend.engine.autoescape
        )
        view = ViewContext(escape=self.backend.escape)
        ctx.view_context = view
        return ctx, view

    def render(self, context=None, request=None, layout=None):
        """
        Render to a SafeString. With layout, the rendered body is provided as
        the "layout" region and the layout template is rendered in its place.
        """
        ctx, view = self._make_context(context, request)
        try:
            for _ in _write_nodes(self.template, ctx, view.output_buffer):
                pass
            if layout is None:
                return view.output_buffer.__html__()
            view.provide("layout", view.output_buffer)
            view.output_buffer = OutputBuffer(escape=self.backend.escape)
            layout_template = self.backend.get_template(layout).template
            for _ in _write_nodes(layout_template, ctx, view.output_buffer):
                pass
            return view.output_buffer.__html__()
        except TemplateDoesNotExist as exc:
            reraise(exc, self.backend)

    def stream(self, context=None, request=None, sink=None):
        """
        Render top-level nodes straight to sink(text). Without a sink, return
        a generator over the chunks. Tags writing to the view's output_buffer
        write to the stream too; captured regions are built in a transient
        in-memory OutputBuffer.
        """
        if sink is None:
            return self._iter_chunks(context, request)
        ctx, view = self._make_context(context, request)
        view.output_buffer = StreamingBuffer(sink, self.backend.escape)
        try:
            for _ in _write_nodes(self.template, ctx, view.output_buffer):
                pass
        except TemplateDoesNotExist as exc:
            reraise(exc, self.backend)

    def _iter_chunks(self, context, request):
        ctx, view = self._make_context(context, request)
        chunks = []
        view.output_buffer = StreamingBuffer(chunks.append, self.backend.escape)
        try:
            for _ in _write_nodes(self.template, ctx, view.output_buffer):
                yield from chunks
                chunks.clear()
        except TemplateDoesNotExist as exc:
            reraise(exc, self.backend)
