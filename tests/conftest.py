import pytest
from django.template import engines


@pytest.fixture
def buffered():
    return engines["buffered"].from_string


@pytest.fixture
def django_template():
    return engines["django"].from_string


@pytest.fixture
def assert_render(buffered, django_template):
    """Render with both engines and assert identical output."""

    def _assert(template_string, context, expected):
        django_result = django_template(template_string).render(context)
        buffered_result = buffered(template_string).render(context)
        assert django_result == expected
        assert buffered_result == expected

    return _assert


@pytest.fixture
def sink():
    """A list-backed sink for StreamingBuffer."""
    chunks = []

    def _sink(text):
        chunks.append(text)

    _sink.chunks = chunks
    return _sink
