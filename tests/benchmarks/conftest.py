import pytest
from django.template import engines


@pytest.fixture
def buffered_engine():
    """Our buffered engine."""
    return engines["buffered"]


@pytest.fixture
def stock_engine():
    """Stock Django engine for comparison."""
    return engines["django"]
