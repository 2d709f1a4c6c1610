"""
Shared pytest fixtures and configuration for tether tests.
"""

import pytest

from tests.utils.fakes import FakeControl, FakeModel
from tether.accessors import _reset_default_accessor


@pytest.fixture(autouse=True)
def reset_default_accessor():
    """Reset the process-wide accessor before each test to prevent state leakage."""
    _reset_default_accessor()


@pytest.fixture
def model():
    """Provide a fresh FakeModel."""
    return FakeModel("Alice", 30)


@pytest.fixture
def control():
    """Provide a fresh FakeControl."""
    return FakeControl()
