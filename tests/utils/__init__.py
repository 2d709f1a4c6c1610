"""
Test utilities for tether.

Shared fakes standing in for models and view controls, and garbage
collection helpers.
"""

from .fakes import FakeControl, FakeModel
from .memory_utils import assert_collected, assert_no_object_leak, count_types

__all__ = [
    "FakeControl",
    "FakeModel",
    "assert_collected",
    "assert_no_object_leak",
    "count_types",
]
