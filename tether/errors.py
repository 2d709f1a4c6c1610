"""
Tether Errors - Exception Taxonomy
==================================

Configuration-contract violations fail fast at the call site, reentrancy
violations are raised synchronously, and validation failures are never raised
(see `tether.validation`).
"""

from typing import Any, Optional


class TetherError(Exception):
    """Base class for all tether errors."""

    pass


class InvalidArgumentError(TetherError, ValueError):
    """Null or otherwise invalid argument passed to a configuration call."""

    pass


class InvalidStateError(TetherError, RuntimeError):
    """Operation attempted in a state that forbids it."""

    pass


class ReentrancyError(InvalidStateError):
    """Collection changed while it is still dispatching a change event."""

    pass


class OperationCancelledError(TetherError):
    """Cooperative cancellation was requested through a CancellationToken."""

    pass


def require_argument(value: Any, name: str, message: Optional[str] = None) -> Any:
    """Raise InvalidArgumentError if value is None, otherwise return it."""
    if value is None:
        raise InvalidArgumentError(message or f"Argument '{name}' must not be None")
    return value


def require_state(condition: bool, message: str) -> None:
    """Raise InvalidStateError unless condition holds."""
    if not condition:
        raise InvalidStateError(message)
