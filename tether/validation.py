"""
Tether Validation - Recorded, Never Raised
==========================================

A `Validator` records validation errors per property key. Nothing here raises:
a failed check adds a `ValidationError` and fires `errors_changed`, and views
bind to that state to show messages.

```python
validator = Validator()
validator.check_property("name", value).not_empty().min_length(2)
validator.has_errors_for_key("name")
```

Each `check_property()` call first forgets the key's previous errors, so a
property setter that re-checks its value always leaves the current verdict.
Checks in one chain stop at the first failure.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from .errors import require_argument
from .events import Event
from .property import EventBindingStrategy, Property


@dataclass(frozen=True)
class ValidationError:
    """One recorded validation failure."""

    key: str
    message: str
    value: Any = None


def _length(value: Any) -> int:
    return 0 if value is None else len(value)


class PropertyCheck:
    """Fluent checks over one value, recording failures on a Validator."""

    def __init__(self, validator: "Validator", key: str, value: Any) -> None:
        self.validator = validator
        self.key = key
        self.value = value
        self.failed = False

    def satisfies(self, predicate: Callable[[Any], bool], message: str) -> "PropertyCheck":
        if not self.failed and not predicate(self.value):
            self.failed = True
            self.validator.add(ValidationError(self.key, message, self.value))
        return self

    def not_none(self, message: Optional[str] = None) -> "PropertyCheck":
        return self.satisfies(
            lambda v: v is not None, message or f"{self.key} is required"
        )

    def not_empty(self, message: Optional[str] = None) -> "PropertyCheck":
        return self.satisfies(
            lambda v: _length(v) > 0, message or f"{self.key} must not be empty"
        )

    def min_length(self, length: int, message: Optional[str] = None) -> "PropertyCheck":
        return self.satisfies(
            lambda v: _length(v) >= length,
            message or f"{self.key} must be at least {length} characters long",
        )

    def max_length(self, length: int, message: Optional[str] = None) -> "PropertyCheck":
        return self.satisfies(
            lambda v: _length(v) <= length,
            message or f"{self.key} must be at most {length} characters long",
        )

    def is_in(self, values: Iterable[Any], message: Optional[str] = None) -> "PropertyCheck":
        allowed = list(values)
        return self.satisfies(
            lambda v: v in allowed,
            message or f"{self.key} must be one of {allowed!r}",
        )

    @property
    def valid(self) -> bool:
        return not self.failed


class Validator:
    """
    Per-key error store.

    `errors_changed` emits `(validator, key)` whenever the errors of `key`
    change; `key` is None when everything was cleared.
    """

    def __init__(self) -> None:
        self._errors: Dict[str, List[ValidationError]] = {}
        self.errors_changed = Event("errors_changed")

    def check_property(self, key: str, value: Any) -> PropertyCheck:
        require_argument(key, "key")
        self.clear_key(key)
        return PropertyCheck(self, key, value)

    def add(self, error: ValidationError) -> None:
        require_argument(error, "error")
        self._errors.setdefault(error.key, []).append(error)
        logging.debug(f"Validation error on '{error.key}': {error.message}")
        self.errors_changed.emit(self, error.key)

    def clear_key(self, key: str) -> None:
        if self._errors.pop(key, None):
            self.errors_changed.emit(self, key)

    def clear(self) -> None:
        if self._errors:
            self._errors.clear()
            self.errors_changed.emit(self, None)

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    def has_errors_for_key(self, key: str) -> bool:
        return bool(self._errors.get(key))

    def get_errors(self, key: Optional[str] = None) -> List[ValidationError]:
        """Errors for `key`, or every error when `key` is None."""
        if key is None:
            return self.errors
        return list(self._errors.get(key, ()))

    @property
    def errors(self) -> List[ValidationError]:
        return [error for errors in self._errors.values() for error in errors]

    def errors_property(self) -> Property:
        """Bindable read-only property tracking `errors` via `errors_changed`."""
        return Property(
            self,
            "errors",
            binding_strategy=EventBindingStrategy("errors_changed"),
            getter=lambda: self.errors,
            property_type=list,
        )

    def __repr__(self) -> str:
        return f"Validator(errors={len(self.errors)})"
