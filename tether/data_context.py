"""
Tether Data Context - Editable, Validated View Model Base
=========================================================

`DataContext` is the base class for view models that edit data interactively.
It combines three things:

**Change notification**: every committed change raises `property_changed`.

**Edit transactions**: `begin_edit()` opens a transaction; the first write to a
property inside it captures the property's original value; `cancel_edit()`
restores the originals, `end_edit()` keeps the current values.

**Validation**: setters check their input against the context's `Validator`.
Failures are recorded, never raised. `validate()` sweeps every read-write
property so errors exist for untouched required fields too.

Basic Usage
-----------

```python
class Company(DataContext):
    name = field(validate=lambda check: check.not_empty().min_length(2))
    industry = field(validate=lambda check: check.is_in(INDUSTRIES))

company = Company()
company.has_errors            # True, nothing entered yet

with company.edit():
    company.name = "Acme"     # original value captured, has_changes is True
    raise Cancelled()         # leaving with an exception cancels the edit
```

Events
------

- `"editing"` when a transaction opens or closes
- `"has_changes"` on the first captured value and when a transaction closes
- the property key for every committed change

No ordinary change notifications are raised while `validating` is True.
"""

import logging
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from .accessors import KeyValueAccessor, get_default_accessor
from .binding_list import BindingList
from .events import Event
from .notify import NotifyPropertyChanged, PropertyChangedEventArgs
from .validation import PropertyCheck, ValidationError, Validator

_MISSING = object()


def dont_validate(attribute: Any) -> Any:
    """
    Exclude a property or field from the `validate()` sweep.

    Works on `field` instances and on `property` objects (apply it above
    `@property`, before the setter is attached, or to the finished property).
    """
    target = attribute.fget if isinstance(attribute, property) else attribute
    target.dont_validate = True
    return attribute


def _skips_validation(attribute: Any) -> bool:
    if getattr(attribute, "dont_validate", False):
        return True
    fget = getattr(attribute, "fget", None)
    return fget is not None and getattr(fget, "dont_validate", False)


class field:
    """
    Guarded DataContext attribute.

    Writes are validated, remembered for edit transactions and committed with
    a change notification. Equal values are not committed.

    Args:
        default: Value returned before the first write.
        default_factory: Called once per instance to produce the default.
        validate: `validate(check)` receiving a `PropertyCheck` for the new value.
        value_type: Declared value type, reported through `Property.property_type`.
    """

    def __init__(
        self,
        default: Any = None,
        *,
        default_factory: Optional[Callable[[], Any]] = None,
        validate: Optional[Callable[[PropertyCheck], Any]] = None,
        value_type: Any = object,
    ) -> None:
        self.default = default
        self.default_factory = default_factory
        self.validate = validate
        self.value_type = value_type
        self.dont_validate = False
        self.name: Optional[str] = None
        self.storage: Optional[str] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self.storage = f"_field_{name}"

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        value = instance.__dict__.get(self.storage, _MISSING)
        if value is _MISSING:
            value = self.default_factory() if self.default_factory else self.default
            instance.__dict__[self.storage] = value
        return value

    def __set__(self, instance: "DataContext", value: Any) -> None:
        if self.validate is not None:
            self.validate(instance.validator.check_property(self.name, value))
        instance.set_field(self.name, self.storage, value)

    def __repr__(self) -> str:
        return f"field({self.name!r})"


class DataContext(NotifyPropertyChanged):
    """
    Base class for editable, validated view models.

    Args:
        accessor: Generic accessor used to capture, restore and sweep
            properties; the process-wide default if omitted.
    """

    def __init__(self, accessor: Optional[KeyValueAccessor] = None) -> None:
        super().__init__()
        self._accessor = accessor
        self._originals: Optional[Dict[str, Any]] = None
        self._validator: Optional[Validator] = None
        self._validating = False
        self._bindings: Optional[BindingList] = None

    @property
    def accessor(self) -> KeyValueAccessor:
        return self._accessor or get_default_accessor()

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def raise_property_changed(self, property_name: str) -> None:
        if not self._validating:
            super().raise_property_changed(property_name)

    def set_field(self, key: str, storage: str, value: Any) -> bool:
        """
        Commit `value` into the instance slot `storage` for property `key`.

        Returns False when nothing was committed: during validation, or when
        the value equals the current one.
        """
        current = getattr(self, key)
        if self._validating or current == value:
            return False
        self.remember(key)
        self.__dict__[storage] = value
        self.raise_property_changed(key)
        return True

    # ------------------------------------------------------------------
    # Edit transactions
    # ------------------------------------------------------------------

    @property
    def editing(self) -> bool:
        return self._originals is not None

    @property
    def has_changes(self) -> bool:
        return bool(self._originals)

    @property
    def changes(self) -> Mapping[str, Any]:
        """Captured original values of the open transaction, keyed by property."""
        return MappingProxyType(self._originals if self._originals is not None else {})

    def remember(self, key: str) -> None:
        """Capture the current value of `key` unless already captured."""
        if not self.editing or self._validating or key in self._originals:
            return
        self._originals[key] = self.accessor.get(self, key)
        if len(self._originals) == 1:
            self.raise_property_changed("has_changes")

    def remember_and_begin_edit(self, key: str) -> None:
        if not self.editing:
            self.begin_edit()
        self.remember(key)

    def begin_edit(self) -> None:
        if self.editing:
            return
        self._originals = {}
        self.on_begin_edit()
        logging.debug(f"{type(self).__name__}: edit started")
        self.raise_property_changed("editing")

    def cancel_edit(self) -> None:
        if not self.editing:
            return
        self.on_cancel_edit()
        # Restore while the map still exists so restoring does not recapture.
        for key, original in list(self._originals.items()):
            self.accessor.set(self, key, original)
        self._originals = None
        logging.debug(f"{type(self).__name__}: edit cancelled")
        self.raise_property_changed("has_changes")
        self.raise_property_changed("editing")

    def end_edit(self) -> None:
        if not self.editing:
            return
        self.on_end_edit()
        self._originals = None
        logging.debug(f"{type(self).__name__}: edit ended")
        self.raise_property_changed("has_changes")
        self.raise_property_changed("editing")

    @contextmanager
    def edit(self) -> Iterator["DataContext"]:
        """Open a transaction; end it on success, cancel it on exception."""
        self.begin_edit()
        try:
            yield self
        except BaseException:
            self.cancel_edit()
            raise
        else:
            self.end_edit()

    def on_begin_edit(self) -> None:
        pass

    def on_cancel_edit(self) -> None:
        pass

    def on_end_edit(self) -> None:
        pass

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @property
    def validator(self) -> Validator:
        if self._validator is None:
            self._validator = Validator()
            if not self._validating:
                self.validate()
        return self._validator

    @property
    def validating(self) -> bool:
        return self._validating

    def validate(self) -> bool:
        """
        Re-check every read-write property.

        Each property not marked with `dont_validate` is read and written back
        through the accessor, so its setter records errors without committing
        anything. `on_validate()` runs afterwards. Once done, one change
        notification is raised per property with errors.

        Returns:
            True if any errors were found.
        """
        self._validating = True
        properties = self.accessor.describe(type(self))
        try:
            self.validator.clear()
            for info in properties:
                if info.readable and info.writable and not _skips_validation(
                    info.attribute
                ):
                    value = self.accessor.get(self, info.key)
                    self.accessor.set(self, info.key, value)
            self.on_validate()
        finally:
            for info in properties:
                if self.validator.has_errors_for_key(info.key):
                    self.property_changed.emit(
                        self, PropertyChangedEventArgs(info.key)
                    )
            self._validating = False
        has_errors = self.validator.has_errors
        if has_errors:
            logging.debug(
                f"{type(self).__name__}: validation found {len(self.validator.errors)} errors"
            )
        return has_errors

    def on_validate(self) -> None:
        pass

    @property
    def errors_changed(self) -> Event:
        return self.validator.errors_changed

    def get_errors(self, key: Optional[str] = None) -> List[ValidationError]:
        return self.validator.get_errors(key)

    @property
    def has_errors(self) -> bool:
        return self.validator.has_errors

    def has_errors_for_key(self, key: str) -> bool:
        return self.validator.has_errors_for_key(key)

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------

    @property
    def bindings(self) -> BindingList:
        if self._bindings is None:
            self._bindings = BindingList()
        return self._bindings
