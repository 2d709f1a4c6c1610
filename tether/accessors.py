"""
Tether Accessors - Generic Owner-Keyed Property Access
======================================================

A `Property` without an explicit getter/setter pair reads and writes its slot
through a `KeyValueAccessor`. The accessor answers three questions about an
`(owner, key)` pair: what is the value, how is it written, and is it read-only.

Resolution
----------

For every `(owner type, key)` the accessor builds an `AccessorEntry` once and
caches it in an LRU cache:

1. An explicit registration made with `register()` on the owner type or one of
   its bases wins.
2. Otherwise the class attribute named `key` is inspected. A `property` is
   read-only when it has no setter; any other data descriptor is writable unless
   it sets a truthy `read_only` attribute; a method or other non-data attribute
   is read-only.
3. Otherwise the key is treated as a plain instance attribute.

`describe()` lists the class-level properties of a type in definition order
(base classes first) and is what `DataContext.validate()` sweeps over.

Configuration
-------------

Most code uses the process-wide default returned by `get_default_accessor()`.
Tests reset it with `_reset_default_accessor()`.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from cachetools import LRUCache

from .errors import InvalidStateError, require_argument


@dataclass(frozen=True)
class AccessorEntry:
    """Resolved read/write functions for one (owner type, key) pair."""

    key: str
    getter: Callable[[Any], Any]
    setter: Optional[Callable[[Any, Any], None]]
    value_type: Any = object
    attribute: Any = None

    @property
    def read_only(self) -> bool:
        return self.setter is None


@dataclass(frozen=True)
class PropertyInfo:
    """A class-level property as reported by `KeyValueAccessor.describe`."""

    key: str
    readable: bool
    writable: bool
    attribute: Any


def _find_class_attribute(owner_type: type, key: str) -> Tuple[bool, Any]:
    for klass in owner_type.__mro__:
        if key in klass.__dict__:
            return True, klass.__dict__[key]
    return False, None


def _annotation_for(owner_type: type, key: str) -> Any:
    for klass in owner_type.__mro__:
        annotations = klass.__dict__.get("__annotations__", {})
        if key in annotations:
            return annotations[key]
    return object


def _is_data_descriptor(attribute: Any) -> bool:
    return hasattr(type(attribute), "__set__") or hasattr(type(attribute), "__delete__")


class KeyValueAccessor:
    """
    Reads and writes named slots of arbitrary owners.

    Args:
        cache_size: Maximum number of resolved (owner type, key) entries kept.
    """

    def __init__(self, cache_size: int = 4096) -> None:
        self._registrations: Dict[Tuple[type, str], AccessorEntry] = {}
        self._cache = LRUCache(maxsize=cache_size)
        self._describe_cache = LRUCache(maxsize=max(16, cache_size // 16))

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        owner_type: type,
        key: str,
        getter: Callable[[Any], Any],
        setter: Optional[Callable[[Any, Any], None]] = None,
        value_type: Any = object,
    ) -> None:
        """Register explicit accessors for `key` on `owner_type` and its subclasses."""
        require_argument(owner_type, "owner_type")
        require_argument(key, "key")
        require_argument(getter, "getter")
        self._registrations[(owner_type, key)] = AccessorEntry(
            key, getter, setter, value_type
        )
        self._cache.clear()
        self._describe_cache.clear()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def entry(self, owner_type: type, key: str) -> AccessorEntry:
        cache_key = (owner_type, key)
        entry = self._cache.get(cache_key)
        if entry is None:
            entry = self._resolve(owner_type, key)
            self._cache[cache_key] = entry
        return entry

    def _resolve(self, owner_type: type, key: str) -> AccessorEntry:
        for klass in owner_type.__mro__:
            registered = self._registrations.get((klass, key))
            if registered is not None:
                return registered

        found, attribute = _find_class_attribute(owner_type, key)

        def getter(owner: Any) -> Any:
            return getattr(owner, key)

        def setter(owner: Any, value: Any) -> None:
            setattr(owner, key, value)

        if not found:
            return AccessorEntry(
                key, getter, setter, _annotation_for(owner_type, key)
            )

        if isinstance(attribute, property):
            value_type = object
            if attribute.fget is not None:
                value_type = inspect.signature(attribute.fget).return_annotation
                if value_type is inspect.Signature.empty:
                    value_type = object
            return AccessorEntry(
                key,
                getter,
                setter if attribute.fset is not None else None,
                value_type,
                attribute,
            )

        if _is_data_descriptor(attribute):
            writable = hasattr(type(attribute), "__set__") and not getattr(
                attribute, "read_only", False
            )
            return AccessorEntry(
                key,
                getter,
                setter if writable else None,
                getattr(attribute, "value_type", _annotation_for(owner_type, key)),
                attribute,
            )

        if callable(attribute) or isinstance(attribute, (staticmethod, classmethod)):
            return AccessorEntry(key, getter, None, object, attribute)

        # Plain class attribute used as a default for an instance attribute.
        return AccessorEntry(key, getter, setter, _annotation_for(owner_type, key))

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self, owner: Any, key: str) -> Any:
        require_argument(owner, "owner")
        return self.entry(type(owner), key).getter(owner)

    def set(self, owner: Any, key: str, value: Any) -> None:
        require_argument(owner, "owner")
        entry = self.entry(type(owner), key)
        if entry.setter is None:
            raise InvalidStateError(
                f"Property '{key}' of {type(owner).__name__} is read-only"
            )
        entry.setter(owner, value)

    def is_read_only(self, owner: Any, key: str) -> bool:
        require_argument(owner, "owner")
        return self.entry(type(owner), key).read_only

    def value_type(self, owner: Any, key: str) -> Any:
        require_argument(owner, "owner")
        return self.entry(type(owner), key).value_type

    def describe(self, owner_type: type) -> List[PropertyInfo]:
        """List public class-level properties of `owner_type`, base classes first."""
        cached = self._describe_cache.get(owner_type)
        if cached is not None:
            return cached

        seen: Dict[str, PropertyInfo] = {}
        for klass in reversed(owner_type.__mro__):
            for key, attribute in klass.__dict__.items():
                if key.startswith("_"):
                    continue
                if not isinstance(attribute, property) and not _is_data_descriptor(
                    attribute
                ):
                    continue
                entry = self.entry(owner_type, key)
                seen.pop(key, None)
                seen[key] = PropertyInfo(
                    key,
                    readable=True,
                    writable=not entry.read_only,
                    attribute=attribute,
                )
        for (klass, key), entry in self._registrations.items():
            if issubclass(owner_type, klass) and key not in seen:
                seen[key] = PropertyInfo(
                    key, readable=True, writable=not entry.read_only, attribute=None
                )

        properties = list(seen.values())
        self._describe_cache[owner_type] = properties
        return properties

    def clear_cache(self) -> None:
        self._cache.clear()
        self._describe_cache.clear()


_default_accessor: Optional[KeyValueAccessor] = None


def get_default_accessor() -> KeyValueAccessor:
    """
    Get or create the process-wide accessor.

    Lazy singleton: created on first access and reused thereafter.
    """
    global _default_accessor
    if _default_accessor is None:
        _default_accessor = KeyValueAccessor()
    return _default_accessor


def set_default_accessor(accessor: KeyValueAccessor) -> None:
    global _default_accessor
    _default_accessor = require_argument(accessor, "accessor")


def _reset_default_accessor() -> None:
    """Reset the process-wide accessor (for testing)."""
    global _default_accessor
    _default_accessor = None
