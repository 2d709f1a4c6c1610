"""
Tether Property - Named, Typed, Observable Slots
================================================

A property is identified by its owner and a string key. It can read and write
the slot, report whether it is read-only, surface the owner's validation errors
for the key, and, when it carries a `BindingStrategy`, notify subscribers when
the slot changes.

Core Components
---------------

**BaseProperty**: Abstract interface shared by every property kind.

**Property**: Concrete property. Uses an injected getter/setter pair when given,
otherwise the generic `KeyValueAccessor`.

**ConvertedProperty**: Wraps another property with a pair of conversion
functions. Without a backwards conversion it is read-only.

**BindingStrategy**: Pluggable factory producing change subscriptions. Strategies
are stateless; they attach to whatever change signal the owner exposes.

Basic Usage
-----------

```python
person = Person()                          # a NotifyPropertyChanged subclass
name = person.get_property("name")
subscription = name.on_property_change(lambda p: print(p.value))
person.name = "Alice"                      # prints "Alice"
subscription.dispose()

upper = name.convert(str.upper)            # read-only converted view
```
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, List, Optional, TypeVar

from .accessors import KeyValueAccessor, get_default_accessor
from .errors import InvalidStateError, require_argument
from .events import Event, Subscription

T = TypeVar("T")
S = TypeVar("S")

PropertyAction = Callable[["BaseProperty"], None]


# ============================================================================
# BINDING STRATEGIES
# ============================================================================


class BindingStrategy(ABC):
    """Produces subscriptions delivering change notifications for a property."""

    @abstractmethod
    def subscribe(self, prop: "BaseProperty", action: PropertyAction) -> Subscription:
        """Invoke `action(prop)` whenever the property changes until disposed."""
        pass


class EventBindingStrategy(BindingStrategy):
    """
    Treats every emission of a named `Event` attribute of the owner as a change.

    Args:
        event_name: Attribute name of the owner's Event, e.g. "text_changed".
    """

    def __init__(self, event_name: str) -> None:
        self.event_name = require_argument(event_name, "event_name")

    def _event(self, owner: Any) -> Event:
        event = getattr(owner, self.event_name, None)
        if not isinstance(event, Event):
            raise InvalidStateError(
                f"{type(owner).__name__} has no event named '{self.event_name}'"
            )
        return event

    def subscribe(self, prop: "BaseProperty", action: PropertyAction) -> Subscription:
        require_argument(prop, "prop")
        require_argument(action, "action")
        return self._event(prop.owner).subscribe(self.adapt(prop, action))

    def adapt(self, prop: "BaseProperty", action: PropertyAction) -> Callable:
        def handler(*args: Any) -> None:
            action(prop)

        return handler

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.event_name!r})"


class NotifyPropertyChangedStrategy(EventBindingStrategy):
    """Subscribes to `property_changed` and filters by the property key."""

    def __init__(self) -> None:
        super().__init__("property_changed")

    def adapt(self, prop: "BaseProperty", action: PropertyAction) -> Callable:
        key = prop.key

        def handler(sender: Any, args: Any) -> None:
            if args.property_name == key:
                action(prop)

        return handler

    def __repr__(self) -> str:
        return "NotifyPropertyChangedStrategy()"


NOTIFY_PROPERTY_CHANGED = NotifyPropertyChangedStrategy()


# ============================================================================
# PROPERTIES
# ============================================================================


class BaseProperty(ABC, Generic[T]):
    """Interface of a property the binding engine can manage."""

    @property
    @abstractmethod
    def owner(self) -> Any:
        pass

    @property
    @abstractmethod
    def key(self) -> str:
        pass

    @property
    @abstractmethod
    def binding_strategy(self) -> Optional[BindingStrategy]:
        pass

    @property
    @abstractmethod
    def value(self) -> T:
        pass

    @value.setter
    @abstractmethod
    def value(self, value: T) -> None:
        pass

    @property
    @abstractmethod
    def property_type(self) -> Any:
        pass

    @property
    @abstractmethod
    def is_read_only(self) -> bool:
        pass

    @property
    @abstractmethod
    def errors(self) -> List[Any]:
        pass

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @abstractmethod
    def on_property_change(self, action: PropertyAction) -> Subscription:
        """Subscribe `action` to changes; dispose the result to unsubscribe."""
        pass

    def convert(
        self,
        to_target: Callable[[T], S],
        to_source: Optional[Callable[[S], T]] = None,
        property_type: Any = object,
    ) -> "ConvertedProperty[S, T]":
        return ConvertedProperty(self, to_target, to_source, property_type)

    def matches(self, key: str) -> bool:
        return self.key == key


class Property(BaseProperty[T]):
    """
    Property backed by an owner slot.

    Args:
        owner: Object containing the slot.
        key: Slot name.
        binding_strategy: Change tracking strategy; None disables subscriptions.
        getter: Optional `() -> value` replacing generic access for reads.
        setter: Optional `(value) -> None` replacing generic access for writes.
        property_type: Value type; inferred from the owner's class if omitted.
        accessor: Generic accessor; the process-wide default if omitted.
    """

    def __init__(
        self,
        owner: Any,
        key: str,
        binding_strategy: Optional[BindingStrategy] = None,
        getter: Optional[Callable[[], T]] = None,
        setter: Optional[Callable[[T], None]] = None,
        property_type: Any = None,
        accessor: Optional[KeyValueAccessor] = None,
    ) -> None:
        self._owner = require_argument(owner, "owner")
        self._key = require_argument(key, "key")
        self._binding_strategy = binding_strategy
        self._getter = getter
        self._setter = setter
        self._property_type = property_type
        self._accessor = accessor

    @property
    def accessor(self) -> KeyValueAccessor:
        return self._accessor or get_default_accessor()

    @property
    def owner(self) -> Any:
        return self._owner

    @property
    def key(self) -> str:
        return self._key

    @property
    def binding_strategy(self) -> Optional[BindingStrategy]:
        return self._binding_strategy

    @property
    def value(self) -> T:
        if self._getter is not None:
            return self._getter()
        return self.get_value()

    @value.setter
    def value(self, value: T) -> None:
        if self._setter is not None:
            self._setter(value)
        else:
            self.set_value(value)

    def get_value(self) -> T:
        """Read through the generic accessor. Override to customize."""
        return self.accessor.get(self._owner, self._key)

    def set_value(self, value: T) -> None:
        """Write through the generic accessor. Override to customize."""
        self.accessor.set(self._owner, self._key, value)

    @property
    def property_type(self) -> Any:
        if self._property_type is not None:
            return self._property_type
        return self.accessor.value_type(self._owner, self._key)

    @property
    def is_read_only(self) -> bool:
        if self._setter is not None:
            return False
        if self._getter is not None:
            return True
        return self.accessor.is_read_only(self._owner, self._key)

    @property
    def errors(self) -> List[Any]:
        get_errors = getattr(self._owner, "get_errors", None)
        if get_errors is None:
            return []
        return list(get_errors(self._key))

    def on_property_change(self, action: PropertyAction) -> Subscription:
        if self._binding_strategy is None:
            raise InvalidStateError(
                f"Property '{self._key}' does not support change tracking "
                f"(binding strategy is None)"
            )
        return self._binding_strategy.subscribe(self, action)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Property):
            return NotImplemented
        return self._owner is other._owner and self._key == other._key

    def __hash__(self) -> int:
        return hash((id(self._owner), self._key))

    def __repr__(self) -> str:
        return f"Property({type(self._owner).__name__}, {self._key!r})"


class ConvertedProperty(BaseProperty[T], Generic[T, S]):
    """View of a source property through conversion functions."""

    def __init__(
        self,
        source: BaseProperty[S],
        to_target: Callable[[S], T],
        to_source: Optional[Callable[[T], S]] = None,
        property_type: Any = object,
    ) -> None:
        self._source = require_argument(source, "source")
        self._to_target = require_argument(to_target, "to_target")
        self._to_source = to_source
        self._property_type = property_type

    @property
    def source(self) -> BaseProperty[S]:
        return self._source

    @property
    def owner(self) -> Any:
        return self._source.owner

    @property
    def key(self) -> str:
        return self._source.key

    @property
    def binding_strategy(self) -> Optional[BindingStrategy]:
        return self._source.binding_strategy

    @property
    def value(self) -> T:
        return self._to_target(self._source.value)

    @value.setter
    def value(self, value: T) -> None:
        if self.is_read_only:
            raise InvalidStateError("Cannot update read-only property")
        self._source.value = self._to_source(value)

    @property
    def property_type(self) -> Any:
        return self._property_type

    @property
    def is_read_only(self) -> bool:
        return self._to_source is None

    @property
    def errors(self) -> List[Any]:
        return self._source.errors

    def on_property_change(self, action: PropertyAction) -> Subscription:
        # Subscribers receive the converted property, not the wrapped one.
        return self._source.on_property_change(lambda _: action(self))

    def __repr__(self) -> str:
        return f"ConvertedProperty({self._source!r})"


def notifying_property(
    owner: Any,
    key: str,
    property_type: Any = None,
    accessor: Optional[KeyValueAccessor] = None,
) -> Property:
    """Property of a NotifyPropertyChanged owner, tracked through property_changed."""
    return Property(
        owner,
        key,
        NOTIFY_PROPERTY_CHANGED,
        property_type=property_type,
        accessor=accessor,
    )
