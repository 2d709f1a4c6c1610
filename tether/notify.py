"""
Tether Notify - Property Change Notification
============================================

`NotifyPropertyChanged` is the mixin every bindable owner in tether implements:
it exposes a `property_changed` event delivering `(sender, PropertyChangedEventArgs)`
to subscribers in subscription order.

```python
class Person(NotifyPropertyChanged):
    def __init__(self):
        super().__init__()
        self._name = ""

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value
        self.raise_property_changed("name")
```

`Person().get_property("name")` returns a `Property` that tracks changes through
that event (see `tether.property`).
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .events import Event

if TYPE_CHECKING:
    from .property import Property

# Property name used when every property of the sender may have changed.
ALL_PROPERTIES = ""


@dataclass(frozen=True)
class PropertyChangedEventArgs:
    """Arguments of a property_changed notification."""

    property_name: str


class NotifyPropertyChanged:
    """Mixin providing a `property_changed` event."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._property_changed = Event("property_changed")

    @property
    def property_changed(self) -> Event:
        # Subclasses that skip __init__ still get an event.
        try:
            return self._property_changed
        except AttributeError:
            self._property_changed = Event("property_changed")
            return self._property_changed

    def raise_property_changed(self, property_name: str) -> None:
        self.property_changed.emit(self, PropertyChangedEventArgs(property_name))

    def get_property(self, key: str) -> "Property":
        """Return a Property for `key` that tracks changes via property_changed."""
        from .property import notifying_property

        return notifying_property(self, key)
