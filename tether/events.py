"""
Tether Events - Ordered Callback Registries
===========================================

This module provides the notification primitive every other tether component is
built on: an `Event` keeps an ordered list of callbacks and returns a disposable
`Subscription` for each one.

Delivery is synchronous and follows subscription order. Emission iterates over
a snapshot of the registry, so callbacks may subscribe or unsubscribe while an
event is being dispatched; a subscription disposed mid-dispatch receives no
further calls, including the remainder of the current dispatch.

Basic Usage
-----------

```python
changed = Event("changed")
subscription = changed.subscribe(lambda sender, key: print(key))
changed.emit(model, "name")   # prints "name"
subscription.dispose()
changed.emit(model, "name")   # nothing
```

Subscriptions are also context managers:

```python
with changed.subscribe(handler):
    changed.emit(model, "name")
```
"""

from typing import Any, Callable, List, Optional

from .errors import require_argument


class Subscription:
    """Disposable handle returned by `Event.subscribe`."""

    __slots__ = ("_event", "callback", "_active")

    def __init__(self, event: "Event", callback: Callable) -> None:
        self._event = event
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def dispose(self) -> None:
        """Stop delivery. Disposing twice is a no-op."""
        if not self._active:
            return
        self._active = False
        self._event._detach(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "active" if self._active else "disposed"
        return f"Subscription({self._event.name!r}, {state})"


class CompositeSubscription:
    """Several subscriptions disposed together."""

    def __init__(self, *subscriptions: Subscription) -> None:
        self._subscriptions = list(subscriptions)

    def add(self, subscription: Subscription) -> None:
        self._subscriptions.append(subscription)

    def dispose(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.dispose()

    def __enter__(self) -> "CompositeSubscription":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()


class Event:
    """
    Ordered registry of callbacks.

    Args:
        name: Name used in reprs and log messages.
        on_first_subscribe: Called when the registry goes from empty to one
            subscriber. Adapters use it to attach to an underlying signal lazily.
        on_last_unsubscribe: Called when the last subscriber leaves.
    """

    def __init__(
        self,
        name: str = "<event>",
        on_first_subscribe: Optional[Callable[[], None]] = None,
        on_last_unsubscribe: Optional[Callable[[], None]] = None,
    ) -> None:
        self.name = name
        self._subscriptions: List[Subscription] = []
        self._on_first_subscribe = on_first_subscribe
        self._on_last_unsubscribe = on_last_unsubscribe

    def subscribe(self, callback: Callable) -> Subscription:
        require_argument(callback, "callback")
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        if len(self._subscriptions) == 1 and self._on_first_subscribe is not None:
            try:
                self._on_first_subscribe()
            except Exception:
                subscription._active = False
                self._subscriptions.remove(subscription)
                raise
        return subscription

    def unsubscribe(self, callback: Callable) -> bool:
        """Remove the first subscription of callback. Returns whether one was found."""
        for subscription in self._subscriptions:
            if subscription.callback == callback:
                subscription.dispose()
                return True
        return False

    def _detach(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            return
        if not self._subscriptions and self._on_last_unsubscribe is not None:
            self._on_last_unsubscribe()

    def emit(self, *args: Any) -> None:
        for subscription in list(self._subscriptions):
            if subscription.active:
                subscription.callback(*args)

    def clear(self) -> None:
        for subscription in list(self._subscriptions):
            subscription.dispose()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __bool__(self) -> bool:
        # An Event with no subscribers is still a valid object.
        return True

    def __repr__(self) -> str:
        return f"Event({self.name!r}, subscribers={len(self._subscriptions)})"
