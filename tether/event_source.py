"""
Tether Event Sources - Triggers for Command Bindings
====================================================

An event source adapts some owner's event (a button click, a list selection)
into the uniform shape a `CommandBinding` consumes:

- `handler`: an `Event` emitting `(sender, args)` whenever the owner fires
- `set_enabled(enabled)`: reflects the command's availability on the owner
- `parameter_extractor`: optional `(sender, args) -> parameter`. Outside a
  trigger (when a binding refreshes the enabled state) it is called as
  `(owner, None)`, so extractors must accept `args=None`

Both adapters attach to the owner's event lazily: only while `handler` has at
least one subscriber.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from .errors import InvalidStateError, require_argument
from .events import Event, Subscription

ParameterExtractor = Callable[[Any, Any], Any]
SetEnabledAction = Callable[[Any, bool], None]


def _owner_event(owner: Any, event_name: str) -> Event:
    event = getattr(owner, event_name, None)
    if not isinstance(event, Event):
        raise InvalidStateError(
            f"{type(owner).__name__}.{event_name} is not an Event"
        )
    return event


def _split(args: tuple, default_sender: Any):
    sender = args[0] if args else default_sender
    event_args = args[1] if len(args) > 1 else None
    return sender, event_args


class EventSource(ABC):
    """
    Uniform trigger consumed by CommandBinding.

    `parameter_extractor(sender, args)` receives `args=None` when called
    outside a trigger.
    """

    parameter_extractor: Optional[ParameterExtractor] = None

    @property
    @abstractmethod
    def owner(self) -> Any:
        pass

    @property
    @abstractmethod
    def handler(self) -> Event:
        pass

    @abstractmethod
    def set_enabled(self, enabled: bool) -> None:
        pass


class EventHandlerSource(EventSource):
    """
    Event source over one owner's `Event` attribute.

    Args:
        owner: Object exposing the event.
        event_name: Attribute name of the event on the owner.
        set_enabled_action: Called as `(owner, enabled)` by `set_enabled`.
        parameter_extractor: Extracts the command parameter from `(sender, args)`.
    """

    def __init__(
        self,
        owner: Any,
        event_name: str,
        set_enabled_action: Optional[SetEnabledAction] = None,
        parameter_extractor: Optional[ParameterExtractor] = None,
    ) -> None:
        self._owner = require_argument(owner, "owner")
        self.event_name = require_argument(event_name, "event_name")
        self.set_enabled_action = set_enabled_action
        self.parameter_extractor = parameter_extractor
        self._owner_subscription: Optional[Subscription] = None
        self._handler = Event(
            f"{event_name}.handler",
            on_first_subscribe=self._attach,
            on_last_unsubscribe=self._detach,
        )

    @property
    def owner(self) -> Any:
        return self._owner

    @property
    def handler(self) -> Event:
        return self._handler

    @property
    def attached(self) -> bool:
        return self._owner_subscription is not None

    def set_enabled(self, enabled: bool) -> None:
        if self.set_enabled_action is not None:
            self.set_enabled_action(self._owner, enabled)

    def _attach(self) -> None:
        event = _owner_event(self._owner, self.event_name)
        self._owner_subscription = event.subscribe(self._handle_owner_event)
        logging.debug(f"Attached to {type(self._owner).__name__}.{self.event_name}")

    def _detach(self) -> None:
        if self._owner_subscription is not None:
            self._owner_subscription.dispose()
            self._owner_subscription = None

    def _handle_owner_event(self, *args: Any) -> None:
        sender, event_args = _split(args, self._owner)
        self._handler.emit(sender, event_args)

    def __repr__(self) -> str:
        return f"EventHandlerSource({type(self._owner).__name__}.{self.event_name})"


class EventListSource(EventSource):
    """
    One trigger over the same event of many owners.

    Each owner may be registered with a replacement sender that is reported
    instead of the owner when its event fires.

    ```python
    source = EventListSource("clicked", set_enabled_action=set_button_enabled)
    for row, button in zip(rows, buttons):
        source.listen(button, replacement_sender=row)
    ```
    """

    def __init__(
        self,
        event_name: str,
        set_enabled_action: Optional[SetEnabledAction] = None,
        parameter_extractor: Optional[ParameterExtractor] = None,
    ) -> None:
        self.event_name = require_argument(event_name, "event_name")
        self.set_enabled_action = set_enabled_action
        self.parameter_extractor = parameter_extractor
        self._owners: List[Any] = []
        self._replacement_senders: List[Any] = []
        self._owner_subscriptions: List[Subscription] = []
        self._handler = Event(
            f"{event_name}.handler",
            on_first_subscribe=self._attach,
            on_last_unsubscribe=self._detach,
        )

    @property
    def owner(self) -> List[Any]:
        return self._owners

    @property
    def owners(self) -> List[Any]:
        return self._owners

    @property
    def handler(self) -> Event:
        return self._handler

    def listen(self, owner: Any, replacement_sender: Any = None) -> None:
        require_argument(owner, "owner")
        self._owners.append(owner)
        self._replacement_senders.append(replacement_sender)
        if self._handler.subscriber_count > 0:
            self._subscribe_owner(len(self._owners) - 1)

    def set_enabled(self, enabled: bool) -> None:
        if self.set_enabled_action is None:
            return
        for owner in self._owners:
            self.set_enabled_action(owner, enabled)

    def _subscribe_owner(self, index: int) -> None:
        owner = self._owners[index]

        def forward(*args: Any) -> None:
            self._handle_owner_event(index, args)

        event = _owner_event(owner, self.event_name)
        self._owner_subscriptions.append(event.subscribe(forward))

    def _attach(self) -> None:
        for index in range(len(self._owners)):
            self._subscribe_owner(index)

    def _detach(self) -> None:
        for subscription in self._owner_subscriptions:
            subscription.dispose()
        self._owner_subscriptions.clear()

    def _handle_owner_event(self, index: int, args: tuple) -> None:
        sender, event_args = _split(args, self._owners[index])
        replacement = self._replacement_senders[index]
        self._handler.emit(sender if replacement is None else replacement, event_args)

    def __repr__(self) -> str:
        return f"EventListSource({self.event_name!r}, owners={len(self._owners)})"
