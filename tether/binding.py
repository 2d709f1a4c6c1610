"""
Tether Binding - Keeping Two Properties in Sync
===============================================

A `PropertyBinding` composes a source property (usually a model) and a target
property (usually a view). While bound it listens to both and moves data across
with its configurable update actions.

Lifecycle
---------

constructed → configured (source, target, actions) → `bind()` → synchronization
events → `unbind()`. A binding can be bound again after unbinding. `source` and
`target` cannot be reassigned while bound.

Feedback loops
--------------

Updating the target from the source usually makes the target emit its own
change notification, which would update the source again. Each binding keeps an
in-progress flag: while one of its actions runs, further update requests on
that binding are ignored.

One-way bindings
----------------

Setting an action to `DONT_UPDATE` disables that direction entirely:

```python
binding.dont_update_source()      # model -> view only
binding.updates_source            # False
```
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Optional

from .errors import InvalidStateError, require_argument, require_state
from .events import Subscription
from .notify import ALL_PROPERTIES, PropertyChangedEventArgs
from .property import BaseProperty


class ChangeSource(Enum):
    """Which side an update action writes to."""

    SOURCE = "source"
    TARGET = "target"


PropertyBindingAction = Callable[["PropertyBinding", ChangeSource], None]


class Binding(ABC):
    """Common contract of everything that can be bound, unbound and updated."""

    enabled: bool

    @abstractmethod
    def bind(self) -> None:
        """Start listening to events."""
        pass

    @abstractmethod
    def unbind(self) -> None:
        """Stop listening to events."""
        pass

    @property
    @abstractmethod
    def bound(self) -> bool:
        pass

    @abstractmethod
    def update_target(self) -> None:
        """Move data from source to target."""
        pass

    @abstractmethod
    def update_source(self) -> None:
        """Move data from target to source."""
        pass


def _dont_update(binding: "PropertyBinding", change: ChangeSource) -> None:
    pass


DONT_UPDATE: PropertyBindingAction = _dont_update


def default_update_target(binding: "PropertyBinding", change: ChangeSource) -> None:
    if binding.target is not None and not binding.target.is_read_only:
        binding.target.value = binding.source.value


def default_update_source(binding: "PropertyBinding", change: ChangeSource) -> None:
    if binding.target is not None and not binding.source.is_read_only:
        binding.source.value = binding.target.value


class PropertyBinding(Binding):
    """
    Binding between a source and a target property.

    Args:
        source: Source property (required before `bind()`).
        target: Target property (optional; without it only update actions run).
        enabled: Initial enabled flag.
    """

    def __init__(
        self,
        source: Optional[BaseProperty] = None,
        target: Optional[BaseProperty] = None,
        enabled: bool = True,
    ) -> None:
        self._source: Optional[BaseProperty] = None
        self._target: Optional[BaseProperty] = None
        self._source_subscription: Optional[Subscription] = None
        self._target_subscription: Optional[Subscription] = None
        self._update_target_action: PropertyBindingAction = default_update_target
        self._update_source_action: PropertyBindingAction = default_update_source
        self._performing_action = False
        self.enabled = enabled
        if source is not None:
            self.source = source
        if target is not None:
            self.target = target

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def source(self) -> Optional[BaseProperty]:
        return self._source

    @source.setter
    def source(self, value: BaseProperty) -> None:
        require_argument(value, "source")
        require_state(not self.bound, "Cannot change source of a bound binding")
        self._source = value

    @property
    def target(self) -> Optional[BaseProperty]:
        return self._target

    @target.setter
    def target(self, value: BaseProperty) -> None:
        require_argument(value, "target")
        require_state(not self.bound, "Cannot change target of a bound binding")
        self._target = value

    @property
    def update_target_action(self) -> PropertyBindingAction:
        return self._update_target_action

    @update_target_action.setter
    def update_target_action(self, action: PropertyBindingAction) -> None:
        self._update_target_action = require_argument(action, "update_target_action")

    @property
    def update_source_action(self) -> PropertyBindingAction:
        return self._update_source_action

    @update_source_action.setter
    def update_source_action(self, action: PropertyBindingAction) -> None:
        self._update_source_action = require_argument(action, "update_source_action")

    def dont_update_target(self) -> None:
        self._update_target_action = DONT_UPDATE

    def dont_update_source(self) -> None:
        self._update_source_action = DONT_UPDATE

    @property
    def updates_target(self) -> bool:
        return self._update_target_action is not DONT_UPDATE

    @property
    def updates_source(self) -> bool:
        return self._update_source_action is not DONT_UPDATE

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def bound(self) -> bool:
        return self._source_subscription is not None

    def bind(self) -> None:
        if self.bound:
            return
        require_state(self._source is not None, "Source is not set")
        self._source_subscription = self._source.on_property_change(self._source_changed)
        if self._target is not None:
            try:
                self._target_subscription = self._target.on_property_change(
                    self._target_changed
                )
            except InvalidStateError:
                self._source_subscription.dispose()
                self._source_subscription = None
                raise
        logging.debug(f"Bound {self!r}")

    def unbind(self) -> None:
        if not self.bound:
            return
        self._source_subscription.dispose()
        self._source_subscription = None
        if self._target_subscription is not None:
            self._target_subscription.dispose()
            self._target_subscription = None
        logging.debug(f"Unbound {self!r}")

    def _source_changed(self, _: BaseProperty) -> None:
        self.update_target()

    def _target_changed(self, _: BaseProperty) -> None:
        self.update_source()

    # ------------------------------------------------------------------
    # Synchronization
    # ------------------------------------------------------------------

    def update_target(self) -> None:
        if self.updates_target:
            self._perform(self._update_target_action, ChangeSource.TARGET)

    def update_source(self) -> None:
        if self.updates_source:
            self._perform(self._update_source_action, ChangeSource.SOURCE)

    @property
    def updating(self) -> bool:
        """True while one of this binding's update actions runs."""
        return self._performing_action

    def _perform(self, action: PropertyBindingAction, change: ChangeSource) -> None:
        if not self.enabled or self._performing_action:
            return
        require_state(self._source is not None, "Source is not set")
        self._performing_action = True
        try:
            action(self, change)
        finally:
            self._performing_action = False

    def __repr__(self) -> str:
        return f"PropertyBinding(source={self._source!r}, target={self._target!r})"


class ObjectBinding(Binding):
    """
    Forwards every property change of a notifying object to a handler.

    The handler receives `(sender, PropertyChangedEventArgs)`. `update_target()`
    forwards a notification for all properties (empty property name).
    """

    def __init__(
        self,
        source: Any = None,
        handler: Optional[Callable[[Any, PropertyChangedEventArgs], None]] = None,
        enabled: bool = True,
    ) -> None:
        self._source = None
        self._handler = None
        self._subscription: Optional[Subscription] = None
        self.enabled = enabled
        if source is not None:
            self.source = source
        if handler is not None:
            self.handler = handler

    @property
    def source(self) -> Any:
        return self._source

    @source.setter
    def source(self, value: Any) -> None:
        require_argument(value, "source")
        require_state(not self.bound, "Cannot change source of a bound binding")
        self._source = value

    @property
    def handler(self) -> Optional[Callable[[Any, PropertyChangedEventArgs], None]]:
        return self._handler

    @handler.setter
    def handler(self, value: Callable[[Any, PropertyChangedEventArgs], None]) -> None:
        self._handler = require_argument(value, "handler")

    @property
    def bound(self) -> bool:
        return self._subscription is not None

    def bind(self) -> None:
        if self.bound:
            return
        require_state(self._source is not None, "Source is not set")
        event = getattr(self._source, "property_changed", None)
        if event is None:
            raise InvalidStateError(
                f"{type(self._source).__name__} does not notify property changes"
            )
        self._subscription = event.subscribe(self._source_changed)

    def unbind(self) -> None:
        if not self.bound:
            return
        self._subscription.dispose()
        self._subscription = None

    def _source_changed(self, sender: Any, args: PropertyChangedEventArgs) -> None:
        if self.enabled and self._handler is not None:
            self._handler(self._source, args)

    def update_target(self) -> None:
        self._source_changed(self._source, PropertyChangedEventArgs(ALL_PROPERTIES))

    def update_source(self) -> None:
        pass
