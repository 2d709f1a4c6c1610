"""
Tether Command Binding - Connecting Commands to Triggers
========================================================

A `CommandBinding` executes its source command whenever the target event
source fires, and keeps the target enabled exactly while the command can
execute.

Execution order for one trigger (when `enabled`):

1. `before_execute_action`
2. `command_started` (synchronous commands only)
3. parameter resolution: an explicit `parameter` wins; otherwise the target's
   `parameter_extractor` result, passed through `parameter_converter`
4. `command.execute(parameter)`
5. `after_execute_action` and `command_finished` (in a `finally` block;
   `command_finished` for synchronous commands only)

Async commands report start and finish through their `is_running` change
instead, so `command_started` / `command_finished` follow the real run.
"""

import logging
from typing import Any, Callable, Optional

from .binding import Binding
from .command import AsyncCommandBase, CommandBase
from .errors import require_state
from .event_source import EventSource
from .events import CompositeSubscription

CommandBindingAction = Callable[["CommandBinding"], None]


def default_update_target(binding: "CommandBinding") -> None:
    if binding.target is not None:
        parameter = binding.get_parameter(binding.target.owner, None)
        binding.target.set_enabled(binding.source.can_execute(parameter))


class CommandBinding(Binding):
    """
    Binding from a command (source) to an event source (target).

    Args:
        source: Command to execute.
        target: Event source triggering execution.
        parameter: Explicit execution parameter.
        enabled: Initial enabled flag.
    """

    def __init__(
        self,
        source: Optional[CommandBase] = None,
        target: Optional[EventSource] = None,
        parameter: Any = None,
        enabled: bool = True,
    ) -> None:
        self._source = source
        self._target = target
        self._subscriptions: Optional[CompositeSubscription] = None
        self.parameter = parameter
        self.parameter_converter: Optional[Callable[[Any], Any]] = None
        self.update_target_action: Optional[CommandBindingAction] = default_update_target
        self.before_execute_action: Optional[CommandBindingAction] = None
        self.after_execute_action: Optional[CommandBindingAction] = None
        self.command_started: Optional[CommandBindingAction] = None
        self.command_finished: Optional[CommandBindingAction] = None
        self.enabled = enabled

    @property
    def source(self) -> Optional[CommandBase]:
        return self._source

    @source.setter
    def source(self, value: CommandBase) -> None:
        require_state(not self.bound, "Cannot change source of a bound binding")
        self._source = value

    @property
    def target(self) -> Optional[EventSource]:
        return self._target

    @target.setter
    def target(self, value: EventSource) -> None:
        require_state(not self.bound, "Cannot change target of a bound binding")
        self._target = value

    @property
    def is_async(self) -> bool:
        return isinstance(self._source, AsyncCommandBase)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def bound(self) -> bool:
        return self._subscriptions is not None

    def bind(self) -> None:
        if self.bound:
            return
        require_state(self._source is not None, "Source is not set")
        subscriptions = CompositeSubscription(
            self._source.can_execute_changed.subscribe(self._can_execute_changed)
        )
        try:
            if self._target is not None:
                subscriptions.add(self._target.handler.subscribe(self._execute_command))
            if self.is_async:
                subscriptions.add(
                    self._source.property_changed.subscribe(self._command_property_changed)
                )
        except Exception:
            subscriptions.dispose()
            raise
        self._subscriptions = subscriptions
        logging.debug(f"Bound {self!r}")

    def unbind(self) -> None:
        if not self.bound:
            return
        self._subscriptions.dispose()
        self._subscriptions = None
        logging.debug(f"Unbound {self!r}")

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def get_parameter(self, sender: Any, args: Any) -> Any:
        parameter = self.parameter
        extractor = getattr(self._target, "parameter_extractor", None)
        if parameter is None and extractor is not None:
            parameter = extractor(sender, args)
            if self.parameter_converter is not None:
                parameter = self.parameter_converter(parameter)
        return parameter

    def _can_execute_changed(self, *args: Any) -> None:
        self.update_target()

    def _execute_command(self, sender: Any = None, args: Any = None) -> None:
        if not self.enabled:
            return
        is_async = self.is_async
        if self.before_execute_action is not None:
            self.before_execute_action(self)
        if not is_async and self.command_started is not None:
            self.command_started(self)
        parameter = self.get_parameter(sender, args)
        try:
            self._source.execute(parameter)
        finally:
            if self.after_execute_action is not None:
                self.after_execute_action(self)
            if not is_async and self.command_finished is not None:
                self.command_finished(self)

    def _command_property_changed(self, sender: Any, args: Any) -> None:
        if args.property_name != "is_running":
            return
        if sender.is_running:
            if self.command_started is not None:
                self.command_started(self)
        elif self.command_finished is not None:
            self.command_finished(self)

    def update_target(self) -> None:
        if self.enabled and self.update_target_action is not None:
            self.update_target_action(self)

    def update_source(self) -> None:
        raise NotImplementedError("Command bindings have no target to source flow")

    def __repr__(self) -> str:
        return f"CommandBinding(source={self._source!r}, target={self._target!r})"
