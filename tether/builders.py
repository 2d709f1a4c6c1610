"""
Tether Builders - Fluent Binding Configuration
==============================================

Builders configure a single `PropertyBinding` or `CommandBinding` step by step.
Every step edits the same binding object, so the result is always one binding
with composed actions.

```python
bindings.add_property(model, "age") \\
    .convert(str, int) \\
    .to(age_field.get_property("text")) \\
    .after_source_update(lambda target, source: model.validate())

bindings.add_command(model.save) \\
    .when_started(show_spinner) \\
    .when_finished(hide_spinner) \\
    .to(EventHandlerSource(save_button, "clicked"))
```

Source-side hooks receive the source property. Target-side hooks receive
`(target, source)`.
"""

from typing import Any, Callable, Optional, Union

from .binding import ChangeSource, PropertyBinding, PropertyBindingAction
from .command import CommandBase
from .command_binding import CommandBinding, CommandBindingAction
from .errors import require_argument
from .event_source import EventSource
from .property import BaseProperty, notifying_property

SourceAction = Callable[[BaseProperty], None]
TargetAction = Callable[[BaseProperty, BaseProperty], None]


def _source_action(action: SourceAction) -> PropertyBindingAction:
    def run(binding: PropertyBinding, change: ChangeSource) -> None:
        action(binding.source)

    return run


def _target_action(action: TargetAction) -> PropertyBindingAction:
    def run(binding: PropertyBinding, change: ChangeSource) -> None:
        action(binding.target, binding.source)

    return run


def _before(
    first: PropertyBindingAction, then: PropertyBindingAction
) -> PropertyBindingAction:
    def run(binding: PropertyBinding, change: ChangeSource) -> None:
        first(binding, change)
        then(binding, change)

    return run


class SourceBuilder:
    """Configures a binding whose target is not set yet."""

    def __init__(self, binding: PropertyBinding) -> None:
        self.binding = require_argument(binding, "binding")

    def update_target(self, action: SourceAction) -> "SourceBuilder":
        self.binding.update_target_action = _source_action(action)
        return self

    def before_target_update(self, action: SourceAction) -> "SourceBuilder":
        self.binding.update_target_action = _before(
            _source_action(action), self.binding.update_target_action
        )
        return self

    def after_target_update(self, action: SourceAction) -> "SourceBuilder":
        self.binding.update_target_action = _before(
            self.binding.update_target_action, _source_action(action)
        )
        return self

    def convert(
        self,
        to_target: Callable[[Any], Any],
        to_source: Optional[Callable[[Any], Any]] = None,
        property_type: Any = object,
    ) -> "SourceBuilder":
        self.binding.source = self.binding.source.convert(
            to_target, to_source, property_type
        )
        return self

    def to(self, target: BaseProperty) -> "TargetBuilder":
        self.binding.target = target
        return TargetBuilder(self.binding)


class TargetBuilder:
    """Configures a binding with both ends set."""

    def __init__(self, binding: PropertyBinding) -> None:
        self.binding = require_argument(binding, "binding")

    def update_target(self, action: TargetAction) -> "TargetBuilder":
        self.binding.update_target_action = _target_action(action)
        return self

    def update_source(self, action: TargetAction) -> "TargetBuilder":
        self.binding.update_source_action = _target_action(action)
        return self

    def before_target_update(self, action: TargetAction) -> "TargetBuilder":
        self.binding.update_target_action = _before(
            _target_action(action), self.binding.update_target_action
        )
        return self

    def after_target_update(self, action: TargetAction) -> "TargetBuilder":
        self.binding.update_target_action = _before(
            self.binding.update_target_action, _target_action(action)
        )
        return self

    def before_source_update(self, action: TargetAction) -> "TargetBuilder":
        self.binding.update_source_action = _before(
            _target_action(action), self.binding.update_source_action
        )
        return self

    def after_source_update(self, action: TargetAction) -> "TargetBuilder":
        self.binding.update_source_action = _before(
            self.binding.update_source_action, _target_action(action)
        )
        return self

    def one_way(self) -> "TargetBuilder":
        """Target follows source; target changes are not written back."""
        self.binding.dont_update_source()
        return self

    def one_way_to_source(self) -> "TargetBuilder":
        """Write the target into the source once, then stop updating the source."""
        binding = self.binding
        old_action = binding.update_source_action

        def init_and_stop(b: PropertyBinding, change: ChangeSource) -> None:
            old_action(b, change)
            b.dont_update_source()

        binding.update_source_action = init_and_stop
        return self


class PropertyBindingBuilder:
    """Entry point for fluent property bindings."""

    @staticmethod
    def create(
        source: Union[BaseProperty, PropertyBinding, Any], key: Optional[str] = None
    ) -> SourceBuilder:
        """
        Start a builder.

        Args:
            source: A property, an existing PropertyBinding, or a notifying
                owner object when `key` is given.
            key: Property name on the owner.
        """
        require_argument(source, "source")
        if key is not None:
            return SourceBuilder(PropertyBinding(source=notifying_property(source, key)))
        if isinstance(source, PropertyBinding):
            return SourceBuilder(source)
        return SourceBuilder(PropertyBinding(source=source))


class CommandBuilder:
    """Configures a CommandBinding."""

    def __init__(self, binding: CommandBinding) -> None:
        self.binding = require_argument(binding, "binding")

    def before_execute(self, action: CommandBindingAction) -> "CommandBuilder":
        self.binding.before_execute_action = action
        return self

    def after_execute(self, action: CommandBindingAction) -> "CommandBuilder":
        self.binding.after_execute_action = action
        return self

    def when_started(self, action: CommandBindingAction) -> "CommandBuilder":
        self.binding.command_started = action
        return self

    def when_finished(self, action: CommandBindingAction) -> "CommandBuilder":
        self.binding.command_finished = action
        return self

    def disabled(self) -> "CommandBuilder":
        self.binding.enabled = False
        return self

    def parameter_converter(self, converter: Callable[[Any], Any]) -> "CommandBuilder":
        self.binding.parameter_converter = converter
        return self

    def to(self, source: EventSource, parameter: Any = None) -> CommandBinding:
        self.binding.target = source
        self.binding.parameter = parameter
        return self.binding


class CommandBindingBuilder:
    """Entry point for fluent command bindings."""

    @staticmethod
    def create(command: Union[CommandBase, CommandBinding]) -> CommandBuilder:
        require_argument(command, "command")
        if isinstance(command, CommandBinding):
            return CommandBuilder(command)
        return CommandBuilder(CommandBinding(source=command))
