"""
Tether - Two-Way Data Binding for Python View Models

Properties, bindings and commands connecting view models to views, with
editable, validated data contexts and observable lists.
"""

# Accessors and properties
from .accessors import (
    KeyValueAccessor,
    _reset_default_accessor,
    get_default_accessor,
    set_default_accessor,
)
from .binding import (
    DONT_UPDATE,
    Binding,
    ChangeSource,
    ObjectBinding,
    PropertyBinding,
)
from .binding_list import BindingList, WeakBindingList
from .builders import (
    CommandBindingBuilder,
    CommandBuilder,
    PropertyBindingBuilder,
    SourceBuilder,
    TargetBuilder,
)

# Commands
from .command import (
    AsyncCommand,
    AsyncCommandBase,
    CancelAsyncCommand,
    CancellationToken,
    CancellationTokenSource,
    Command,
    CommandBase,
    delay,
)
from .command_binding import CommandBinding

# Data context and validation
from .data_context import DataContext, dont_validate, field

# Exceptions
from .errors import (
    InvalidArgumentError,
    InvalidStateError,
    OperationCancelledError,
    ReentrancyError,
    TetherError,
)
from .event_source import EventHandlerSource, EventListSource, EventSource
from .events import CompositeSubscription, Event, Subscription
from .notify import ALL_PROPERTIES, NotifyPropertyChanged, PropertyChangedEventArgs
from .observable_list import (
    CollectionChangeAction,
    CollectionChangedEventArgs,
    ObservableList,
)
from .property import (
    NOTIFY_PROPERTY_CHANGED,
    BaseProperty,
    BindingStrategy,
    ConvertedProperty,
    EventBindingStrategy,
    NotifyPropertyChangedStrategy,
    Property,
    notifying_property,
)
from .validation import PropertyCheck, ValidationError, Validator

# Export all the main classes and functions
__all__ = [
    # Events
    "Event",
    "Subscription",
    "CompositeSubscription",
    "NotifyPropertyChanged",
    "PropertyChangedEventArgs",
    "ALL_PROPERTIES",
    # Properties
    "BaseProperty",
    "Property",
    "ConvertedProperty",
    "BindingStrategy",
    "EventBindingStrategy",
    "NotifyPropertyChangedStrategy",
    "NOTIFY_PROPERTY_CHANGED",
    "notifying_property",
    "KeyValueAccessor",
    "get_default_accessor",
    "set_default_accessor",
    # Bindings
    "Binding",
    "ChangeSource",
    "DONT_UPDATE",
    "PropertyBinding",
    "ObjectBinding",
    "CommandBinding",
    "BindingList",
    "WeakBindingList",
    # Builders
    "PropertyBindingBuilder",
    "SourceBuilder",
    "TargetBuilder",
    "CommandBindingBuilder",
    "CommandBuilder",
    # Commands
    "CommandBase",
    "Command",
    "AsyncCommandBase",
    "AsyncCommand",
    "CancelAsyncCommand",
    "CancellationToken",
    "CancellationTokenSource",
    "delay",
    # Event sources
    "EventSource",
    "EventHandlerSource",
    "EventListSource",
    # Data context
    "DataContext",
    "field",
    "dont_validate",
    "Validator",
    "PropertyCheck",
    "ValidationError",
    # Collections
    "ObservableList",
    "CollectionChangeAction",
    "CollectionChangedEventArgs",
    # Exceptions
    "TetherError",
    "InvalidArgumentError",
    "InvalidStateError",
    "ReentrancyError",
    "OperationCancelledError",
    # Testing utilities (internal use)
    "_reset_default_accessor",
]
