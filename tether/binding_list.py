"""
Tether Binding List - Managing Many Bindings at Once
====================================================

A view model usually owns one `BindingList` holding all of its bindings, so
they are enabled, disabled, bound and unbound together.

```python
bindings = BindingList()
bindings.add_property(model, "name").to(control.get_property("text"))
bindings.add_command(save_command).to(save_button_source)
bindings.bind()          # binds every member
bindings.update_target() # pushes model data into the view
```

Rules:

- `enabled` reads as the AND of all members and writes to every member.
- `bound` is a list-level flag flipped only by `bind()` / `unbind()`.
- A binding added to an already bound list is bound and updated immediately.

`WeakBindingList` offers the same contract but does not keep its members alive;
members that have been garbage collected are skipped and dropped.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterator, List, Optional

from .binding import Binding, ObjectBinding
from .errors import require_argument
from .util.weak_collection import WeakCollection

if TYPE_CHECKING:
    from .builders import CommandBuilder, SourceBuilder
    from .notify import PropertyChangedEventArgs
    from .property import BaseProperty


class BindingList(Binding):
    """Ordered collection of bindings driven as one."""

    def __init__(self) -> None:
        self._bindings: List[Binding] = []
        self._bound = False

    # Storage hooks, overridden by WeakBindingList.

    def _members(self) -> List[Binding]:
        return list(self._bindings)

    def _store(self, binding: Binding) -> None:
        self._bindings.append(binding)

    def _discard(self, binding: Binding) -> bool:
        for index, member in enumerate(self._bindings):
            if member is binding:
                del self._bindings[index]
                return True
        return False

    def _drop_all(self) -> None:
        self._bindings.clear()

    # Membership

    def add(self, binding: Binding) -> Binding:
        require_argument(binding, "binding")
        binding.enabled = self.enabled
        self._store(binding)
        if self._bound:
            binding.bind()
            binding.update_target()
        return binding

    def remove(self, binding: Binding) -> bool:
        require_argument(binding, "binding")
        if self._discard(binding):
            binding.unbind()
            return True
        return False

    def clear(self) -> None:
        self.unbind()
        self._drop_all()

    # Binding contract

    def bind(self) -> None:
        for binding in self._members():
            binding.bind()
        self._bound = True
        logging.debug(f"Bound {type(self).__name__} with {len(self)} bindings")

    def unbind(self) -> None:
        for binding in self._members():
            binding.unbind()
        self._bound = False

    @property
    def bound(self) -> bool:
        return self._bound

    def update_target(self) -> None:
        for binding in self._members():
            binding.update_target()

    def update_source(self) -> None:
        for binding in self._members():
            binding.update_source()

    @property
    def enabled(self) -> bool:
        return all(binding.enabled for binding in self._members())

    @enabled.setter
    def enabled(self, value: bool) -> None:
        for binding in self._members():
            binding.enabled = value

    @property
    def count(self) -> int:
        return len(self._members())

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[Binding]:
        return iter(self._members())

    def __contains__(self, binding: object) -> bool:
        return any(member is binding for member in self._members())

    # Fluent helpers

    def add_property(
        self, source: Any, key: Optional[str] = None
    ) -> "SourceBuilder":
        """
        Start a property binding and add it to this list.

        `source` is either a property, or an owner combined with `key`, in which
        case the owner's `property_changed` event drives change tracking.
        """
        from .builders import PropertyBindingBuilder

        builder = PropertyBindingBuilder.create(source, key)
        self.add(builder.binding)
        return builder

    def add_command(self, command: Any) -> "CommandBuilder":
        """Start a command binding and add it to this list."""
        from .builders import CommandBindingBuilder

        builder = CommandBindingBuilder.create(command)
        self.add(builder.binding)
        return builder

    def add_object(
        self,
        source: Any,
        handler: Callable[[Any, "PropertyChangedEventArgs"], None],
    ) -> ObjectBinding:
        """Forward every property change of `source` to `handler`."""
        return self.add(ObjectBinding(source, handler))


class WeakBindingList(BindingList):
    """BindingList that does not keep its members alive."""

    def __init__(self) -> None:
        super().__init__()
        self._weak_bindings: WeakCollection[Binding] = WeakCollection()

    def _members(self) -> List[Binding]:
        return self._weak_bindings.live()

    def _store(self, binding: Binding) -> None:
        self._weak_bindings.add(binding)

    def _discard(self, binding: Binding) -> bool:
        return self._weak_bindings.remove(binding)

    def _drop_all(self) -> None:
        self._weak_bindings.clear()

    @property
    def count(self) -> int:
        return self._weak_bindings.complete_count
