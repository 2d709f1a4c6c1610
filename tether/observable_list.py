"""
Tether Observable List - A List That Reports Its Changes
========================================================

`ObservableList` is a mutable sequence raising two kinds of notifications:

- `property_changed` with `"Count"` (when the length changes) and `"Item[]"`
  (on every mutation)
- `collection_changed` with one `CollectionChangedEventArgs` per mutation

Every mutation follows the same order: check reentrancy, mutate, raise the
property notifications, raise exactly one collection event.

```python
items = ObservableList(["a", "b"])
items.collection_changed.subscribe(lambda sender, e: print(e.action, e.new_items))
items.append("c")          # CollectionChangeAction.ADD ['c']
items.move(0, 2)           # CollectionChangeAction.MOVE ['a']
```

Reentrancy
----------

While a collection event is being delivered the list is blocked. A subscriber
that mutates the list during delivery raises `ReentrancyError`, unless it is
the only subscriber (a single observer may safely react by editing the list).
"""

from collections.abc import MutableSequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Iterable, List, Optional, TypeVar, overload

from .errors import ReentrancyError, require_argument
from .events import Event
from .notify import NotifyPropertyChanged

T = TypeVar("T")

COUNT = "Count"
INDEXER = "Item[]"


class CollectionChangeAction(Enum):
    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    MOVE = "move"
    RESET = "reset"


@dataclass(frozen=True)
class CollectionChangedEventArgs:
    """
    Description of one collection change.

    Indices are -1 and item lists are None where they do not apply, e.g. a
    `RESET` carries neither.
    """

    action: CollectionChangeAction
    new_items: Optional[List[Any]] = None
    old_items: Optional[List[Any]] = None
    new_index: int = -1
    old_index: int = -1


class _ReentrancyMonitor:
    """Counts nested blocks; disposing releases one."""

    def __init__(self) -> None:
        self.busy_count = 0

    @property
    def busy(self) -> bool:
        return self.busy_count > 0

    def enter(self) -> "_ReentrancyMonitor":
        self.busy_count += 1
        return self

    def dispose(self) -> None:
        self.busy_count -= 1

    def __enter__(self) -> "_ReentrancyMonitor":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()


class ObservableList(NotifyPropertyChanged, MutableSequence, Generic[T]):
    """
    List raising change notifications.

    Args:
        items: Initial contents, copied.
    """

    def __init__(self, items: Iterable[T] = ()) -> None:
        require_argument(items, "items")
        super().__init__()
        self._items: List[T] = list(items)
        self._monitor = _ReentrancyMonitor()
        self.collection_changed = Event("collection_changed")

    # ------------------------------------------------------------------
    # Reentrancy
    # ------------------------------------------------------------------

    def block_reentrancy(self) -> _ReentrancyMonitor:
        """Block mutations from collection_changed subscribers until disposed."""
        return self._monitor.enter()

    def check_reentrancy(self) -> None:
        if self._monitor.busy and self.collection_changed.subscriber_count > 1:
            raise ReentrancyError(
                "Cannot change ObservableList during a collection_changed event"
            )

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _notify(self, args: CollectionChangedEventArgs, count_changed: bool = True) -> None:
        if count_changed:
            self.raise_property_changed(COUNT)
        self.raise_property_changed(INDEXER)
        if self.collection_changed.subscriber_count:
            with self.block_reentrancy():
                self.collection_changed.emit(self, args)

    def _index(self, index: int) -> int:
        if not isinstance(index, int):
            raise TypeError(f"list indices must be integers, not {type(index).__name__}")
        if index < 0:
            index += len(self._items)
        if not 0 <= index < len(self._items):
            raise IndexError("list index out of range")
        return index

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> List[T]: ...

    def __getitem__(self, index):
        return self._items[index]

    def __setitem__(self, index: int, item: T) -> None:
        if isinstance(index, slice):
            raise TypeError("ObservableList does not support slice assignment")
        index = self._index(index)
        self.check_reentrancy()
        old_item = self._items[index]
        self._items[index] = item
        self._notify(
            CollectionChangedEventArgs(
                CollectionChangeAction.REPLACE,
                new_items=[item],
                old_items=[old_item],
                new_index=index,
                old_index=index,
            ),
            count_changed=False,
        )

    def __delitem__(self, index: int) -> None:
        if isinstance(index, slice):
            raise TypeError("ObservableList does not support slice deletion; use remove_range")
        index = self._index(index)
        self.check_reentrancy()
        item = self._items.pop(index)
        self._notify(
            CollectionChangedEventArgs(
                CollectionChangeAction.REMOVE, old_items=[item], old_index=index
            )
        )

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ObservableList):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    __hash__ = None

    def insert(self, index: int, item: T) -> None:
        size = len(self._items)
        if index < 0:
            index = max(0, index + size)
        index = min(index, size)
        self.check_reentrancy()
        self._items.insert(index, item)
        self._notify(
            CollectionChangedEventArgs(
                CollectionChangeAction.ADD, new_items=[item], new_index=index
            )
        )

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def move(self, old_index: int, new_index: int) -> None:
        """Move the item at `old_index` so that it ends up at `new_index`."""
        old_index = self._index(old_index)
        new_index = self._index(new_index)
        self.check_reentrancy()
        item = self._items.pop(old_index)
        self._items.insert(new_index, item)
        self._notify(
            CollectionChangedEventArgs(
                CollectionChangeAction.MOVE,
                new_items=[item],
                old_items=[item],
                new_index=new_index,
                old_index=old_index,
            ),
            count_changed=False,
        )

    def insert_range(self, index: int, items: Iterable[T]) -> None:
        require_argument(items, "items")
        if not 0 <= index <= len(self._items):
            raise IndexError("insert_range index out of range")
        new_items = list(items)
        if not new_items:
            return
        self.check_reentrancy()
        self._items[index:index] = new_items
        self._notify(
            CollectionChangedEventArgs(
                CollectionChangeAction.ADD, new_items=new_items, new_index=index
            )
        )

    def extend(self, items: Iterable[T]) -> None:
        self.insert_range(len(self._items), items)

    add_range = extend

    def remove_range(self, start: int, count: int) -> None:
        if start < 0 or count < 0:
            raise IndexError("remove_range start and count must not be negative")
        if start + count > len(self._items):
            raise IndexError("remove_range range out of bounds")
        if count == 0:
            return
        self.check_reentrancy()
        old_items = self._items[start:start + count]
        del self._items[start:start + count]
        self._notify(
            CollectionChangedEventArgs(
                CollectionChangeAction.REMOVE, old_items=old_items, old_index=start
            )
        )

    def reset(self, items: Iterable[T]) -> None:
        """Replace the whole contents with `items` in a single RESET."""
        require_argument(items, "items")
        new_items = list(items)
        self.check_reentrancy()
        self._items = new_items
        self._notify(CollectionChangedEventArgs(CollectionChangeAction.RESET))

    def reverse(self) -> None:
        """Reverse in place, reported as a single RESET."""
        self.check_reentrancy()
        self._items.reverse()
        self._notify(
            CollectionChangedEventArgs(CollectionChangeAction.RESET), count_changed=False
        )

    def clear(self) -> None:
        self.check_reentrancy()
        self._items.clear()
        self._notify(CollectionChangedEventArgs(CollectionChangeAction.RESET))

    def __iadd__(self, items: Iterable[T]) -> "ObservableList[T]":
        self.extend(items)
        return self

    def __repr__(self) -> str:
        return f"ObservableList({self._items!r})"
