"""
Weak Collection - Non-Owning Ordered Membership
===============================================

`WeakCollection` stores members through weak references in an arena of slots.
Membership never keeps a member alive. Dead slots are skipped by every read
and returned to a free list, so iteration, counting and removal never fail
because a member was garbage collected.

Slots are reused from the free list, but iteration order always follows
insertion order: each slot carries a monotonically increasing sequence number.
"""

import weakref
from typing import Callable, Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")


class _Slot:
    __slots__ = ("ref", "sequence")

    def __init__(self, ref: Optional[weakref.ref], sequence: int) -> None:
        self.ref = ref
        self.sequence = sequence

    def get(self):
        return self.ref() if self.ref is not None else None


class WeakCollection(Generic[T]):
    """Ordered collection of weakly referenced members."""

    def __init__(self) -> None:
        self._slots: List[_Slot] = []
        self._free_list: List[int] = []
        self._sequence = 0

    def add(self, item: T) -> None:
        self.purge()
        self._sequence += 1
        slot = _Slot(weakref.ref(item), self._sequence)
        if self._free_list:
            self._slots[self._free_list.pop()] = slot
        else:
            self._slots.append(slot)

    def remove(self, item: T) -> bool:
        """Remove `item` (by identity). Returns whether it was a live member."""
        for index, slot in enumerate(self._slots):
            if slot.get() is item:
                self._release(index)
                return True
        return False

    def _release(self, index: int) -> None:
        self._slots[index].ref = None
        self._free_list.append(index)

    def purge(self) -> None:
        """Release every slot whose member has been collected."""
        for index, slot in enumerate(self._slots):
            if slot.ref is not None and slot.ref() is None:
                self._release(index)

    def clear(self) -> None:
        self._slots.clear()
        self._free_list.clear()

    def live(self) -> List[T]:
        """Strong references to the live members, in insertion order."""
        ordered = sorted(
            (slot for slot in self._slots if slot.ref is not None),
            key=lambda slot: slot.sequence,
        )
        members = []
        for slot in ordered:
            item = slot.get()
            if item is not None:
                members.append(item)
        return members

    def for_each(self, action: Callable[[T], None]) -> None:
        for item in self.live():
            action(item)

    def all(self, predicate: Callable[[T], bool]) -> bool:
        return all(predicate(item) for item in self.live())

    @property
    def complete_count(self) -> int:
        """Number of live members."""
        return len(self.live())

    def __iter__(self) -> Iterator[T]:
        return iter(self.live())

    def __len__(self) -> int:
        return self.complete_count

    def __contains__(self, item: object) -> bool:
        return any(member is item for member in self.live())
