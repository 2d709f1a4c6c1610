"""Unit tests for ObservableList."""

import pytest

from tether import (
    CollectionChangeAction,
    CollectionChangedEventArgs,
    InvalidArgumentError,
    ObservableList,
    ReentrancyError,
)


def record(collection):
    """Subscribe recorders for both notification kinds."""
    properties, changes = [], []
    collection.property_changed.subscribe(
        lambda sender, args: properties.append(args.property_name)
    )
    collection.collection_changed.subscribe(lambda sender, args: changes.append(args))
    return properties, changes


@pytest.mark.unit
@pytest.mark.collection
def test_constructor_copies_its_input():
    """The list owns a copy of the initial items"""
    source = [3]
    collection = ObservableList(source)

    collection.append(5)

    assert source == [3]
    assert collection == [3, 5]


@pytest.mark.unit
@pytest.mark.collection
def test_constructor_rejects_none():
    """None is not an iterable of items"""
    with pytest.raises(InvalidArgumentError):
        ObservableList(None)


@pytest.mark.unit
@pytest.mark.collection
def test_insert_raises_add():
    """insert reports an ADD at the insertion index"""
    collection = ObservableList()
    properties, changes = record(collection)

    collection.insert(0, 5)

    assert properties == ["Count", "Item[]"]
    assert changes == [
        CollectionChangedEventArgs(CollectionChangeAction.ADD, new_items=[5], new_index=0)
    ]
    assert changes[0].old_items is None
    assert changes[0].old_index == -1


@pytest.mark.unit
@pytest.mark.collection
def test_append_reports_the_end_index():
    """append is an insert at the end"""
    collection = ObservableList("AB")
    _, changes = record(collection)

    collection.append("C")

    assert changes[0].new_index == 2


@pytest.mark.unit
@pytest.mark.collection
def test_delete_raises_remove():
    """Removing by index or by value reports a REMOVE"""
    collection = ObservableList("ABC")
    properties, changes = record(collection)

    collection.remove("B")
    del collection[0]

    assert properties == ["Count", "Item[]", "Count", "Item[]"]
    assert changes == [
        CollectionChangedEventArgs(CollectionChangeAction.REMOVE, old_items=["B"], old_index=1),
        CollectionChangedEventArgs(CollectionChangeAction.REMOVE, old_items=["A"], old_index=0),
    ]
    assert collection == ["C"]


@pytest.mark.unit
@pytest.mark.collection
def test_pop_with_negative_index():
    """Negative indices are reported as positions"""
    collection = ObservableList("ABC")
    _, changes = record(collection)

    assert collection.pop() == "C"
    assert changes[0].old_index == 2


@pytest.mark.unit
@pytest.mark.collection
def test_set_raises_replace_without_count():
    """Replacing an item only raises Item[] and a REPLACE"""
    collection = ObservableList("ABC")
    properties, changes = record(collection)

    collection[2] = "I"

    assert properties == ["Item[]"]
    assert changes == [
        CollectionChangedEventArgs(
            CollectionChangeAction.REPLACE,
            new_items=["I"],
            old_items=["C"],
            new_index=2,
            old_index=2,
        )
    ]


@pytest.mark.unit
@pytest.mark.collection
def test_move_is_a_single_event():
    """move reports one MOVE with both indices"""
    collection = ObservableList([0, 1, 2, 3])
    properties, changes = record(collection)

    collection.move(1, 3)

    assert collection == [0, 2, 3, 1]
    assert properties == ["Item[]"]
    assert changes == [
        CollectionChangedEventArgs(
            CollectionChangeAction.MOVE,
            new_items=[1],
            old_items=[1],
            new_index=3,
            old_index=1,
        )
    ]


@pytest.mark.unit
@pytest.mark.collection
def test_clear_raises_reset():
    """clear reports Count, Item[] and a RESET"""
    collection = ObservableList("ABC")
    properties, changes = record(collection)

    collection.clear()

    assert len(collection) == 0
    assert properties == ["Count", "Item[]"]
    assert changes == [CollectionChangedEventArgs(CollectionChangeAction.RESET)]


@pytest.mark.unit
@pytest.mark.collection
def test_range_operations_raise_one_event():
    """insert_range, extend and remove_range report all items at once"""
    collection = ObservableList([1, 5])
    _, changes = record(collection)

    collection.insert_range(1, [2, 3, 4])
    collection.extend([6, 7])
    collection.remove_range(0, 2)

    assert collection == [3, 4, 5, 6, 7]
    assert changes == [
        CollectionChangedEventArgs(CollectionChangeAction.ADD, new_items=[2, 3, 4], new_index=1),
        CollectionChangedEventArgs(CollectionChangeAction.ADD, new_items=[6, 7], new_index=5),
        CollectionChangedEventArgs(CollectionChangeAction.REMOVE, old_items=[1, 2], old_index=0),
    ]


@pytest.mark.unit
@pytest.mark.collection
def test_range_bounds_are_checked():
    """Out of range positions raise IndexError"""
    collection = ObservableList([1, 2])

    with pytest.raises(IndexError):
        collection.insert_range(3, [0])
    with pytest.raises(IndexError):
        collection.remove_range(1, 2)
    with pytest.raises(IndexError):
        collection.move(0, 2)


@pytest.mark.unit
@pytest.mark.collection
def test_reset_replaces_contents():
    """reset swaps all items and raises a RESET"""
    collection = ObservableList([1, 2])
    _, changes = record(collection)

    collection.reset([9])

    assert collection == [9]
    assert changes[0].action is CollectionChangeAction.RESET


@pytest.mark.unit
@pytest.mark.collection
def test_slice_assignment_is_not_supported():
    """Slices can be read but not assigned or deleted"""
    collection = ObservableList([1, 2, 3])

    assert collection[1:] == [2, 3]
    with pytest.raises(TypeError):
        collection[0:1] = [5]
    with pytest.raises(TypeError):
        del collection[0:1]


@pytest.mark.unit
@pytest.mark.collection
def test_reentrant_change_with_two_subscribers_fails():
    """A subscriber may not change the list while others are listening"""
    collection = ObservableList("ABC")
    properties, changes = record(collection)
    failures = []

    def reenter(sender, args):
        with pytest.raises(ReentrancyError):
            collection.append("X")
        failures.append(True)

    collection.collection_changed.subscribe(reenter)

    collection[2] = "I"

    assert failures == [True]
    assert "Item[]" in properties
    assert changes[0].action is CollectionChangeAction.REPLACE
    assert collection == ["A", "B", "I"]


@pytest.mark.unit
@pytest.mark.collection
def test_single_subscriber_may_change_the_list():
    """With one subscriber a reentrant change is allowed"""
    collection = ObservableList()

    def add_once(sender, args):
        if len(collection) == 1:
            collection.append("second")

    collection.collection_changed.subscribe(add_once)
    collection.append("first")

    assert collection == ["first", "second"]


@pytest.mark.unit
@pytest.mark.collection
def test_block_reentrancy_counts_nested_blocks():
    """The same monitor is returned and must be released once per block"""
    collection = ObservableList()
    first = collection.block_reentrancy()
    second = collection.block_reentrancy()
    received = []
    collection.collection_changed.subscribe(lambda sender, args: received.append(args))
    collection.collection_changed.subscribe(lambda sender, args: None)

    assert first is second
    with pytest.raises(ReentrancyError):
        collection.append("I")

    first.dispose()
    with pytest.raises(ReentrancyError):
        collection.append("J")

    first.dispose()
    collection.append("K")

    assert received == [
        CollectionChangedEventArgs(CollectionChangeAction.ADD, new_items=["K"], new_index=0)
    ]


@pytest.mark.unit
@pytest.mark.collection
def test_reverse_is_a_single_reset():
    """reverse reports one RESET and leaves Count alone"""
    collection = ObservableList([1, 2, 3, 4])
    properties, changes = record(collection)

    collection.reverse()

    assert collection == [4, 3, 2, 1]
    assert properties == ["Item[]"]
    assert changes == [CollectionChangedEventArgs(CollectionChangeAction.RESET)]


@pytest.mark.unit
@pytest.mark.collection
def test_empty_ranges_raise_nothing():
    """Ranges without items change nothing and notify nothing"""
    collection = ObservableList([1, 2])
    properties, changes = record(collection)

    collection.insert_range(1, [])
    collection.extend([])
    collection.remove_range(1, 0)

    assert collection == [1, 2]
    assert properties == []
    assert changes == []
