"""Unit tests for Event and Subscription."""

import pytest

from tether import CompositeSubscription, Event, InvalidArgumentError


@pytest.mark.unit
def test_event_delivers_arguments_in_subscription_order():
    """Subscribers are called in the order they subscribed"""
    event = Event("changed")
    calls = []

    event.subscribe(lambda sender, key: calls.append(("first", key)))
    event.subscribe(lambda sender, key: calls.append(("second", key)))
    event.emit(object(), "name")

    assert calls == [("first", "name"), ("second", "name")]


@pytest.mark.unit
def test_disposed_subscription_receives_nothing():
    """Disposing a subscription stops delivery and is idempotent"""
    event = Event()
    calls = []
    subscription = event.subscribe(calls.append)

    subscription.dispose()
    subscription.dispose()
    event.emit(1)

    assert calls == []
    assert not subscription.active
    assert event.subscriber_count == 0


@pytest.mark.unit
def test_subscription_disposed_mid_dispatch_is_skipped():
    """A subscriber disposed by an earlier one is not called in the same dispatch"""
    event = Event()
    calls = []
    second = None

    def first(value):
        calls.append("first")
        second.dispose()

    event.subscribe(first)
    second = event.subscribe(lambda value: calls.append("second"))
    event.emit(1)

    assert calls == ["first"]


@pytest.mark.unit
def test_subscriber_added_mid_dispatch_waits_for_next_emission():
    """Emission iterates over a snapshot of the subscribers"""
    event = Event()
    calls = []

    def first(value):
        calls.append(("first", value))
        if value == 1:
            event.subscribe(lambda v: calls.append(("late", v)))

    event.subscribe(first)
    event.emit(1)
    event.emit(2)

    assert calls == [("first", 1), ("first", 2), ("late", 2)]


@pytest.mark.unit
def test_first_and_last_subscriber_hooks():
    """Hooks run when the registry becomes non-empty and empty again"""
    hooks = []
    event = Event(
        on_first_subscribe=lambda: hooks.append("attach"),
        on_last_unsubscribe=lambda: hooks.append("detach"),
    )

    a = event.subscribe(lambda: None)
    b = event.subscribe(lambda: None)
    a.dispose()
    assert hooks == ["attach"]

    b.dispose()
    assert hooks == ["attach", "detach"]


@pytest.mark.unit
def test_unsubscribe_by_callback():
    """unsubscribe removes the first matching callback"""
    event = Event()
    calls = []
    event.subscribe(calls.append)

    assert event.unsubscribe(calls.append)
    assert not event.unsubscribe(calls.append)
    event.emit(1)
    assert calls == []


@pytest.mark.unit
def test_subscriber_exceptions_propagate():
    """Errors raised by subscribers reach the emitter"""
    event = Event()

    def failing(value):
        raise ValueError("boom")

    event.subscribe(failing)

    with pytest.raises(ValueError, match="boom"):
        event.emit(1)


@pytest.mark.unit
def test_subscribe_rejects_none():
    """None is not a valid callback"""
    with pytest.raises(InvalidArgumentError):
        Event().subscribe(None)


@pytest.mark.unit
def test_subscriptions_work_as_context_managers():
    """Leaving the with block disposes the subscription"""
    event = Event()
    calls = []

    with event.subscribe(calls.append):
        event.emit(1)
    event.emit(2)

    assert calls == [1]


@pytest.mark.unit
def test_composite_subscription_disposes_all():
    """CompositeSubscription disposes every member once"""
    first, second = Event(), Event()
    calls = []
    composite = CompositeSubscription(first.subscribe(calls.append))
    composite.add(second.subscribe(calls.append))

    composite.dispose()
    composite.dispose()
    first.emit(1)
    second.emit(2)

    assert calls == []
    assert len(first) == 0 and len(second) == 0


@pytest.mark.unit
def test_failing_first_subscribe_hook_leaves_no_subscription():
    """A subscribe whose attach hook fails is rolled back and can be retried"""
    attempts = []

    def attach():
        attempts.append("attach")
        if len(attempts) == 1:
            raise RuntimeError("cannot attach")

    event = Event("changed", on_first_subscribe=attach)
    calls = []

    with pytest.raises(RuntimeError, match="cannot attach"):
        event.subscribe(calls.append)
    event.emit(1)

    assert event.subscriber_count == 0
    assert calls == []

    event.subscribe(calls.append)
    event.emit(2)

    assert attempts == ["attach", "attach"]
    assert calls == [2]
