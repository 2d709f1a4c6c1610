"""Unit tests for properties and binding strategies."""

import pytest

from tests.utils.fakes import FakeControl, FakeModel
from tether import (
    EventBindingStrategy,
    InvalidStateError,
    Property,
    notifying_property,
)


@pytest.mark.unit
@pytest.mark.binding
def test_property_reads_and_writes_through_accessor(model):
    """A Property without getter/setter uses the generic accessor"""
    name = model.get_property("name")

    name.value = "Bob"

    assert model.name == "Bob"
    assert name.value == "Bob"
    assert name.owner is model
    assert name.key == "name"
    assert name.property_type is str


@pytest.mark.unit
@pytest.mark.binding
def test_notifying_property_filters_by_key(model):
    """Subscribers only hear about their own key"""
    name_changes = []
    model.get_property("name").on_property_change(
        lambda p: name_changes.append(p.value)
    )

    model.age = 31
    model.name = "Bob"

    assert name_changes == ["Bob"]


@pytest.mark.unit
@pytest.mark.binding
def test_disposed_property_subscription_stops_delivery(model):
    """Disposing the returned subscription stops notifications"""
    changes = []
    subscription = model.get_property("name").on_property_change(changes.append)

    subscription.dispose()
    model.name = "Bob"

    assert changes == []


@pytest.mark.unit
@pytest.mark.binding
def test_property_without_strategy_cannot_be_observed(model):
    """on_property_change needs a binding strategy"""
    prop = Property(model, "name")

    with pytest.raises(InvalidStateError, match="binding strategy"):
        prop.on_property_change(lambda p: None)


@pytest.mark.unit
@pytest.mark.binding
def test_read_only_detection(model):
    """Read-only state comes from the accessor or from a getter-only pair"""
    assert model.get_property("greeting").is_read_only
    assert not model.get_property("name").is_read_only
    assert Property(model, "name", getter=lambda: "x").is_read_only
    assert not Property(
        model, "greeting", getter=lambda: "x", setter=lambda v: None
    ).is_read_only


@pytest.mark.unit
@pytest.mark.binding
def test_injected_getter_and_setter():
    """Explicit getter/setter replace generic access"""
    store = {"value": 1}
    prop = Property(
        store,
        "value",
        getter=lambda: store["value"],
        setter=lambda v: store.__setitem__("value", v),
    )

    prop.value = 5

    assert store["value"] == 5
    assert prop.value == 5


@pytest.mark.unit
@pytest.mark.binding
def test_event_binding_strategy_forwards_every_emission():
    """EventBindingStrategy subscribes to a named Event of the owner"""
    control = FakeControl()
    text = Property(control, "text", EventBindingStrategy("text_changed"))
    seen = []
    text.on_property_change(lambda p: seen.append(p.value))

    control.text = "hello"

    assert seen == ["hello"]


@pytest.mark.unit
@pytest.mark.binding
def test_event_binding_strategy_requires_an_event():
    """A missing event attribute is reported as invalid state"""
    prop = Property(FakeModel(), "name", EventBindingStrategy("missing"))

    with pytest.raises(InvalidStateError, match="missing"):
        prop.on_property_change(lambda p: None)


@pytest.mark.unit
@pytest.mark.binding
def test_errors_delegate_to_owner():
    """errors and has_errors come from the owner's get_errors"""

    class WithErrors(FakeModel):
        def get_errors(self, key=None):
            return ["too short"] if key == "name" else []

    owner = WithErrors()

    assert owner.get_property("name").errors == ["too short"]
    assert owner.get_property("name").has_errors
    assert not owner.get_property("age").has_errors
    assert FakeModel().get_property("name").errors == []


@pytest.mark.unit
@pytest.mark.binding
def test_properties_compare_by_owner_and_key(model):
    """Two properties of the same slot are equal"""
    assert model.get_property("name") == notifying_property(model, "name")
    assert model.get_property("name") != model.get_property("age")
    assert model.get_property("name") != FakeModel().get_property("name")
    assert len({model.get_property("name"), model.get_property("name")}) == 1


@pytest.mark.unit
@pytest.mark.binding
def test_converted_property_two_way(model):
    """convert maps values in both directions"""
    age_text = model.get_property("age").convert(str, int)

    assert age_text.value == "30"
    age_text.value = "42"

    assert model.age == 42
    assert not age_text.is_read_only


@pytest.mark.unit
@pytest.mark.binding
def test_converted_property_without_back_conversion_is_read_only(model):
    """Writing a one-way conversion raises"""
    upper = model.get_property("name").convert(str.upper)

    assert upper.is_read_only
    assert upper.value == "ALICE"
    with pytest.raises(InvalidStateError, match="read-only"):
        upper.value = "BOB"


@pytest.mark.unit
@pytest.mark.binding
def test_converted_property_notifies_with_itself(model):
    """Subscribers of a converted property receive the converted view"""
    upper = model.get_property("name").convert(str.upper)
    seen = []
    upper.on_property_change(lambda p: seen.append(p.value))

    model.name = "Bob"

    assert seen == ["BOB"]
