"""
Integration tests wiring a view model to fake view controls.

These exercise the pieces together: guarded fields, edit transactions,
property bindings with conversion, command bindings and async commands with
their cancel command.
"""

import asyncio

import pytest

from tests.utils.fakes import FakeControl
from tether import (
    AsyncCommand,
    BindingList,
    Command,
    DataContext,
    EventHandlerSource,
    ObservableList,
    field,
)


class CustomerViewModel(DataContext):
    name = field(default="", validate=lambda check: check.not_empty())
    age = field(
        default=0,
        validate=lambda check: check.satisfies(lambda v: v >= 0, "age must not be negative"),
    )


def clicked(button):
    return EventHandlerSource(button, "clicked", set_enabled_action=FakeControl.set_enabled)


@pytest.fixture
def form():
    view_model = CustomerViewModel()
    name_box, age_box, save_button = FakeControl(), FakeControl(), FakeControl()
    saved = []
    save = Command(
        lambda p: saved.append((view_model.name, view_model.age)),
        can_execute=lambda p: not view_model.has_errors,
    )
    view_model.errors_changed.subscribe(
        lambda validator, key: save.raise_can_execute_changed()
    )

    bindings = view_model.bindings
    bindings.add_property(view_model, "name").to(name_box.get_text_property())
    bindings.add_property(view_model, "age").convert(str, int).to(
        age_box.get_text_property()
    )
    bindings.add_command(save).to(clicked(save_button))
    bindings.bind()
    bindings.update_target()
    return view_model, name_box, age_box, save_button, saved


@pytest.mark.integration
@pytest.mark.binding
def test_initial_state_is_pushed_to_the_view(form):
    view_model, name_box, age_box, save_button, _ = form

    assert name_box.text == ""
    assert age_box.text == "0"
    assert save_button.enabled is False


@pytest.mark.integration
@pytest.mark.binding
def test_typing_updates_the_model_and_enables_saving(form):
    view_model, name_box, age_box, save_button, saved = form

    name_box.text = "Alice"
    age_box.text = "31"

    assert view_model.name == "Alice"
    assert view_model.age == 31
    assert save_button.enabled is True

    save_button.click()
    assert saved == [("Alice", 31)]


@pytest.mark.integration
@pytest.mark.binding
def test_invalid_model_change_disables_saving(form):
    view_model, name_box, _, save_button, saved = form
    name_box.text = "Alice"

    view_model.name = ""

    assert name_box.text == ""
    assert save_button.enabled is False
    save_button.click()
    assert saved == []


@pytest.mark.integration
@pytest.mark.context
def test_cancelled_edit_restores_the_view(form):
    view_model, name_box, _, _, _ = form
    name_box.text = "Alice"

    view_model.begin_edit()
    name_box.text = "Carol"
    assert view_model.has_changes
    view_model.cancel_edit()

    assert view_model.name == "Alice"
    assert name_box.text == "Alice"
    assert not view_model.editing


@pytest.mark.integration
@pytest.mark.binding
def test_unbound_view_no_longer_reaches_the_model(form):
    view_model, name_box, _, _, _ = form
    name_box.text = "Alice"

    view_model.bindings.unbind()
    name_box.text = "Bob"

    assert view_model.name == "Alice"


@pytest.mark.integration
@pytest.mark.command
def test_async_save_disables_its_button_and_can_be_cancelled():
    save_button, cancel_button = FakeControl(), FakeControl()
    outcomes = []

    async def save(parameter):
        token = command.token
        while not token.is_cancellation_requested:
            await asyncio.sleep(0.001)
        outcomes.append("cancelled")

    command = AsyncCommand(save)
    bindings = BindingList()
    bindings.add_command(command).to(clicked(save_button))
    bindings.add_command(command.cancel_command).to(clicked(cancel_button))
    bindings.bind()
    bindings.update_target()

    assert save_button.enabled is True
    assert cancel_button.enabled is False

    async def scenario():
        save_button.click()
        assert command.is_running
        assert save_button.enabled is False
        assert cancel_button.enabled is True

        cancel_button.click()
        assert cancel_button.enabled is False

        while command.is_running:
            await asyncio.sleep(0.001)

    asyncio.run(scenario())

    assert outcomes == ["cancelled"]
    assert save_button.enabled is True
    assert cancel_button.enabled is False


@pytest.mark.integration
@pytest.mark.collection
def test_list_changes_drive_a_command(control):
    items = ObservableList()
    clear = Command(lambda p: items.clear(), can_execute=lambda p: len(items) > 0)

    def count_changed(sender, args):
        if args.property_name == "Count":
            clear.raise_can_execute_changed()

    items.property_changed.subscribe(count_changed)
    bindings = BindingList()
    bindings.add_command(clear).to(clicked(control))
    bindings.bind()
    bindings.update_target()
    assert control.enabled is False

    items.extend(["a", "b"])
    assert control.enabled is True

    control.click()
    assert len(items) == 0
    assert control.enabled is False
