"""Unit tests for Validator and PropertyCheck."""

import pytest

from tether import ValidationError, Validator


@pytest.mark.unit
@pytest.mark.context
def test_failed_checks_are_recorded_not_raised():
    """A failing check adds an error for the key"""
    validator = Validator()

    validator.check_property("name", "").not_empty()

    assert validator.has_errors
    assert validator.has_errors_for_key("name")
    [error] = validator.get_errors("name")
    assert error == ValidationError("name", "name must not be empty", "")


@pytest.mark.unit
@pytest.mark.context
def test_chain_stops_at_first_failure():
    """Only the first failing check of a chain is recorded"""
    validator = Validator()

    validator.check_property("id", None).not_none().not_empty()

    assert [e.message for e in validator.get_errors("id")] == ["id is required"]


@pytest.mark.unit
@pytest.mark.context
@pytest.mark.parametrize(
    "value, valid",
    [("A", False), ("Al", True), ("x" * 100, True), ("x" * 101, False)],
)
def test_length_bounds(value, valid):
    """min_length and max_length are inclusive"""
    validator = Validator()

    check = validator.check_property("name", value).min_length(2).max_length(100)

    assert check.valid is valid
    assert validator.has_errors is not valid


@pytest.mark.unit
@pytest.mark.context
def test_is_in_and_custom_predicate():
    """is_in and satisfies record their messages"""
    validator = Validator()

    validator.check_property("industry", "Mining").is_in(["Finance", "Education"])
    validator.check_property("age", -1).satisfies(lambda v: v >= 0, "age must be positive")

    assert validator.has_errors_for_key("industry")
    assert validator.get_errors("age")[0].message == "age must be positive"
    assert len(validator.errors) == 2
    assert len(validator.get_errors()) == 2


@pytest.mark.unit
@pytest.mark.context
def test_rechecking_a_key_replaces_its_errors():
    """check_property forgets earlier errors of the same key only"""
    validator = Validator()
    validator.check_property("name", "").not_empty()
    validator.check_property("id", None).not_none()

    validator.check_property("name", "Andrew").not_empty()

    assert not validator.has_errors_for_key("name")
    assert validator.has_errors_for_key("id")


@pytest.mark.unit
@pytest.mark.context
def test_errors_changed_is_emitted_per_key():
    """errors_changed reports the affected key, None for clear"""
    validator = Validator()
    keys = []
    validator.errors_changed.subscribe(lambda sender, key: keys.append(key))

    validator.check_property("name", "").not_empty()
    validator.check_property("name", "ok").not_empty()
    validator.check_property("id", None).not_none()
    validator.clear()
    validator.clear()

    assert keys == ["name", "name", "id", None]


@pytest.mark.unit
@pytest.mark.context
def test_errors_property_is_bindable():
    """errors_property tracks errors through errors_changed"""
    validator = Validator()
    errors = validator.errors_property()
    seen = []
    errors.on_property_change(lambda p: seen.append(len(p.value)))

    validator.check_property("name", "").not_empty()
    validator.clear()

    assert seen == [1, 0]
    assert errors.is_read_only
