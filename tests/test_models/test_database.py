"""Tests for typed database properties and rows."""

from datetime import date

import pytest
from pydantic import ValidationError

from notezero.errors import InvalidPropertyValue, NotFound
from notezero.models.database import (
    CheckboxValue,
    Database,
    DateValue,
    MultiSelectValue,
    NumberValue,
    PropertyDefinition,
    PropertyType,
    SelectOption,
    SelectValue,
    TextValue,
    empty_value,
    parse_value,
)


def _make_database() -> Database:
    """Tasks table with a name, a status select and a done checkbox."""
    status = PropertyDefinition(
        id="status",
        name="Status",
        type=PropertyType.SELECT,
        options=[SelectOption(id="todo", name="To do"), SelectOption(id="done", name="Done", color="green")],
    )
    return Database(
        name="Tasks",
        properties=[
            PropertyDefinition(id="name", name="Name", type=PropertyType.TEXT),
            status,
            PropertyDefinition(id="done", name="Done", type=PropertyType.CHECKBOX),
        ],
    )


def test_parse_value_discriminates_on_type():
    assert isinstance(parse_value({"type": "text", "value": "x"}), TextValue)
    assert isinstance(parse_value({"type": "number", "value": 3}), NumberValue)
    assert isinstance(parse_value({"type": "date", "value": "2026-03-01"}), DateValue)
    assert parse_value({"type": "date", "value": "2026-03-01"}).value == date(2026, 3, 1)
    assert isinstance(parse_value({"type": "multi_select", "optionIds": ["a"]}), MultiSelectValue)


def test_parse_value_rejects_unknown_kind():
    with pytest.raises(ValidationError):
        parse_value({"type": "formula", "value": "1+1"})


def test_empty_value_matches_column():
    definition = PropertyDefinition(name="Done", type=PropertyType.CHECKBOX)
    assert empty_value(definition) == CheckboxValue(value=False)


def test_add_row_fills_missing_columns():
    """Unspecified columns start with their empty value."""
    db = _make_database()
    row = db.add_row({"name": {"type": "text", "value": "Write tests"}})
    assert row.values["name"].value == "Write tests"
    assert row.values["status"] == SelectValue()
    assert row.values["done"] == CheckboxValue()


def test_add_row_unknown_column():
    db = _make_database()
    with pytest.raises(NotFound):
        db.add_row({"priority": {"type": "text", "value": "high"}})


def test_set_value_wrong_kind():
    """A value of another kind than the column is rejected."""
    db = _make_database()
    row = db.add_row()
    with pytest.raises(InvalidPropertyValue):
        db.set_value(row.id, "done", {"type": "text", "value": "yes"})


def test_set_value_unknown_option():
    """Select values must name one of the column's options."""
    db = _make_database()
    row = db.add_row()
    with pytest.raises(InvalidPropertyValue):
        db.set_value(row.id, "status", {"type": "select", "option_id": "blocked"})

    db.set_value(row.id, "status", SelectValue(option_id="done"))
    assert db.get_row(row.id).values["status"].option_id == "done"


def test_set_value_missing_row():
    db = _make_database()
    with pytest.raises(NotFound):
        db.set_value("nope", "name", {"type": "text", "value": "x"})


def test_add_and_remove_property():
    """New columns reach existing rows; removed columns leave them."""
    db = _make_database()
    row = db.add_row()
    db.add_property(PropertyDefinition(id="due", name="Due", type=PropertyType.DATE))
    assert row.values["due"] == DateValue()

    db.remove_property("due")
    assert "due" not in row.values
    assert db.get_property("due") is None
    with pytest.raises(NotFound):
        db.remove_property("due")


def test_remove_row():
    db = _make_database()
    row = db.add_row()
    db.remove_row(row.id)
    assert db.rows == []
    with pytest.raises(NotFound):
        db.remove_row(row.id)


def test_database_json_round_trip():
    """Rows serialize with their type tags and load back into the same variants."""
    db = _make_database()
    db.add_row({"status": {"type": "select", "optionId": "todo"}})
    loaded = Database.model_validate(db.model_dump(mode="json", by_alias=True))
    assert loaded.rows[0].values["status"] == SelectValue(option_id="todo")
