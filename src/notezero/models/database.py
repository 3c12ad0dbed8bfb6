"""Lightweight database model: typed properties and rows.

Row values are a closed union discriminated on ``type``, one variant per
property kind, so a value can always be checked against its column.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from notezero.errors import InvalidPropertyValue, NotFound
from notezero.ordering import new_id, utc_now


class PropertyType(str, Enum):
    """Column kinds."""

    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    CHECKBOX = "checkbox"
    URL = "url"


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SelectOption(_Model):
    id: str = Field(default_factory=new_id)
    name: str
    color: str = "default"


class PropertyDefinition(_Model):
    """A column. ``options`` only applies to select and multi_select."""

    id: str = Field(default_factory=new_id)
    name: str
    type: PropertyType
    options: list[SelectOption] = []

    def option_ids(self) -> set[str]:
        return {option.id for option in self.options}


class TextValue(_Model):
    type: Literal["text"] = "text"
    value: str = ""


class NumberValue(_Model):
    type: Literal["number"] = "number"
    value: float | None = None


class SelectValue(_Model):
    type: Literal["select"] = "select"
    option_id: str | None = None


class MultiSelectValue(_Model):
    type: Literal["multi_select"] = "multi_select"
    option_ids: list[str] = []


class DateValue(_Model):
    type: Literal["date"] = "date"
    value: date | None = None


class CheckboxValue(_Model):
    type: Literal["checkbox"] = "checkbox"
    value: bool = False


class UrlValue(_Model):
    type: Literal["url"] = "url"
    value: str = ""


PropertyValue = Annotated[
    TextValue | NumberValue | SelectValue | MultiSelectValue | DateValue | CheckboxValue | UrlValue,
    Field(discriminator="type"),
]

_value_adapter: TypeAdapter = TypeAdapter(PropertyValue)

_EMPTY_VALUES: dict[PropertyType, type[BaseModel]] = {
    PropertyType.TEXT: TextValue,
    PropertyType.NUMBER: NumberValue,
    PropertyType.SELECT: SelectValue,
    PropertyType.MULTI_SELECT: MultiSelectValue,
    PropertyType.DATE: DateValue,
    PropertyType.CHECKBOX: CheckboxValue,
    PropertyType.URL: UrlValue,
}


def empty_value(definition: PropertyDefinition):
    """Blank value of the right kind for a column."""
    return _EMPTY_VALUES[definition.type]()


def parse_value(raw) -> "PropertyValue":
    """Validate a raw dict (or an existing value) into a PropertyValue variant."""
    return _value_adapter.validate_python(raw)


class DatabaseRow(_Model):
    id: str = Field(default_factory=new_id)
    values: dict[str, PropertyValue] = {}
    page_id: str | None = None


class Database(_Model):
    """A named table of typed rows."""

    id: str = Field(default_factory=new_id)
    name: str
    icon: str | None = None
    properties: list[PropertyDefinition] = []
    rows: list[DatabaseRow] = []
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def get_property(self, property_id: str) -> PropertyDefinition | None:
        return next((p for p in self.properties if p.id == property_id), None)

    def get_row(self, row_id: str) -> DatabaseRow | None:
        return next((r for r in self.rows if r.id == row_id), None)

    def _check(self, definition: PropertyDefinition, value) -> "PropertyValue":
        value = parse_value(value)
        if value.type != definition.type.value:
            raise InvalidPropertyValue(
                definition.id, f"expected {definition.type.value}, got {value.type}"
            )
        if isinstance(value, SelectValue) and value.option_id is not None:
            if value.option_id not in definition.option_ids():
                raise InvalidPropertyValue(definition.id, f"unknown option {value.option_id}")
        if isinstance(value, MultiSelectValue):
            unknown = set(value.option_ids) - definition.option_ids()
            if unknown:
                raise InvalidPropertyValue(definition.id, f"unknown options {sorted(unknown)}")
        return value

    def add_property(self, definition: PropertyDefinition) -> PropertyDefinition:
        """Append a column; existing rows get its empty value."""
        self.properties.append(definition)
        for row in self.rows:
            row.values[definition.id] = empty_value(definition)
        self.updated_at = utc_now()
        return definition

    def remove_property(self, property_id: str) -> None:
        if self.get_property(property_id) is None:
            raise NotFound("property", property_id)
        self.properties = [p for p in self.properties if p.id != property_id]
        for row in self.rows:
            row.values.pop(property_id, None)
        self.updated_at = utc_now()

    def add_row(self, values: dict | None = None, page_id: str | None = None) -> DatabaseRow:
        """Add a row; unspecified columns start empty, unknown columns are rejected."""
        values = values or {}
        for property_id in values:
            if self.get_property(property_id) is None:
                raise NotFound("property", property_id)
        row = DatabaseRow(page_id=page_id)
        for definition in self.properties:
            raw = values.get(definition.id)
            row.values[definition.id] = (
                self._check(definition, raw) if raw is not None else empty_value(definition)
            )
        self.rows.append(row)
        self.updated_at = utc_now()
        return row

    def set_value(self, row_id: str, property_id: str, value) -> DatabaseRow:
        row = self.get_row(row_id)
        if row is None:
            raise NotFound("row", row_id)
        definition = self.get_property(property_id)
        if definition is None:
            raise NotFound("property", property_id)
        row.values[property_id] = self._check(definition, value)
        self.updated_at = utc_now()
        return row

    def remove_row(self, row_id: str) -> None:
        if self.get_row(row_id) is None:
            raise NotFound("row", row_id)
        self.rows = [r for r in self.rows if r.id != row_id]
        self.updated_at = utc_now()
