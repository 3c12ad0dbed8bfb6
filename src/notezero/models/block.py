"""Block model: the atomic content unit of a page."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from notezero.ordering import new_id


class BlockType(str, Enum):
    """Supported block types."""

    TEXT = "text"
    HEADING_1 = "heading1"
    HEADING_2 = "heading2"
    HEADING_3 = "heading3"
    BULLETED_LIST = "bulleted_list"
    NUMBERED_LIST = "numbered_list"
    TODO = "todo"
    QUOTE = "quote"
    DIVIDER = "divider"
    CODE = "code"
    CALLOUT = "callout"
    TOGGLE = "toggle"
    IMAGE = "image"
    PAGE_REFERENCE = "page"


class BlockColor(str, Enum):
    """Fixed presentational palette. No invariant is attached to it."""

    DEFAULT = "default"
    GRAY = "gray"
    BROWN = "brown"
    ORANGE = "orange"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"
    PINK = "pink"
    RED = "red"


class Block(BaseModel):
    """A content block. Its position is implied by the owning sequence."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id)
    type: BlockType = BlockType.TEXT
    content: str = ""
    checked: bool = False  # only meaningful for todo blocks
    color: BlockColor | None = None


class BlockPatch(BaseModel):
    """Partial update for a block. Unset fields are left alone."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: BlockType | None = None
    content: str | None = None
    checked: bool | None = None
    color: BlockColor | None = None

    @field_validator("type", "content", "checked")
    @classmethod
    def _not_null(cls, value):
        # only color can be cleared with null
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    @model_validator(mode="after")
    def _todo_defaults_unchecked(self) -> "BlockPatch":
        # converting to todo without an explicit checked value starts unchecked
        if self.type == BlockType.TODO and "checked" not in self.model_fields_set:
            self.checked = False
        return self

    def changes(self) -> dict:
        """Fields explicitly set on this patch, including defaults it implies."""
        changes = self.model_dump(exclude_unset=True)
        if self.type == BlockType.TODO:
            changes["checked"] = self.checked
        return changes
