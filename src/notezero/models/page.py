"""Page model: a titled node of the workspace tree owning a block sequence."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from notezero.models.sequence import BlockSequence
from notezero.ordering import new_id, utc_now

DEFAULT_ICON = "\U0001f4c4"  # page facing up

UNTITLED_PLACEHOLDERS = {
    "en": "Untitled",
    "ru": "Без названия",
}


class PageState(str, Enum):
    """Lifecycle state derived from the archive/delete flags."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class Page(BaseModel):
    """A page with lifecycle flags. Favorite is orthogonal to the lifecycle."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id)
    title: str = ""
    icon: str | None = None
    cover: str | None = None
    parent_id: str | None = None
    blocks: BlockSequence = Field(default_factory=BlockSequence)
    is_favorite: bool = False
    is_archived: bool = False
    is_deleted: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def state(self) -> PageState:
        if self.is_deleted:
            return PageState.DELETED
        if self.is_archived:
            return PageState.ARCHIVED
        return PageState.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.state == PageState.ACTIVE

    @property
    def display_icon(self) -> str:
        return self.icon or DEFAULT_ICON

    def display_title(self, locale: str = "en") -> str:
        """Title for display; empty titles are stored as-is and shown as a placeholder."""
        if self.title:
            return self.title
        return UNTITLED_PLACEHOLDERS.get(locale.split("-")[0].lower(), UNTITLED_PLACEHOLDERS["en"])

    def touch(self) -> None:
        self.updated_at = utc_now()


class PagePatch(BaseModel):
    """Partial update for page content fields.

    Parent, favorite and lifecycle flags change only through their dedicated
    tree operations so the tree invariants are checked.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str | None = None
    icon: str | None = None
    cover: str | None = None

    @field_validator("title")
    @classmethod
    def _title_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("title may be empty but not null")
        return value

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)
