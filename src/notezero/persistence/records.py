"""Backend row shapes and the single mapping between rows and domain models.

Rows use the backend's snake_case column names (``parent_id``,
``is_favorite``, ``position`` ...). Domain models never carry a position;
it only exists here.
"""

import logging
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from notezero.models.block import Block, BlockColor, BlockType
from notezero.models.page import Page
from notezero.models.sequence import BlockSequence
from notezero.ordering import new_id, sort_by_position, utc_now

logger = logging.getLogger(__name__)


class PageFilter(str, Enum):
    """Server-side page listings."""

    ROOT = "root"
    CHILDREN = "children"
    FAVORITES = "favorites"
    ARCHIVED = "archived"
    ALL = "all"  # every non-deleted page, used for reloads


class PageRecord(BaseModel):
    """A row of the ``pages`` table."""

    id: str = Field(default_factory=new_id)
    workspace_id: str
    parent_id: str | None = None
    title: str = ""
    icon: str | None = None
    cover: str | None = None
    is_favorite: bool = False
    is_archived: bool = False
    is_deleted: bool = False
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class BlockRecord(BaseModel):
    """A row of the ``blocks`` table."""

    id: str = Field(default_factory=new_id)
    page_id: str
    type: str = BlockType.TEXT.value
    content: str = ""
    position: int = 0
    checked: bool = False
    color: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


def to_column_values(changes: dict) -> dict:
    """Domain field changes as JSON-ready column values (enums by value)."""
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in changes.items()}


def block_to_record(block: Block, page_id: str, position: int) -> BlockRecord:
    return BlockRecord(
        id=block.id,
        page_id=page_id,
        type=block.type.value,
        content=block.content,
        position=position,
        checked=block.checked,
        color=block.color.value if block.color else None,
    )


def record_to_block(record: BlockRecord) -> Block:
    try:
        block_type = BlockType(record.type)
    except ValueError:
        logger.warning("Unknown block type %r on block %s, treated as text", record.type, record.id)
        block_type = BlockType.TEXT
    try:
        color = BlockColor(record.color) if record.color else None
    except ValueError:
        color = None
    return Block(
        id=record.id,
        type=block_type,
        content=record.content,
        checked=record.checked,
        color=color,
    )


def page_to_record(page: Page, workspace_id: str, created_by: str | None = None) -> PageRecord:
    return PageRecord(
        id=page.id,
        workspace_id=workspace_id,
        parent_id=page.parent_id,
        title=page.title,
        icon=page.icon,
        cover=page.cover,
        is_favorite=page.is_favorite,
        is_archived=page.is_archived,
        is_deleted=page.is_deleted,
        created_by=created_by,
        created_at=page.created_at,
        updated_at=page.updated_at,
    )


def record_to_page(record: PageRecord, blocks: list[BlockRecord]) -> Page:
    """Build a Page; blocks are ordered by (position, created_at, id)."""
    return Page(
        id=record.id,
        title=record.title,
        icon=record.icon or None,
        cover=record.cover,
        parent_id=record.parent_id,
        blocks=BlockSequence([record_to_block(b) for b in sort_by_position(blocks)]),
        is_favorite=record.is_favorite,
        is_archived=record.is_archived,
        is_deleted=record.is_deleted,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )
