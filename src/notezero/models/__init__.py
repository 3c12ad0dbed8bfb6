"""Data models for pages, blocks and databases."""

from notezero.models.block import Block, BlockColor, BlockPatch, BlockType
from notezero.models.database import (
    Database,
    DatabaseRow,
    PropertyDefinition,
    PropertyType,
    PropertyValue,
    SelectOption,
)
from notezero.models.page import Page, PagePatch, PageState
from notezero.models.sequence import BlockSequence

__all__ = [
    "Block",
    "BlockColor",
    "BlockPatch",
    "BlockSequence",
    "BlockType",
    "Database",
    "DatabaseRow",
    "Page",
    "PagePatch",
    "PageState",
    "PropertyDefinition",
    "PropertyType",
    "PropertyValue",
    "SelectOption",
]
