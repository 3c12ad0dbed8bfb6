"""Document core: page tree, lifecycle, editor commands and search."""

from notezero.document.editor import (
    BLOCK_TYPE_LABELS,
    backspace_on_empty,
    change_block_type,
    filter_block_types,
    split_block,
)
from notezero.document.lifecycle import LifecycleAction, PageLifecycle
from notezero.document.search import SearchHit, search_pages
from notezero.document.tree import PageTree, default_blocks

__all__ = [
    "BLOCK_TYPE_LABELS",
    "backspace_on_empty",
    "change_block_type",
    "default_blocks",
    "filter_block_types",
    "LifecycleAction",
    "PageLifecycle",
    "PageTree",
    "SearchHit",
    "search_pages",
    "split_block",
]
