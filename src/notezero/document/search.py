"""Case-insensitive substring search over page titles and block content.

No ranking: hits come back in collection order.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from notezero.models.block import Block
from notezero.models.page import Page


class SearchHit(BaseModel):
    """A matching page and the blocks whose content matched."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: Page
    title_match: bool
    blocks: list[Block]


def search_pages(pages: Iterable[Page], query: str, include_archived: bool = True) -> list[SearchHit]:
    """Find pages whose title or any block content contains ``query``.

    Deleted pages never match. A blank query returns no hits.
    """
    needle = query.strip().lower()
    if not needle:
        return []

    hits: list[SearchHit] = []
    for page in pages:
        if page.is_deleted or (page.is_archived and not include_archived):
            continue
        title_match = needle in page.title.lower()
        blocks = [b for b in page.blocks if needle in b.content.lower()]
        if title_match or blocks:
            hits.append(SearchHit(page=page, title_match=title_match, blocks=blocks))
    return hits
