"""The page forest: traversal, filtered views and structural invariants.

Invariants kept by every write:
- a non-null parent_id references an existing, non-deleted page
- no page is its own ancestor
- permanently deleting a page deletes its whole subtree

Reads are lenient (None / empty list for unknown ids). Structural writes raise
NotFound / CycleDetected / InvalidTransition before changing anything.
Deleted pages are kept as tombstones for persistence but are invisible to
every query.
"""

import logging
from collections.abc import Iterable, Iterator

from notezero.document.lifecycle import LifecycleAction, PageLifecycle
from notezero.errors import CycleDetected, NotFound
from notezero.models.block import Block, BlockPatch, BlockType
from notezero.models.page import Page, PagePatch
from notezero.models.sequence import BlockSequence

logger = logging.getLogger(__name__)


def default_blocks() -> BlockSequence:
    """A new page starts with one empty text block."""
    return BlockSequence([Block(type=BlockType.TEXT, content="")])


class PageTree:
    """All pages of a workspace keyed by id."""

    def __init__(self, pages: Iterable[Page] = (), *, duplicate_suffix: str = " (copy)") -> None:
        self._pages: dict[str, Page] = {}
        self.duplicate_suffix = duplicate_suffix
        self.load(pages)

    # --- loading -----------------------------------------------------------

    def load(self, pages: Iterable[Page]) -> list[str]:
        """Replace the collection, repairing broken parent chains.

        Pages whose parent is missing, deleted, or part of a cycle are moved
        to the root so traversal always ends at a root page. Returns the ids
        of the pages that were moved.
        """
        self._pages = {page.id: page for page in pages}
        repaired: list[str] = []
        for page in self._pages.values():
            if page.is_deleted or page.parent_id is None:
                continue
            parent = self._pages.get(page.parent_id)
            if parent is None or parent.is_deleted:
                logger.warning("Page %s has missing parent %s, moved to root", page.id, page.parent_id)
                page.parent_id = None
                repaired.append(page.id)
        for page in self._pages.values():
            if not page.is_deleted and self._in_cycle(page):
                logger.warning("Page %s is part of a parent cycle, moved to root", page.id)
                page.parent_id = None
                repaired.append(page.id)
        return repaired

    def _in_cycle(self, page: Page) -> bool:
        seen = {page.id}
        parent_id = page.parent_id
        while parent_id is not None:
            if parent_id in seen:
                return True
            seen.add(parent_id)
            parent = self._pages.get(parent_id)
            parent_id = parent.parent_id if parent else None
        return False

    # --- lookups -------------------------------------------------------------

    def __len__(self) -> int:
        return sum(1 for _ in self.pages())

    def __contains__(self, page_id: object) -> bool:
        return isinstance(page_id, str) and self.get_page(page_id) is not None

    def pages(self, include_deleted: bool = False) -> Iterator[Page]:
        for page in self._pages.values():
            if include_deleted or not page.is_deleted:
                yield page

    def get_page(self, page_id: str) -> Page | None:
        page = self._pages.get(page_id)
        if page is None or page.is_deleted:
            return None
        return page

    def _require(self, page_id: str | None, *, allow_deleted: bool = False) -> Page:
        page = self._pages.get(page_id) if page_id is not None else None
        if page is None or (page.is_deleted and not allow_deleted):
            logger.warning("Page not found: %s", page_id)
            raise NotFound("page", page_id)
        return page

    # --- queries -------------------------------------------------------------

    def get_page_path(self, page_id: str) -> list[Page]:
        """Pages from the root down to ``page_id`` inclusive; empty for unknown ids."""
        path: list[Page] = []
        seen: set[str] = set()
        page = self.get_page(page_id)
        while page is not None:
            if page.id in seen:
                raise CycleDetected(page_id, page.id)
            seen.add(page.id)
            path.append(page)
            page = self.get_page(page.parent_id) if page.parent_id is not None else None
        path.reverse()
        return path

    def get_root_pages(self) -> list[Page]:
        return [p for p in self.pages() if p.parent_id is None and not p.is_archived]

    def get_child_pages(self, parent_id: str) -> list[Page]:
        return [p for p in self.pages() if p.parent_id == parent_id and not p.is_archived]

    def get_favorite_pages(self) -> list[Page]:
        return [p for p in self.pages() if p.is_favorite and not p.is_archived]

    def get_archived_pages(self) -> list[Page]:
        return [p for p in self.pages() if p.is_archived]

    def descendants(self, page_id: str) -> list[Page]:
        """All non-deleted pages below ``page_id`` (archived included), breadth first."""
        result: list[Page] = []
        frontier = [page_id]
        while frontier:
            parent_id = frontier.pop(0)
            for page in self.pages():
                if page.parent_id == parent_id:
                    result.append(page)
                    frontier.append(page.id)
        return result

    def is_ancestor(self, ancestor_id: str, page_id: str) -> bool:
        """True when ``ancestor_id`` appears on the parent chain of ``page_id``."""
        return any(p.id == ancestor_id for p in self.get_page_path(page_id)[:-1])

    # --- page writes ---------------------------------------------------------

    def create(
        self,
        title: str = "",
        parent_id: str | None = None,
        *,
        icon: str | None = None,
        cover: str | None = None,
        blocks: BlockSequence | None = None,
    ) -> Page:
        if parent_id is not None:
            self._require(parent_id)
        page = Page(
            title=title,
            icon=icon,
            cover=cover,
            parent_id=parent_id,
            blocks=blocks if blocks is not None else default_blocks(),
        )
        self._pages[page.id] = page
        return page

    def update(self, page_id: str, patch: PagePatch | dict) -> Page:
        page = self._require(page_id)
        if isinstance(patch, dict):
            patch = PagePatch.model_validate(patch)
        for name, value in patch.changes().items():
            setattr(page, name, value)
        page.touch()
        return page

    def move(self, page_id: str, new_parent_id: str | None) -> bool:
        """Reparent a page. Returns False when the parent is unchanged."""
        page = self._require(page_id)
        if new_parent_id is not None:
            self._require(new_parent_id)
            if new_parent_id == page_id or self.is_ancestor(page_id, new_parent_id):
                logger.warning("Rejected move of %s under %s: cycle", page_id, new_parent_id)
                raise CycleDetected(page_id, new_parent_id)
        if page.parent_id == new_parent_id:
            return False
        page.parent_id = new_parent_id
        page.touch()
        return True

    def archive(self, page_id: str) -> bool:
        page = self._require(page_id, allow_deleted=True)
        return PageLifecycle.apply(page, LifecycleAction.ARCHIVE)

    def restore(self, page_id: str) -> bool:
        page = self._require(page_id, allow_deleted=True)
        return PageLifecycle.apply(page, LifecycleAction.RESTORE)

    def permanently_delete(self, page_id: str) -> list[Page]:
        """Delete the page and, transitively, every page below it.

        Returns the pages that were deleted, the target first.
        """
        page = self._require(page_id, allow_deleted=True)
        PageLifecycle.check(page, LifecycleAction.DELETE)
        doomed = [page, *self.descendants(page_id)]
        for target in doomed:
            PageLifecycle.apply(target, LifecycleAction.DELETE)
        return doomed

    def duplicate(self, page_id: str) -> Page:
        """Shallow duplicate: same parent, copied content, fresh ids, not favorite."""
        page = self._require(page_id)
        copy = Page(
            title=f"{page.title}{self.duplicate_suffix}",
            icon=page.icon,
            cover=page.cover,
            parent_id=page.parent_id,
            blocks=page.blocks.clone(),
        )
        self._pages[copy.id] = copy
        return copy

    def toggle_favorite(self, page_id: str) -> Page:
        page = self._require(page_id)
        page.is_favorite = not page.is_favorite
        page.touch()
        return page

    # --- block writes --------------------------------------------------------

    def add_block(self, page_id: str, block: Block, after: str | None = None) -> Block:
        page = self._require(page_id)
        inserted = page.blocks.insert_after(after, block)
        page.touch()
        return inserted

    def update_block(self, page_id: str, block_id: str, patch: BlockPatch | dict) -> Block | None:
        page = self._require(page_id)
        block = page.blocks.update(block_id, patch)
        if block is not None:
            page.touch()
        return block

    def remove_block(self, page_id: str, block_id: str) -> Block | None:
        page = self._require(page_id)
        block = page.blocks.remove(block_id)
        if block is not None:
            page.touch()
        return block

    def duplicate_block(self, page_id: str, block_id: str) -> Block | None:
        page = self._require(page_id)
        block = page.blocks.duplicate(block_id)
        if block is not None:
            page.touch()
        return block

    def move_block(self, page_id: str, block_id: str, target_index: int) -> bool:
        page = self._require(page_id)
        moved = page.blocks.move(block_id, target_index)
        if moved:
            page.touch()
        return moved
