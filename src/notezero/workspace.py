"""Workspace: the page tree plus its persistence, passed explicitly to callers.

Every mutation follows one path: validate and apply to the local PageTree
(synchronously, so callers see the result at once), then submit the matching
gateway calls to the PersistencePipeline. Structural errors are raised before
anything is applied or queued. Queries never touch the backend.

Block positions only exist remotely. The workspace keeps, per page, the
positions the backend will hold once the queue drains, and after every
order change writes only the positions that ``assign_positions`` changed.
"""

import logging

from notezero.config import Settings
from notezero.document.search import SearchHit, search_pages
from notezero.document.tree import PageTree, default_blocks
from notezero.models.block import Block, BlockPatch, BlockType
from notezero.models.page import Page, PagePatch
from notezero.ordering import assign_positions, changed_positions, renumber
from notezero.persistence.gateway import PersistenceGateway
from notezero.persistence.memory import InMemoryGateway
from notezero.persistence.pipeline import PersistencePipeline
from notezero.persistence.records import PageFilter, record_to_page, to_column_values
from notezero.persistence.rest import RestGateway

logger = logging.getLogger(__name__)


class Workspace:
    """Explicit store for one workspace's pages."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        workspace_id: str = "default",
        user_id: str | None = None,
        pipeline: PersistencePipeline | None = None,
        duplicate_suffix: str = " (copy)",
        locale: str = "en",
    ) -> None:
        self.gateway = gateway
        self.workspace_id = workspace_id
        self.user_id = user_id or None
        self.pipeline = pipeline or PersistencePipeline()
        self.tree = PageTree(duplicate_suffix=duplicate_suffix)
        self.locale = locale
        self._positions: dict[str, dict[str, int]] = {}

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        gateway: PersistenceGateway | None = None,
        *,
        auto_flush: bool = True,
    ) -> "Workspace":
        """Build a workspace; without a backend URL the in-memory gateway is used."""
        if gateway is None:
            gateway = RestGateway() if settings.backend_url else InMemoryGateway()
        pipeline = PersistencePipeline(
            timeout_seconds=settings.persistence_timeout_seconds,
            max_attempts=settings.persistence_max_attempts,
            auto_flush=auto_flush,
        )
        return cls(
            gateway,
            workspace_id=settings.workspace_id,
            user_id=settings.user_id,
            pipeline=pipeline,
            duplicate_suffix=settings.duplicate_title_suffix,
            locale=settings.locale,
        )

    # --- queries -------------------------------------------------------------

    def get_page(self, page_id: str) -> Page | None:
        return self.tree.get_page(page_id)

    def get_page_path(self, page_id: str) -> list[Page]:
        return self.tree.get_page_path(page_id)

    def get_root_pages(self) -> list[Page]:
        return self.tree.get_root_pages()

    def get_child_pages(self, parent_id: str) -> list[Page]:
        return self.tree.get_child_pages(parent_id)

    def get_favorite_pages(self) -> list[Page]:
        return self.tree.get_favorite_pages()

    def get_archived_pages(self) -> list[Page]:
        return self.tree.get_archived_pages()

    def search(self, query: str, include_archived: bool = True) -> list[SearchHit]:
        return search_pages(self.tree.pages(), query, include_archived=include_archived)

    # --- persistence plumbing ------------------------------------------------

    async def flush(self) -> None:
        await self.pipeline.flush()

    def _submit_page_fields(self, name: str, page_id: str, fields: dict) -> None:
        pipeline = self.pipeline

        async def run() -> None:
            await self.gateway.update_page(pipeline.remote_id(page_id), fields)

        pipeline.submit(name, page_id, run)

    def _submit_page_insert(self, page: Page) -> None:
        """Persist a new page and its blocks as one resumable op."""
        pipeline = self.pipeline
        snapshot = [block.model_copy() for block in page.blocks]
        positions = renumber([block.id for block in snapshot])
        self._positions[page.id] = dict(positions)
        done: set[str] = set()

        async def run() -> None:
            if page.id not in done:
                record = await self.gateway.insert_page(
                    self.workspace_id,
                    page.title,
                    pipeline.remote_id(page.parent_id),
                    page.icon,
                    self.user_id,
                    page_id=page.id,
                    cover=page.cover,
                )
                pipeline.remember_id(page.id, record.id)
                done.add(page.id)
            for block in snapshot:
                if block.id in done:
                    continue
                await self._insert_block_row(page.id, block, positions[block.id])
                done.add(block.id)

        pipeline.submit("insert_page", page.id, run)

    async def _insert_block_row(self, page_id: str, block: Block, position: int) -> None:
        record = await self.gateway.insert_block(
            self.pipeline.remote_id(page_id),
            block.type.value,
            block.content,
            position,
            block_id=block.id,
            checked=block.checked,
            color=block.color.value if block.color else None,
        )
        self.pipeline.remember_id(block.id, record.id)

    def _sync_order(self, page: Page, inserted: Block | None = None) -> None:
        """Queue the insert of ``inserted`` and every position the new order changes."""
        current = self._positions.setdefault(page.id, {})
        assigned = assign_positions(page.blocks.ids(), current)
        changed = changed_positions(assigned, current)
        pipeline = self.pipeline

        if inserted is not None:
            block = inserted.model_copy()
            position = changed.pop(block.id)

            async def insert() -> None:
                await self._insert_block_row(page.id, block, position)

            pipeline.submit("insert_block", block.id, insert)

        for block_id, position in changed.items():
            self._submit_block_fields("reposition_block", block_id, {"position": position})
        self._positions[page.id] = assigned

    def _submit_block_fields(self, name: str, block_id: str, fields: dict) -> None:
        pipeline = self.pipeline

        async def run() -> None:
            await self.gateway.update_block(pipeline.remote_id(block_id), fields)

        pipeline.submit(name, block_id, run)

    # --- page writes ---------------------------------------------------------

    def create_page(self, title: str = "", parent_id: str | None = None, icon: str | None = None) -> Page:
        page = self.tree.create(title, parent_id, icon=icon)
        self._submit_page_insert(page)
        return page

    def update_page(self, page_id: str, patch: PagePatch | dict) -> Page:
        if isinstance(patch, dict):
            patch = PagePatch.model_validate(patch)
        page = self.tree.update(page_id, patch)
        changes = patch.changes()
        if changes:
            self._submit_page_fields("update_page", page_id, to_column_values(changes))
        return page

    def move_page(self, page_id: str, new_parent_id: str | None) -> bool:
        moved = self.tree.move(page_id, new_parent_id)
        if moved:
            pipeline = self.pipeline

            async def run() -> None:
                await self.gateway.update_page(
                    pipeline.remote_id(page_id), {"parent_id": pipeline.remote_id(new_parent_id)}
                )

            pipeline.submit("move_page", page_id, run)
        return moved

    def archive_page(self, page_id: str) -> bool:
        changed = self.tree.archive(page_id)
        if changed:
            pipeline = self.pipeline

            async def run() -> None:
                await self.gateway.soft_delete_page(pipeline.remote_id(page_id))

            pipeline.submit("archive_page", page_id, run)
        return changed

    def restore_page(self, page_id: str) -> bool:
        changed = self.tree.restore(page_id)
        if changed:
            self._submit_page_fields("restore_page", page_id, {"is_archived": False})
        return changed

    def permanently_delete_page(self, page_id: str) -> list[Page]:
        deleted = self.tree.permanently_delete(page_id)
        for page in deleted:
            self._positions.pop(page.id, None)
            self._submit_page_fields("delete_page", page.id, {"is_deleted": True})
        return deleted

    def duplicate_page(self, page_id: str) -> Page:
        copy = self.tree.duplicate(page_id)
        self._submit_page_insert(copy)
        return copy

    def toggle_favorite(self, page_id: str) -> Page:
        page = self.tree.toggle_favorite(page_id)
        self._submit_page_fields("toggle_favorite", page_id, {"is_favorite": page.is_favorite})
        return page

    # --- block writes --------------------------------------------------------

    def add_block(self, page_id: str, block: Block, after: str | None = None) -> Block:
        inserted = self.tree.add_block(page_id, block, after)
        self._sync_order(self.tree.get_page(page_id), inserted)
        return inserted

    def update_block(self, page_id: str, block_id: str, patch: BlockPatch | dict) -> Block | None:
        if isinstance(patch, dict):
            patch = BlockPatch.model_validate(patch)
        block = self.tree.update_block(page_id, block_id, patch)
        if block is not None:
            self._submit_block_fields("update_block", block_id, to_column_values(patch.changes()))
        return block

    def remove_block(self, page_id: str, block_id: str) -> Block | None:
        removed = self.tree.remove_block(page_id, block_id)
        if removed is not None:
            self._positions.get(page_id, {}).pop(block_id, None)
            pipeline = self.pipeline

            async def run() -> None:
                await self.gateway.delete_block(pipeline.remote_id(block_id))

            pipeline.submit("delete_block", block_id, run)
        return removed

    def duplicate_block(self, page_id: str, block_id: str) -> Block | None:
        clone = self.tree.duplicate_block(page_id, block_id)
        if clone is not None:
            self._sync_order(self.tree.get_page(page_id), clone)
        return clone

    def move_block(self, page_id: str, block_id: str, target_index: int) -> bool:
        moved = self.tree.move_block(page_id, block_id, target_index)
        if moved:
            self._sync_order(self.tree.get_page(page_id))
        return moved

    # --- reconciliation ------------------------------------------------------

    async def reload(self) -> None:
        """Replace local state with the backend's (non-deleted pages and their blocks).

        Queued ops and recorded failures are dropped: remote truth wins. Pages
        moved to the root by a broken parent chain and pages that came back
        without blocks are repaired on the backend too.
        """
        records = await self.gateway.list_pages(self.workspace_id, PageFilter.ALL)
        pages: list[Page] = []
        positions: dict[str, dict[str, int]] = {}
        for record in records:
            block_records = await self.gateway.list_blocks(record.id)
            pages.append(record_to_page(record, block_records))
            positions[record.id] = {b.id: b.position for b in block_records}

        self.pipeline.clear()
        repaired = self.tree.load(pages)
        self._positions = positions
        for page_id in repaired:
            self._submit_page_fields("move_page", page_id, {"parent_id": None})
        for page in self.tree.pages():
            if not page.blocks:
                logger.warning("Page %s has no blocks, restoring default block", page.id)
                self.add_block(page.id, default_blocks()[0])
        logger.info("Reloaded workspace %s: %d pages", self.workspace_id, len(pages))

    # --- seed ----------------------------------------------------------------

    @classmethod
    def seeded(cls, gateway: PersistenceGateway | None = None, **kwargs) -> "Workspace":
        """A workspace holding the starter pages, backed by memory unless told otherwise."""
        workspace = cls(gateway or InMemoryGateway(), **kwargs)
        workspace.seed()
        return workspace

    def seed(self) -> list[Page]:
        """Create the starter pages of a fresh workspace."""
        home = self.create_page("Home", icon="\U0001f3e0")
        self._fill(home, [
            Block(type=BlockType.HEADING_1, content="Welcome to NoteZero"),
            Block(content="Start creating pages and organizing your workspace."),
        ])
        self.toggle_favorite(home.id)

        started = self.create_page("Getting Started", icon="\U0001f680")
        self._fill(started, [
            Block(type=BlockType.HEADING_1, content="Getting Started"),
            Block(content="This is your first page. Click anywhere to start typing."),
            Block(type=BlockType.TODO, content="Create your first page"),
            Block(type=BlockType.TODO, content="Add some blocks"),
            Block(type=BlockType.TODO, content="Explore the sidebar", checked=True),
        ])

        plan = self.create_page("Q4 Project Plan", icon="\U0001f4cb")
        self._fill(plan, [
            Block(type=BlockType.HEADING_1, content="Q4 Project Plan"),
            Block(content="Key milestones and strategy for the upcoming quarter."),
            Block(type=BlockType.HEADING_2, content="Goals"),
            Block(type=BlockType.BULLETED_LIST, content="Complete user research"),
            Block(type=BlockType.BULLETED_LIST, content="Launch MVP"),
            Block(type=BlockType.BULLETED_LIST, content="Gather feedback"),
        ])
        self.toggle_favorite(plan.id)
        return [home, started, plan]

    def _fill(self, page: Page, blocks: list[Block]) -> None:
        """Replace a fresh page's default block with ``blocks``."""
        placeholder = page.blocks[0].id
        anchor = placeholder
        for block in blocks:
            anchor = self.add_block(page.id, block, after=anchor).id
        self.remove_block(page.id, placeholder)
