"""Dict-backed gateway for offline use and tests.

Behaves like the REST backend: honors client ids, orders listings the same
way, and raises GatewayError for unknown rows.
"""

from notezero.ordering import new_id, sort_by_position, utc_now
from notezero.persistence.gateway import GatewayError, PersistenceGateway
from notezero.persistence.records import BlockRecord, PageFilter, PageRecord


class InMemoryGateway(PersistenceGateway):
    def __init__(self) -> None:
        self.pages: dict[str, PageRecord] = {}
        self.blocks: dict[str, BlockRecord] = {}

    def _page(self, page_id: str) -> PageRecord:
        try:
            return self.pages[page_id]
        except KeyError:
            raise GatewayError(f"page {page_id} does not exist") from None

    def _block(self, block_id: str) -> BlockRecord:
        try:
            return self.blocks[block_id]
        except KeyError:
            raise GatewayError(f"block {block_id} does not exist") from None

    async def insert_page(
        self,
        workspace_id: str,
        title: str,
        parent_id: str | None = None,
        icon: str | None = None,
        created_by: str | None = None,
        *,
        page_id: str | None = None,
        cover: str | None = None,
    ) -> PageRecord:
        record = PageRecord(
            id=page_id or new_id(),
            workspace_id=workspace_id,
            parent_id=parent_id,
            title=title,
            icon=icon,
            cover=cover,
            created_by=created_by,
        )
        if record.id in self.pages:
            raise GatewayError(f"page {record.id} already exists")
        self.pages[record.id] = record
        return record.model_copy()

    async def update_page(self, page_id: str, fields: dict) -> None:
        record = self._page(page_id)
        self.pages[page_id] = record.model_copy(update={**fields, "updated_at": utc_now()})

    async def soft_delete_page(self, page_id: str) -> None:
        await self.update_page(page_id, {"is_archived": True})

    async def list_pages(
        self,
        workspace_id: str,
        filter: PageFilter = PageFilter.ALL,
        parent_id: str | None = None,
    ) -> list[PageRecord]:
        def matches(p: PageRecord) -> bool:
            if p.workspace_id != workspace_id or p.is_deleted:
                return False
            if filter == PageFilter.ROOT:
                return p.parent_id is None and not p.is_archived
            if filter == PageFilter.CHILDREN:
                return p.parent_id == parent_id and not p.is_archived
            if filter == PageFilter.FAVORITES:
                return p.is_favorite and not p.is_archived
            if filter == PageFilter.ARCHIVED:
                return p.is_archived
            return True

        found = [p.model_copy() for p in self.pages.values() if matches(p)]
        return sorted(found, key=lambda p: (p.created_at, p.id))

    async def insert_block(
        self,
        page_id: str,
        type: str,
        content: str,
        position: int,
        *,
        block_id: str | None = None,
        checked: bool = False,
        color: str | None = None,
    ) -> BlockRecord:
        self._page(page_id)
        record = BlockRecord(
            id=block_id or new_id(),
            page_id=page_id,
            type=type,
            content=content,
            position=position,
            checked=checked,
            color=color,
        )
        if record.id in self.blocks:
            raise GatewayError(f"block {record.id} already exists")
        self.blocks[record.id] = record
        return record.model_copy()

    async def update_block(self, block_id: str, fields: dict) -> None:
        record = self._block(block_id)
        self.blocks[block_id] = record.model_copy(update={**fields, "updated_at": utc_now()})

    async def delete_block(self, block_id: str) -> None:
        self._block(block_id)
        del self.blocks[block_id]

    async def list_blocks(self, page_id: str) -> list[BlockRecord]:
        return sort_by_position(b.model_copy() for b in self.blocks.values() if b.page_id == page_id)
