"""Abstract CRUD boundary to the remote store.

Implementations raise on failure; a call that returns has succeeded.
Permanent deletion is an ``update_page(is_deleted=True)``: pages are never
hard-deleted through this interface.
"""

from abc import ABC, abstractmethod

from notezero.persistence.records import BlockRecord, PageFilter, PageRecord


class GatewayError(Exception):
    """Backend rejected or could not serve a request.

    ``transient`` marks errors worth retrying (outage, throttling).
    """

    def __init__(self, message: str, transient: bool = False) -> None:
        super().__init__(message)
        self.transient = transient


class PersistenceGateway(ABC):
    """The eight logical operations the document core issues."""

    @abstractmethod
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
        """Insert a page; ``page_id`` is a client-side id the backend may honor."""

    @abstractmethod
    async def update_page(self, page_id: str, fields: dict) -> None:
        """Apply column values to a page."""

    @abstractmethod
    async def soft_delete_page(self, page_id: str) -> None:
        """Archive a page."""

    @abstractmethod
    async def list_pages(
        self,
        workspace_id: str,
        filter: PageFilter = PageFilter.ALL,
        parent_id: str | None = None,
    ) -> list[PageRecord]:
        """Pages matching ``filter`` ordered by creation time."""

    @abstractmethod
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
        """Insert a block at ``position``."""

    @abstractmethod
    async def update_block(self, block_id: str, fields: dict) -> None:
        """Apply column values to a block."""

    @abstractmethod
    async def delete_block(self, block_id: str) -> None:
        """Remove a block row."""

    @abstractmethod
    async def list_blocks(self, page_id: str) -> list[BlockRecord]:
        """Blocks of a page ordered by position."""
