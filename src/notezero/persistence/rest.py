"""PostgREST-style backend gateway over httpx.

Tables ``pages`` and ``blocks`` under ``/rest/v1``. Filters use PostgREST
operators (``eq.``, ``is.null``) and inserts ask for the stored row back via
``Prefer: return=representation``. HTTP errors propagate as
httpx.HTTPStatusError / httpx.TransportError for the pipeline to classify.
"""

import httpx

from notezero.ordering import utc_now
from notezero.persistence.client import get_http_client
from notezero.persistence.gateway import GatewayError, PersistenceGateway
from notezero.persistence.records import BlockRecord, PageFilter, PageRecord

_PAGES = "/rest/v1/pages"
_BLOCKS = "/rest/v1/blocks"
_RETURN_ROW = {"Prefer": "return=representation"}


class RestGateway(PersistenceGateway):
    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client

    async def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = await get_http_client()
        return self._client

    async def _insert(self, path: str, row: dict) -> dict:
        client = await self._http()
        response = await client.post(path, json=row, headers=_RETURN_ROW)
        response.raise_for_status()
        rows = response.json()
        if not rows:
            raise GatewayError(f"insert into {path} returned no row")
        return rows[0]

    async def _patch(self, path: str, row_id: str, fields: dict) -> None:
        client = await self._http()
        payload = {**fields, "updated_at": utc_now().isoformat()}
        response = await client.patch(path, params={"id": f"eq.{row_id}"}, json=payload)
        response.raise_for_status()

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
        row = {
            "workspace_id": workspace_id,
            "parent_id": parent_id,
            "title": title,
            "icon": icon,
            "cover": cover,
            "created_by": created_by,
        }
        if page_id:
            row["id"] = page_id
        return PageRecord.model_validate(await self._insert(_PAGES, row))

    async def update_page(self, page_id: str, fields: dict) -> None:
        await self._patch(_PAGES, page_id, fields)

    async def soft_delete_page(self, page_id: str) -> None:
        await self._patch(_PAGES, page_id, {"is_archived": True})

    async def list_pages(
        self,
        workspace_id: str,
        filter: PageFilter = PageFilter.ALL,
        parent_id: str | None = None,
    ) -> list[PageRecord]:
        params = {
            "workspace_id": f"eq.{workspace_id}",
            "is_deleted": "eq.false",
            "order": "created_at.asc,id.asc",
        }
        if filter == PageFilter.ROOT:
            params.update({"parent_id": "is.null", "is_archived": "eq.false"})
        elif filter == PageFilter.CHILDREN:
            params.update({"parent_id": f"eq.{parent_id}", "is_archived": "eq.false"})
        elif filter == PageFilter.FAVORITES:
            params.update({"is_favorite": "eq.true", "is_archived": "eq.false"})
        elif filter == PageFilter.ARCHIVED:
            params["is_archived"] = "eq.true"

        client = await self._http()
        response = await client.get(_PAGES, params=params)
        response.raise_for_status()
        return [PageRecord.model_validate(row) for row in response.json()]

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
        row = {
            "page_id": page_id,
            "type": type,
            "content": content,
            "position": position,
            "checked": checked,
            "color": color,
        }
        if block_id:
            row["id"] = block_id
        return BlockRecord.model_validate(await self._insert(_BLOCKS, row))

    async def update_block(self, block_id: str, fields: dict) -> None:
        await self._patch(_BLOCKS, block_id, fields)

    async def delete_block(self, block_id: str) -> None:
        client = await self._http()
        response = await client.delete(_BLOCKS, params={"id": f"eq.{block_id}"})
        response.raise_for_status()

    async def list_blocks(self, page_id: str) -> list[BlockRecord]:
        client = await self._http()
        response = await client.get(
            _BLOCKS,
            params={"page_id": f"eq.{page_id}", "order": "position.asc,created_at.asc,id.asc"},
        )
        response.raise_for_status()
        return [BlockRecord.model_validate(row) for row in response.json()]
