"""Workspace routes.

Every mutation is applied to the in-memory workspace before the response is
built; persistence runs afterwards as a background flush. Failures from that
flush land in the pipeline's failure ledger, visible through ``GET /sync``.
"""

import logging
from enum import Enum

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from notezero.errors import PersistenceFailure
from notezero.models.block import Block, BlockColor, BlockPatch, BlockType
from notezero.models.page import Page, PagePatch
from notezero.workspace import Workspace

logger = logging.getLogger(__name__)

router = APIRouter(tags=["workspace"])


class PageView(str, Enum):
    ROOT = "root"
    FAVORITES = "favorites"
    ARCHIVED = "archived"


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreatePageRequest(_Body):
    title: str = ""
    parent_id: str | None = None
    icon: str | None = None


class MovePageRequest(_Body):
    parent_id: str | None = None


class AddBlockRequest(_Body):
    type: BlockType = BlockType.TEXT
    content: str = ""
    checked: bool = False
    color: BlockColor | None = None
    after: str | None = None


class MoveBlockRequest(_Body):
    index: int


def get_workspace(request: Request) -> Workspace:
    return request.app.state.workspace


async def persist(workspace: Workspace) -> None:
    """Background flush. Failures stay in the ledger for ``GET /sync``."""
    try:
        await workspace.flush()
    except PersistenceFailure:
        logger.warning("Background persistence failed", extra={"failures": len(workspace.pipeline.failures)})


def _dump(model: BaseModel) -> dict:
    return model.model_dump(mode="json", by_alias=True)


def _page(workspace: Workspace, page: Page) -> dict:
    """Page JSON plus the title and icon as the sidebar shows them."""
    data = _dump(page)
    data["displayTitle"] = page.display_title(workspace.locale)
    data["displayIcon"] = page.display_icon
    return data


def _page_or_404(workspace: Workspace, page_id: str) -> Page:
    page = workspace.get_page(page_id)
    if page is None:
        raise HTTPException(status_code=404, detail=f"page not found: {page_id}")
    return page


def _sync_status(workspace: Workspace) -> dict:
    return {
        "pending": workspace.pipeline.pending,
        "failures": [
            {"operation": f.operation, "entityId": f.entity_id, "error": str(f.cause)}
            for f in workspace.pipeline.failures
        ],
    }


# --- pages -------------------------------------------------------------------


@router.get("/pages")
async def list_pages(view: PageView = PageView.ROOT, workspace: Workspace = Depends(get_workspace)) -> list[dict]:
    if view == PageView.FAVORITES:
        pages = workspace.get_favorite_pages()
    elif view == PageView.ARCHIVED:
        pages = workspace.get_archived_pages()
    else:
        pages = workspace.get_root_pages()
    return [_page(workspace, p) for p in pages]


@router.post("/pages", status_code=201)
async def create_page(
    body: CreatePageRequest,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    page = workspace.create_page(body.title, body.parent_id, icon=body.icon)
    background_tasks.add_task(persist, workspace)
    return _page(workspace, page)


@router.get("/pages/{page_id}")
async def get_page(page_id: str, workspace: Workspace = Depends(get_workspace)) -> dict:
    return _page(workspace, _page_or_404(workspace, page_id))


@router.patch("/pages/{page_id}")
async def update_page(
    page_id: str,
    patch: PagePatch,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    page = workspace.update_page(page_id, patch)
    background_tasks.add_task(persist, workspace)
    return _page(workspace, page)


@router.delete("/pages/{page_id}")
async def delete_page(
    page_id: str,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    """Permanently delete a page and its subtree."""
    deleted = workspace.permanently_delete_page(page_id)
    background_tasks.add_task(persist, workspace)
    return {"deleted": [p.id for p in deleted]}


@router.get("/pages/{page_id}/children")
async def child_pages(page_id: str, workspace: Workspace = Depends(get_workspace)) -> list[dict]:
    return [_page(workspace, p) for p in workspace.get_child_pages(page_id)]


@router.get("/pages/{page_id}/path")
async def page_path(page_id: str, workspace: Workspace = Depends(get_workspace)) -> list[dict]:
    """Breadcrumb from the root down to the page."""
    return [_page(workspace, p) for p in workspace.get_page_path(page_id)]


@router.post("/pages/{page_id}/move")
async def move_page(
    page_id: str,
    body: MovePageRequest,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    workspace.move_page(page_id, body.parent_id)
    background_tasks.add_task(persist, workspace)
    return _page(workspace, _page_or_404(workspace, page_id))


@router.post("/pages/{page_id}/archive")
async def archive_page(
    page_id: str,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    workspace.archive_page(page_id)
    background_tasks.add_task(persist, workspace)
    return _page(workspace, _page_or_404(workspace, page_id))


@router.post("/pages/{page_id}/restore")
async def restore_page(
    page_id: str,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    workspace.restore_page(page_id)
    background_tasks.add_task(persist, workspace)
    return _page(workspace, _page_or_404(workspace, page_id))


@router.post("/pages/{page_id}/favorite")
async def toggle_favorite(
    page_id: str,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    page = workspace.toggle_favorite(page_id)
    background_tasks.add_task(persist, workspace)
    return _page(workspace, page)


@router.post("/pages/{page_id}/duplicate", status_code=201)
async def duplicate_page(
    page_id: str,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    copy = workspace.duplicate_page(page_id)
    background_tasks.add_task(persist, workspace)
    return _page(workspace, copy)


# --- blocks ------------------------------------------------------------------


@router.post("/pages/{page_id}/blocks", status_code=201)
async def add_block(
    page_id: str,
    body: AddBlockRequest,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    block = Block(type=body.type, content=body.content, checked=body.checked, color=body.color)
    inserted = workspace.add_block(page_id, block, after=body.after)
    background_tasks.add_task(persist, workspace)
    return _dump(inserted)


@router.patch("/pages/{page_id}/blocks/{block_id}")
async def update_block(
    page_id: str,
    block_id: str,
    patch: BlockPatch,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    block = workspace.update_block(page_id, block_id, patch)
    if block is None:
        raise HTTPException(status_code=404, detail=f"block not found: {block_id}")
    background_tasks.add_task(persist, workspace)
    return _dump(block)


@router.delete("/pages/{page_id}/blocks/{block_id}")
async def remove_block(
    page_id: str,
    block_id: str,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    removed = workspace.remove_block(page_id, block_id)
    if removed is None:
        raise HTTPException(status_code=404, detail=f"block not found: {block_id}")
    background_tasks.add_task(persist, workspace)
    return {"removed": removed.id}


@router.post("/pages/{page_id}/blocks/{block_id}/duplicate", status_code=201)
async def duplicate_block(
    page_id: str,
    block_id: str,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    clone = workspace.duplicate_block(page_id, block_id)
    if clone is None:
        raise HTTPException(status_code=404, detail=f"block not found: {block_id}")
    background_tasks.add_task(persist, workspace)
    return _dump(clone)


@router.post("/pages/{page_id}/blocks/{block_id}/move")
async def move_block(
    page_id: str,
    block_id: str,
    body: MoveBlockRequest,
    background_tasks: BackgroundTasks,
    workspace: Workspace = Depends(get_workspace),
) -> dict:
    moved = workspace.move_block(page_id, block_id, body.index)
    background_tasks.add_task(persist, workspace)
    page = _page_or_404(workspace, page_id)
    return {"moved": moved, "order": page.blocks.ids()}


# --- search and sync ---------------------------------------------------------


@router.get("/search")
async def search(q: str = "", workspace: Workspace = Depends(get_workspace)) -> list[dict]:
    return [_dump(hit) for hit in workspace.search(q)]


@router.get("/sync")
async def sync_status(workspace: Workspace = Depends(get_workspace)) -> dict:
    return _sync_status(workspace)


@router.post("/sync/flush")
async def flush(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Drain queued writes now; a failed write answers 502."""
    await workspace.flush()
    return _sync_status(workspace)


@router.post("/sync/reload")
async def reload(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Drop local state and queued writes, reload from the backend."""
    await workspace.reload()
    return {"pages": len(workspace.tree), **_sync_status(workspace)}
