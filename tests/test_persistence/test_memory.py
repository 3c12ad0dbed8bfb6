"""Tests for the in-memory gateway."""

import pytest

from notezero.persistence.gateway import GatewayError
from notezero.persistence.memory import InMemoryGateway
from notezero.persistence.records import PageFilter


async def _make_pages(gateway: InMemoryGateway) -> dict[str, str]:
    """root, child, favorite, archived and deleted pages in workspace ws."""
    root = await gateway.insert_page("ws", "Root", page_id="root")
    await gateway.insert_page("ws", "Child", root.id, page_id="child")
    await gateway.insert_page("ws", "Fav", page_id="fav")
    await gateway.update_page("fav", {"is_favorite": True})
    await gateway.insert_page("ws", "Old", page_id="old")
    await gateway.soft_delete_page("old")
    await gateway.insert_page("ws", "Gone", page_id="gone")
    await gateway.update_page("gone", {"is_deleted": True})
    await gateway.insert_page("other-ws", "Elsewhere")
    return {"root": root.id}


async def test_insert_page_honors_client_id(gateway: InMemoryGateway):
    record = await gateway.insert_page("ws", "A", icon="⭐", created_by="u1", page_id="p1")
    assert record.id == "p1"
    assert record.created_by == "u1"
    assert gateway.pages["p1"].icon == "⭐"


async def test_insert_page_generates_id(gateway: InMemoryGateway):
    record = await gateway.insert_page("ws", "A")
    assert record.id in gateway.pages


async def test_duplicate_insert_rejected(gateway: InMemoryGateway):
    await gateway.insert_page("ws", "A", page_id="p1")
    with pytest.raises(GatewayError):
        await gateway.insert_page("ws", "B", page_id="p1")


async def test_update_unknown_page(gateway: InMemoryGateway):
    with pytest.raises(GatewayError) as exc_info:
        await gateway.update_page("missing", {"title": "x"})
    assert exc_info.value.transient is False


@pytest.mark.parametrize(
    ("page_filter", "expected"),
    [
        (PageFilter.ROOT, ["root", "fav"]),
        (PageFilter.FAVORITES, ["fav"]),
        (PageFilter.ARCHIVED, ["old"]),
        (PageFilter.ALL, ["root", "child", "fav", "old"]),
    ],
)
async def test_list_pages_filters(gateway: InMemoryGateway, page_filter, expected):
    await _make_pages(gateway)
    pages = await gateway.list_pages("ws", page_filter)
    assert sorted(p.id for p in pages) == sorted(expected)


async def test_list_children(gateway: InMemoryGateway):
    await _make_pages(gateway)
    pages = await gateway.list_pages("ws", PageFilter.CHILDREN, parent_id="root")
    assert [p.id for p in pages] == ["child"]


async def test_listings_are_copies(gateway: InMemoryGateway):
    await gateway.insert_page("ws", "A", page_id="p1")
    (page,) = await gateway.list_pages("ws")
    page.title = "mutated"
    assert gateway.pages["p1"].title == "A"


async def test_block_crud(gateway: InMemoryGateway):
    await gateway.insert_page("ws", "A", page_id="p1")
    await gateway.insert_block("p1", "text", "second", 2048, block_id="b2")
    await gateway.insert_block("p1", "todo", "first", 1024, block_id="b1", checked=True)

    blocks = await gateway.list_blocks("p1")
    assert [b.id for b in blocks] == ["b1", "b2"]
    assert blocks[0].checked is True

    await gateway.update_block("b2", {"position": 512})
    assert [b.id for b in await gateway.list_blocks("p1")] == ["b2", "b1"]

    await gateway.delete_block("b2")
    assert [b.id for b in await gateway.list_blocks("p1")] == ["b1"]
    with pytest.raises(GatewayError):
        await gateway.delete_block("b2")


async def test_insert_block_into_unknown_page(gateway: InMemoryGateway):
    with pytest.raises(GatewayError):
        await gateway.insert_block("missing", "text", "", 1024)
