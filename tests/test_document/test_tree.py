"""Tests for PageTree traversal, views and structural invariants."""

import pytest

from notezero.document.tree import PageTree
from notezero.errors import CycleDetected, InvalidTransition, NotFound
from notezero.models.block import Block, BlockPatch, BlockType
from notezero.models.page import Page
from notezero.models.sequence import BlockSequence


def _ids(pages: list[Page]) -> list[str]:
    return [p.id for p in pages]


def _make_chain(tree: PageTree, *titles: str) -> list[Page]:
    """Pages nested one under the other, outermost first."""
    pages: list[Page] = []
    parent_id = None
    for title in titles:
        page = tree.create(title, parent_id)
        pages.append(page)
        parent_id = page.id
    return pages


# --- create and read ----------------------------------------------------------


def test_create_page_has_one_empty_text_block(tree: PageTree):
    """New pages start with a single empty text block."""
    page = tree.create()
    assert len(page.blocks) == 1
    assert page.blocks[0].type == BlockType.TEXT
    assert page.blocks[0].content == ""
    assert tree.get_page(page.id) is page


def test_create_under_missing_parent(tree: PageTree):
    with pytest.raises(NotFound):
        tree.create("Orphan", parent_id="missing")
    assert len(tree) == 0


def test_page_path_of_child(tree: PageTree):
    """Root A with child B: the path of B is [A, B]."""
    a, b = _make_chain(tree, "A", "B")
    assert tree.get_page_path(b.id) == [a, b]


def test_page_path_terminates_and_starts_at_root(tree: PageTree):
    """Every path ends at the page and starts at a root page."""
    pages = _make_chain(tree, "A", "B", "C", "D")
    for page in pages:
        path = tree.get_page_path(page.id)
        assert path[-1].id == page.id
        assert path[0].parent_id is None


def test_reads_are_lenient(tree: PageTree):
    """Unknown ids give None or empty lists, never errors."""
    assert tree.get_page("missing") is None
    assert tree.get_page_path("missing") == []
    assert tree.get_child_pages("missing") == []


def test_views(tree: PageTree):
    """Root, child and favorite views hide archived pages; the archived view shows them."""
    a, b = _make_chain(tree, "A", "B")
    c = tree.create("C")
    tree.toggle_favorite(a.id)
    tree.toggle_favorite(c.id)
    tree.archive(c.id)

    assert _ids(tree.get_root_pages()) == [a.id]
    assert _ids(tree.get_child_pages(a.id)) == [b.id]
    assert _ids(tree.get_favorite_pages()) == [a.id]
    assert _ids(tree.get_archived_pages()) == [c.id]


# --- update and move ------------------------------------------------------------


def test_update_merges_and_touches(tree: PageTree):
    page = tree.create("Old")
    before = page.updated_at
    tree.update(page.id, {"title": "New", "icon": "⭐"})
    assert page.title == "New"
    assert page.icon == "⭐"
    assert page.updated_at >= before


def test_update_missing_page(tree: PageTree):
    with pytest.raises(NotFound):
        tree.update("missing", {"title": "x"})


def test_move_reparents(tree: PageTree):
    a = tree.create("A")
    b = tree.create("B")
    assert tree.move(b.id, a.id) is True
    assert tree.get_page_path(b.id) == [a, b]
    assert tree.move(b.id, a.id) is False
    assert tree.move(b.id, None) is True
    assert b.parent_id is None


def test_move_under_itself_rejected(tree: PageTree):
    """Moving a page under itself fails and changes nothing."""
    a = tree.create("A")
    with pytest.raises(CycleDetected):
        tree.move(a.id, a.id)
    assert a.parent_id is None


def test_move_under_child_rejected(tree: PageTree):
    """Moving A under its child B fails and the tree is unchanged."""
    a, b = _make_chain(tree, "A", "B")
    with pytest.raises(CycleDetected):
        tree.move(a.id, b.id)
    assert a.parent_id is None
    assert b.parent_id == a.id
    assert tree.get_page_path(b.id) == [a, b]


def test_move_under_deep_descendant_rejected(tree: PageTree):
    a, _, _, d = _make_chain(tree, "A", "B", "C", "D")
    with pytest.raises(CycleDetected):
        tree.move(a.id, d.id)


def test_move_to_missing_parent(tree: PageTree):
    a = tree.create("A")
    with pytest.raises(NotFound):
        tree.move(a.id, "missing")


# --- lifecycle ----------------------------------------------------------------


def test_archive_and_restore_views(tree: PageTree):
    """Archived A leaves the root view and returns after restore."""
    a = tree.create("A")
    tree.archive(a.id)
    assert a not in tree.get_root_pages()
    assert a in tree.get_archived_pages()

    tree.restore(a.id)
    assert a in tree.get_root_pages()
    assert a not in tree.get_archived_pages()


def test_archive_restore_archive_round_trip(tree: PageTree):
    """Restored then re-archived, a page appears only in the archived view."""
    a = tree.create("A")
    tree.archive(a.id)
    tree.restore(a.id)
    tree.archive(a.id)
    assert a.is_archived
    assert _ids(tree.get_archived_pages()) == [a.id]
    assert tree.get_root_pages() == []
    assert tree.get_favorite_pages() == []


def test_archive_does_not_cascade(tree: PageTree):
    """Children of an archived page stay active."""
    a, b = _make_chain(tree, "A", "B")
    tree.archive(a.id)
    assert not b.is_archived
    assert tree.get_child_pages(a.id) == [b]


def test_archive_is_idempotent(tree: PageTree):
    a = tree.create("A")
    assert tree.archive(a.id) is True
    assert tree.archive(a.id) is False


def test_permanent_delete_cascades(tree: PageTree):
    """Deleting a page deletes its whole subtree and hides it everywhere."""
    a, b, c = _make_chain(tree, "A", "B", "C")
    other = tree.create("Other")
    tree.archive(a.id)

    deleted = tree.permanently_delete(a.id)

    assert _ids(deleted) == [a.id, b.id, c.id]
    assert all(p.is_deleted for p in deleted)
    for page in (a, b, c):
        assert tree.get_page(page.id) is None
        assert page.id not in tree
    assert _ids(tree.get_root_pages()) == [other.id]
    assert tree.get_archived_pages() == []
    assert len(tree) == 1


def test_deleted_is_terminal(tree: PageTree):
    a = tree.create("A")
    tree.permanently_delete(a.id)
    with pytest.raises(InvalidTransition):
        tree.restore(a.id)
    with pytest.raises(InvalidTransition):
        tree.archive(a.id)
    with pytest.raises(InvalidTransition):
        tree.permanently_delete(a.id)


def test_writes_to_deleted_page_raise_not_found(tree: PageTree):
    a = tree.create("A")
    tree.permanently_delete(a.id)
    with pytest.raises(NotFound):
        tree.update(a.id, {"title": "x"})
    with pytest.raises(NotFound):
        tree.create("Child", parent_id=a.id)
    with pytest.raises(NotFound):
        tree.add_block(a.id, Block())


def test_toggle_favorite_on_archived_page(tree: PageTree):
    """Favorite is independent of archive state."""
    a = tree.create("A")
    tree.archive(a.id)
    tree.toggle_favorite(a.id)
    assert a.is_favorite
    assert tree.get_favorite_pages() == []
    tree.restore(a.id)
    assert tree.get_favorite_pages() == [a]


# --- duplicate ------------------------------------------------------------------


def test_duplicate_page(tree: PageTree):
    """The copy has new ids, equal content, same parent and is not favorite."""
    root = tree.create("Root")
    a = tree.create("A", parent_id=root.id, icon="\U0001f4da", cover="blue")
    a.blocks = BlockSequence([
        Block(type=BlockType.HEADING_1, content="One"),
        Block(content="Two"),
        Block(type=BlockType.TODO, content="Three", checked=True),
    ])
    tree.toggle_favorite(a.id)

    copy = tree.duplicate(a.id)

    assert copy.id != a.id
    assert copy.title == "A (copy)"
    assert (copy.icon, copy.cover, copy.parent_id) == (a.icon, a.cover, root.id)
    assert copy.is_favorite is False
    assert [(b.type, b.content, b.checked) for b in copy.blocks] == [
        (b.type, b.content, b.checked) for b in a.blocks
    ]
    assert not set(copy.blocks.ids()) & set(a.blocks.ids())


def test_duplicate_is_isolated(tree: PageTree):
    """Edits and favorites on the copy never reach the original."""
    a = tree.create("A")
    copy = tree.duplicate(a.id)
    tree.update_block(copy.id, copy.blocks[0].id, BlockPatch(content="changed"))
    tree.add_block(copy.id, Block(content="extra"))
    tree.toggle_favorite(copy.id)

    assert a.blocks[0].content == ""
    assert len(a.blocks) == 1
    assert a.is_favorite is False


def test_duplicate_is_shallow(tree: PageTree):
    """Children are not copied."""
    a, _ = _make_chain(tree, "A", "B")
    copy = tree.duplicate(a.id)
    assert tree.get_child_pages(copy.id) == []


def test_duplicate_suffix_is_configurable():
    tree = PageTree(duplicate_suffix=" - Copy")
    a = tree.create("Plan")
    assert tree.duplicate(a.id).title == "Plan - Copy"


# --- blocks -------------------------------------------------------------------


def test_block_operations_touch_page(tree: PageTree):
    page = tree.create("A")
    first = page.blocks[0]
    before = page.updated_at

    second = tree.add_block(page.id, Block(content="two"), after=first.id)
    tree.move_block(page.id, second.id, 0)
    clone = tree.duplicate_block(page.id, second.id)
    tree.remove_block(page.id, first.id)

    assert page.blocks.ids() == [second.id, clone.id]
    assert page.updated_at >= before


def test_block_operations_on_missing_block_are_noops(tree: PageTree):
    page = tree.create("A")
    assert tree.update_block(page.id, "missing", {"content": "x"}) is None
    assert tree.remove_block(page.id, "missing") is None
    assert tree.duplicate_block(page.id, "missing") is None
    assert tree.move_block(page.id, "missing", 0) is False


def test_insert_todo_block_unchecked(tree: PageTree):
    page = tree.create("A")
    block = tree.add_block(page.id, Block(type=BlockType.TODO, content="task"))
    assert block.checked is False


# --- load -----------------------------------------------------------------------


def test_load_moves_orphans_to_root():
    """Pages whose parent is missing or deleted are reparented to the root."""
    gone = Page(id="gone", is_deleted=True)
    orphan = Page(id="orphan", parent_id="missing")
    child_of_deleted = Page(id="child", parent_id="gone")
    tree = PageTree([gone, orphan, child_of_deleted])

    assert orphan.parent_id is None
    assert child_of_deleted.parent_id is None
    assert set(_ids(tree.get_root_pages())) == {"orphan", "child"}


def test_load_breaks_cycles():
    """A stored parent cycle is cut so paths terminate."""
    a = Page(id="a", parent_id="b")
    b = Page(id="b", parent_id="a")
    tree = PageTree([a, b])

    for page_id in ("a", "b"):
        path = tree.get_page_path(page_id)
        assert path[-1].id == page_id
        assert path[0].parent_id is None


def test_load_reports_repaired_pages():
    """load returns the ids it moved to the root and nothing else."""
    tree = PageTree()
    repaired = tree.load([
        Page(id="root"),
        Page(id="kept", parent_id="root"),
        Page(id="orphan", parent_id="missing"),
        Page(id="a", parent_id="b"),
        Page(id="b", parent_id="a"),
    ])

    assert sorted(repaired) == ["a", "orphan"]
    assert tree.get_page("kept").parent_id == "root"
