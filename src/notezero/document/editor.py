"""Editor keyboard and slash-menu commands expressed as block operations.

These are the usability rules of the block editor, not structural
necessities of the sequence:

- paragraph break inserts an empty text block after the current one, which
  then takes focus
- delete-backward on an empty non-text block turns it into a text block in
  place instead of removing it
- choosing a type from the slash menu converts the block and clears it

Every command works on any target exposing the PageTree block API, so the
same code drives a bare tree or a persisting Workspace.
"""

from typing import Protocol

from notezero.models.block import Block, BlockPatch, BlockType

BLOCK_TYPE_LABELS: dict[BlockType, str] = {
    BlockType.TEXT: "Text",
    BlockType.HEADING_1: "Heading 1",
    BlockType.HEADING_2: "Heading 2",
    BlockType.HEADING_3: "Heading 3",
    BlockType.BULLETED_LIST: "Bulleted list",
    BlockType.NUMBERED_LIST: "Numbered list",
    BlockType.TODO: "To-do",
    BlockType.QUOTE: "Quote",
    BlockType.DIVIDER: "Divider",
    BlockType.CODE: "Code",
    BlockType.CALLOUT: "Callout",
    BlockType.TOGGLE: "Toggle list",
    BlockType.IMAGE: "Image",
    BlockType.PAGE_REFERENCE: "Page",
}

# Order of the "Basic blocks" section of the slash menu
SLASH_MENU_TYPES: list[BlockType] = [
    BlockType.TEXT,
    BlockType.HEADING_1,
    BlockType.HEADING_2,
    BlockType.HEADING_3,
    BlockType.BULLETED_LIST,
    BlockType.NUMBERED_LIST,
    BlockType.TODO,
    BlockType.QUOTE,
    BlockType.DIVIDER,
]


class BlockTarget(Protocol):
    def get_page(self, page_id: str): ...

    def add_block(self, page_id: str, block: Block, after: str | None = None) -> Block: ...

    def update_block(self, page_id: str, block_id: str, patch: BlockPatch | dict) -> Block | None: ...


def filter_block_types(query: str) -> list[BlockType]:
    """Slash-menu entries whose label contains ``query`` (case-insensitive)."""
    needle = query.lower()
    return [t for t in SLASH_MENU_TYPES if needle in BLOCK_TYPE_LABELS[t].lower()]


def parse_slash_command(content: str) -> str | None:
    """Filter text typed after a leading '/', or None when the menu is closed."""
    if content.startswith("/"):
        return content[1:]
    return None


def split_block(target: BlockTarget, page_id: str, block_id: str) -> Block:
    """Paragraph break: new empty text block right after ``block_id``.

    Returns the new block, which should receive input focus.
    """
    return target.add_block(page_id, Block(type=BlockType.TEXT, content=""), after=block_id)


def backspace_on_empty(target: BlockTarget, page_id: str, block_id: str) -> bool:
    """Delete-backward on an empty block.

    Converts an empty non-text block to text and returns True. Text blocks
    and non-empty blocks are left alone (False) for the caller's default
    handling.
    """
    page = target.get_page(page_id)
    block = page.blocks.get(block_id) if page is not None else None
    if block is None or block.content != "" or block.type == BlockType.TEXT:
        return False
    target.update_block(page_id, block_id, BlockPatch(type=BlockType.TEXT))
    return True


def change_block_type(target: BlockTarget, page_id: str, block_id: str, block_type: BlockType) -> Block | None:
    """Slash-menu selection: convert the block and clear its content."""
    return target.update_block(page_id, block_id, BlockPatch(type=block_type, content=""))
