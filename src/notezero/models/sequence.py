"""Ordered block collection of a single page.

Order is the list order and nothing else. Lookups by a missing block id are
tolerant: mutations become no-ops and return None/False so UI entry points
racing each other (drag handle vs. inline edit) never fail on a stale id.
"""

from collections.abc import Iterator

from pydantic import Field, RootModel

from notezero.models.block import Block, BlockPatch
from notezero.ordering import new_id


class BlockSequence(RootModel[list[Block]]):
    """Blocks of one page with order-preserving mutation primitives."""

    root: list[Block] = Field(default_factory=list)

    def __iter__(self) -> Iterator[Block]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> Block:
        return self.root[index]

    def __contains__(self, block_id: object) -> bool:
        return any(block.id == block_id for block in self.root)

    def ids(self) -> list[str]:
        return [block.id for block in self.root]

    def index_of(self, block_id: str) -> int | None:
        for i, block in enumerate(self.root):
            if block.id == block_id:
                return i
        return None

    def get(self, block_id: str) -> Block | None:
        index = self.index_of(block_id)
        return self.root[index] if index is not None else None

    def insert_after(self, anchor_id: str | None, block: Block) -> Block:
        """Insert ``block`` right after ``anchor_id``; append when the anchor is None or unknown.

        A block whose id already exists in the sequence is inserted under a fresh id.
        Returns the block as stored.
        """
        if block.id in self:
            block = block.model_copy(update={"id": new_id()})
        anchor = self.index_of(anchor_id) if anchor_id is not None else None
        if anchor is None:
            self.root.append(block)
        else:
            self.root.insert(anchor + 1, block)
        return block

    def update(self, block_id: str, patch: BlockPatch | dict) -> Block | None:
        """Merge the set fields of ``patch`` into the block. Order is untouched."""
        block = self.get(block_id)
        if block is None:
            return None
        if isinstance(patch, dict):
            patch = BlockPatch.model_validate(patch)
        for name, value in patch.changes().items():
            setattr(block, name, value)
        return block

    def remove(self, block_id: str) -> Block | None:
        index = self.index_of(block_id)
        if index is None:
            return None
        return self.root.pop(index)

    def duplicate(self, block_id: str) -> Block | None:
        """Clone a block under a new id directly after the original."""
        block = self.get(block_id)
        if block is None:
            return None
        clone = block.model_copy(update={"id": new_id()})
        return self.insert_after(block_id, clone)

    def move(self, block_id: str, target_index: int) -> bool:
        """Reinsert the block at ``target_index`` (clamped). Returns False when nothing moved."""
        index = self.index_of(block_id)
        if index is None:
            return False
        target = max(0, min(target_index, len(self.root) - 1))
        if target == index:
            return False
        block = self.root.pop(index)
        self.root.insert(target, block)
        return True

    def clone(self) -> "BlockSequence":
        """Deep copy with fresh block ids and the same order."""
        return BlockSequence([block.model_copy(update={"id": new_id()}) for block in self.root])
