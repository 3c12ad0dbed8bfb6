"""Id generation and persisted-position ordering.

The in-memory model keeps block order implicitly (list order). Positions only
exist once blocks are persisted, so this module owns the two directions:

- assign_positions: given the current order and the positions already stored
  remotely, compute a position for every block such that sorting by position
  reproduces the order, while rewriting as few stored positions as possible.
- sort_by_position: rebuild the order from stored records on reload.
"""

from bisect import bisect_left
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any, TypeVar
from uuid import uuid4

POSITION_STEP = 1024

T = TypeVar("T")


def new_id() -> str:
    """Return a fresh opaque identifier (UUID4, canonical form)."""
    return str(uuid4())


def utc_now() -> datetime:
    """Current UTC timestamp, timezone-aware."""
    return datetime.now(timezone.utc)


def _longest_increasing_run(values: Sequence[int]) -> set[int]:
    """Indices of one longest strictly increasing subsequence of ``values``.

    Patience sorting, O(n log n).
    """
    tails: list[int] = []  # values
    tail_idx: list[int] = []  # index into values for each tail
    prev: list[int] = [-1] * len(values)
    for i, value in enumerate(values):
        k = bisect_left(tails, value)
        if k == len(tails):
            tails.append(value)
            tail_idx.append(i)
        else:
            tails[k] = value
            tail_idx[k] = i
        prev[i] = tail_idx[k - 1] if k > 0 else -1

    keep: set[int] = set()
    i = tail_idx[-1] if tail_idx else -1
    while i != -1:
        keep.add(i)
        i = prev[i]
    return keep


def renumber(order: Sequence[str], step: int = POSITION_STEP) -> dict[str, int]:
    """Evenly spaced positions for ``order``: step, 2*step, ..."""
    return {block_id: (i + 1) * step for i, block_id in enumerate(order)}


def assign_positions(
    order: Sequence[str],
    current: Mapping[str, int],
    step: int = POSITION_STEP,
) -> dict[str, int]:
    """Compute positions for every id in ``order``.

    Ids whose stored position belongs to the longest increasing run keep it;
    the others are spread evenly inside the gap between their kept neighbours.
    When a gap is too narrow, everything is renumbered with ``step`` spacing.
    """
    known = [i for i, block_id in enumerate(order) if block_id in current]
    keep_local = _longest_increasing_run([current[order[i]] for i in known])
    anchors = {known[j] for j in keep_local}

    result: dict[str, int] = {}
    pending: list[str] = []
    lower = 0

    def _fill(upper: int | None) -> bool:
        if not pending:
            return True
        if upper is None:
            for n, block_id in enumerate(pending, start=1):
                result[block_id] = lower + n * step
            pending.clear()
            return True
        gap = upper - lower
        if gap <= len(pending):
            return False
        stride = gap / (len(pending) + 1)
        for n, block_id in enumerate(pending, start=1):
            result[block_id] = lower + int(stride * n)
        pending.clear()
        return True

    for i, block_id in enumerate(order):
        if i in anchors:
            position = current[block_id]
            if not _fill(position):
                return renumber(order, step)
            result[block_id] = position
            lower = position
        else:
            pending.append(block_id)
    _fill(None)
    return result


def changed_positions(assigned: Mapping[str, int], current: Mapping[str, int]) -> dict[str, int]:
    """Subset of ``assigned`` that differs from what is already stored."""
    return {block_id: pos for block_id, pos in assigned.items() if current.get(block_id) != pos}


def sort_by_position(records: Iterable[T], key: Any = None) -> list[T]:
    """Stable order for persisted records: (position, created_at, id).

    ``key`` extracts that triple; by default attributes of the same names are read.
    """
    if key is None:
        def key(record: Any) -> tuple:
            return (record.position, record.created_at, record.id)
    return sorted(records, key=key)
