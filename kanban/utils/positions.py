"""Position arithmetic for densely ordered siblings.

Siblings under one parent (columns of a board, cards of a column) carry
positions ``0..N-1``. Every mutation is planned here as a :class:`Splice`:
at most two range shifts followed by one direct set of the moving row.
Nothing in this module touches the database.
"""

from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

K = TypeVar("K", bound=Hashable)


@dataclass(frozen=True)
class Shift:
    """Add ``delta`` to every sibling of ``parent_id`` positioned in ``[lower, upper]``.

    ``upper=None`` leaves the range unbounded above.
    """

    parent_id: str
    lower: int
    upper: int | None
    delta: int

    def covers(self, position: int) -> bool:
        if position < self.lower:
            return False
        return self.upper is None or position <= self.upper


@dataclass(frozen=True)
class Splice:
    """Shifts to run in order, then place the moving row at ``(parent_id, position)``."""

    parent_id: str
    position: int
    shifts: tuple[Shift, ...] = field(default_factory=tuple)


def append_position(max_position: int | None) -> int:
    """Position of a new last sibling given the current max (``None`` when empty)."""
    return 0 if max_position is None else max_position + 1


def plan_insert(parent_id: str, position: int | None, max_position: int | None) -> Splice:
    """Insert a new sibling, appending when ``position`` is omitted or past the end."""
    end = append_position(max_position)
    actual = end if position is None else min(position, end)
    shifts: tuple[Shift, ...] = ()
    if actual < end:
        shifts = (Shift(parent_id, actual, max_position, 1),)
    return Splice(parent_id, actual, shifts)


def plan_remove(parent_id: str, position: int) -> Shift:
    """Close the gap left by the sibling at ``position``."""
    return Shift(parent_id, position + 1, None, -1)


def plan_reorder(parent_id: str, old_position: int, new_position: int) -> Splice | None:
    """Move a sibling within its parent. Returns None when nothing changes."""
    if old_position == new_position:
        return None
    if new_position > old_position:
        shift = Shift(parent_id, old_position + 1, new_position, -1)
    else:
        shift = Shift(parent_id, new_position, old_position - 1, 1)
    return Splice(parent_id, new_position, (shift,))


def plan_move(
    source_parent_id: str,
    source_position: int,
    target_parent_id: str,
    target_position: int,
    target_max_position: int | None,
) -> Splice | None:
    """Remove-at in the source parent, then insert-at in the target parent.

    The insertion point is clamped to "append at end" of the target.
    ``target_max_position`` must not count the moving row.
    """
    if source_parent_id == target_parent_id:
        return plan_reorder(source_parent_id, source_position, target_position)

    insert = plan_insert(target_parent_id, target_position, target_max_position)
    return Splice(
        target_parent_id,
        insert.position,
        (plan_remove(source_parent_id, source_position), *insert.shifts),
    )


def renumber(rows: Iterable[tuple[K, int]]) -> list[tuple[K, int]]:
    """Given ``(id, position)`` rows already in order, list the ones whose position must change."""
    return [(row_id, index) for index, (row_id, position) in enumerate(rows) if position != index]


def merge_order(current_ids: Sequence[K], requested_ids: Iterable[K]) -> list[K]:
    """Requested members first (first occurrence wins), then the rest in their current order.

    Ids that are not current members are dropped.
    """
    members = set(current_ids)
    ordered: list[K] = []
    seen: set[K] = set()
    for row_id in requested_ids:
        if row_id in members and row_id not in seen:
            ordered.append(row_id)
            seen.add(row_id)
    ordered.extend(row_id for row_id in current_ids if row_id not in seen)
    return ordered
