"""Statements that keep sibling positions dense.

Column and card stores share these; they differ only in which foreign key
names the parent (``board_id`` for columns, ``column_id`` for cards).
"""

from collections.abc import Iterable
from typing import Any, ClassVar, TypeVar

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.orm import InstrumentedAttribute

from kanban.models.base import Base, utc_now
from kanban.repos.base import BaseRepository
from kanban.utils.positions import Shift, Splice, merge_order, renumber

OrderedModel = TypeVar("OrderedModel", bound=Base)


class OrderedRepository(BaseRepository[OrderedModel]):
    parent_field: ClassVar[str]

    @property
    def _parent(self) -> InstrumentedAttribute:
        return getattr(self.model, self.parent_field)

    @property
    def _position(self) -> InstrumentedAttribute:
        return self.model.position  # type: ignore[attr-defined]

    async def max_position(self, parent_id: str) -> int | None:
        """Highest sibling position under the parent, None when it has no children."""
        stmt = select(func.max(self._position)).where(self._parent == parent_id)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def count_children(self, parent_id: str) -> int:
        return await self.count(self._parent == parent_id)

    async def ordered_rows(self, parent_id: str) -> list[tuple[str, int]]:
        """(id, position) of every sibling, ties broken by creation time."""
        stmt = (
            select(self.model.id, self._position)
            .where(self._parent == parent_id)
            .order_by(self._position, self.model.created_at)
        )
        result = await self.session.execute(stmt)
        return [(row_id, position) for row_id, position in result.all()]

    async def apply_shift(self, shift: Shift) -> int:
        """Run one range shift. Returns the number of rows moved."""
        conditions: list[Any] = [self._parent == shift.parent_id, self._position >= shift.lower]
        if shift.upper is not None:
            conditions.append(self._position <= shift.upper)
        stmt = (
            update(self.model)
            .where(*conditions)
            .values(position=self._position + shift.delta, updated_at=utc_now())
        )
        result = await self.session.execute(stmt)
        return result.rowcount  # type: ignore

    async def set_position(self, row_id: str, position: int, parent_id: str | None = None) -> None:
        values: dict[str, Any] = {"position": position, "updated_at": utc_now()}
        if parent_id is not None:
            values[self.parent_field] = parent_id
        stmt = update(self.model).where(self.model.id == row_id).values(**values)
        await self.session.execute(stmt)

    async def apply_splice(self, row_id: str, splice: Splice) -> None:
        """Run a planned splice: its shifts in order, then place the row."""
        for shift in splice.shifts:
            moved = await self.apply_shift(shift)
            logger.debug(
                f"{self.model.__tablename__}: shifted {moved} row(s) of {shift.parent_id} "
                f"in [{shift.lower}, {shift.upper if shift.upper is not None else '∞'}] "
                f"by {shift.delta:+d}"
            )
        await self.set_position(row_id, splice.position, splice.parent_id)

    async def normalize(self, parent_id: str) -> int:
        """Rewrite sibling positions to 0..N-1 keeping their relative order."""
        changes = renumber(await self.ordered_rows(parent_id))
        for row_id, position in changes:
            await self.set_position(row_id, position)
        if changes:
            logger.debug(
                f"{self.model.__tablename__}: renormalized {len(changes)} row(s) of {parent_id}"
            )
        return len(changes)

    async def set_order(
        self,
        parent_id: str,
        ordered_ids: Iterable[str],
        *,
        auto_commit: bool = True,
    ) -> list[str]:
        """Place the listed children first, in the given order, the rest after them.

        Ids that are not children of ``parent_id`` are ignored. Returns the
        resulting order.
        """
        async with self.atomic(auto_commit=auto_commit):
            rows = await self.ordered_rows(parent_id)
            current = dict(rows)
            order = merge_order([row_id for row_id, _ in rows], ordered_ids)
            for index, row_id in enumerate(order):
                if current[row_id] != index:
                    await self.set_position(row_id, index)
        return order
