from collections.abc import Iterable

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.core.exceptions.domain import ResourceNotFoundError
from kanban.models.card import Card
from kanban.models.column import BoardColumn
from kanban.repos.ordering import OrderedRepository
from kanban.utils.positions import plan_insert, plan_reorder


class ColumnRepo(OrderedRepository[BoardColumn]):
    parent_field = "board_id"

    def __init__(self, session: AsyncSession):
        super().__init__(session, BoardColumn)

    async def create(
        self,
        board_id: str,
        name: str,
        position: int | None = None,
        *,
        auto_commit: bool = True,
    ) -> BoardColumn:
        """Add a column at ``position``, or at the end when omitted or past the end."""
        async with self.atomic(auto_commit=auto_commit):
            splice = plan_insert(board_id, position, await self.max_position(board_id))
            for shift in splice.shifts:
                await self.apply_shift(shift)
            column = BoardColumn(board_id=board_id, name=name, position=splice.position)
            self.session.add(column)
            await self.session.flush()
        logger.debug(f"Column {column.id} created on board {board_id} at {column.position}")
        return column

    async def list_for_board(self, board_id: str) -> list[BoardColumn]:
        """Columns of a board in position order."""
        stmt = (
            select(BoardColumn)
            .where(BoardColumn.board_id == board_id)
            .order_by(BoardColumn.position)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def rename(self, column_id: str, name: str, *, auto_commit: bool = True) -> BoardColumn:
        column = await self.get_by_id(column_id)
        if not column:
            raise ResourceNotFoundError("Column", column_id)
        return await self.update_fields(column, {"name": name}, auto_commit=auto_commit)

    async def reorder(
        self,
        column_id: str,
        new_position: int,
        *,
        auto_commit: bool = True,
    ) -> BoardColumn:
        """Move a column within its board.

        ``new_position`` is trusted: callers keep it inside ``0..count-1``.
        Reordering to the current position writes nothing.
        """
        async with self.atomic(auto_commit=auto_commit):
            column = await self.get_by_id(column_id)
            if not column:
                raise ResourceNotFoundError("Column", column_id)
            splice = plan_reorder(column.board_id, column.position, new_position)
            if splice is not None:
                await self.apply_splice(column.id, splice)
        return column

    async def set_order_for_board(
        self,
        board_id: str,
        ordered_column_ids: Iterable[str],
        *,
        auto_commit: bool = True,
    ) -> list[str]:
        return await self.set_order(board_id, ordered_column_ids, auto_commit=auto_commit)

    async def count_cards(self, column_id: str) -> int:
        stmt = select(func.count()).select_from(Card).where(Card.column_id == column_id)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def delete(self, column_id: str, *, auto_commit: bool = True) -> bool:
        """Delete a column and its cards, then close the gap among its siblings.

        Returns False when the column does not exist.
        """
        async with self.atomic(auto_commit=auto_commit):
            column = await self.get_by_id(column_id)
            if not column:
                return False
            board_id = column.board_id
            await self.delete_by_id(column_id, auto_commit=False)
            await self.normalize(board_id)
        logger.debug(f"Column {column_id} deleted from board {board_id}")
        return True
