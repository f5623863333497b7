from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.core.exceptions.domain import ResourceNotFoundError
from kanban.models.board import Board
from kanban.repos.base import BaseRepository


class BoardRepo(BaseRepository[Board]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, Board)

    async def create(self, name: str, *, auto_commit: bool = True) -> Board:
        return await self.create_one({"name": name}, auto_commit=auto_commit)

    async def get_all(self) -> list[Board]:
        """All boards, newest first."""
        stmt = (
            select(Board)
            .order_by(Board.created_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def rename(self, board_id: str, name: str, *, auto_commit: bool = True) -> Board:
        board = await self.get_by_id(board_id)
        if not board:
            raise ResourceNotFoundError("Board", board_id)
        return await self.update_fields(board, {"name": name}, auto_commit=auto_commit)

    async def delete(self, board_id: str, *, auto_commit: bool = True) -> bool:
        """Delete a board; its columns and cards go with it."""
        return await self.delete_by_id(board_id, auto_commit=auto_commit)
