from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.core.exceptions.domain import (
    ConflictError,
    ResourceNotFoundError,
    ValidationError,
)
from kanban.models.board import Board
from kanban.models.card import Card
from kanban.models.column import BoardColumn
from kanban.models.db import Database
from kanban.repos.board import BoardRepo
from kanban.repos.card import CardRepo
from kanban.repos.column import ColumnRepo
from kanban.schemas.base import validate_schema
from kanban.schemas.board import BoardCreate, BoardDetail, BoardRename, BoardResponse
from kanban.schemas.card import CardCreate, CardResponse, CardUpdate
from kanban.schemas.column import ColumnCreate, ColumnResponse, ColumnUpdate


@dataclass
class _Stores:
    session: AsyncSession
    boards: BoardRepo
    columns: ColumnRepo
    cards: CardRepo


def _check_position(position: int) -> int:
    if isinstance(position, bool) or not isinstance(position, int):
        raise ValidationError("Position must be an integer")
    if position < 0:
        raise ValidationError("Position must be non-negative")
    return position


class KanbanService:
    """Validates requests and orchestrates the board, column and card stores.

    Every call runs on its own session; validation always happens before the
    first write, so a rejected call changes nothing.
    """

    def __init__(self, db: Database):
        self._db = db

    @asynccontextmanager
    async def _stores(self) -> AsyncIterator[_Stores]:
        session = self._db.session()
        try:
            yield _Stores(
                session=session,
                boards=BoardRepo(session),
                columns=ColumnRepo(session),
                cards=CardRepo(session),
            )
        finally:
            await session.close()

    # === Lookups shared by the operations below ===

    @staticmethod
    async def _require_board(stores: _Stores, board_id: str) -> Board:
        if not board_id:
            raise ValidationError("Board ID is required")
        board = await stores.boards.get_by_id(board_id)
        if not board:
            raise ResourceNotFoundError("Board", board_id)
        return board

    @staticmethod
    async def _require_column(stores: _Stores, column_id: str) -> BoardColumn:
        if not column_id:
            raise ValidationError("Column ID is required")
        column = await stores.columns.get_by_id(column_id)
        if not column:
            raise ResourceNotFoundError("Column", column_id)
        return column

    @staticmethod
    async def _require_card(stores: _Stores, card_id: str) -> Card:
        if not card_id:
            raise ValidationError("Card ID is required")
        card = await stores.cards.get_by_id(card_id)
        if not card:
            raise ResourceNotFoundError("Card", card_id)
        return card

    # === Boards ===

    async def create_board(self, name: str) -> BoardResponse:
        data = validate_schema(BoardCreate, {"name": name})
        async with self._stores() as stores:
            board = await stores.boards.create(data.name)
            logger.info(f"Board created: {board.id} ({board.name!r})")
            return BoardResponse.model_validate(board)

    async def get_board(self, board_id: str) -> BoardResponse:
        async with self._stores() as stores:
            board = await self._require_board(stores, board_id)
            return BoardResponse.model_validate(board)

    async def get_board_detail(self, board_id: str) -> BoardDetail:
        """A board with its ordered columns and cards."""
        async with self._stores() as stores:
            board = await self._require_board(stores, board_id)
            columns = await stores.columns.list_for_board(board_id)
            cards = await stores.cards.list_for_board(board_id)
            return BoardDetail(
                **BoardResponse.model_validate(board).model_dump(),
                columns=[ColumnResponse.model_validate(c) for c in columns],
                cards=[CardResponse.model_validate(c) for c in cards],
            )

    async def list_boards(self) -> list[BoardResponse]:
        async with self._stores() as stores:
            boards = await stores.boards.get_all()
            return [BoardResponse.model_validate(b) for b in boards]

    async def rename_board(self, board_id: str, name: str) -> BoardResponse:
        data = validate_schema(BoardRename, {"name": name})
        async with self._stores() as stores:
            await self._require_board(stores, board_id)
            board = await stores.boards.rename(board_id, data.name)
            return BoardResponse.model_validate(board)

    async def delete_board(self, board_id: str) -> None:
        """Delete a board with all its columns and cards."""
        async with self._stores() as stores:
            await self._require_board(stores, board_id)
            await stores.boards.delete(board_id)
            logger.info(f"Board deleted: {board_id}")

    # === Columns ===

    async def create_column(
        self, board_id: str, name: str, position: int | None = None
    ) -> ColumnResponse:
        data = validate_schema(
            ColumnCreate, {"board_id": board_id, "name": name, "position": position}
        )
        async with self._stores() as stores:
            await self._require_board(stores, data.board_id)
            column = await stores.columns.create(data.board_id, data.name, data.position)
            logger.info(f"Column created: {column.id} ({column.name!r}) at {column.position}")
            return ColumnResponse.model_validate(column)

    async def get_column(self, column_id: str) -> ColumnResponse:
        async with self._stores() as stores:
            column = await self._require_column(stores, column_id)
            return ColumnResponse.model_validate(column)

    async def list_columns(self, board_id: str) -> list[ColumnResponse]:
        async with self._stores() as stores:
            await self._require_board(stores, board_id)
            columns = await stores.columns.list_for_board(board_id)
            return [ColumnResponse.model_validate(c) for c in columns]

    async def rename_column(self, column_id: str, name: str) -> ColumnResponse:
        return await self.update_column(column_id, name=name)

    async def reorder_column(self, column_id: str, new_position: int) -> ColumnResponse:
        return await self.update_column(column_id, position=new_position)

    async def update_column(
        self,
        column_id: str,
        *,
        name: str | None = None,
        position: int | None = None,
    ) -> ColumnResponse:
        """Rename and/or reorder a column in one transaction.

        A position past the last column moves it to the end.
        """
        data = validate_schema(ColumnUpdate, {"name": name, "position": position})
        async with self._stores() as stores:
            column = await self._require_column(stores, column_id)
            if data.name is not None:
                column = await stores.columns.rename(column_id, data.name, auto_commit=False)
            if data.position is not None:
                last = await stores.columns.count_children(column.board_id) - 1
                column = await stores.columns.reorder(
                    column_id, min(data.position, last), auto_commit=False
                )
            await stores.session.commit()
            return ColumnResponse.model_validate(column)

    async def set_column_order(
        self, board_id: str, ordered_column_ids: list[str]
    ) -> list[ColumnResponse]:
        """Reorder a board's columns wholesale.

        Listed columns come first in the given order; unlisted ones keep their
        relative order after them. Ids from other boards are ignored.
        """
        async with self._stores() as stores:
            await self._require_board(stores, board_id)
            await stores.columns.set_order_for_board(board_id, ordered_column_ids)
            columns = await stores.columns.list_for_board(board_id)
            return [ColumnResponse.model_validate(c) for c in columns]

    async def delete_column(self, column_id: str, force: bool = False) -> None:
        """Delete a column. A column holding cards needs ``force=True``."""
        async with self._stores() as stores:
            await self._require_column(stores, column_id)
            card_count = await stores.columns.count_cards(column_id)
            if card_count and not force:
                raise ConflictError(
                    f"Column contains {card_count} card(s). "
                    "Use force=true to delete a non-empty column"
                )
            await stores.columns.delete(column_id)
            logger.info(f"Column deleted: {column_id} (cards removed: {card_count})")

    # === Cards ===

    async def create_card(
        self,
        board_id: str,
        column_id: str,
        title: str,
        *,
        description: str | None = None,
        assignee: str | None = None,
        due_date: str | None = None,
        labels: list[str] | None = None,
        priority: str | None = None,
    ) -> CardResponse:
        data = validate_schema(
            CardCreate,
            {
                "board_id": board_id,
                "column_id": column_id,
                "title": title,
                "description": description,
                "assignee": assignee,
                "due_date": due_date,
                "labels": labels,
                "priority": priority,
            },
        )
        async with self._stores() as stores:
            await self._require_board(stores, data.board_id)
            column = await self._require_column(stores, data.column_id)
            if column.board_id != data.board_id:
                raise ValidationError(
                    f"Column '{column.id}' does not belong to board '{data.board_id}'"
                )
            card = await stores.cards.create(data)
            logger.info(f"Card created: {card.id} ({card.title!r}) in column {card.column_id}")
            return CardResponse.model_validate(card)

    async def get_card(self, card_id: str) -> CardResponse:
        async with self._stores() as stores:
            card = await self._require_card(stores, card_id)
            return CardResponse.model_validate(card)

    async def list_cards(self, board_id: str) -> list[CardResponse]:
        async with self._stores() as stores:
            await self._require_board(stores, board_id)
            cards = await stores.cards.list_for_board(board_id)
            return [CardResponse.model_validate(c) for c in cards]

    async def list_column_cards(self, column_id: str) -> list[CardResponse]:
        async with self._stores() as stores:
            await self._require_column(stores, column_id)
            cards = await stores.cards.list_for_column(column_id)
            return [CardResponse.model_validate(c) for c in cards]

    async def update_card(
        self, card_id: str, changes: CardUpdate | Mapping[str, object]
    ) -> CardResponse:
        """Apply a partial update: absent fields are kept, null fields cleared."""
        if not isinstance(changes, CardUpdate):
            changes = validate_schema(CardUpdate, dict(changes))
        patch = changes.to_patch()
        async with self._stores() as stores:
            card = await self._require_card(stores, card_id)
            if not patch.is_empty:
                card = await stores.cards.update(card_id, patch)
            return CardResponse.model_validate(card)

    async def delete_card(self, card_id: str) -> None:
        async with self._stores() as stores:
            await self._require_card(stores, card_id)
            await stores.cards.delete(card_id)
            logger.info(f"Card deleted: {card_id}")

    async def move_card(self, card_id: str, to_column_id: str, to_position: int) -> CardResponse:
        """Move a card to a position in any column of its board.

        Positions past the end of the target column append.
        """
        _check_position(to_position)
        async with self._stores() as stores:
            card = await self._require_card(stores, card_id)
            target = await self._require_column(stores, to_column_id)
            if target.board_id != card.board_id:
                raise ValidationError(
                    f"Column '{target.id}' does not belong to board '{card.board_id}'"
                )
            if target.id == card.column_id:
                last = await stores.cards.count_children(target.id) - 1
                to_position = min(to_position, last)
            from_column_id = card.column_id
            card = await stores.cards.move(card_id, target.id, to_position)
            if from_column_id != target.id:
                logger.info(f"Card {card_id} moved to column {target.id} at {card.position}")
            return CardResponse.model_validate(card)

    async def reorder_card(self, card_id: str, to_position: int) -> CardResponse:
        """Move a card within its column. Positions past the end move it last."""
        _check_position(to_position)
        async with self._stores() as stores:
            card = await self._require_card(stores, card_id)
            last = await stores.cards.count_children(card.column_id) - 1
            card = await stores.cards.reorder(card_id, min(to_position, last))
            return CardResponse.model_validate(card)

    async def set_card_order(
        self, column_id: str, ordered_card_ids: list[str]
    ) -> list[CardResponse]:
        """Reorder a column's cards wholesale; same rules as ``set_column_order``."""
        async with self._stores() as stores:
            await self._require_column(stores, column_id)
            await stores.cards.set_order_for_column(column_id, ordered_card_ids)
            cards = await stores.cards.list_for_column(column_id)
            return [CardResponse.model_validate(c) for c in cards]
