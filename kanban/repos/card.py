from collections.abc import Iterable

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.core.constants import DEFAULT_PRIORITY, Priority
from kanban.core.exceptions.domain import ResourceNotFoundError, ValidationError
from kanban.models.card import Card
from kanban.repos.ordering import OrderedRepository
from kanban.schemas.card import CardCreate
from kanban.schemas.patch import CLEAR, CardPatch, resolve
from kanban.utils.positions import append_position, plan_move, plan_reorder


def coerce_priority(value: str | None) -> Priority:
    """Known priority, or the default for anything missing or unrecognised."""
    try:
        return Priority(value)
    except ValueError:
        return DEFAULT_PRIORITY


class CardRepo(OrderedRepository[Card]):
    parent_field = "column_id"

    def __init__(self, session: AsyncSession):
        super().__init__(session, Card)

    async def create(self, data: CardCreate, *, auto_commit: bool = True) -> Card:
        """Append a card to the end of its column."""
        async with self.atomic(auto_commit=auto_commit):
            position = append_position(await self.max_position(data.column_id))
            card = Card(
                board_id=data.board_id,
                column_id=data.column_id,
                title=data.title,
                description=data.description or None,
                assignee=data.assignee or None,
                due_date=data.due_date or None,
                labels=list(data.labels or []),
                priority=coerce_priority(data.priority),
                position=position,
            )
            self.session.add(card)
            await self.session.flush()
        logger.debug(f"Card {card.id} created in column {card.column_id} at {position}")
        return card

    async def list_for_board(self, board_id: str) -> list[Card]:
        """All cards of a board, grouped by column and in position order."""
        stmt = (
            select(Card)
            .where(Card.board_id == board_id)
            .order_by(Card.column_id, Card.position)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_column(self, column_id: str) -> list[Card]:
        stmt = (
            select(Card)
            .where(Card.column_id == column_id)
            .order_by(Card.position)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, card_id: str, patch: CardPatch, *, auto_commit: bool = True) -> Card:
        """Apply a partial update. Position and column are never touched here."""
        card = await self.get_by_id(card_id)
        if not card:
            raise ResourceNotFoundError("Card", card_id)
        if patch.title is CLEAR:
            raise ValidationError("Card title cannot be empty")

        changes = {
            "title": resolve(patch.title, card.title),
            "description": resolve(patch.description, card.description),
            "assignee": resolve(patch.assignee, card.assignee),
            "due_date": resolve(patch.due_date, card.due_date),
            "labels": list(resolve(patch.labels, card.labels, cleared=[])),
            "priority": coerce_priority(
                resolve(patch.priority, card.priority, cleared=DEFAULT_PRIORITY)
            ),
        }
        return await self.update_fields(card, changes, auto_commit=auto_commit)

    async def reorder(self, card_id: str, to_position: int, *, auto_commit: bool = True) -> Card:
        """Move a card within its own column.

        ``to_position`` is trusted: callers keep it inside ``0..count-1``.
        """
        async with self.atomic(auto_commit=auto_commit):
            card = await self.get_by_id(card_id)
            if not card:
                raise ResourceNotFoundError("Card", card_id)
            splice = plan_reorder(card.column_id, card.position, to_position)
            if splice is not None:
                await self.apply_splice(card.id, splice)
        return card

    async def move(
        self,
        card_id: str,
        to_column_id: str,
        to_position: int,
        *,
        auto_commit: bool = True,
    ) -> Card:
        """Move a card to ``to_position`` of ``to_column_id``.

        Within the same column this is a reorder. Across columns the source gap
        is closed, and a position past the end of the target column appends.
        """
        async with self.atomic(auto_commit=auto_commit):
            card = await self.get_by_id(card_id)
            if not card:
                raise ResourceNotFoundError("Card", card_id)

            source_column_id = card.column_id
            if source_column_id == to_column_id:
                splice = plan_reorder(source_column_id, card.position, to_position)
            else:
                target_max = await self.max_position(to_column_id)
                splice = plan_move(
                    source_column_id, card.position, to_column_id, to_position, target_max
                )

            if splice is not None:
                await self.apply_splice(card.id, splice)
            if source_column_id != to_column_id:
                await self.normalize(source_column_id)

        if source_column_id != to_column_id:
            logger.debug(
                f"Card {card_id} moved from column {source_column_id} "
                f"to {to_column_id} at {card.position}"
            )
        return card

    async def set_order_for_column(
        self,
        column_id: str,
        ordered_card_ids: Iterable[str],
        *,
        auto_commit: bool = True,
    ) -> list[str]:
        return await self.set_order(column_id, ordered_card_ids, auto_commit=auto_commit)

    async def delete(self, card_id: str, *, auto_commit: bool = True) -> bool:
        """Delete a card and close the gap in its column. False if it did not exist."""
        async with self.atomic(auto_commit=auto_commit):
            card = await self.get_by_id(card_id)
            if not card:
                return False
            column_id = card.column_id
            await self.delete_by_id(card_id, auto_commit=False)
            await self.normalize(column_id)
        return True
