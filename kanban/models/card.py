from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kanban.core.constants import DEFAULT_PRIORITY, FieldSizes
from kanban.models.base import Base
from kanban.models.types import LabelList


class Card(Base):
    __tablename__ = "cards"
    __table_args__ = (
        Index("idx_cards_column", "column_id"),
        Index("idx_cards_board", "board_id"),
    )

    board_id: Mapped[str] = mapped_column(
        String(FieldSizes.ID),
        ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )
    column_id: Mapped[str] = mapped_column(
        String(FieldSizes.ID),
        ForeignKey("columns.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(FieldSizes.TITLE), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    assignee: Mapped[str | None] = mapped_column(String(FieldSizes.MEDIUM), nullable=True)
    due_date: Mapped[str | None] = mapped_column(String(FieldSizes.SHORT), nullable=True)
    labels: Mapped[list[str]] = mapped_column(LabelList, nullable=False, default=list)
    priority: Mapped[str] = mapped_column(
        String(FieldSizes.SHORT), nullable=False, default=DEFAULT_PRIORITY
    )
    # Dense per column: 0..N-1.
    position: Mapped[int] = mapped_column(Integer, nullable=False)
