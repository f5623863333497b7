from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from kanban.core.constants import FieldSizes
from kanban.models.base import Base


class BoardColumn(Base):
    __tablename__ = "columns"
    __table_args__ = (Index("idx_columns_board", "board_id"),)

    board_id: Mapped[str] = mapped_column(
        String(FieldSizes.ID),
        ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(FieldSizes.NAME), nullable=False)
    # Dense per board: 0..N-1. Not unique-constrained since range shifts pass through duplicates.
    position: Mapped[int] = mapped_column(Integer, nullable=False)
