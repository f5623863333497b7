from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from kanban.core.constants import FieldSizes
from kanban.models.base import Base


class Board(Base):
    __tablename__ = "boards"

    name: Mapped[str] = mapped_column(String(FieldSizes.NAME), nullable=False)
