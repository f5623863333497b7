from pydantic import field_validator

from kanban.core.constants import FieldSizes
from kanban.schemas.base import BaseSchema, BaseTimestampSchema, clean_text
from kanban.schemas.card import CardResponse
from kanban.schemas.column import ColumnResponse


class BoardCreate(BaseSchema):
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        return clean_text(v, "Board name", FieldSizes.NAME)


class BoardRename(BoardCreate):
    pass


class BoardResponse(BaseTimestampSchema):
    id: str
    name: str


class BoardDetail(BoardResponse):
    """A board with its columns and cards, each in position order."""

    columns: list[ColumnResponse] = []
    cards: list[CardResponse] = []
