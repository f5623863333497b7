from pydantic import Field, field_validator, model_validator

from kanban.core.constants import FieldSizes
from kanban.schemas.base import BaseSchema, BaseTimestampSchema, clean_text


class ColumnCreate(BaseSchema):
    board_id: str = Field(min_length=1)
    name: str
    position: int | None = Field(default=None, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        return clean_text(v, "Column name", FieldSizes.NAME)


class ColumnUpdate(BaseSchema):
    """Rename and/or reorder; at least one field must be present."""

    name: str | None = None
    position: int | None = Field(default=None, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return clean_text(v, "Column name", FieldSizes.NAME)

    @model_validator(mode="after")
    def require_change(self) -> "ColumnUpdate":
        if self.name is None and self.position is None:
            raise ValueError("Either name or position must be provided")
        return self


class ColumnResponse(BaseTimestampSchema):
    id: str
    board_id: str
    name: str
    position: int
