from pydantic import Field, field_validator

from kanban.core.constants import DEFAULT_PRIORITY, FieldSizes, Limits, Priority
from kanban.schemas.base import BaseSchema, BaseTimestampSchema, clean_text
from kanban.schemas.patch import CardPatch, decode


def _check_description(v: str | None) -> str | None:
    if v is not None and len(v) > FieldSizes.TEXT:
        raise ValueError(f"Card description must be {FieldSizes.TEXT} characters or less")
    return v


def _check_labels(v: object) -> list[str] | None:
    if v is not None and not isinstance(v, list):
        raise ValueError("Card labels must be a list")
    if v is not None and len(v) > Limits.MAX_LABELS:
        raise ValueError(f"Card can have maximum {Limits.MAX_LABELS} labels")
    return v


class CardCreate(BaseSchema):
    board_id: str = Field(min_length=1)
    column_id: str = Field(min_length=1)
    title: str
    description: str | None = None
    assignee: str | None = Field(default=None, max_length=FieldSizes.MEDIUM)
    due_date: str | None = Field(default=None, max_length=FieldSizes.SHORT)
    labels: list[str] = Field(default_factory=list)
    priority: Priority = DEFAULT_PRIORITY

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        return clean_text(v, "Card title", FieldSizes.TITLE)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return _check_description(v) or None

    @field_validator("assignee", "due_date")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("labels", mode="before")
    @classmethod
    def validate_labels(cls, v: list[str] | None) -> list[str]:
        return _check_labels(v) or []

    @field_validator("priority", mode="before")
    @classmethod
    def default_priority(cls, v: str | None) -> str:
        return DEFAULT_PRIORITY if v is None else v


class CardUpdate(BaseSchema):
    """Partial card update as received at the boundary.

    Only fields present in the input count; an explicit null clears the field,
    and so does an empty description, assignee or due date.
    """

    title: str | None = None
    description: str | None = None
    assignee: str | None = Field(default=None, max_length=FieldSizes.MEDIUM)
    due_date: str | None = Field(default=None, max_length=FieldSizes.SHORT)
    labels: list[str] | None = None
    priority: Priority | None = None

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Card title cannot be empty")
        return clean_text(v, "Card title", FieldSizes.TITLE)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return _check_description(v) or None

    @field_validator("assignee", "due_date")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("labels")
    @classmethod
    def validate_labels(cls, v: list[str] | None) -> list[str] | None:
        return _check_labels(v)

    def to_patch(self) -> CardPatch:
        fields_set = self.model_fields_set
        return CardPatch(
            **{
                name: decode(fields_set, name, getattr(self, name))
                for name in CardPatch.__dataclass_fields__
            }
        )


class CardResponse(BaseTimestampSchema):
    id: str
    board_id: str
    column_id: str
    title: str
    description: str | None = None
    assignee: str | None = None
    due_date: str | None = None
    labels: list[str] = Field(default_factory=list)
    priority: Priority
    position: int
