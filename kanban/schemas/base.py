from datetime import datetime
from typing import TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from kanban.core.exceptions.domain import ValidationError

SchemaType = TypeVar("SchemaType", bound=BaseModel)


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        arbitrary_types_allowed=True,
        extra="forbid",
    )


class BaseTimestampSchema(BaseSchema):
    created_at: datetime
    updated_at: datetime


def clean_text(value: object, label: str, max_length: int) -> str:
    """Trim and check a required short text field."""
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{label} must be a string")
    if value is None or not value.strip():
        raise ValueError(f"{label} is required")
    value = value.strip()
    if len(value) > max_length:
        raise ValueError(f"{label} must be {max_length} characters or less")
    return value


def validate_schema(schema: type[SchemaType], data: dict) -> SchemaType:
    """Build a schema, raising the domain ValidationError on bad input."""
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(describe_errors(e)) from e


def describe_errors(error: PydanticValidationError) -> str:
    messages = []
    for item in error.errors():
        message = item["msg"].removeprefix("Value error, ")
        location = ".".join(str(part) for part in item["loc"])
        if location and location not in message:
            message = f"{location}: {message}"
        messages.append(message)
    return "; ".join(messages)
