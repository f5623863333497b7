"""Per-field update values: keep, clear to null, or set.

A partial card update carries one of these for every optional field, so
"field absent" and "field explicitly null" never collapse into each other.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class _Marker(Enum):
    UNCHANGED = "unchanged"
    CLEAR = "clear"

    def __repr__(self) -> str:
        return self.name


UNCHANGED = _Marker.UNCHANGED
CLEAR = _Marker.CLEAR


@dataclass(frozen=True)
class SetTo(Generic[T]):
    value: T


FieldUpdate = _Marker | SetTo


def resolve(update: FieldUpdate, current: T, *, cleared: T | None = None) -> T | None:
    """Apply an update to the current value; CLEAR yields ``cleared``."""
    if update is UNCHANGED:
        return current
    if update is CLEAR:
        return cleared
    return update.value


def decode(fields_set: set[str], name: str, value: object) -> FieldUpdate:
    """Turn one field of a parsed request body into an update value."""
    if name not in fields_set:
        return UNCHANGED
    if value is None:
        return CLEAR
    return SetTo(value)


@dataclass(frozen=True)
class CardPatch:
    title: FieldUpdate = UNCHANGED
    description: FieldUpdate = UNCHANGED
    assignee: FieldUpdate = UNCHANGED
    due_date: FieldUpdate = UNCHANGED
    labels: FieldUpdate = UNCHANGED
    priority: FieldUpdate = UNCHANGED

    @property
    def is_empty(self) -> bool:
        return all(
            getattr(self, name) is UNCHANGED
            for name in ("title", "description", "assignee", "due_date", "labels", "priority")
        )
