from enum import StrEnum


class FieldSizes:
    ID = 36
    NAME = 100
    TITLE = 200
    SHORT = 50
    MEDIUM = 255
    TEXT = 2000


class Limits:
    MAX_LABELS = 10


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


DEFAULT_PRIORITY = Priority.MEDIUM
