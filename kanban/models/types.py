import json

from loguru import logger
from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator


class LabelList(TypeDecorator):
    """Ordered list of strings stored as JSON array text.

    Malformed stored text reads back as an empty list instead of failing the query.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[str] | None, dialect) -> str:
        return json.dumps(list(value or []))

    def process_result_value(self, value: str | None, dialect) -> list[str]:
        if not value:
            return []
        try:
            parsed = json.loads(value)
        except ValueError:
            logger.warning(f"Unreadable labels value, using []: {value[:50]!r}")
            return []
        if not isinstance(parsed, list):
            logger.warning(f"Labels value is not a list, using []: {value[:50]!r}")
            return []
        return [str(label) for label in parsed]
