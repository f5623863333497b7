from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kanban.core.constants import FieldSizes
from kanban.models.base import utc_now


class LedgerBase(DeclarativeBase):
    """Kept apart from ``Base``: the ledger has no created/updated columns."""


class MigrationRecord(LedgerBase):
    """Ledger row for an applied schema migration."""

    __tablename__ = "migrations"

    id: Mapped[str] = mapped_column(String(FieldSizes.ID), primary_key=True)
    name: Mapped[str] = mapped_column(String(FieldSizes.MEDIUM), nullable=False)
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
