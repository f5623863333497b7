"""Idempotent schema setup.

Each migration runs in its own transaction together with its ledger row, so
a failed migration leaves neither its tables nor a ledger entry behind.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from types import ModuleType

from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from loguru import logger
from sqlalchemy import inspect, insert, select
from sqlalchemy.engine import Connection

from kanban.core.exceptions.domain import MigrationError
from kanban.migrations.versions import m001_initial_schema
from kanban.models.db import Database
from kanban.models.migration import MigrationRecord

EXPECTED_TABLES = ("boards", "columns", "cards")
EXPECTED_INDEXES = ("idx_columns_board", "idx_cards_column", "idx_cards_board")


@dataclass(frozen=True)
class Migration:
    id: str
    name: str
    upgrade: Callable[[Operations], None]

    @classmethod
    def from_module(cls, module: ModuleType) -> "Migration":
        return cls(id=module.revision, name=module.name, upgrade=module.upgrade)


ALL_MIGRATIONS: tuple[Migration, ...] = (Migration.from_module(m001_initial_schema),)


class MigrationRunner:
    def __init__(self, db: Database, migrations: Sequence[Migration] = ALL_MIGRATIONS):
        self._db = db
        self._migrations = migrations

    async def run(self) -> list[str]:
        """Apply every migration not yet in the ledger. Returns the ids applied."""
        logger.info("Running database migrations...")
        async with self._db.engine.begin() as conn:
            await conn.run_sync(self._ensure_ledger)

        applied: list[str] = []
        for migration in self._migrations:
            try:
                async with self._db.engine.begin() as conn:
                    if await conn.run_sync(self._apply, migration):
                        applied.append(migration.id)
            except Exception as e:
                logger.error(f"Failed to apply migration {migration.id}: {e}")
                raise MigrationError(migration.id, str(e)) from e

        if applied:
            logger.info(f"Applied {len(applied)} migration(s): {', '.join(applied)}")
        else:
            logger.info("All migrations are up to date")
        return applied

    async def applied_ids(self) -> list[str]:
        async with self._db.engine.connect() as conn:
            await conn.run_sync(self._ensure_ledger)
            ledger = MigrationRecord.__table__
            result = await conn.execute(select(ledger.c.id).order_by(ledger.c.applied_at))
            return [row_id for (row_id,) in result.all()]

    async def verify_schema(self) -> list[str]:
        """Names of expected tables and indexes that are missing."""
        async with self._db.engine.connect() as conn:
            return await conn.run_sync(self._missing_objects)

    @staticmethod
    def _ensure_ledger(conn: Connection) -> None:
        MigrationRecord.__table__.create(conn, checkfirst=True)

    @staticmethod
    def _apply(conn: Connection, migration: Migration) -> bool:
        ledger = MigrationRecord.__table__
        done = conn.execute(select(ledger.c.id).where(ledger.c.id == migration.id)).first()
        if done:
            logger.debug(f"Migration {migration.id} ({migration.name}) already applied, skipping")
            return False

        logger.info(f"Applying migration {migration.id}: {migration.name}")
        context = MigrationContext.configure(conn)
        migration.upgrade(Operations(context))
        conn.execute(insert(ledger).values(id=migration.id, name=migration.name))
        return True

    @staticmethod
    def _missing_objects(conn: Connection) -> list[str]:
        inspector = inspect(conn)
        tables = set(inspector.get_table_names())
        missing = [name for name in EXPECTED_TABLES if name not in tables]
        indexes = {
            index["name"]
            for table in EXPECTED_TABLES
            if table in tables
            for index in inspector.get_indexes(table)
        }
        missing.extend(name for name in EXPECTED_INDEXES if name not in indexes)
        return missing
