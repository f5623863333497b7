import pytest
import sqlalchemy as sa
from alembic.operations import Operations
from sqlalchemy import inspect, text

from kanban.core.exceptions.domain import MigrationError
from kanban.migrations.runner import ALL_MIGRATIONS, Migration, MigrationRunner
from kanban.models.db import Database
from kanban.repos.board import BoardRepo
from kanban.repos.card import CardRepo
from kanban.repos.column import ColumnRepo
from kanban.schemas.card import CardCreate


def _broken_upgrade(op: Operations) -> None:
    op.create_table("scratch", sa.Column("id", sa.String(length=36), primary_key=True))
    raise RuntimeError("boom")


async def _table_names(db: Database) -> set[str]:
    async with db.engine.connect() as conn:
        return set(await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))


@pytest.mark.asyncio
async def test_fresh_database_gets_full_schema(tmp_path) -> None:
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}")
    await db.init()
    try:
        runner = MigrationRunner(db)

        assert await runner.run() == ["001"]
        assert await runner.applied_ids() == ["001"]
        assert await runner.verify_schema() == []
        assert {"boards", "columns", "cards", "migrations"} <= await _table_names(db)
    finally:
        await db.dispose()


@pytest.mark.asyncio
async def test_rerun_is_a_noop(db: Database) -> None:
    runner = MigrationRunner(db)

    assert await runner.run() == []
    assert await runner.run() == []
    assert await runner.applied_ids() == ["001"]


@pytest.mark.asyncio
async def test_verify_schema_reports_missing_objects(db: Database) -> None:
    async with db.engine.begin() as conn:
        await conn.execute(text("DROP INDEX idx_cards_board"))

    assert await MigrationRunner(db).verify_schema() == ["idx_cards_board"]


@pytest.mark.asyncio
async def test_failed_migration_leaves_nothing_behind(db: Database) -> None:
    runner = MigrationRunner(db, [*ALL_MIGRATIONS, Migration("002", "broken", _broken_upgrade)])

    with pytest.raises(MigrationError) as exc_info:
        await runner.run()

    assert exc_info.value.migration_id == "002"
    assert "boom" in str(exc_info.value)
    assert "scratch" not in await _table_names(db)
    assert await runner.applied_ids() == ["001"]


@pytest.mark.asyncio
async def test_foreign_keys_are_enforced(db: Database) -> None:
    async with db.engine.connect() as conn:
        result = await conn.execute(text("PRAGMA foreign_keys"))
        assert result.scalar_one() == 1


@pytest.mark.asyncio
async def test_board_delete_cascades_through_schema(db: Database) -> None:
    session = db.session()
    try:
        board = await BoardRepo(session).create("B")
        column = await ColumnRepo(session).create(board.id, "todo")
        await CardRepo(session).create(
            CardCreate(board_id=board.id, column_id=column.id, title="t")
        )
        board_id = board.id
    finally:
        await session.close()

    async with db.engine.begin() as conn:
        await conn.execute(text("DELETE FROM boards WHERE id = :id"), {"id": board_id})
        columns_left = await conn.execute(text("SELECT count(*) FROM columns"))
        cards_left = await conn.execute(text("SELECT count(*) FROM cards"))
        assert columns_left.scalar_one() == 0
        assert cards_left.scalar_one() == 0


@pytest.mark.asyncio
async def test_ledger_has_only_its_own_columns(db: Database) -> None:
    async with db.engine.connect() as conn:
        columns = await conn.run_sync(
            lambda sync_conn: inspect(sync_conn).get_columns("migrations")
        )

    assert [c["name"] for c in columns] == ["id", "name", "applied_at"]
