"""Shared fixtures: a migrated, file-backed SQLite database per test."""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.migrations.runner import MigrationRunner
from kanban.models.db import Database
from kanban.repos.board import BoardRepo
from kanban.repos.card import CardRepo
from kanban.repos.column import ColumnRepo
from kanban.services.kanban_service import KanbanService


@pytest_asyncio.fixture
async def db(tmp_path) -> AsyncIterator[Database]:
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'kanban.db'}")
    await database.init()
    await MigrationRunner(database).run()
    try:
        yield database
    finally:
        await database.dispose()


@pytest_asyncio.fixture
async def session(db: Database) -> AsyncIterator[AsyncSession]:
    s = db.session()
    try:
        yield s
    finally:
        await s.close()


@pytest.fixture
def boards(session: AsyncSession) -> BoardRepo:
    return BoardRepo(session)


@pytest.fixture
def columns(session: AsyncSession) -> ColumnRepo:
    return ColumnRepo(session)


@pytest.fixture
def cards(session: AsyncSession) -> CardRepo:
    return CardRepo(session)


@pytest.fixture
def service(db: Database) -> KanbanService:
    return KanbanService(db)
