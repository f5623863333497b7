import pytest

from kanban.core.config import Settings
from kanban.core.exceptions.domain import MigrationError
from kanban.main import init_db, lifespan, main
from kanban.models.db import Database


def _settings(tmp_path, **overrides) -> Settings:
    values = {"database_path": str(tmp_path / "nested" / "kanban.db"), "log_file": None}
    return Settings(**{**values, **overrides})


def test_settings_build_sqlite_url(tmp_path) -> None:
    settings = _settings(tmp_path)

    assert settings.db_url == f"sqlite+aiosqlite:///{tmp_path / 'nested' / 'kanban.db'}"
    assert settings.db_directory == tmp_path / "nested"


def test_database_url_overrides_path(tmp_path) -> None:
    settings = _settings(tmp_path, database_url="sqlite+aiosqlite:///:memory:")
    assert settings.db_url == "sqlite+aiosqlite:///:memory:"


@pytest.mark.asyncio
async def test_lifespan_creates_database_and_serves(tmp_path) -> None:
    settings = _settings(tmp_path)

    async with lifespan(settings) as service:
        board = await service.create_board("First")

    assert (tmp_path / "nested" / "kanban.db").exists()

    async with lifespan(settings) as service:
        assert [b.id for b in await service.list_boards()] == [board.id]


@pytest.mark.asyncio
async def test_init_db_is_idempotent(db: Database) -> None:
    await init_db(db)
    await init_db(db)


def test_session_before_init_fails(tmp_path) -> None:
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'never.db'}")
    with pytest.raises(RuntimeError):
        db.session()
    with pytest.raises(RuntimeError):
        db.engine


def test_main_prepares_database(tmp_path, monkeypatch) -> None:
    settings = _settings(tmp_path)
    monkeypatch.setattr("kanban.main.get_settings", lambda: settings)

    main()

    assert (tmp_path / "nested" / "kanban.db").exists()


def test_main_exits_on_migration_failure(tmp_path, monkeypatch) -> None:
    async def failing_init_db(db: Database) -> None:
        raise MigrationError("001", "disk full")

    monkeypatch.setattr("kanban.main.get_settings", lambda: _settings(tmp_path))
    monkeypatch.setattr("kanban.main.init_db", failing_init_db)

    with pytest.raises(SystemExit) as exc_info:
        main()

    assert exc_info.value.code == 1
