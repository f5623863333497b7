import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger

from kanban.core.config import Settings, get_settings
from kanban.core.exceptions.base import AppException
from kanban.core.logger import setup_logger
from kanban.migrations.runner import MigrationRunner
from kanban.models.db import Database
from kanban.services.kanban_service import KanbanService


async def init_db(db: Database) -> None:
    """Bring the schema up to date and check it is complete."""
    if not await db.is_healthy():
        raise RuntimeError("Database connection is not healthy")

    runner = MigrationRunner(db)
    await runner.run()

    missing = await runner.verify_schema()
    if missing:
        raise RuntimeError(f"Database schema is incomplete, missing: {', '.join(missing)}")


@asynccontextmanager
async def lifespan(settings: Settings | None = None) -> AsyncIterator[KanbanService]:
    """Own the database handle for the life of the process and hand out the service."""
    settings = settings or get_settings()
    if not settings.database_url:
        settings.db_directory.mkdir(parents=True, exist_ok=True)

    db = Database.from_settings(settings)
    await db.init()
    try:
        await init_db(db)
        yield KanbanService(db)
    finally:
        await db.dispose()


async def _run(settings: Settings) -> None:
    async with lifespan(settings) as service:
        boards = await service.list_boards()
        logger.info(f"{settings.app_name} database ready ({len(boards)} board(s))")


def main():
    settings = get_settings()
    setup_logger(debug=settings.debug, log_file=settings.log_file)
    try:
        asyncio.run(_run(settings))
    except AppException as e:
        logger.error(f"Startup failed: {e.to_dict()}")
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
