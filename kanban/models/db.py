from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from kanban.core.config import Settings


class Database:
    """Process-wide database handle: one async engine, sessions on demand.

    Constructed by the entry point and passed to the stores and services that
    need it. ``init()`` must run before ``session()``; ``dispose()`` tears down.
    """

    def __init__(self, url: str, *, echo: bool = False, busy_timeout_ms: int = 5000):
        self.url = url
        self._echo = echo
        self._busy_timeout_ms = busy_timeout_ms
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.db_url,
            echo=settings.debug,
            busy_timeout_ms=settings.sqlite_busy_timeout_ms,
        )

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not initialized - call init() first")
        return self._engine

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    async def init(self) -> None:
        """Create the engine and session factory. Safe to call more than once."""
        if self._engine is not None:
            return

        self._engine = create_async_engine(self.url, echo=self._echo, pool_pre_ping=True)
        if self.is_sqlite:
            self._install_sqlite_hooks(self._engine)

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(f"Database engine created: {self.url}")

    def _install_sqlite_hooks(self, engine: AsyncEngine) -> None:
        busy_timeout_ms = self._busy_timeout_ms

        @event.listens_for(engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, connection_record) -> None:
            # Take over transaction control from the driver so "begin" below decides the BEGIN.
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.execute("PRAGMA journal_mode = WAL")
            cursor.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)}")
            cursor.close()

        @event.listens_for(engine.sync_engine, "begin")
        def _on_begin(conn: Connection) -> None:
            # Write lock up front: a read-shift-write sequence on one parent never interleaves.
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    def session(self) -> AsyncSession:
        """Open a new session. The caller closes it."""
        if self._session_factory is None:
            raise RuntimeError("Database is not initialized - call init() first")
        return self._session_factory()

    async def is_healthy(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                return result.scalar_one() == 1
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def dispose(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine disposed")
