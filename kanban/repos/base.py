from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic repository with async CRUD operations."""

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        self.session = session
        self.model = model

    @asynccontextmanager
    async def atomic(self, *, auto_commit: bool = True) -> AsyncIterator[None]:
        """Run the enclosed statements as one transaction.

        Any error rolls the whole session transaction back before propagating.
        With ``auto_commit=False`` the work is only flushed, leaving the commit
        to the caller.

        The rollback expires every instance loaded in the session; callers
        that catch the error must re-read rows before touching attributes.
        """
        try:
            yield
        except Exception:
            await self.session.rollback()
            raise
        if auto_commit:
            await self.session.commit()
        else:
            await self.session.flush()

    async def create_one(self, data: dict[str, Any], *, auto_commit: bool = True) -> ModelType:
        """Create a single record."""
        instance = self.model(**data)
        async with self.atomic(auto_commit=auto_commit):
            self.session.add(instance)
            await self.session.flush()
        return instance

    async def get_by_id(self, obj_id: str) -> ModelType | None:
        """Get a record by its primary key, re-read from the database."""
        return await self.session.get(self.model, obj_id, populate_existing=True)

    async def update_fields(
        self,
        instance: ModelType,
        data: dict[str, Any],
        *,
        auto_commit: bool = True,
    ) -> ModelType:
        """Overwrite the given attributes of a loaded record."""
        async with self.atomic(auto_commit=auto_commit):
            for key, value in data.items():
                setattr(instance, key, value)
            await self.session.flush()
        return instance

    async def delete_by_id(self, obj_id: str, *, auto_commit: bool = True) -> bool:
        """Delete a record by ID. Returns True if deleted."""
        async with self.atomic(auto_commit=auto_commit):
            stmt = delete(self.model).where(self.model.id == obj_id)
            result = await self.session.execute(stmt)
        return result.rowcount > 0  # type: ignore

    async def count(self, *criteria: Any) -> int:
        """Count records matching the given criteria."""
        stmt = select(func.count()).select_from(self.model).where(*criteria)
        result = await self.session.execute(stmt)
        return result.scalar_one()
