"""Base repository: generic get/create/update over one ORM model.

execute() and persist() are the session calls every repository goes through,
so SQLAlchemy errors surface as DatabaseOperationException.
"""

from collections.abc import Callable
from typing import Any

from sqlalchemy import select
from sqlalchemy.engine import Result
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from app.domain.exceptions import DatabaseOperationException
from app.infrastructure.persistence.database import Base


async def execute(db: AsyncSession, statement: Executable, operation: str) -> Result[Any]:
    """Run statement; SQLAlchemy errors are raised as DatabaseOperationException."""
    try:
        return await db.execute(statement)
    except SQLAlchemyError as e:
        raise DatabaseOperationException(operation, str(e)) from e


async def persist[T: Base](
    db: AsyncSession,
    obj: T,
    operation: str,
    on_conflict: Callable[[], Exception] | None = None,
) -> T:
    """Add, flush and refresh a new row (no commit).

    A constraint violation raises on_conflict() when given, so callers can
    report duplicates in domain terms. Every other SQLAlchemy error is a
    DatabaseOperationException.
    """
    db.add(obj)
    try:
        await db.flush()
        await db.refresh(obj)
    except IntegrityError as e:
        if on_conflict is not None:
            raise on_conflict() from e
        raise DatabaseOperationException(operation, str(e)) from e
    except SQLAlchemyError as e:
        raise DatabaseOperationException(operation, str(e)) from e
    return obj


class BaseRepository[ModelType: Base]:
    """Base repository with get_entity, add and save.

    Subclasses expose DTO-returning methods built on these helpers; ORM
    instances never leave the repository. SQLAlchemy errors other than the
    ones a subclass maps itself are raised as DatabaseOperationException.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    @property
    def table(self) -> str:
        return self.model.__tablename__

    async def get_entity(self, entity_id: str) -> ModelType | None:
        """Return a single record by primary key, or None."""
        model: Any = self.model
        result = await execute(
            self.db, select(self.model).where(model.id == entity_id), f"get {self.table}"
        )
        return result.scalar_one_or_none()

    async def add(
        self, obj: ModelType, on_conflict: Callable[[], Exception] | None = None
    ) -> ModelType:
        """Persist a new record (flush + refresh, no commit); see persist()."""
        return await persist(self.db, obj, f"create {self.table}", on_conflict)

    async def save(self, obj: ModelType) -> ModelType:
        """Flush changes made to an attached record and reload it."""
        try:
            await self.db.flush()
            await self.db.refresh(obj)
        except SQLAlchemyError as e:
            raise DatabaseOperationException(f"update {self.table}", str(e)) from e
        return obj
