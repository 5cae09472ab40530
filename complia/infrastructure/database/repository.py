"""Generic repository base for SQLAlchemy models."""

from typing import Generic, TypeVar

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from complia.infrastructure.database.base import BaseModel

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Common lookups shared by the concrete repositories.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class EntityRepository(BaseRepository[EntityModel]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, EntityModel)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    async def get_by_id(self, entity_id: int) -> T | None:
        """Retrieve a model instance by its primary key."""
        stmt = select(self.model_class).where(self.model_class.id == entity_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def filter_by(self, **kwargs: object) -> list[T]:
        """Return every row matching all field-value pairs, ordered by id."""
        stmt = select(self.model_class)
        for field, value in kwargs.items():
            if hasattr(self.model_class, field):
                stmt = stmt.where(getattr(self.model_class, field) == value)
            else:
                logger.warning(
                    "Attempted to filter by non-existent field '{}' on {}",
                    field,
                    self.model_class.__name__,
                )
        result = await self.session.execute(stmt.order_by(self.model_class.id))
        return list(result.scalars().all())

    async def find_one_by(self, **kwargs: object) -> T | None:
        """Return the first row matching all field-value pairs."""
        stmt = select(self.model_class)
        for field, value in kwargs.items():
            stmt = stmt.where(getattr(self.model_class, field) == value)
        result = await self.session.execute(stmt.order_by(self.model_class.id).limit(1))
        return result.scalar_one_or_none()
