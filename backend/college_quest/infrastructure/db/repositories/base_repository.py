"""
Base Repository for College Quest

Generic async repository implementing CRUD operations, plus the batched
range reader used wherever a listing may exceed the per-request row cap.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, TypeVar, Generic, List, Optional, Type
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select
from sqlmodel import SQLModel

from college_quest.config.settings import settings
from college_quest.infrastructure.exceptions import DatabaseError, DuplicateError


logger = logging.getLogger(__name__)

# Type variables for generic repository
ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=SQLModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=SQLModel)


async def add_in_savepoint(session: AsyncSession, obj: SQLModel) -> bool:
    """
    Insert `obj` inside a SAVEPOINT.

    Returns False when a constraint rejects the row. Only the savepoint is
    rolled back; earlier writes in the same transaction are kept.
    """
    try:
        async with session.begin_nested():
            session.add(obj)
            await session.flush()
    except IntegrityError:
        return False
    return True


class IReadRepository(ABC, Generic[ModelType]):
    """Interface for read operations."""

    @abstractmethod
    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """Get a single record by ID."""
        pass


class IWriteRepository(ABC, Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """Interface for write operations."""

    @abstractmethod
    async def create(self, data: CreateSchemaType, **extra: Any) -> ModelType:
        """Create a new record."""
        pass

    @abstractmethod
    async def update(
        self,
        id: UUID,
        data: UpdateSchemaType
    ) -> Optional[ModelType]:
        """Update an existing record."""
        pass

    @abstractmethod
    async def delete(self, id: UUID) -> bool:
        """Delete a record by ID."""
        pass


class BaseRepository(
    IReadRepository[ModelType],
    IWriteRepository[ModelType, CreateSchemaType, UpdateSchemaType],
    Generic[ModelType, CreateSchemaType, UpdateSchemaType]
):
    """
    Generic async repository with CRUD operations.

    Args:
        model: The SQLModel class to operate on
        session: Async database session
        batch_size: Row cap for a single read (defaults to MAX_ROWS_PER_REQUEST)
    """

    def __init__(
        self,
        model: Type[ModelType],
        session: AsyncSession,
        batch_size: Optional[int] = None
    ):
        self._model = model
        self._session = session
        self._batch_size = batch_size or settings.max_rows_per_request

    @property
    def session(self) -> AsyncSession:
        """Get the current session."""
        return self._session

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def table_name(self) -> str:
        return self._model.__tablename__

    async def _execute(self, stmt, operation: str):
        """
        Execute a statement, converting driver errors to DatabaseError.

        The error is logged here; callers surface it without retrying.
        """
        try:
            return await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Database {operation} on {self.table_name} failed: {e}")
            raise DatabaseError(
                f"Failed to {operation} {self.table_name}",
                operation=operation,
                table=self.table_name,
                original_error=e,
            ) from e

    async def _flush(self, operation: str) -> None:
        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Database {operation} on {self.table_name} failed: {e}")
            raise DatabaseError(
                f"Failed to {operation} {self.table_name}",
                operation=operation,
                table=self.table_name,
                original_error=e,
            ) from e

    # =========================================================================
    # Batched reads
    # =========================================================================

    async def _fetch_batch(self, stmt: Select, offset: int, size: int) -> List[Any]:
        """One range-bounded read of at most `size` rows."""
        result = await self._execute(stmt.offset(offset).limit(size), "select")
        return list(result.scalars().all())

    async def fetch_range(
        self,
        stmt: Select,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> List[Any]:
        """
        Read rows [offset, offset + limit) of an ordered statement.

        Issues sequential sub-requests of at most batch_size rows and stops
        early once a sub-request comes back short (end of data). With
        limit=None every remaining row is read.
        """
        rows: List[Any] = []
        cursor = offset
        remaining = limit

        while remaining is None or remaining > 0:
            size = self._batch_size if remaining is None else min(self._batch_size, remaining)
            batch = await self._fetch_batch(stmt, cursor, size)
            rows.extend(batch)
            if len(batch) < size:
                break
            cursor += size
            if remaining is not None:
                remaining -= size

        return rows

    async def count_matching(self, stmt: Select) -> int:
        """Count the rows a statement would return, ignoring its ordering."""
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        result = await self._execute(count_stmt, "count")
        return result.scalar_one()

    # =========================================================================
    # CRUD
    # =========================================================================

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """
        Get a single record by its primary key.

        Returns:
            Model instance or None if not found
        """
        try:
            return await self._session.get(self._model, id)
        except SQLAlchemyError as e:
            logger.error(f"Database get on {self.table_name} failed: {e}")
            raise DatabaseError(
                f"Failed to get {self.table_name}",
                operation="get",
                table=self.table_name,
                original_error=e,
            ) from e

    async def create(self, data: CreateSchemaType, **extra: Any) -> ModelType:
        """
        Create a new record.

        Args:
            data: Create schema with field values
            extra: Column values not present on the create schema (e.g. id)

        Raises:
            DuplicateError: the id, or another unique column, is taken
        """
        values = data.model_dump()
        values.update({k: v for k, v in extra.items() if v is not None})

        if values.get("id") is not None and await self.get_by_id(values["id"]):
            raise self._duplicate(values["id"])

        db_obj = self._model(**values)
        try:
            created = await add_in_savepoint(self._session, db_obj)
        except SQLAlchemyError as e:
            logger.error(f"Database insert on {self.table_name} failed: {e}")
            raise DatabaseError(
                f"Failed to insert {self.table_name}",
                operation="insert",
                table=self.table_name,
                original_error=e,
            ) from e
        if not created:
            raise self._duplicate(values.get("id"))

        await self._session.refresh(db_obj)
        return db_obj

    def _duplicate(self, id: Optional[UUID]) -> DuplicateError:
        logger.warning(f"Insert into {self.table_name} rejected as duplicate (id={id})")
        return DuplicateError(
            f"{self.table_name} record conflicts with an existing one",
            operation="insert",
            table=self.table_name,
        )

    async def update(
        self,
        id: UUID,
        data: UpdateSchemaType
    ) -> Optional[ModelType]:
        """
        Update an existing record with the fields set on `data`.

        Returns:
            Updated model instance or None if not found
        """
        db_obj = await self.get_by_id(id)
        if not db_obj:
            return None

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(db_obj, field, value)

        self._session.add(db_obj)
        await self._flush("update")
        await self._session.refresh(db_obj)
        return db_obj

    async def delete(self, id: UUID) -> bool:
        """
        Delete a record by ID.

        Returns:
            True if deleted, False if not found
        """
        db_obj = await self.get_by_id(id)
        if not db_obj:
            return False

        await self._session.delete(db_obj)
        await self._flush("delete")
        return True

    async def count(self) -> int:
        """Get total count of records."""
        stmt = select(func.count()).select_from(self._model)
        result = await self._execute(stmt, "count")
        return result.scalar_one()
