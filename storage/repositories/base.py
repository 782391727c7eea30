"""
Repository Base.

============================================================
CONTRACT
============================================================
- A repository is built around one AsyncSession handed in
  by the unit of work (storage.persistence).
- It flushes so generated ids and constraint violations
  surface immediately, but never commits.
- Every SQLAlchemyError leaves a repository as a
  RepositoryException subclass (see exceptions.py).

============================================================
"""

import logging
from typing import Any, Awaitable, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import (
    IntegrityError as SQLAlchemyIntegrityError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from storage.models.base import Base
from storage.repositories.exceptions import (
    ConnectionError,
    DuplicateRecordError,
    IntegrityError,
    QueryError,
)


T = TypeVar("T", bound=Base)
R = TypeVar("R")

_UNIQUE_MARKERS = ("unique", "duplicate")


class BaseRepository(Generic[T]):
    """Session holder plus error translation for one ORM model."""

    def __init__(
        self,
        session: AsyncSession,
        model_class: Type[T],
        repository_name: str
    ) -> None:
        self._session = session
        self._model_class = model_class
        self._repository_name = repository_name
        self._logger = logging.getLogger(f"storage.{repository_name}")

    @property
    def session(self) -> AsyncSession:
        return self._session

    @property
    def repository_name(self) -> str:
        return self._repository_name

    # =========================================================
    # ERROR TRANSLATION
    # =========================================================

    def _handle_db_error(
        self,
        error: Exception,
        operation: str,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Re-raise a SQLAlchemy error as a repository error.

        ``context`` may carry ``field`` and ``value`` naming the
        unique key that was being written; they end up on
        DuplicateRecordError.
        """
        context = context or {}
        self._logger.error(
            f"[{self._repository_name}] {operation} failed: {error}",
            extra={"context": context},
            exc_info=True
        )
        name = self._repository_name

        if isinstance(error, OperationalError):
            raise ConnectionError(name, operation, str(error)) from error

        if isinstance(error, SQLAlchemyIntegrityError):
            text = str(error.orig if error.orig is not None else error).lower()
            if any(marker in text for marker in _UNIQUE_MARKERS):
                raise DuplicateRecordError(
                    name,
                    context.get("field", "unknown"),
                    context.get("value", "unknown"),
                ) from error
            raise IntegrityError(name, operation, "foreign_key_or_check", str(error)) from error

        raise QueryError(name, operation, operation, str(error)) from error

    async def _guard(
        self,
        awaitable: Awaitable[R],
        operation: str,
        context: Optional[Dict[str, Any]] = None
    ) -> R:
        try:
            return await awaitable
        except SQLAlchemyError as e:
            self._handle_db_error(e, operation, context)
            raise

    # =========================================================
    # SESSION HELPERS
    # =========================================================

    async def _add(self, entity: T, key: Optional[Dict[str, Any]] = None) -> T:
        """Stage and flush one row. ``key`` names its unique field, if any."""
        self._session.add(entity)
        await self._guard(self._session.flush(), f"add_{self._model_class.__tablename__}", key)
        return entity

    async def _get_by_id(self, record_id: Any) -> Optional[T]:
        return await self._guard(
            self._session.get(self._model_class, record_id),
            "get_by_id",
            {"id": str(record_id)},
        )

    async def _execute(self, stmt: Any, operation: str) -> Any:
        return await self._guard(self._session.execute(stmt), operation)

    async def _execute_query(self, stmt: Any, operation: str = "query") -> List[T]:
        result = await self._execute(stmt, operation)
        return list(result.scalars().all())

    async def _execute_scalar(self, stmt: Any, operation: str = "query_scalar") -> Optional[T]:
        result = await self._execute(stmt, operation)
        return result.scalars().first()
