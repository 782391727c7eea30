"""
Storage - Database.

============================================================
RESPONSIBILITY
============================================================
Async engine and session factory.

- PostgreSQL (asyncpg) in production, pooled
- SQLite (aiosqlite) for tests and local runs
- Schema creation from the ORM models
- Health check

============================================================
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from core.exceptions import PersistenceError
from core.settings import Settings, get_settings
from storage.models import Base


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatabaseConfig:
    url: str
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout_seconds: int = 30
    pool_recycle_seconds: int = 1800
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DatabaseConfig":
        settings = settings or get_settings()
        return cls(url=settings.database_url)


def create_database_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create the async engine; pool options apply to server databases only."""
    logger.info(f"Creating database engine for: {config.url.split('@')[-1]}")

    if config.is_sqlite:
        if ":memory:" in config.url:
            # An in-memory database exists only on its one shared connection
            return create_async_engine(config.url, echo=config.echo, poolclass=StaticPool)
        return create_async_engine(config.url, echo=config.echo)

    return create_async_engine(
        config.url,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout_seconds,
        pool_recycle=config.pool_recycle_seconds,
        pool_pre_ping=True,
        echo=config.echo,
    )


class Database:
    """
    Owns the engine and hands out sessions.

    Usage:
        db = Database(DatabaseConfig.from_settings())
        await db.create_all()
        async with db.session_factory() as session:
            ...
        await db.dispose()
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._engine = create_database_engine(config)
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker:
        return self._session_factory

    async def create_all(self) -> None:
        """
        Create all tables defined in the ORM models.

        Raises:
            PersistenceError: If table creation fails
        """
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            logger.error(f"Table creation failed: {e}", exc_info=True)
            raise PersistenceError(f"Cannot create tables: {e}", cause=e) from e
        logger.info(f"Database tables ready: {sorted(Base.metadata.tables)}")

    async def health_check(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self._engine.dispose()
