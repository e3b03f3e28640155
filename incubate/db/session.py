"""
Database Session Management
===========================

Builds the async engine for the embedded SQLite file, the session
factory handed to the database worker, and schema creation on open.

There are no module-level engine globals: the application container
owns one engine per process and passes it to whoever needs it.
"""

import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from incubate.config import Settings
from incubate.core.errors import StorageOpenError
from incubate.db.base import Base
import incubate.models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger(__name__)


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the journal database file.

    The parent directory is created if missing.

    Raises:
        StorageOpenError: If the data directory can't be created
    """
    db_path = settings.database_path
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageOpenError(
            message=f"Failed to create data directory {db_path.parent}",
        ) from exc

    return create_async_engine(
        settings.database_url_async,
        echo=settings.SQL_ECHO,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory used by the database worker."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Open the database and create any missing tables and indexes.

    Called once on application startup. A failure here is fatal: the
    journal can't run without its database.

    Raises:
        StorageOpenError: If the file can't be opened or the schema created
    """
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Failed to open database %s: %s", engine.url, exc)
        raise StorageOpenError(message=f"Failed to open database: {exc}") from exc

    logger.info("Database ready at %s", engine.url.database)


async def close_db(engine: AsyncEngine) -> None:
    """
    Close database connections.

    Called on application shutdown to clean up resources.
    """
    await engine.dispose()
    logger.info("Database connections closed")
