"""Database connection manager with connection pooling and async support."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool, QueuePool

from mirotrak.models.base import Base

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./mirotrak.db"


def _configure_connection(engine: Engine) -> None:
    """Register per-connection setup for the engine's dialect."""
    dialect = engine.dialect.name

    @event.listens_for(engine, "connect")
    def receive_connect(dbapi_conn, connection_record):
        """Set connection parameters on connect."""
        cursor = dbapi_conn.cursor()
        if dialect == "sqlite":
            # SQLite leaves foreign keys (and ON DELETE CASCADE) off by default
            cursor.execute("PRAGMA foreign_keys=ON")
        elif dialect == "postgresql":
            cursor.execute("SET timezone='UTC'")
        cursor.close()


class DatabaseManager:
    """Manages database connections with pooling and lifecycle management.

    Supports both sync and async database operations with proper connection pooling,
    health checks, and graceful shutdown.
    """

    def __init__(self, database_url: str, pool_size: int = 20, max_overflow: int = 10):
        """Initialize database manager.

        Args:
            database_url: Database connection string (postgresql+asyncpg://... or sqlite+aiosqlite://...)
            pool_size: Size of the connection pool
            max_overflow: Max connections beyond pool_size
        """
        self.database_url = database_url
        self.pool_size = pool_size
        self.max_overflow = max_overflow

        # Sync engine for migrations and admin tasks
        self._sync_engine = None

        # Async engine for application runtime
        self._async_engine = None
        self._async_session_factory = None

        self._initialized = False

    @property
    def sync_url(self) -> str:
        """Connection string with the async driver swapped for its sync counterpart."""
        return (
            self.database_url.replace("postgresql+asyncpg://", "postgresql://")
            .replace("sqlite+aiosqlite://", "sqlite://")
        )

    @property
    def async_url(self) -> str:
        """Connection string using an async driver."""
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("sqlite://"):
            url = url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url

    @property
    def sync_engine(self) -> Engine:
        """Synchronous engine, created on first use."""
        self.initialize_sync()
        return self._sync_engine

    def initialize_sync(self) -> None:
        """Initialize the synchronous engine used by Alembic."""
        if self._sync_engine is not None:
            return

        if self.sync_url.startswith("sqlite"):
            self._sync_engine = create_engine(self.sync_url, echo=False)
        else:
            self._sync_engine = create_engine(
                self.sync_url,
                poolclass=QueuePool,
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_pre_ping=True,  # Verify connections before using
                echo=False,  # Set to True for SQL debugging
            )
        _configure_connection(self._sync_engine)

    async def initialize_async(self) -> None:
        """Initialize asynchronous database engine and session factory."""
        if self._async_engine is not None:
            return

        async_url = self.async_url

        if async_url.startswith("sqlite"):
            # SQLite connections are cheap and must not be shared across event loops
            self._async_engine = create_async_engine(
                async_url,
                poolclass=NullPool,
                echo=False,
            )
        else:
            self._async_engine = create_async_engine(
                async_url,
                poolclass=AsyncAdaptedQueuePool,
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_pre_ping=True,
                echo=False,
            )
        _configure_connection(self._async_engine.sync_engine)

        self._async_session_factory = async_sessionmaker(
            bind=self._async_engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

        self._initialized = True

    @asynccontextmanager
    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get an asynchronous database session context manager.

        Yields:
            SQLAlchemy AsyncSession instance

        Raises:
            RuntimeError: If async engine not initialized

        Example:
            async with db_manager.get_async_session() as session:
                result = await session.execute(select(ClientDB))
        """
        if self._async_session_factory is None:
            raise RuntimeError("Async database not initialized. Call initialize_async() first.")

        session = self._async_session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """Create all database tables (for development/testing only).

        Note: In production, use Alembic migrations instead.
        """
        if self._async_engine is None:
            await self.initialize_async()

        # Import models to ensure they're registered with Base.metadata
        import mirotrak.models  # noqa: F401

        async with self._async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        """Drop all database tables (for testing only).

        Warning: This will delete all data!
        """
        if self._async_engine is None:
            await self.initialize_async()

        import mirotrak.models  # noqa: F401

        async with self._async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def health_check(self) -> bool:
        """Check database connection health.

        Returns:
            True if database is accessible, False otherwise
        """
        try:
            if self._async_engine is None:
                await self.initialize_async()

            async with self.get_async_session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception:
            return False

    async def close(self) -> None:
        """Close database connections and dispose of connection pool."""
        if self._async_engine is not None:
            await self._async_engine.dispose()
            self._async_engine = None
            self._async_session_factory = None

        if self._sync_engine is not None:
            self._sync_engine.dispose()
            self._sync_engine = None

        self._initialized = False


# Global database manager instance (initialized in application startup)
_db_manager: DatabaseManager | None = None


def initialize_database(database_url: str | None = None) -> DatabaseManager:
    """Initialize global database manager.

    Args:
        database_url: Database connection string (defaults to DATABASE_URL env var)

    Returns:
        DatabaseManager instance
    """
    global _db_manager

    if database_url is None:
        database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

    _db_manager = DatabaseManager(database_url)
    return _db_manager


def get_database_manager() -> DatabaseManager | None:
    """Return the global database manager, if the application initialized one."""
    return _db_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting database session.

    Yields:
        AsyncSession instance

    Example:
        @router.get("/api/clients")
        async def list_clients(db: AsyncSession = Depends(get_db_session)):
            result = await db.execute(select(ClientDB))
            return result.scalars().all()
    """
    if _db_manager is None:
        raise RuntimeError("Database not initialized. Call initialize_database() first.")

    async with _db_manager.get_async_session() as session:
        yield session


async def shutdown_database() -> None:
    """Shutdown database connections (call on application shutdown)."""
    global _db_manager
    if _db_manager is not None:
        await _db_manager.close()
        _db_manager = None
