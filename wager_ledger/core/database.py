"""Database connection and session management.

Transaction Guarantees:
- Each operation gets its own session and transaction
- All reads and writes for one operation are atomic
- On any exception, the entire transaction is rolled back
"""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar
import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import Settings, get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

T = TypeVar("T")


def engine_options(settings: Settings) -> dict[str, Any]:
    """Build create_async_engine keyword arguments for the configured backend."""
    options: dict[str, Any] = {"echo": settings.database_echo}
    if settings.is_postgres:
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,  # Check connection health before use
            pool_recycle=300,
            pool_timeout=30,
            isolation_level=settings.database_isolation_level,
        )
    return options


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory - creates new sessions for each request."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Results stay readable after commit
        autoflush=False,  # Manual flush for better control
    )


engine = create_async_engine(settings.database_url_async, **engine_options(settings))
async_session_factory = create_session_factory(engine)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Dependency that provides the session factory (for engine-owned transactions)."""
    return async_session_factory


async def run_in_transaction(
    session_factory: async_sessionmaker[AsyncSession],
    fn: Callable[[AsyncSession], Awaitable[T]],
) -> T:
    """Run ``fn`` inside one transaction.

    The session handed to ``fn`` is the transaction handle; every persistence
    call made with it commits together when ``fn`` returns and rolls back
    together when it raises. The exception is re-raised unchanged.
    """
    async with session_factory() as session:
        async with session.begin():
            return await fn(session)


async def init_db() -> None:
    """Initialize database (create tables if needed)."""
    from ..models import Base

    async with engine.begin() as conn:
        # In production, use migrations instead
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
    logger.info("Database connections closed")
