"""Admin Panel Database Configuration - Async SQLAlchemy over asyncpg."""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from adminpanel.core.config import settings
from adminpanel.core.logging import get_logger

logger = get_logger("database")

engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_timeout=settings.db_pool_timeout,
    pool_recycle=settings.db_pool_recycle,
    pool_pre_ping=True,
    echo=settings.debug and settings.log_level == "DEBUG",
)

# expire_on_commit=False: services return ORM objects after committing, and
# response models read their attributes outside the session.
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; commits on success, rolls back on any exit by error."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except BaseException:
            # Includes CancelledError from disconnected clients
            await session.rollback()
            raise


async def check_db_connection() -> bool:
    """Round-trip a trivial query on a pooled connection."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (OperationalError, DBAPIError, OSError) as e:
        logger.debug(f"Database connection check failed: {e}")
        return False
