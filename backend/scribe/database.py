"""
Database configuration and session management.
Uses SQLAlchemy async engine (asyncpg for PostgreSQL in production).
"""
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from scribe.config import settings
from scribe.models.base import Base


def _engine_options(database_url: str) -> dict:
    """Pool options; SQLite (used in tests) does not take a sized pool."""
    options = {
        "echo": False,  # Disable SQLAlchemy query logging
        "future": True,
        "pool_pre_ping": True,
    }
    if not database_url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20)
    return options


# Create async engine
engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncSession:
    """
    Dependency for FastAPI routes to get database session.
    Usage: db: AsyncSession = Depends(get_db)
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """
    Initialize database: create tables.
    Called on application startup.
    """
    # Register every model on Base.metadata before create_all
    import scribe.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
