"""
Async engine, session factory and the request-scoped session dependency.

Services only flush; the transaction is committed here once the request
handler returns, or rolled back if it raised. Routes declare the dependency
with scope="function" so the commit runs before the response is sent and a
failed commit reaches the client as an error.
"""

from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from eventaro.core.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict:
    options = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    return options


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def check_db_connected(db: AsyncSession) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        await db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
