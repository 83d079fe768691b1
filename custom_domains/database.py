"""Database connection and session management."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from custom_domains.config import settings


# SQLAlchemy 2.0 declarative base
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def _is_sqlite_url(url: str) -> bool:
    """Check if database URL is for SQLite."""
    return url.startswith("sqlite")


def _engine_options(url: str) -> dict[str, Any]:
    """Pool options for the configured backend (SQLite pools take no sizing)."""
    if _is_sqlite_url(url):
        return {}
    return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}


# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.LOG_LEVEL == "DEBUG",
    future=True,
    **_engine_options(settings.DATABASE_URL),
)

# Create async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for FastAPI routes to get a database session.

    Automatically commits on success and rolls back on exception.

    Usage:
        @router.post("/endpoint")
        async def endpoint(db: AsyncSession = Depends(get_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
