"""Database configuration and session management.

Provides async SQLAlchemy engine and session factory.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from catalog_cms.infrastructure.config import settings

# Engine is created lazily so the in-memory backend never needs a driver
_engine = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

# Base class for models
Base = declarative_base()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the async session factory, creating the engine on first use."""
    global _engine, _session_factory
    if _session_factory is None:
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.debug,
            pool_pre_ping=True,
        )
        _session_factory = async_sessionmaker(
            _engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory
