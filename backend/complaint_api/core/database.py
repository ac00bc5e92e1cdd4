"""
Async SQLAlchemy engine and sessions.

The engine is built on first use so tests can point DATABASE_URL somewhere
else before anything connects.
"""

from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from complaint_api.core.config import settings

Base = declarative_base()

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def async_database_url(url: str) -> str:
    """Swap a plain sqlite URL for its aiosqlite form"""
    if url.startswith("sqlite:///"):
        return "sqlite+aiosqlite:///" + url[len("sqlite:///"):]
    return url


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        url = async_database_url(settings.DATABASE_URL)
        if url.startswith("sqlite"):
            options = {"connect_args": {"check_same_thread": False}, "poolclass": NullPool}
        else:
            options = {"pool_pre_ping": True}
        _engine = create_async_engine(url, echo=settings.DB_ECHO, **options)
    return _engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(), class_=AsyncSession, expire_on_commit=False, autoflush=False
        )
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session. Pending changes are committed when the endpoint
    returns and rolled back if it raises.
    """
    async with get_session_local()() as session:
        try:
            yield session
            if session.new or session.dirty or session.deleted:
                await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
