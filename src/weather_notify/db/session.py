# ABOUTME: Async engine and session lifecycle for the subscriptions database.
# ABOUTME: Sessions are scoped per request or per job tick; repositories commit their own writes.

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from weather_notify.config import Settings, get_settings
from weather_notify.db.models import Base

log = structlog.get_logger()

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine(settings: Settings | None = None) -> AsyncEngine:
    """Get or create the process-wide async engine."""
    global _engine
    if _engine is None:
        settings = settings or get_settings()
        _engine = create_async_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_pool_max_overflow,
            pool_pre_ping=True,
            echo=settings.log_level == "DEBUG",
        )
        log.debug("db_engine_created", host=settings.db_host, db=settings.db_name)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory.

    Objects survive commits unexpired so rows listed at the start of a tick
    can still be read after earlier rows were written.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession]:
    """Open a session for one request or one job tick.

    There is no commit on exit: every repository mutation is its own
    committed unit of work. Anything left uncommitted by a failure is
    rolled back before the session is closed.
    """
    session = get_session_factory()()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency yielding a request-scoped session."""
    async with get_session() as session:
        yield session


async def init_db() -> None:
    """Create missing tables. Production schemas are managed by Alembic."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("db_schema_ready")


async def close_db() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        log.debug("db_engine_disposed")
    _engine = None
    _session_factory = None
