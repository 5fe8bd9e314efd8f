"""Database configuration and base models"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from appconfig.core.config import settings


class Base(DeclarativeBase):
    """Base class for all database models"""

    pass


def to_async_url(db_url: str) -> str:
    """Convert a plain SQLite URL to its aiosqlite form"""
    if db_url.startswith("sqlite:///"):
        return db_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return db_url


def create_engine(db_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for ``db_url``

    SQLite connections get pragmas for foreign keys and concurrent access.
    """
    async_engine = create_async_engine(to_async_url(db_url), echo=echo, future=True)

    if "sqlite" in db_url:

        @event.listens_for(async_engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            """Set SQLite pragmas for integrity and concurrency"""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA busy_timeout=30000")  # 30 seconds
            cursor.close()

    return async_engine


def create_session_maker(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to ``async_engine``"""
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = create_engine(settings.db_url, echo=settings.db_echo)
async_session_maker = create_session_maker(engine)


async def init_db(async_engine: AsyncEngine | None = None):
    """Initialize database (create tables)"""
    async with (async_engine or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(async_engine: AsyncEngine | None = None):
    """Close database connections"""
    await (async_engine or engine).dispose()
