"""
Pytest configuration and fixtures.

Every test gets its own SQLite database file under ``tmp_path`` so that
concurrent sessions see the same data.
"""

import pytest_asyncio

from appconfig.concurrency import KeyedLockManager
from appconfig.models import close_db, create_engine, create_session_maker, init_db
from appconfig.repositories import SqlApplicationStore, SqlCommandStore
from appconfig.services import ApplicationConfigServiceImpl


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    """Session factory bound to a fresh database with all tables created"""
    engine = create_engine(f"sqlite:///{tmp_path / 'appconfig.db'}")
    await init_db(engine)

    yield create_session_maker(engine)

    await close_db(engine)


@pytest_asyncio.fixture
async def store(session_maker):
    return SqlApplicationStore(session_maker)


@pytest_asyncio.fixture
async def command_store(session_maker):
    return SqlCommandStore(session_maker)


@pytest_asyncio.fixture
async def lock_manager():
    return KeyedLockManager()


@pytest_asyncio.fixture
async def service(store, command_store, lock_manager):
    return ApplicationConfigServiceImpl(store, command_store, lock_manager=lock_manager)
