"""
Pytest configuration and fixtures
"""

import os
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from models.base import Base
from models.editor import Editor  # noqa: F401
from models.category import Category  # noqa: F401
from models.article import Article  # noqa: F401
from models.import_run import ImportRun  # noqa: F401
from ingestion.extractors.wordpress_client import WordPressClient, WordPressConfig
from typing import AsyncGenerator, Optional
from wordpress_fakes import FakeWordPress, WP_ROOT

# Test database URL; defaults to a throw-away SQLite file per test
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create test database engine"""
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = create_async_engine(
        url,
        echo=False,
        poolclass=NullPool,  # Disable connection pooling for tests
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables after test
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def fake_wordpress():
    return FakeWordPress()


@pytest_asyncio.fixture
async def make_client(fake_wordpress):
    """Factory for WordPressClient instances talking to the fake site"""
    clients = []

    def _make(username: Optional[str] = None, password: Optional[str] = None, **kwargs) -> WordPressClient:
        config = WordPressConfig(base_url=WP_ROOT, username=username, password=password, timeout=5.0)
        kwargs.setdefault("page_delay", 0)
        client = WordPressClient(config, transport=fake_wordpress.transport, **kwargs)
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.close()
