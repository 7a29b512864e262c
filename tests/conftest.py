"""Pytest configuration and fixtures."""

import os

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from storeledger.core.db import Base, get_db
from storeledger.main import create_app

# Import all models so Base.metadata knows every table
from storeledger import models  # noqa: F401


def _test_database_url(tmp_path) -> str:
    """TEST_DATABASE_URL if set (e.g. a Postgres test DB), else a throwaway SQLite file."""
    url = os.getenv("TEST_DATABASE_URL")
    if url:
        return url
    return f"sqlite+aiosqlite:///{tmp_path / 'storeledger_test.db'}"


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    engine = create_async_engine(_test_database_url(tmp_path), echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine):
    """Create fresh DB session for each test."""
    async_session_maker = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db_session):
    """Create async test client with overridden DB dependency."""
    app = create_app()

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        ac.app = app
        ac.db_session = db_session
        yield ac
