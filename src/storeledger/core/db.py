"""Async engine, session factory and the declarative base for ledger models."""

import os
from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

DEFAULT_DATABASE_URL = "postgresql+asyncpg://storeledger:dev_password_change_in_prod@db:5432/storeledger_dev"


def normalize_database_url(url: str) -> str:
    """Hosting providers hand out postgres:// URLs; the engine needs asyncpg."""
    if not url:
        return DEFAULT_DATABASE_URL
    for scheme in ("postgres://", "postgresql://"):
        if url.startswith(scheme):
            return "postgresql+asyncpg://" + url[len(scheme):]
    return url


def engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": os.getenv("DB_ECHO", "").lower() in {"1", "true", "yes"}}
    if url.startswith("postgresql"):
        options["pool_pre_ping"] = True
    return options


DATABASE_URL = normalize_database_url(os.getenv("DATABASE_URL", ""))

engine = create_async_engine(DATABASE_URL, **engine_options(DATABASE_URL))

# Cascade code reads balances back after commit
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.

    Commits on success. Services commit their own ledger cascades day by
    day, so this final commit only flushes what a handler left pending.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    await engine.dispose()
