from __future__ import annotations
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker

from chronochat.config import get_settings
from chronochat.core.errors import StoreError

# Register table metadata
from chronochat.db import models  # noqa: F401


@lru_cache()
def get_engine() -> AsyncEngine:
    return create_async_engine(get_settings().database_url, echo=False, future=True)


@lru_cache()
def get_sessionmaker() -> sessionmaker:
    return sessionmaker(
        bind=get_engine(), class_=AsyncSession, expire_on_commit=False, autoflush=False, autocommit=False
    )


def reset_engine() -> None:
    """Forget the cached engine so the next session picks up current settings."""
    get_sessionmaker.cache_clear()
    get_engine.cache_clear()


async def init_db() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db() -> None:
    await get_engine().dispose()


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """One unit of work: commit on success, roll back on error.

    Driver/ORM failures surface as StoreError; domain errors pass through.
    """
    session: AsyncSession = get_sessionmaker()()
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        raise StoreError(f"Persistent store operation failed: {e.__class__.__name__}") from e
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
