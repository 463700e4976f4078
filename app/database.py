"""
Database Configuration Module

This module sets up SQLAlchemy 2.0 in async mode for the Book Review API.

WHY Async?
==========
Every request spends almost all of its time waiting on the database:
reading a book, writing a review, re-aggregating ratings. With an
AsyncEngine those waits yield the event loop, so concurrent requests
interleave instead of blocking a worker thread each.

Drivers:
- PostgreSQL: asyncpg   (postgresql+asyncpg://...)
- SQLite:     aiosqlite (sqlite+aiosqlite://...) - used by the test suite

Session Management Pattern
==========================
We use the "session per request" pattern:
1. Request arrives -> create a new AsyncSession
2. Use session for all database operations in that request
3. Repositories commit each write as soon as it is made
4. Close session when request ends

This is implemented using FastAPI's dependency injection.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import get_settings

settings = get_settings()


# =============================================================================
# Database Engine
# =============================================================================
# Key parameters:
# - pool_size / max_overflow: connection pool sizing (not valid for SQLite)
# - pool_pre_ping: Test connection health before using
# - echo: Log all SQL statements (debug only)

def build_engine(database_url: str | None = None, **kwargs) -> AsyncEngine:
    """Create an AsyncEngine for the configured (or given) database URL."""
    url = database_url or settings.database_url
    options: dict = {"pool_pre_ping": True, "echo": settings.debug}
    if not url.startswith("sqlite"):
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow
    options.update(kwargs)
    return create_async_engine(url, **options)


engine = build_engine()


# =============================================================================
# Session Factory
# =============================================================================
# expire_on_commit=False: objects stay readable after commit. With async
# sessions an expired attribute would need an implicit (forbidden) lazy load.

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    autoflush=False,
    expire_on_commit=False,
)


# =============================================================================
# Base Model Class
# =============================================================================

class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    All models inherit from this class:

        class Book(Base):
            __tablename__ = "books"
            ...

    Alembic uses Base.metadata to discover tables for migrations.
    """
    pass


# =============================================================================
# Dependency Injection
# =============================================================================
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database session dependency for FastAPI.

    Creates one AsyncSession per request, yields it to the route handler and
    closes it when the request ends. Anything left uncommitted (for example
    after an error half-way through a handler) is rolled back on close.

    Usage in Routes:
        @router.get("/books/")
        async def list_books(db: DbSession):
            ...

    Yields:
        SQLAlchemy AsyncSession instance
    """
    async with AsyncSessionLocal() as db:
        yield db


# =============================================================================
# Utility Functions
# =============================================================================
async def create_tables(bind: AsyncEngine | None = None) -> None:
    """
    Create all database tables.

    Useful for development and tests. In production, use Alembic migrations.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(bind: AsyncEngine | None = None) -> None:
    """
    Drop all database tables.

    DANGER: This deletes all data! Only use in development and tests.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
