"""
pytest Fixtures for Book Review API Tests

Shared fixtures used across all test files.

FIXTURE SCOPES:
- engine / db_session / client: function scope, so every test starts with
  an empty in-memory database
- sample data fixtures: built on db_session, committed before the test runs

The suite runs with pytest-asyncio in "auto" mode (see pyproject.toml):
async tests and async fixtures need no extra markers.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
# This disables rate limiting, sets a test secret key and keeps the
# module-level engine away from PostgreSQL
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"

from collections.abc import AsyncGenerator, Awaitable, Callable
from decimal import Decimal
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import Book, Review, User
from app.repositories import BookRepository, ReviewRepository, UserRepository
from app.services.security import create_access_token, hash_password

# =============================================================================
# DATABASE FIXTURES
# =============================================================================
# SQLite in-memory through aiosqlite. StaticPool keeps the single
# connection alive; without it the in-memory database would vanish between
# connections.


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    A session configured exactly like app.database.AsyncSessionLocal.
    """
    TestSessionLocal = async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )
    async with TestSessionLocal() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client talking to the app in-process.

    get_db is overridden so requests use the test session.
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# HELPERS
# =============================================================================


def auth_header(user: User) -> dict[str, str]:
    """Authorization header carrying a valid token for `user`."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def book_fields(**overrides: Any) -> dict[str, Any]:
    """Valid book fields; override any of them per test."""
    fields = {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "description": "Bilbo Baggins embarks on an unexpected adventure.",
        "genre": "Fantasy",
        "published_year": 1937,
    }
    fields.update(overrides)
    return fields


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

# One hash shared by every fixture user (bcrypt is slow)
_PASSWORD = "secret123"
_PASSWORD_HASH = hash_password(_PASSWORD)


@pytest.fixture
def password() -> str:
    return _PASSWORD


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory fixture: `await make_user("Dana")`."""

    async def _make_user(name: str, email: str | None = None) -> User:
        return await UserRepository(db_session).create(
            name=name,
            email=email or f"{name.lower()}@example.com",
            hashed_password=_PASSWORD_HASH,
        )

    return _make_user


@pytest.fixture
async def sample_user(make_user) -> User:
    return await make_user("Alice")


@pytest.fixture
async def second_user(make_user) -> User:
    """A second user for ownership scenarios."""
    return await make_user("Bob")


@pytest.fixture
async def third_user(make_user) -> User:
    return await make_user("Carol")


@pytest.fixture
def make_book(db_session: AsyncSession, sample_user: User) -> Callable[..., Awaitable[Book]]:
    """
    Factory fixture for books.

    Rating fields may be given directly (average_rating=Decimal("4.5"),
    review_count=3) to set up search and sort scenarios without reviews.
    """

    async def _make_book(owner: User | None = None, **overrides: Any) -> Book:
        values = book_fields(**overrides)
        values.setdefault("average_rating", Decimal("0"))
        values.setdefault("review_count", 0)
        return await BookRepository(db_session).create(
            added_by_id=(owner or sample_user).id,
            **values,
        )

    return _make_book


@pytest.fixture
async def sample_book(make_book) -> Book:
    """The Hobbit, added by sample_user, no reviews."""
    return await make_book()


@pytest.fixture
async def sample_review(db_session: AsyncSession, sample_book: Book, second_user: User) -> Review:
    """A 4-star review of sample_book by second_user (ratings not recomputed)."""
    return await ReviewRepository(db_session).create(
        book_id=sample_book.id,
        user_id=second_user.id,
        rating=4,
        review_text="A charming adventure with a memorable dragon.",
    )


@pytest.fixture
def sample_user_headers(sample_user: User) -> dict[str, str]:
    return auth_header(sample_user)


@pytest.fixture
def second_user_headers(second_user: User) -> dict[str, str]:
    return auth_header(second_user)
