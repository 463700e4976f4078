"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Provided here:
- DbSession: one AsyncSession per request
- Pagination: page / pageSize query parameters
- BookFilters: catalogue search query parameters -> BookSearchCriteria
- CurrentUserId: the authenticated caller's user id (401 otherwise)
"""

from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import get_db
from app.exceptions import UnauthenticatedError
from app.repositories import UserRepository
from app.schemas.book import BookSearchCriteria, BookSortField, SortOrder
from app.services.security import decode_access_token

settings = get_settings()

# Instead of writing:
#   async def get_books(db: AsyncSession = Depends(get_db)):
# routes write:
#   async def get_books(db: DbSession):
DbSession = Annotated[AsyncSession, Depends(get_db)]


# =============================================================================
# Pagination Parameters
# =============================================================================
class PaginationParams:
    """
    Common pagination parameters for list endpoints.

        GET /api/v1/books/1/reviews?page=2&pageSize=20
    """

    def __init__(
        self,
        page: int = Query(
            default=1,
            ge=1,
            description="Page number (1-indexed)",
            examples=[1, 2, 3],
        ),
        page_size: int = Query(
            default=settings.default_page_size,
            ge=1,
            le=settings.max_page_size,
            alias="pageSize",
            description=f"Number of items per page (max {settings.max_page_size})",
            examples=[10, 25, 50],
        ),
    ) -> None:
        self.page = page
        self.page_size = page_size


Pagination = Annotated[PaginationParams, Depends()]


# =============================================================================
# Book Search Filters
# =============================================================================
def get_book_filters(
    pagination: Pagination,
    search: str | None = Query(
        default=None,
        max_length=100,
        description="Searches title, author and description (case-insensitive)",
        examples=["hobbit", "tolkien"],
    ),
    author: str | None = Query(
        default=None,
        max_length=100,
        description="Filter by author (partial match, case-insensitive)",
    ),
    genre: str | None = Query(
        default=None,
        description="Filter by genre; 'All' disables the filter",
        examples=["Fantasy", "All"],
    ),
    min_rating: float | None = Query(default=None, alias="minRating", ge=0, le=5),
    max_rating: float | None = Query(default=None, alias="maxRating", ge=0, le=5),
    min_year: int | None = Query(default=None, alias="minYear"),
    max_year: int | None = Query(default=None, alias="maxYear"),
    sort_by: BookSortField = Query(default=BookSortField.CREATED_AT, alias="sortBy"),
    sort_order: SortOrder = Query(default=SortOrder.DESC, alias="sortOrder"),
) -> BookSearchCriteria:
    """
    Collect catalogue query parameters into BookSearchCriteria.

        GET /api/v1/books/?search=ring&genre=Fantasy&minRating=4&sortBy=rating
    """
    return BookSearchCriteria(
        text=search or None,
        author=author or None,
        genre=genre or None,
        min_rating=min_rating,
        max_rating=max_rating,
        min_year=min_year,
        max_year=max_year,
        sort_by=sort_by,
        sort_order=sort_order,
        page=pagination.page,
        page_size=pagination.page_size,
    )


BookFilters = Annotated[BookSearchCriteria, Depends(get_book_filters)]


# =============================================================================
# JWT Authentication
# =============================================================================
# auto_error=False so a missing header reaches get_current_user_id and gets
# the same error envelope as a bad token.
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/token",
    auto_error=False,
)


async def get_current_user_id(
    db: DbSession,
    token: str | None = Depends(oauth2_scheme),
) -> int:
    """
    Resolve the Bearer token to a user id.

    Raises:
        UnauthenticatedError: Token missing, invalid, expired, or the user
            it names no longer exists
    """
    if not token:
        raise UnauthenticatedError("Not authenticated")

    user_id = decode_access_token(token)
    if user_id is None:
        raise UnauthenticatedError()

    if await UserRepository(db).get(user_id) is None:
        raise UnauthenticatedError()

    return user_id


CurrentUserId = Annotated[int, Depends(get_current_user_id)]
