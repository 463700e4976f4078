"""
Books Router

Endpoints:
- GET /books/ - Search, filter, sort and paginate the catalogue
- GET /books/filters - Values for the filter controls
- GET /books/stats - Catalogue statistics
- GET /books/{book_id} - Get one book
- POST /books/ - Add a book (authenticated)
- PUT /books/{book_id} - Update a book (owner only)
- DELETE /books/{book_id} - Delete a book and its reviews (owner only)

averageRating / reviewCount are read-only here: they are derived from the
book's reviews and ignored if sent in a request body.
"""

import logging

from fastapi import APIRouter, Request, status

from app.config import get_settings
from app.dependencies import BookFilters, CurrentUserId, DbSession
from app.schemas.book import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookStatsResponse,
    BookUpdate,
    FilterOptionsResponse,
)
from app.schemas.common import ErrorResponse, PaginationMeta
from app.services import books as book_service
from app.services.rate_limiter import WRITE_LIMIT, limiter

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"model": ErrorResponse, "description": "Book not found"},
    },
)


# =============================================================================
# Browse
# =============================================================================


@router.get(
    "/",
    response_model=BookListResponse,
    summary="List books",
    description="""
    Search and browse the catalogue.

    - `search`: matches title, author or description (case-insensitive)
    - `author`, `genre` ('All' = any), `minRating`/`maxRating`, `minYear`/`maxYear`
    - `sortBy`: createdAt, rating, year, title, author, reviews, popularity
    - `sortOrder`: asc / desc (popularity is always most-reviewed first)
    """,
)
@limiter.limit(settings.rate_limit_default)
async def list_books(
    request: Request,
    db: DbSession,
    filters: BookFilters,
) -> BookListResponse:
    page = await book_service.search_books(db, filters)
    return BookListResponse(
        items=[BookResponse.model_validate(book) for book in page.items],
        pagination=PaginationMeta.from_page(page),
    )


@router.get(
    "/filters",
    response_model=FilterOptionsResponse,
    summary="Get filter options",
)
@limiter.limit(settings.rate_limit_default)
async def get_filter_options(request: Request, db: DbSession) -> FilterOptionsResponse:
    """Distinct genres, authors and years plus the rating span of the catalogue."""
    options = await book_service.get_filter_options(db)
    return FilterOptionsResponse.model_validate(options)


@router.get(
    "/stats",
    response_model=BookStatsResponse,
    summary="Get catalogue statistics",
)
@limiter.limit(settings.rate_limit_default)
async def get_book_stats(request: Request, db: DbSession) -> BookStatsResponse:
    stats = await book_service.get_book_stats(db)
    return BookStatsResponse.model_validate(stats)


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    summary="Get a book",
)
@limiter.limit(settings.rate_limit_default)
async def get_book(request: Request, book_id: int, db: DbSession) -> BookResponse:
    book = await book_service.get_book(db, book_id)
    return BookResponse.model_validate(book)


# =============================================================================
# Mutations
# =============================================================================


@router.post(
    "/",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a book",
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        422: {"model": ErrorResponse, "description": "Validation error"},
    },
)
@limiter.limit(WRITE_LIMIT)
async def create_book(
    request: Request,
    book_data: BookCreate,
    db: DbSession,
    user_id: CurrentUserId,
) -> BookResponse:
    """
    Add a book to the catalogue. The caller becomes its owner.

    New books start with averageRating 0 and reviewCount 0.
    """
    book = await book_service.create_book(db, user_id, book_data.model_dump())
    return BookResponse.model_validate(book)


@router.put(
    "/{book_id}",
    response_model=BookResponse,
    summary="Update a book",
    responses={
        403: {"model": ErrorResponse, "description": "Not the owner"},
        422: {"model": ErrorResponse, "description": "Validation error"},
    },
)
@limiter.limit(WRITE_LIMIT)
async def update_book(
    request: Request,
    book_id: int,
    book_data: BookUpdate,
    db: DbSession,
    user_id: CurrentUserId,
) -> BookResponse:
    """Only the fields sent are changed."""
    book = await book_service.update_book(
        db,
        user_id,
        book_id,
        book_data.model_dump(exclude_unset=True),
    )
    return BookResponse.model_validate(book)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a book",
    description="Delete a book you added. All of its reviews are deleted too.",
    responses={403: {"model": ErrorResponse, "description": "Not the owner"}},
)
@limiter.limit(WRITE_LIMIT)
async def delete_book(
    request: Request,
    book_id: int,
    db: DbSession,
    user_id: CurrentUserId,
) -> None:
    await book_service.delete_book(db, user_id, book_id)
