"""
Reviews Router

Endpoints:
- GET /books/{book_id}/reviews - List reviews for a book
- POST /books/{book_id}/reviews - Create a review (authenticated)
- GET /books/{book_id}/rating - Live rating breakdown for a book
- GET /reviews/{review_id} - Get a specific review
- PUT /reviews/{review_id} - Update a review (author only)
- DELETE /reviews/{review_id} - Delete a review (author only)
- GET /users/{user_id}/reviews - Reviews written by a user

Every create, update and delete refreshes the book's averageRating and
reviewCount before the response is sent.
"""

import logging

from fastapi import APIRouter, Request, status

from app.config import get_settings
from app.dependencies import CurrentUserId, DbSession, Pagination
from app.schemas.common import ErrorResponse, PaginationMeta
from app.schemas.review import (
    RatingBreakdownResponse,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from app.services import reviews as review_service
from app.services.pagination import Page
from app.services.rate_limiter import WRITE_LIMIT, limiter
from app.services.ratings import get_rating_breakdown

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    tags=["Reviews"],
    responses={
        404: {"model": ErrorResponse, "description": "Review or book not found"},
    },
)


def _review_list(page: Page) -> ReviewListResponse:
    return ReviewListResponse(
        items=[ReviewResponse.model_validate(review) for review in page.items],
        pagination=PaginationMeta.from_page(page),
    )


# =============================================================================
# Book Review Endpoints
# =============================================================================


@router.get(
    "/books/{book_id}/reviews",
    response_model=ReviewListResponse,
    summary="List reviews for a book",
    description="Paginated reviews of a book, newest first.",
)
@limiter.limit(settings.rate_limit_default)
async def list_book_reviews(
    request: Request,
    book_id: int,
    db: DbSession,
    pagination: Pagination,
) -> ReviewListResponse:
    page = await review_service.list_reviews_by_book(
        db, book_id, page=pagination.page, page_size=pagination.page_size
    )
    return _review_list(page)


@router.post(
    "/books/{book_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a review",
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        409: {"model": ErrorResponse, "description": "Already reviewed this book"},
        422: {"model": ErrorResponse, "description": "Validation error"},
    },
)
@limiter.limit(WRITE_LIMIT)
async def create_review(
    request: Request,
    book_id: int,
    review_data: ReviewCreate,
    db: DbSession,
    user_id: CurrentUserId,
) -> ReviewResponse:
    """
    Review a book. Each user may review a given book once; use
    PUT /reviews/{review_id} to change an existing review.
    """
    review = await review_service.create_review(
        db,
        user_id,
        book_id,
        rating=review_data.rating,
        review_text=review_data.review_text,
    )
    return ReviewResponse.model_validate(review)


@router.get(
    "/books/{book_id}/rating",
    response_model=RatingBreakdownResponse,
    summary="Get book rating statistics",
)
@limiter.limit(settings.rate_limit_default)
async def get_book_rating(
    request: Request,
    book_id: int,
    db: DbSession,
) -> RatingBreakdownResponse:
    """Average, review count and how many reviews gave each star value."""
    breakdown = await get_rating_breakdown(db, book_id)
    return RatingBreakdownResponse.model_validate(breakdown)


# =============================================================================
# Single Review Endpoints
# =============================================================================


@router.get(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Get a review",
)
@limiter.limit(settings.rate_limit_default)
async def get_review(request: Request, review_id: int, db: DbSession) -> ReviewResponse:
    review = await review_service.get_review(db, review_id)
    return ReviewResponse.model_validate(review)


@router.put(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Update a review",
    description="Update your own review. Fields left out keep their value.",
    responses={403: {"model": ErrorResponse, "description": "Not the author"}},
)
@limiter.limit(WRITE_LIMIT)
async def update_review(
    request: Request,
    review_id: int,
    review_data: ReviewUpdate,
    db: DbSession,
    user_id: CurrentUserId,
) -> ReviewResponse:
    review = await review_service.update_review(
        db,
        user_id,
        review_id,
        rating=review_data.rating,
        review_text=review_data.review_text,
    )
    return ReviewResponse.model_validate(review)


@router.delete(
    "/reviews/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
    responses={403: {"model": ErrorResponse, "description": "Not the author"}},
)
@limiter.limit(WRITE_LIMIT)
async def delete_review(
    request: Request,
    review_id: int,
    db: DbSession,
    user_id: CurrentUserId,
) -> None:
    await review_service.delete_review(db, user_id, review_id)


# =============================================================================
# User Review Endpoints
# =============================================================================


@router.get(
    "/users/{user_id}/reviews",
    response_model=ReviewListResponse,
    summary="List reviews by a user",
    description="Paginated reviews written by a user, newest first.",
)
@limiter.limit(settings.rate_limit_default)
async def list_user_reviews(
    request: Request,
    user_id: int,
    db: DbSession,
    pagination: Pagination,
) -> ReviewListResponse:
    page = await review_service.list_reviews_by_user(
        db, user_id, page=pagination.page, page_size=pagination.page_size
    )
    return _review_list(page)
