"""
Review Service

Business logic for book reviews.

Business Rules:
- One review per user per book (checked up front, backed by a unique
  constraint for concurrent duplicates)
- Only the review author can update or delete a review
- book_id / user_id never change after creation
- Every successful create, update and delete is followed by a rating
  recompute for the review's book, in the same request

The caller's identity is always an explicit `user_id` argument.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models import Review
from app.repositories import BookRepository, ReviewRepository, UserRepository
from app.services.pagination import Page, page_offset
from app.services.ratings import recalculate_book_rating
from app.services.validation import validate_review_fields

logger = logging.getLogger(__name__)

NEWEST_FIRST = (Review.created_at.desc(), Review.id.desc())

# Unique constraint on (book_id, user_id), as reported by PostgreSQL and SQLite
_DUPLICATE_REVIEW_MARKERS = (
    "uq_review_book_user",
    "UNIQUE constraint failed: reviews.book_id, reviews.user_id",
)


def _is_duplicate_review(error: IntegrityError) -> bool:
    message = str(error.orig)
    return any(marker in message for marker in _DUPLICATE_REVIEW_MARKERS)


async def get_review(db: AsyncSession, review_id: int) -> Review:
    """Get a review by ID with its author loaded, or raise NotFoundError."""
    review = await ReviewRepository(db).get(review_id)
    if review is None:
        raise NotFoundError(f"Review with id {review_id} not found")
    return review


async def _get_owned_review(db: AsyncSession, user_id: int, review_id: int, action: str) -> Review:
    review = await get_review(db, review_id)
    if review.user_id != user_id:
        raise ForbiddenError(f"You can only {action} your own reviews")
    return review


async def create_review(
    db: AsyncSession,
    user_id: int,
    book_id: int,
    rating: int,
    review_text: str,
) -> Review:
    """
    Create a review and refresh the book's rating.

    Raises:
        ValidationError: Rating or text out of bounds
        NotFoundError: Book doesn't exist
        ConflictError: This user already reviewed this book
        RatingRecalculationError: Review saved, rating refresh failed
    """
    values = validate_review_fields(rating, review_text)

    if await BookRepository(db).get(book_id) is None:
        raise NotFoundError(f"Book with id {book_id} not found")

    reviews = ReviewRepository(db)
    if await reviews.get_by_book_and_user(book_id, user_id) is not None:
        raise ConflictError(
            "You have already reviewed this book. You can update your existing review."
        )

    try:
        review = await reviews.create(book_id=book_id, user_id=user_id, **values)
    except IntegrityError as e:
        if _is_duplicate_review(e):
            # Lost a race against a concurrent review by the same user
            raise ConflictError("You have already reviewed this book.") from e
        # Foreign key: the book was deleted after the existence check
        raise NotFoundError(f"Book with id {book_id} not found") from e

    logger.info(f"Review {review.id} created for book {book_id} by user {user_id}")

    await recalculate_book_rating(db, book_id)
    return review


async def update_review(
    db: AsyncSession,
    user_id: int,
    review_id: int,
    rating: int | None = None,
    review_text: str | None = None,
) -> Review:
    """
    Update the rating and/or text of a review. Fields left as None keep
    their current value.

    Raises:
        NotFoundError: Review doesn't exist
        ForbiddenError: Caller is not the author
        ValidationError: New values out of bounds
        RatingRecalculationError: Review saved, rating refresh failed
    """
    review = await _get_owned_review(db, user_id, review_id, "update")
    values = validate_review_fields(rating, review_text, partial=True)

    if values:
        review = await ReviewRepository(db).update_by_id(review_id, **values)
        logger.info(f"Review {review_id} updated by user {user_id}")

    await recalculate_book_rating(db, review.book_id)
    return review


async def delete_review(db: AsyncSession, user_id: int, review_id: int) -> None:
    """
    Delete a review and refresh the book's rating.

    Raises:
        NotFoundError: Review doesn't exist
        ForbiddenError: Caller is not the author
        RatingRecalculationError: Review deleted, rating refresh failed
    """
    review = await _get_owned_review(db, user_id, review_id, "delete")
    book_id = review.book_id

    await ReviewRepository(db).delete_by_id(review_id)
    logger.info(f"Review {review_id} deleted by user {user_id}")

    await recalculate_book_rating(db, book_id)


async def list_reviews_by_book(
    db: AsyncSession,
    book_id: int,
    page: int = 1,
    page_size: int = 10,
) -> Page[Review]:
    """
    Reviews of a book, newest first.

    Raises:
        NotFoundError: Book doesn't exist
    """
    if await BookRepository(db).get(book_id) is None:
        raise NotFoundError(f"Book with id {book_id} not found")

    reviews = ReviewRepository(db)
    criteria = (Review.book_id == book_id,)
    items = await reviews.find(
        *criteria,
        order_by=NEWEST_FIRST,
        skip=page_offset(page, page_size),
        limit=page_size,
    )
    total = await reviews.count(*criteria)
    return Page(items=items, total=total, page=page, page_size=page_size)


async def list_reviews_by_user(
    db: AsyncSession,
    user_id: int,
    page: int = 1,
    page_size: int = 10,
) -> Page[Review]:
    """
    Reviews written by a user, newest first.

    Raises:
        NotFoundError: User doesn't exist
    """
    if await UserRepository(db).get(user_id) is None:
        raise NotFoundError(f"User with id {user_id} not found")

    reviews = ReviewRepository(db)
    criteria = (Review.user_id == user_id,)
    items = await reviews.find(
        *criteria,
        order_by=NEWEST_FIRST,
        skip=page_offset(page, page_size),
        limit=page_size,
    )
    total = await reviews.count(*criteria)
    return Page(items=items, total=total, page=page, page_size=page_size)
