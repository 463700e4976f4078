"""
Ratings Service

Maintains the denormalized rating fields on the Book model:
- average_rating: The mean of all review ratings, one decimal
- review_count: Total number of reviews

The review service calls recalculate_book_rating() right after every
committed review create, update or delete. The recompute is a single UPDATE
that counts, sums and rounds the book's reviews inside the database
(never a delta, never a read-then-write), so concurrent recomputes for the
same book cannot store a pair computed from an older review set.

The review write and the recompute are separate commits. If the recompute
fails the review change stays, and the book's fields remain stale until
the next successful recompute (or a run of recalculate_all_book_ratings).
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError, RatingRecalculationError
from app.models import Book
from app.repositories import BookRepository, ReviewRepository

logger = logging.getLogger(__name__)

ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class BookRating:
    """Result of a recompute: the values now stored on the book."""

    book_id: int
    average_rating: Decimal
    review_count: int


@dataclass(frozen=True)
class RatingBreakdown:
    book_id: int
    average_rating: float
    total_reviews: int
    distribution: dict[int, int]


def compute_average(rating_sum: int, review_count: int) -> Decimal:
    """
    Mean rating rounded half-up to one decimal, 0 when there are no reviews.

    Works on the exact integer sum so that e.g. 4.25 rounds to 4.3, not to
    the binary-float neighbour.
    """
    if review_count == 0:
        return Decimal("0.0")
    mean = Decimal(rating_sum) / Decimal(review_count)
    return mean.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


async def recalculate_book_rating(db: AsyncSession, book_id: int) -> BookRating:
    """
    Recalculate and store a book's rating aggregations.

    Only average_rating and review_count are written, in one UPDATE that
    reads the reviews itself.

    Args:
        db: Database session
        book_id: ID of the book to update

    Returns:
        The values written

    Raises:
        NotFoundError: If the book doesn't exist
        RatingRecalculationError: If the UPDATE fails
    """
    try:
        book = await BookRepository(db).refresh_rating(book_id)
    except SQLAlchemyError as e:
        logger.error(f"Rating recalculation failed for book {book_id}: {e}")
        await db.rollback()
        raise RatingRecalculationError(book_id) from e

    if book is None:
        raise NotFoundError(f"Book with id {book_id} not found")

    logger.debug(
        f"Book {book_id} rating recalculated: "
        f"{book.average_rating} from {book.review_count} reviews"
    )
    return BookRating(
        book_id=book_id,
        average_rating=book.average_rating,
        review_count=book.review_count,
    )


async def recalculate_all_book_ratings(db: AsyncSession) -> int:
    """
    Recalculate rating aggregations for all books.

    Repair pass for aggregates left stale by a failed recompute.

    Returns:
        Number of books updated
    """
    book_ids = (await db.execute(select(Book.id))).scalars().all()

    for book_id in book_ids:
        await recalculate_book_rating(db, book_id)

    logger.info(f"Recalculated ratings for {len(book_ids)} books")
    return len(book_ids)


async def get_rating_breakdown(db: AsyncSession, book_id: int) -> RatingBreakdown:
    """
    Live rating statistics for a book, computed from its reviews.

    Raises:
        NotFoundError: If the book doesn't exist
    """
    if await BookRepository(db).get(book_id) is None:
        raise NotFoundError(f"Book with id {book_id} not found")

    reviews = ReviewRepository(db)
    review_count, rating_sum = await reviews.rating_totals(book_id)
    distribution = await reviews.rating_distribution(book_id)

    return RatingBreakdown(
        book_id=book_id,
        average_rating=float(compute_average(rating_sum, review_count)),
        total_reviews=review_count,
        distribution=distribution,
    )
