"""
Review Repository

Besides plain CRUD, exposes the two aggregations over a book's reviews:
the count/sum used to maintain the book's rating fields, and the per-star
distribution shown on the rating breakdown endpoint.
"""

from sqlalchemy import func, select

from app.models.review import Review
from app.repositories.base import Repository


class ReviewRepository(Repository[Review]):
    model = Review

    async def get_by_book_and_user(self, book_id: int, user_id: int) -> Review | None:
        stmt = select(Review).where(
            Review.book_id == book_id,
            Review.user_id == user_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def rating_totals(self, book_id: int) -> tuple[int, int]:
        """
        Count and sum of ratings for one book, read in a single query.

        Sum rather than AVG so the caller can round the exact mean itself.

        Returns:
            (review_count, rating_sum) - (0, 0) for a book with no reviews
        """
        stmt = select(
            func.count(Review.id),
            func.coalesce(func.sum(Review.rating), 0),
        ).where(Review.book_id == book_id)
        count, total = (await self.db.execute(stmt)).one()
        return int(count), int(total)

    async def rating_distribution(self, book_id: int) -> dict[int, int]:
        """Number of reviews per star value, every value 1..5 present."""
        distribution = {rating: 0 for rating in range(1, 6)}
        stmt = (
            select(Review.rating, func.count(Review.id))
            .where(Review.book_id == book_id)
            .group_by(Review.rating)
        )
        for rating, count in (await self.db.execute(stmt)).all():
            distribution[rating] = count
        return distribution
