"""
Book Repository

Catalogue-wide aggregations used by the filter options and statistics
endpoints live here, next to the CRUD inherited from Repository, along
with the in-database refresh of a book's rating fields.
"""

from sqlalchemy import Integer, func, select

from app.models.book import Book
from app.models.review import Review
from app.repositories.base import Repository


class BookRepository(Repository[Book]):
    model = Book

    async def rating_bounds(self) -> tuple[float, float, float] | None:
        """
        Min, max and mean of average_rating across all books.

        Returns:
            (min, max, mean) or None when there are no books
        """
        stmt = select(
            func.count(Book.id),
            func.min(Book.average_rating),
            func.max(Book.average_rating),
            func.avg(Book.average_rating),
        )
        count, low, high, mean = (await self.db.execute(stmt)).one()
        if not count:
            return None
        return float(low), float(high), float(mean)

    async def overview(self) -> tuple[int, int, float]:
        """
        Total books, total reviews (sum of review_count) and the mean of
        the books' average ratings.
        """
        stmt = select(
            func.count(Book.id),
            func.coalesce(func.sum(Book.review_count), 0),
            func.coalesce(func.avg(Book.average_rating), 0),
        )
        total_books, total_reviews, mean = (await self.db.execute(stmt)).one()
        return int(total_books), int(total_reviews), float(mean)

    async def genre_stats(self) -> list[tuple[str, int, float]]:
        """
        Book count and mean average_rating per genre.

        Sorted by count descending, then genre name for a stable order.
        """
        count_col = func.count(Book.id).label("count")
        stmt = (
            select(Book.genre, count_col, func.avg(Book.average_rating))
            .group_by(Book.genre)
            .order_by(count_col.desc(), Book.genre.asc())
        )
        rows = (await self.db.execute(stmt)).all()
        return [(genre, int(count), float(mean or 0)) for genre, count, mean in rows]

    async def refresh_rating(self, book_id: int) -> Book | None:
        """
        Rewrite average_rating and review_count from the book's reviews.

        Count, sum and rounding all happen inside one UPDATE, so the stored
        pair always matches one consistent view of the reviews table even
        when several recomputes for the book run at once.

        The mean is rounded half-up to one decimal on integers:
        tenths = (20 * sum + count) // (2 * count).

        Returns:
            The refreshed book, or None if it doesn't exist
        """
        review_count = (
            select(func.count(Review.id))
            .where(Review.book_id == book_id)
            .scalar_subquery()
        )
        rating_sum = (
            select(func.coalesce(func.sum(Review.rating), 0))
            .where(Review.book_id == book_id)
            .scalar_subquery()
        )
        # NULL divisor when there are no reviews, coalesced to 0 below
        tenths = (rating_sum * 20 + review_count) // func.nullif(
            review_count * 2, 0, type_=Integer
        )
        return await self.update_by_id(
            book_id,
            review_count=review_count,
            average_rating=func.coalesce(tenths / 10.0, 0),
        )
