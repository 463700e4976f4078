"""
Book Service

Business logic for the book catalogue:
- CRUD with ownership checks (only the user who added a book may change it)
- Search: text / author / genre / rating range / year range filters,
  several sort orders, pagination
- Filter options and catalogue statistics for the browse UI

average_rating and review_count are never accepted from callers; they
are maintained by app.services.ratings.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import ColumnElement, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ForbiddenError, NotFoundError
from app.models import Book, Review
from app.repositories import BookRepository, ReviewRepository, UserRepository
from app.schemas.book import BookSearchCriteria, BookSortField, SortOrder
from app.services.pagination import Page, page_offset
from app.services.validation import (
    MIN_PUBLISHED_YEAR,
    current_year,
    validate_book_fields,
)

logger = logging.getLogger(__name__)

MIN_AVERAGE_RATING = 0
MAX_AVERAGE_RATING = 5
ALL_GENRES = "all"


@dataclass
class YearRange:
    min: int | None
    max: int | None
    available: list[int]


@dataclass
class RatingRange:
    min_rating: float
    max_rating: float
    avg_rating: float


@dataclass
class FilterOptions:
    genres: list[str]
    authors: list[str]
    years: YearRange
    ratings: RatingRange


@dataclass
class GenreStat:
    genre: str
    count: int
    average_rating: float


@dataclass
class BookStats:
    total_books: int
    total_reviews: int
    average_rating: float
    genre_stats: list[GenreStat]


# =============================================================================
# Helpers
# =============================================================================

async def get_book(db: AsyncSession, book_id: int) -> Book:
    """Get a book by ID with its owner loaded, or raise NotFoundError."""
    book = await BookRepository(db).get(book_id)
    if book is None:
        raise NotFoundError(f"Book with id {book_id} not found")
    return book


async def _get_owned_book(db: AsyncSession, user_id: int, book_id: int, action: str) -> Book:
    book = await get_book(db, book_id)
    if book.added_by_id != user_id:
        raise ForbiddenError(f"Not authorized to {action} this book")
    return book


def build_search_filters(criteria: BookSearchCriteria) -> list[ColumnElement[bool]]:
    """
    Translate search criteria into WHERE clauses (all ANDed together).

    - text: case-insensitive substring of title OR author OR description
    - author: case-insensitive substring of author
    - genre: exact match, skipped for the "all" sentinel
    - rating / year ranges: inclusive, skipped when they equal the full range
    """
    filters: list[ColumnElement[bool]] = []

    if criteria.text:
        term = criteria.text
        filters.append(
            or_(
                Book.title.icontains(term, autoescape=True),
                Book.author.icontains(term, autoescape=True),
                Book.description.icontains(term, autoescape=True),
            )
        )

    if criteria.author:
        filters.append(Book.author.icontains(criteria.author, autoescape=True))

    if criteria.genre and criteria.genre.lower() != ALL_GENRES:
        filters.append(Book.genre == criteria.genre)

    min_rating = MIN_AVERAGE_RATING if criteria.min_rating is None else criteria.min_rating
    max_rating = MAX_AVERAGE_RATING if criteria.max_rating is None else criteria.max_rating
    if min_rating > MIN_AVERAGE_RATING or max_rating < MAX_AVERAGE_RATING:
        filters.append(
            Book.average_rating.between(Decimal(str(min_rating)), Decimal(str(max_rating)))
        )

    this_year = current_year()
    min_year = MIN_PUBLISHED_YEAR if criteria.min_year is None else criteria.min_year
    max_year = this_year if criteria.max_year is None else criteria.max_year
    if min_year > MIN_PUBLISHED_YEAR or max_year < this_year:
        filters.append(Book.published_year.between(min_year, max_year))

    return filters


def build_sort(sort_by: BookSortField, sort_order: SortOrder) -> list[Any]:
    """
    ORDER BY clauses for a sort field.

    - rating: average_rating in the requested direction, then review_count desc
    - popularity: review_count desc, then average_rating desc (order ignored)
    - everything else: the named column in the requested direction
    Book.id is appended so that pages never overlap on ties.
    """
    def direct(column):
        return column.asc() if sort_order == SortOrder.ASC else column.desc()

    if sort_by == BookSortField.RATING:
        return [direct(Book.average_rating), Book.review_count.desc(), direct(Book.id)]
    if sort_by == BookSortField.POPULARITY:
        return [Book.review_count.desc(), Book.average_rating.desc(), Book.id.desc()]

    columns = {
        BookSortField.YEAR: Book.published_year,
        BookSortField.TITLE: Book.title,
        BookSortField.AUTHOR: Book.author,
        BookSortField.REVIEWS: Book.review_count,
        BookSortField.CREATED_AT: Book.created_at,
    }
    return [direct(columns[sort_by]), direct(Book.id)]


# =============================================================================
# CRUD
# =============================================================================

async def create_book(db: AsyncSession, user_id: int, fields: dict[str, Any]) -> Book:
    """
    Create a book owned by `user_id`. Ratings start at 0 / 0.

    Raises:
        ValidationError: Missing or invalid fields
    """
    values = validate_book_fields(fields)
    book = await BookRepository(db).create(
        **values,
        added_by_id=user_id,
        average_rating=Decimal("0"),
        review_count=0,
    )
    logger.info(f"Book {book.id} '{book.title}' added by user {user_id}")
    return book


async def update_book(
    db: AsyncSession,
    user_id: int,
    book_id: int,
    fields: dict[str, Any],
) -> Book:
    """
    Partially update a book. Only provided fields change.

    Derived rating fields and unknown keys in `fields` are ignored.

    Raises:
        NotFoundError: Book doesn't exist
        ForbiddenError: Caller doesn't own the book
        ValidationError: A provided field is invalid
    """
    book = await _get_owned_book(db, user_id, book_id, "update")
    values = validate_book_fields(fields, partial=True)
    if not values:
        return book

    book = await BookRepository(db).update_by_id(
        book_id,
        **values,
        updated_at=datetime.now(UTC),
    )
    logger.info(f"Book {book_id} updated by user {user_id}: {sorted(values)}")
    return book


async def delete_book(db: AsyncSession, user_id: int, book_id: int) -> int:
    """
    Delete a book and every review of it.

    Reviews go first so no review ever points at a missing book.

    Returns:
        Number of reviews removed

    Raises:
        NotFoundError: Book doesn't exist
        ForbiddenError: Caller doesn't own the book
    """
    await _get_owned_book(db, user_id, book_id, "delete")

    removed = await ReviewRepository(db).delete_many(Review.book_id == book_id)
    await BookRepository(db).delete_by_id(book_id)

    logger.info(f"Book {book_id} deleted by user {user_id} ({removed} reviews removed)")
    return removed


async def list_books_by_user(db: AsyncSession, user_id: int) -> list[Book]:
    """
    Books added by a user, newest first.

    Raises:
        NotFoundError: User doesn't exist
    """
    if await UserRepository(db).get(user_id) is None:
        raise NotFoundError(f"User with id {user_id} not found")

    return await BookRepository(db).find(
        Book.added_by_id == user_id,
        order_by=(Book.created_at.desc(), Book.id.desc()),
    )


# =============================================================================
# Search & Browse
# =============================================================================

async def search_books(db: AsyncSession, criteria: BookSearchCriteria) -> Page[Book]:
    """
    Filter, sort and paginate the catalogue.

    See build_search_filters() and build_sort() for the matching and
    ordering rules.
    """
    books = BookRepository(db)
    filters = build_search_filters(criteria)

    items = await books.find(
        *filters,
        order_by=build_sort(criteria.sort_by, criteria.sort_order),
        skip=page_offset(criteria.page, criteria.page_size),
        limit=criteria.page_size,
    )
    total = await books.count(*filters)

    return Page(
        items=items,
        total=total,
        page=criteria.page,
        page_size=criteria.page_size,
    )


async def get_filter_options(db: AsyncSession) -> FilterOptions:
    """Values the browse UI offers in its filter controls."""
    books = BookRepository(db)

    genres = sorted(await books.distinct(Book.genre))
    authors = sorted(await books.distinct(Book.author))
    years = sorted(await books.distinct(Book.published_year), reverse=True)

    bounds = await books.rating_bounds()
    if bounds is None:
        ratings = RatingRange(min_rating=0.0, max_rating=5.0, avg_rating=0.0)
    else:
        low, high, mean = bounds
        ratings = RatingRange(min_rating=low, max_rating=high, avg_rating=round(mean, 2))

    return FilterOptions(
        genres=genres,
        authors=authors,
        years=YearRange(
            min=min(years) if years else None,
            max=max(years) if years else None,
            available=years,
        ),
        ratings=ratings,
    )


async def get_book_stats(db: AsyncSession) -> BookStats:
    """Catalogue overview plus per-genre counts and ratings."""
    books = BookRepository(db)

    total_books, total_reviews, mean = await books.overview()
    genre_stats = [
        GenreStat(genre=genre, count=count, average_rating=round(avg, 2))
        for genre, count, avg in await books.genre_stats()
    ]

    return BookStats(
        total_books=total_books,
        total_reviews=total_reviews,
        average_rating=round(mean, 2),
        genre_stats=genre_stats,
    )
