"""
Book Model

The central model of the Book Review API.

Derived fields
==============
average_rating and review_count are denormalized from the reviews table.
They are written only by app.services.ratings.recalculate_book_rating and
are never taken from client input. Keeping them on the row lets listings
sort and filter by rating without a COUNT/AVG subquery per request.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.user import User


class Genre(str, Enum):
    """
    Closed set of genres a book can belong to.

    The value is what's stored and what goes over the wire.
    """
    FICTION = "Fiction"
    NON_FICTION = "Non-Fiction"
    MYSTERY = "Mystery"
    ROMANCE = "Romance"
    SCI_FI = "Sci-Fi"
    FANTASY = "Fantasy"
    THRILLER = "Thriller"
    BIOGRAPHY = "Biography"
    HISTORY = "History"
    SELF_HELP = "Self-Help"
    POETRY = "Poetry"
    DRAMA = "Drama"
    HORROR = "Horror"
    ADVENTURE = "Adventure"
    OTHER = "Other"

    @classmethod
    def values(cls) -> list[str]:
        return [genre.value for genre in cls]


class Book(Base):
    """
    Book model representing books added by users.

    Table: books

    Fields:
    - title, author, description: free text with length bounds
    - genre: one of Genre
    - published_year: 1000..current year
    - cover_image: optional image URL
    - added_by_id: owning user, fixed at creation
    - average_rating / review_count: derived from reviews

    Indexes:
    - title, author, genre, published_year: filtering and sorting
    - average_rating, review_count: rating sorts and range filters

    Example:
        book = Book(
            title="1984",
            author="George Orwell",
            description="A dystopian social science fiction novel...",
            genre=Genre.SCI_FI.value,
            published_year=1949,
            added_by_id=user.id,
        )
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Basic Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(200),
        index=True,
        nullable=False,
        comment="Book title"
    )

    author: Mapped[str] = mapped_column(
        String(100),
        index=True,
        nullable=False,
        comment="Author name as entered by the user"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Book description or summary"
    )

    genre: Mapped[str] = mapped_column(
        String(20),
        index=True,
        nullable=False,
        comment="One of the fixed genre values"
    )

    published_year: Mapped[int] = mapped_column(
        Integer,
        index=True,
        nullable=False,
        comment="Year of publication"
    )

    cover_image: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Cover image URL"
    )

    # -------------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------------
    added_by_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        index=True,
        nullable=False,
        comment="User who added the book (owner)"
    )

    # -------------------------------------------------------------------------
    # Rating Aggregation (derived)
    # -------------------------------------------------------------------------
    # Numeric(2, 1): 0.0 .. 5.0, one fractional digit
    average_rating: Mapped[Decimal] = mapped_column(
        Numeric(2, 1),
        default=Decimal("0"),
        index=True,
        nullable=False,
        comment="Mean review rating rounded to one decimal, 0 if no reviews"
    )

    review_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        index=True,
        nullable=False,
        comment="Number of reviews for this book"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        index=True,
        nullable=False,
    )

    # No onupdate here: rating recomputes must not touch it.
    # The book service sets it explicitly on owner edits.
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    # Reviews are deliberately not mapped as a cascading relationship:
    # the book service deletes them explicitly before deleting the book.
    added_by: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"Book(id={self.id}, title='{self.title}', author='{self.author}')"
