"""
Review Model

Represents a user's review of a book: a 1-5 rating and a short text.

Business Rules:
- One review per user per book (unique constraint)
- Rating must be 1-5
- Only the author can edit/delete their review
- book_id and user_id never change after creation
"""

from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import User


class Review(Base):
    """
    Review model for book reviews.

    Attributes:
        id: Primary key
        book_id: Foreign key to books table
        user_id: Foreign key to users table (the author)
        rating: 1-5 star rating
        review_text: Review body
        created_at: When the review was created
        updated_at: When the review was last updated
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Foreign keys
    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    # Review content
    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Rating from 1-5 stars",
    )
    review_text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Review text content",
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        index=True,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships
    user: Mapped[User] = relationship("User", lazy="selectin")

    # Constraints
    __table_args__ = (
        # One review per user per book
        UniqueConstraint("book_id", "user_id", name="uq_review_book_user"),
        # Rating must be 1-5
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, book_id={self.book_id}, user_id={self.user_id}, rating={self.rating})>"
