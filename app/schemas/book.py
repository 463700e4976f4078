"""
Book Pydantic Schemas

Handles:
- Create / update payloads (shapes only; bounds live in app.services.validation)
- Search criteria for the catalogue listing
- Book responses with the owner embedded as {id, name}
- Filter options and catalogue statistics
"""

from datetime import datetime
from enum import Enum

from pydantic import ConfigDict, Field

from app.models.book import Genre
from app.schemas.common import CamelModel, PaginatedResponse
from app.schemas.user import UserPublic


class BookSortField(str, Enum):
    """Sort keys accepted by GET /books (query param `sortBy`)."""

    CREATED_AT = "createdAt"
    RATING = "rating"
    YEAR = "year"
    TITLE = "title"
    AUTHOR = "author"
    REVIEWS = "reviews"
    POPULARITY = "popularity"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# =============================================================================
# Requests
# =============================================================================


class BookCreate(CamelModel):
    """
    Schema for adding a book.

    Example request body:
    {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "description": "A hobbit is swept into a quest...",
        "genre": "Fantasy",
        "publishedYear": 1937,
        "coverImage": "https://example.com/hobbit.jpg"
    }
    """

    title: str = Field(..., description="Book title (1-200 characters)", examples=["The Hobbit"])
    author: str = Field(..., description="Author name (1-100 characters)", examples=["J.R.R. Tolkien"])
    description: str = Field(
        ...,
        description="Summary (10-1000 characters)",
        examples=["A hobbit is swept into a quest for a dragon's treasure."],
    )
    genre: str = Field(..., description="One of the supported genres", examples=[Genre.FANTASY.value])
    published_year: int = Field(..., description="Year of publication", examples=[1937])
    cover_image: str | None = Field(default=None, description="Cover image URL")


class BookUpdate(CamelModel):
    """
    Schema for updating a book.

    All fields are optional; only the ones sent are changed. Unknown keys
    (including averageRating / reviewCount) are ignored.
    """

    title: str | None = None
    author: str | None = None
    description: str | None = None
    genre: str | None = None
    published_year: int | None = None
    cover_image: str | None = None

    model_config = ConfigDict(extra="ignore")


class BookSearchCriteria(CamelModel):
    """
    Catalogue search parameters.

    Every filter is optional. Rating and year ranges are inclusive; a range
    equal to the full span (0-5 stars, 1000-current year) applies no filter.
    """

    text: str | None = Field(default=None, description="Matches title, author or description")
    author: str | None = Field(default=None, description="Matches author")
    genre: str | None = Field(default=None, description="Exact genre, or 'All'")
    min_rating: float | None = Field(default=None, ge=0, le=5)
    max_rating: float | None = Field(default=None, ge=0, le=5)
    min_year: int | None = Field(default=None)
    max_year: int | None = Field(default=None)
    sort_by: BookSortField = BookSortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=100)


# =============================================================================
# Responses
# =============================================================================


class BookResponse(CamelModel):
    """
    Schema for book responses.

    averageRating is a float on the wire (one decimal), not a string.
    """

    id: int = Field(..., description="Unique identifier")
    title: str
    author: str
    description: str
    genre: str
    published_year: int
    cover_image: str | None = None
    average_rating: float = Field(
        default=0.0,
        ge=0,
        le=5,
        description="Mean review rating, one decimal, 0 when unreviewed",
    )
    review_count: int = Field(default=0, ge=0, description="Number of reviews")
    added_by: UserPublic = Field(..., description="User who added the book")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "The Hobbit",
                "author": "J.R.R. Tolkien",
                "description": "A hobbit is swept into a quest for a dragon's treasure.",
                "genre": "Fantasy",
                "publishedYear": 1937,
                "coverImage": None,
                "averageRating": 4.7,
                "reviewCount": 3,
                "addedBy": {"id": 7, "name": "Alice Reader"},
                "createdAt": "2024-01-15T10:30:00Z",
                "updatedAt": "2024-01-15T10:30:00Z",
            }
        },
    )


BookListResponse = PaginatedResponse[BookResponse]


class YearRangeResponse(CamelModel):
    min: int | None = None
    max: int | None = None
    available: list[int] = Field(default_factory=list, description="Newest first")


class RatingRangeResponse(CamelModel):
    min_rating: float
    max_rating: float
    avg_rating: float


class FilterOptionsResponse(CamelModel):
    """Values for the browse UI's filter controls."""

    genres: list[str]
    authors: list[str]
    years: YearRangeResponse
    ratings: RatingRangeResponse


class GenreStatResponse(CamelModel):
    genre: str
    count: int
    average_rating: float


class BookStatsResponse(CamelModel):
    """Catalogue totals plus a per-genre breakdown (largest genre first)."""

    total_books: int
    total_reviews: int
    average_rating: float
    genre_stats: list[GenreStatResponse]
