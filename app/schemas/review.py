"""
Review Pydantic Schemas

Schemas:
- ReviewCreate: Rating plus text
- ReviewUpdate: Either or both of rating and text
- ReviewResponse: Review with its author embedded under "userId"
- ReviewListResponse: Paginated list of reviews
- RatingBreakdownResponse: Live average, count and 1-5 distribution

Business Rules (enforced in app.services):
- Rating must be 1-5, text 10-500 characters after trimming
- One review per user per book
- Users can only edit/delete their own reviews
"""

from datetime import datetime

from pydantic import AliasChoices, ConfigDict, Field

from app.schemas.common import CamelModel, PaginatedResponse
from app.schemas.user import UserPublic


class ReviewCreate(CamelModel):
    """
    Schema for creating a review.

    Example request body:
    {
        "rating": 5,
        "reviewText": "One of the best books I've ever read."
    }
    """

    rating: int = Field(..., description="Rating from 1 to 5 stars", examples=[4, 5])
    review_text: str = Field(
        ...,
        description="Review body (10-500 characters)",
        examples=["One of the best books I've ever read."],
    )


class ReviewUpdate(CamelModel):
    """Fields left out keep their current value."""

    rating: int | None = Field(default=None, description="Rating from 1 to 5 stars")
    review_text: str | None = Field(default=None, description="Review body")


class ReviewResponse(CamelModel):
    """
    Schema for review responses.

    The author is embedded as {id, name} under the key "userId".
    """

    id: int = Field(..., description="Unique review identifier")
    book_id: int = Field(..., description="ID of the reviewed book")
    user: UserPublic = Field(
        ...,
        validation_alias=AliasChoices("user", "userId"),
        serialization_alias="userId",
        description="User who wrote the review",
    )
    rating: int
    review_text: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "bookId": 42,
                "userId": {"id": 7, "name": "Alice Reader"},
                "rating": 5,
                "reviewText": "This book completely changed my perspective.",
                "createdAt": "2024-01-15T10:30:00Z",
                "updatedAt": "2024-01-15T10:30:00Z",
            }
        },
    )


ReviewListResponse = PaginatedResponse[ReviewResponse]


class RatingBreakdownResponse(CamelModel):
    """Live rating statistics for one book."""

    book_id: int
    average_rating: float = Field(..., ge=0, le=5, description="0 means no reviews")
    total_reviews: int = Field(..., ge=0)
    distribution: dict[int, int] = Field(
        default_factory=lambda: {1: 0, 2: 0, 3: 0, 4: 0, 5: 0},
        description="Count of each rating (1-5)",
    )
