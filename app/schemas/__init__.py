"""
Pydantic Schemas Package

Request/response models for the HTTP layer. Wire names are camelCase
(see app.schemas.common.CamelModel); Python attribute names stay snake_case.

Schema Naming Convention:
- XxxCreate: Fields required when creating a record
- XxxUpdate: Fields allowed when updating (all optional)
- XxxResponse: Fields returned in API responses
"""

from app.schemas.book import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookSearchCriteria,
    BookSortField,
    BookStatsResponse,
    BookUpdate,
    FilterOptionsResponse,
    SortOrder,
)
from app.schemas.common import ErrorResponse, PaginatedResponse, PaginationMeta
from app.schemas.review import (
    RatingBreakdownResponse,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from app.schemas.user import (
    AuthResponse,
    LoginRequest,
    UserCreate,
    UserPublic,
    UserResponse,
)

__all__ = [
    # Common
    "ErrorResponse",
    "PaginatedResponse",
    "PaginationMeta",
    # Book schemas
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookListResponse",
    "BookSearchCriteria",
    "BookSortField",
    "SortOrder",
    "FilterOptionsResponse",
    "BookStatsResponse",
    # Review schemas
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewListResponse",
    "RatingBreakdownResponse",
    # User schemas
    "UserCreate",
    "LoginRequest",
    "UserPublic",
    "UserResponse",
    "AuthResponse",
]
