"""
Shared Schema Building Blocks

Every response model on the wire uses camelCase field names
(publishedYear, averageRating, ...) while Python code keeps snake_case.
CamelModel wires that up once:

- alias_generator=to_camel: published_year <-> "publishedYear"
- populate_by_name: Python code may still build models by field name
- from_attributes: models validate straight from ORM objects/dataclasses

FastAPI serializes response models by alias, so clients only ever see
the camelCase names.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.services.pagination import Page

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    """Navigation info attached to every paginated list."""

    current_page: int = Field(..., ge=1, description="Current page number")
    total_pages: int = Field(..., ge=0, description="Total number of pages")
    total_items: int = Field(..., ge=0, description="Total number of matching items")
    has_next: bool = Field(..., description="Whether a next page exists")
    has_prev: bool = Field(..., description="Whether a previous page exists")

    @classmethod
    def from_page(cls, page: Page) -> "PaginationMeta":
        return cls(
            current_page=page.page,
            total_pages=page.total_pages,
            total_items=page.total,
            has_next=page.has_next,
            has_prev=page.has_prev,
        )


class PaginatedResponse(CamelModel, Generic[T]):
    """
    Paginated list envelope:

    {"items": [...], "pagination": {"currentPage": 1, "totalPages": 3, ...}}
    """

    items: list[T] = Field(..., description="Items on this page")
    pagination: PaginationMeta


class FieldErrorDetail(BaseModel):
    field: str = Field(..., description="Offending field", examples=["rating"])
    message: str = Field(..., examples=["Rating must be an integer between 1 and 5"])


class ErrorResponse(BaseModel):
    """
    Body of every error response.

    Documented on routes via `responses=` so the OpenAPI schema shows it.
    """

    error: str = Field(..., description="Stable error code", examples=["not_found"])
    message: str = Field(..., description="Human readable message")
    details: list[FieldErrorDetail] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "validation_error",
                "message": "Validation failed",
                "details": [
                    {"field": "rating", "message": "Rating must be an integer between 1 and 5"}
                ],
            }
        },
    )
