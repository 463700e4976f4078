"""
Validation Service

Field-level validation for book and review input.

The request schemas in app.schemas only check shapes and types. The rules
below are the precondition of every service call, whether it comes from a
router, a script or a test. Each violation becomes one entry in
ValidationError.details:

    {"field": "rating", "message": "Rating must be between 1 and 5"}
"""

from datetime import UTC, datetime
from typing import Any

from app.config import get_settings
from app.exceptions import ValidationError
from app.models.book import Genre

MIN_PUBLISHED_YEAR = 1000
MIN_RATING = 1
MAX_RATING = 5

# field -> (min length, max length) after trimming
BOOK_TEXT_BOUNDS: dict[str, tuple[int, int]] = {
    "title": (1, 200),
    "author": (1, 100),
    "description": (10, 1000),
}
COVER_IMAGE_MAX_LENGTH = 500

BOOK_REQUIRED_FIELDS = ("title", "author", "description", "genre", "published_year")
BOOK_EDITABLE_FIELDS = (*BOOK_REQUIRED_FIELDS, "cover_image")


def current_year() -> int:
    return datetime.now(UTC).year


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# =============================================================================
# Reviews
# =============================================================================

def validate_rating(value: Any) -> str | None:
    if not _is_int(value) or not MIN_RATING <= value <= MAX_RATING:
        return f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}"
    return None


def validate_review_text(value: Any) -> tuple[str | None, str | None]:
    """Returns (cleaned text, error message)."""
    settings = get_settings()
    low, high = settings.review_text_min_length, settings.review_text_max_length
    if not isinstance(value, str):
        return None, "Review text is required"
    cleaned = value.strip()
    if not low <= len(cleaned) <= high:
        return None, f"Review text must be between {low} and {high} characters"
    return cleaned, None


def validate_review_fields(
    rating: Any = None,
    review_text: Any = None,
    *,
    partial: bool = False,
) -> dict[str, Any]:
    """
    Validate review input and return the cleaned values.

    Args:
        rating: Star rating
        review_text: Review body (trimmed before length checks)
        partial: If True, None means "not provided" and is skipped

    Returns:
        Dict with the provided fields, cleaned

    Raises:
        ValidationError: One detail entry per invalid field
    """
    cleaned: dict[str, Any] = {}
    details: list[dict[str, str]] = []

    if rating is not None or not partial:
        error = validate_rating(rating)
        if error:
            details.append({"field": "rating", "message": error})
        else:
            cleaned["rating"] = rating

    if review_text is not None or not partial:
        text, error = validate_review_text(review_text)
        if error:
            details.append({"field": "review_text", "message": error})
        else:
            cleaned["review_text"] = text

    if details:
        raise ValidationError(details=details)
    return cleaned


# =============================================================================
# Books
# =============================================================================

def _check_book_field(field: str, value: Any) -> tuple[Any, str | None]:
    if field in BOOK_TEXT_BOUNDS:
        low, high = BOOK_TEXT_BOUNDS[field]
        if not isinstance(value, str):
            return None, f"{field.capitalize()} is required"
        value = value.strip()
        if not low <= len(value) <= high:
            return None, f"{field.capitalize()} must be between {low} and {high} characters"
        return value, None

    if field == "genre":
        if isinstance(value, Genre):
            value = value.value
        if value not in Genre.values():
            return None, "Please select a valid genre"
        return value, None

    if field == "published_year":
        if not _is_int(value) or not MIN_PUBLISHED_YEAR <= value <= current_year():
            return None, (
                f"Published year must be between {MIN_PUBLISHED_YEAR} "
                f"and {current_year()}"
            )
        return value, None

    if field == "cover_image":
        if value is None:
            return None, None
        if not isinstance(value, str) or len(value.strip()) > COVER_IMAGE_MAX_LENGTH:
            return None, (
                f"Cover image must be at most {COVER_IMAGE_MAX_LENGTH} characters"
            )
        return value.strip() or None, None

    raise KeyError(field)


def validate_book_fields(fields: dict[str, Any], *, partial: bool = False) -> dict[str, Any]:
    """
    Validate book input and return only editable, cleaned fields.

    Keys outside BOOK_EDITABLE_FIELDS (derived rating fields, ids, anything
    unknown) are dropped without error.

    Args:
        fields: Raw field values keyed by attribute name
        partial: If True (updates), only the keys present are validated.
            An explicit None clears cover_image and is rejected for the
            required fields

    Raises:
        ValidationError: One detail entry per invalid field
    """
    cleaned: dict[str, Any] = {}
    details: list[dict[str, str]] = []

    for field in BOOK_EDITABLE_FIELDS:
        if field not in fields and (partial or field not in BOOK_REQUIRED_FIELDS):
            continue

        value, error = _check_book_field(field, fields.get(field))
        if error:
            details.append({"field": field, "message": error})
        else:
            cleaned[field] = value

    if details:
        raise ValidationError(details=details)
    return cleaned
