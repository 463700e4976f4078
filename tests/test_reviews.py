"""
Tests for Reviews

Service layer:
- Create (validation, missing book, one review per user per book, including
  a duplicate that slips past the up-front check)
- Update / delete (author only, partial updates)
- Listing by book and by user

HTTP layer:
- Wire shape (bookId, userId {id, name}, reviewText)
- Authentication and ownership errors in the error envelope
"""

from decimal import Decimal

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models import Book, Review, User
from app.repositories import BookRepository, ReviewRepository
from app.services import reviews as review_service
from app.services.ratings import recalculate_book_rating

VALID_TEXT = "A thoughtful and engaging read."


# =============================================================================
# Create
# =============================================================================


class TestCreateReview:

    async def test_create_review(self, db_session: AsyncSession, sample_book: Book, second_user: User):
        review = await review_service.create_review(
            db_session, second_user.id, sample_book.id, 4, VALID_TEXT
        )

        assert review.id is not None
        assert review.book_id == sample_book.id
        assert review.user_id == second_user.id
        assert review.user.name == "Bob"
        assert review.rating == 4

        book = await BookRepository(db_session).get(sample_book.id)
        assert (book.average_rating, book.review_count) == (Decimal("4.0"), 1)

    async def test_text_is_trimmed(self, db_session: AsyncSession, sample_book: Book, second_user: User):
        review = await review_service.create_review(
            db_session, second_user.id, sample_book.id, 3, f"   {VALID_TEXT}   "
        )
        assert review.review_text == VALID_TEXT

    @pytest.mark.parametrize("rating", [0, 6, -1])
    async def test_rating_out_of_range(
        self, db_session: AsyncSession, sample_book: Book, second_user: User, rating: int
    ):
        with pytest.raises(ValidationError) as exc_info:
            await review_service.create_review(
                db_session, second_user.id, sample_book.id, rating, VALID_TEXT
            )
        assert exc_info.value.details[0]["field"] == "rating"

    @pytest.mark.parametrize("text", ["too short", "          short          ", "x" * 501])
    async def test_text_out_of_bounds(
        self, db_session: AsyncSession, sample_book: Book, second_user: User, text: str
    ):
        with pytest.raises(ValidationError) as exc_info:
            await review_service.create_review(
                db_session, second_user.id, sample_book.id, 4, text
            )
        assert exc_info.value.details[0]["field"] == "review_text"

    async def test_text_at_bounds(
        self, db_session: AsyncSession, make_book, second_user: User, third_user: User
    ):
        book = await make_book()
        short = await review_service.create_review(db_session, second_user.id, book.id, 4, "x" * 10)
        long = await review_service.create_review(db_session, third_user.id, book.id, 4, "y" * 500)
        assert len(short.review_text) == 10
        assert len(long.review_text) == 500

    async def test_every_invalid_field_reported(
        self, db_session: AsyncSession, sample_book: Book, second_user: User
    ):
        with pytest.raises(ValidationError) as exc_info:
            await review_service.create_review(db_session, second_user.id, sample_book.id, 9, "short")

        fields = {detail["field"] for detail in exc_info.value.details}
        assert fields == {"rating", "review_text"}

    async def test_missing_book(self, db_session: AsyncSession, second_user: User):
        with pytest.raises(NotFoundError):
            await review_service.create_review(db_session, second_user.id, 99999, 4, VALID_TEXT)

    async def test_validation_checked_before_book_lookup(
        self, db_session: AsyncSession, second_user: User
    ):
        with pytest.raises(ValidationError):
            await review_service.create_review(db_session, second_user.id, 99999, 7, VALID_TEXT)

    async def test_duplicate_review_conflicts(
        self, db_session: AsyncSession, sample_book: Book, second_user: User
    ):
        await review_service.create_review(db_session, second_user.id, sample_book.id, 4, VALID_TEXT)

        with pytest.raises(ConflictError):
            await review_service.create_review(
                db_session, second_user.id, sample_book.id, 2, "Changed my mind about it."
            )

        assert await ReviewRepository(db_session).count(Review.book_id == sample_book.id) == 1
        book = await BookRepository(db_session).get(sample_book.id)
        assert (book.average_rating, book.review_count) == (Decimal("4.0"), 1)

    async def test_concurrent_duplicate_conflicts(
        self,
        db_session: AsyncSession,
        sample_book: Book,
        sample_review: Review,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """The up-front check passed, but the unique constraint catches the duplicate."""
        book_id, user_id = sample_book.id, sample_review.user_id
        await recalculate_book_rating(db_session, book_id)

        async def _not_reviewed_yet(self, book_id: int, user_id: int):
            return None

        monkeypatch.setattr(ReviewRepository, "get_by_book_and_user", _not_reviewed_yet)

        with pytest.raises(ConflictError):
            await review_service.create_review(
                db_session, user_id, book_id, 1, "Second review from the same reader."
            )

        # The failed insert was rolled back; the session keeps working
        assert await ReviewRepository(db_session).count(Review.book_id == book_id) == 1
        book = await BookRepository(db_session).get(book_id)
        assert (book.average_rating, book.review_count) == (Decimal("4.0"), 1)

    async def test_book_deleted_during_create(
        self,
        db_session: AsyncSession,
        sample_book: Book,
        second_user: User,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """A foreign key failure on insert is reported as a missing book, not a duplicate."""
        book_id, user_id = sample_book.id, second_user.id

        async def _book_gone(self, **values):
            raise IntegrityError(
                "INSERT INTO reviews", {}, Exception("FOREIGN KEY constraint failed")
            )

        monkeypatch.setattr(ReviewRepository, "create", _book_gone)

        with pytest.raises(NotFoundError) as exc_info:
            await review_service.create_review(db_session, user_id, book_id, 4, VALID_TEXT)

        assert str(book_id) in exc_info.value.message

    async def test_owner_may_review_own_book(
        self, db_session: AsyncSession, sample_book: Book, sample_user: User
    ):
        review = await review_service.create_review(
            db_session, sample_user.id, sample_book.id, 5, VALID_TEXT
        )
        assert review.user_id == sample_book.added_by_id


# =============================================================================
# Update / Delete
# =============================================================================


class TestUpdateReview:

    async def test_update_rating_and_text(
        self, db_session: AsyncSession, sample_review: Review, second_user: User
    ):
        review = await review_service.update_review(
            db_session, second_user.id, sample_review.id, rating=2, review_text="Less fun the second time."
        )

        assert review.rating == 2
        assert review.review_text == "Less fun the second time."
        book = await BookRepository(db_session).get(review.book_id)
        assert (book.average_rating, book.review_count) == (Decimal("2.0"), 1)

    async def test_partial_update_keeps_other_field(
        self, db_session: AsyncSession, sample_review: Review, second_user: User
    ):
        original_text = sample_review.review_text

        review = await review_service.update_review(
            db_session, second_user.id, sample_review.id, rating=5
        )

        assert review.rating == 5
        assert review.review_text == original_text

    async def test_empty_update_still_refreshes_rating(
        self, db_session: AsyncSession, sample_review: Review, second_user: User
    ):
        # sample_review is inserted without a recompute, so the book is stale
        review = await review_service.update_review(db_session, second_user.id, sample_review.id)

        book = await BookRepository(db_session).get(review.book_id)
        assert (book.average_rating, book.review_count) == (Decimal("4.0"), 1)

    async def test_not_author(self, db_session: AsyncSession, sample_review: Review, sample_user: User):
        with pytest.raises(ForbiddenError):
            await review_service.update_review(db_session, sample_user.id, sample_review.id, rating=1)

        review = await ReviewRepository(db_session).get(sample_review.id)
        assert review.rating == 4

    async def test_missing_review(self, db_session: AsyncSession, second_user: User):
        with pytest.raises(NotFoundError):
            await review_service.update_review(db_session, second_user.id, 99999, rating=3)

    async def test_invalid_new_values(
        self, db_session: AsyncSession, sample_review: Review, second_user: User
    ):
        with pytest.raises(ValidationError):
            await review_service.update_review(
                db_session, second_user.id, sample_review.id, review_text="short"
            )


class TestDeleteReview:

    async def test_delete(self, db_session: AsyncSession, sample_review: Review, second_user: User):
        review_id, book_id = sample_review.id, sample_review.book_id

        await review_service.delete_review(db_session, second_user.id, review_id)

        assert await ReviewRepository(db_session).get(review_id) is None
        book = await BookRepository(db_session).get(book_id)
        assert (book.average_rating, book.review_count) == (Decimal("0"), 0)

    async def test_not_author(self, db_session: AsyncSession, sample_review: Review, sample_user: User):
        with pytest.raises(ForbiddenError):
            await review_service.delete_review(db_session, sample_user.id, sample_review.id)

        assert await ReviewRepository(db_session).get(sample_review.id) is not None

    async def test_missing_review(self, db_session: AsyncSession, second_user: User):
        with pytest.raises(NotFoundError):
            await review_service.delete_review(db_session, second_user.id, 99999)


# =============================================================================
# Listing
# =============================================================================


class TestListReviews:

    async def test_by_book_newest_first_and_paginated(
        self, db_session: AsyncSession, sample_book: Book, make_user
    ):
        created = []
        for i in range(5):
            user = await make_user(f"Reader{i}")
            created.append(
                await review_service.create_review(
                    db_session, user.id, sample_book.id, (i % 5) + 1, f"Review number {i} text"
                )
            )

        page = await review_service.list_reviews_by_book(db_session, sample_book.id, page=1, page_size=2)

        assert [r.id for r in page.items] == [created[4].id, created[3].id]
        assert page.total == 5
        assert page.total_pages == 3
        assert page.has_next is True
        assert page.has_prev is False

        last = await review_service.list_reviews_by_book(db_session, sample_book.id, page=3, page_size=2)
        assert [r.id for r in last.items] == [created[0].id]
        assert last.has_next is False
        assert last.has_prev is True

    async def test_by_book_missing(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await review_service.list_reviews_by_book(db_session, 99999)

    async def test_by_book_empty(self, db_session: AsyncSession, sample_book: Book):
        page = await review_service.list_reviews_by_book(db_session, sample_book.id)
        assert page.items == []
        assert page.total == 0
        assert page.total_pages == 0

    async def test_by_user(
        self, db_session: AsyncSession, make_book, second_user: User
    ):
        first = await make_book()
        second = await make_book(title="Dune", genre="Sci-Fi")
        await review_service.create_review(db_session, second_user.id, first.id, 4, VALID_TEXT)
        await review_service.create_review(db_session, second_user.id, second.id, 3, VALID_TEXT)

        page = await review_service.list_reviews_by_user(db_session, second_user.id)

        assert page.total == 2
        assert {r.book_id for r in page.items} == {first.id, second.id}

    async def test_by_user_missing(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await review_service.list_reviews_by_user(db_session, 99999)


# =============================================================================
# HTTP
# =============================================================================


class TestReviewEndpoints:
    """Tests for the /books/{id}/reviews and /reviews/{id} routes."""

    async def test_create_review(
        self, client: AsyncClient, sample_book: Book, second_user: User, second_user_headers: dict
    ):
        response = await client.post(
            f"/api/v1/books/{sample_book.id}/reviews",
            json={"rating": 5, "reviewText": VALID_TEXT},
            headers=second_user_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["bookId"] == sample_book.id
        assert data["userId"] == {"id": second_user.id, "name": "Bob"}
        assert data["rating"] == 5
        assert data["reviewText"] == VALID_TEXT
        assert "createdAt" in data
        assert "updatedAt" in data

        book = await client.get(f"/api/v1/books/{sample_book.id}")
        assert book.json()["averageRating"] == 5.0
        assert book.json()["reviewCount"] == 1

    async def test_create_requires_auth(self, client: AsyncClient, sample_book: Book):
        response = await client.post(
            f"/api/v1/books/{sample_book.id}/reviews",
            json={"rating": 5, "reviewText": VALID_TEXT},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "unauthenticated"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_create_duplicate(
        self, client: AsyncClient, sample_review: Review, second_user_headers: dict
    ):
        response = await client.post(
            f"/api/v1/books/{sample_review.book_id}/reviews",
            json={"rating": 1, "reviewText": VALID_TEXT},
            headers=second_user_headers,
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "conflict"

    async def test_create_invalid(
        self, client: AsyncClient, sample_book: Book, second_user_headers: dict
    ):
        response = await client.post(
            f"/api/v1/books/{sample_book.id}/reviews",
            json={"rating": 6, "reviewText": "short"},
            headers=second_user_headers,
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "validation_error"
        assert {d["field"] for d in body["details"]} == {"rating", "review_text"}

    async def test_create_missing_body_field(
        self, client: AsyncClient, sample_book: Book, second_user_headers: dict
    ):
        response = await client.post(
            f"/api/v1/books/{sample_book.id}/reviews",
            json={"rating": 4},
            headers=second_user_headers,
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"][0]["field"] == "reviewText"

    async def test_create_for_missing_book(self, client: AsyncClient, second_user_headers: dict):
        response = await client.post(
            "/api/v1/books/99999/reviews",
            json={"rating": 4, "reviewText": VALID_TEXT},
            headers=second_user_headers,
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_list_book_reviews(self, client: AsyncClient, sample_review: Review):
        response = await client.get(f"/api/v1/books/{sample_review.book_id}/reviews")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert len(data["items"]) == 1
        assert data["items"][0]["userId"]["name"] == "Bob"
        assert data["pagination"] == {
            "currentPage": 1,
            "totalPages": 1,
            "totalItems": 1,
            "hasNext": False,
            "hasPrev": False,
        }

    async def test_list_page_size_param(self, client: AsyncClient, sample_review: Review):
        response = await client.get(
            f"/api/v1/books/{sample_review.book_id}/reviews",
            params={"page": 2, "pageSize": 1},
        )

        data = response.json()
        assert data["items"] == []
        assert data["pagination"]["currentPage"] == 2
        assert data["pagination"]["hasPrev"] is True

    async def test_get_review(self, client: AsyncClient, sample_review: Review):
        response = await client.get(f"/api/v1/reviews/{sample_review.id}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == sample_review.id

    async def test_get_missing_review(self, client: AsyncClient):
        response = await client.get("/api/v1/reviews/99999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        body = response.json()
        assert body["error"] == "not_found"
        assert body["details"] == []

    async def test_update_review(
        self, client: AsyncClient, sample_review: Review, second_user_headers: dict
    ):
        response = await client.put(
            f"/api/v1/reviews/{sample_review.id}",
            json={"rating": 2},
            headers=second_user_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["rating"] == 2
        assert response.json()["reviewText"] == sample_review.review_text

    async def test_update_not_author(
        self, client: AsyncClient, sample_review: Review, sample_user_headers: dict
    ):
        response = await client.put(
            f"/api/v1/reviews/{sample_review.id}",
            json={"rating": 1},
            headers=sample_user_headers,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"] == "forbidden"

    async def test_delete_review(
        self, client: AsyncClient, sample_review: Review, second_user_headers: dict
    ):
        review_id = sample_review.id

        response = await client.delete(f"/api/v1/reviews/{review_id}", headers=second_user_headers)
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = await client.get(f"/api/v1/reviews/{review_id}")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_delete_not_author(
        self, client: AsyncClient, sample_review: Review, sample_user_headers: dict
    ):
        response = await client.delete(
            f"/api/v1/reviews/{sample_review.id}", headers=sample_user_headers
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_list_user_reviews(
        self, client: AsyncClient, sample_review: Review, second_user: User
    ):
        response = await client.get(f"/api/v1/users/{second_user.id}/reviews")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["pagination"]["totalItems"] == 1
        assert data["items"][0]["bookId"] == sample_review.book_id

    async def test_list_missing_user_reviews(self, client: AsyncClient):
        response = await client.get("/api/v1/users/99999/reviews")
        assert response.status_code == status.HTTP_404_NOT_FOUND
