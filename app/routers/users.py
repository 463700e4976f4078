"""
Users Router

Public, per-user listings:
- GET /users/{user_id}/books - Books a user added, newest first

(A user's reviews live in the reviews router: GET /users/{user_id}/reviews.)
"""

from fastapi import APIRouter, Request

from app.config import get_settings
from app.dependencies import DbSession
from app.schemas.book import BookResponse
from app.schemas.common import ErrorResponse
from app.services import books as book_service
from app.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)


@router.get(
    "/{user_id}/books",
    response_model=list[BookResponse],
    summary="List books added by a user",
)
@limiter.limit(settings.rate_limit_default)
async def list_user_books(
    request: Request,
    user_id: int,
    db: DbSession,
) -> list[BookResponse]:
    books = await book_service.list_books_by_user(db, user_id)
    return [BookResponse.model_validate(book) for book in books]
