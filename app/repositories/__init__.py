"""
Repositories Package

Async data-access objects, one per model. Services create them from the
request's AsyncSession:

    reviews = ReviewRepository(db)
"""

from app.repositories.base import Repository
from app.repositories.books import BookRepository
from app.repositories.reviews import ReviewRepository
from app.repositories.users import UserRepository

__all__ = [
    "Repository",
    "BookRepository",
    "ReviewRepository",
    "UserRepository",
]
