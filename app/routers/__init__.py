"""
API Routers Package

This package contains FastAPI routers that handle API endpoints.

Router Structure:
- auth.py: /api/v1/auth/* endpoints (registration, login, current user)
- books.py: /api/v1/books/* endpoints (catalogue, filters, stats)
- reviews.py: /api/v1/books/{id}/reviews, /api/v1/reviews/*, /api/v1/users/{id}/reviews
- users.py: /api/v1/users/{id}/books

Each router is imported and registered in main.py.
"""

from app.routers.auth import router as auth_router
from app.routers.books import router as books_router
from app.routers.reviews import router as reviews_router
from app.routers.users import router as users_router

__all__ = [
    "auth_router",
    "books_router",
    "reviews_router",
    "users_router",
]
