"""
Book Review API Application Package

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: Async SQLAlchemy engine and session management
- exceptions.py: Domain error taxonomy
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models (users, books, reviews)
- repositories/: Data access layer over the models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Business logic (ratings, reviews, books, auth, rate limiting)
"""

__version__ = "1.0.0"
