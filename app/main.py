"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application.

Key Concepts:
=============

1. Application Factory Pattern
   - create_app() function returns configured app
   - Tests build the app the same way production does

2. Lifespan Events
   - startup: optionally create tables (development convenience)
   - shutdown: dispose the async engine's connection pool

3. Exception Handlers
   - AppError subclasses map to their own status code
   - Request validation errors use the same envelope
   - Database and unexpected errors are logged and hidden from clients

Every error response has the shape:
    {"error": "<code>", "message": "...", "details": [...]}
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings
from app.database import create_tables, engine
from app.exceptions import (
    AppError,
    InternalFailureError,
    UnauthenticatedError,
    ValidationError,
)
from app.routers import auth_router, books_router, reviews_router, users_router
from app.services.rate_limiter import limiter, rate_limit_exceeded_handler

# =============================================================================
# Logging Configuration
# =============================================================================
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Request locations that add nothing to a field name ("body.rating" -> "rating")
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Code before yield runs on startup, code after yield on shutdown.
    """
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.environment}, debug: {settings.debug}")
    logger.info(f"API version: {settings.api_version}")

    if settings.create_tables_on_startup:
        await create_tables()
        logger.info("Database tables created")

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await engine.dispose()


# =============================================================================
# Exception Handlers
# =============================================================================
def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in _LOCATION_PREFIXES]
    return ".".join(parts) or "request"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError with its own status code and code."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Pydantic request validation failures, in the validation_error envelope."""
    error = ValidationError(
        details=[
            {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
            for err in exc.errors()
        ]
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Handle SQLAlchemy database errors.

    Logs the actual error for debugging while hiding details from users.
    """
    logger.error(f"Database error: {exc}")
    error = InternalFailureError("A database error occurred. Please try again later.")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all exception handler.

    In production, hide internal errors from users.
    In debug mode, show more details.
    """
    logger.error(f"Unhandled error: {exc}", exc_info=True)
    error = InternalFailureError(str(exc) if settings.debug else None)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# =============================================================================
# Application Factory
# =============================================================================
def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## Book Review API

Browse books, write reviews, and see ratings that stay in sync with them.

### Features
- **Books**: Add, search, filter, sort and paginate the catalogue
- **Reviews**: One review per user per book; ratings update automatically
- **Stats**: Filter options and catalogue statistics

### Authentication
Register or log in to get a token, then send `Authorization: Bearer <token>`.
        """,
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    # The limiter must live on app.state for the route decorators to find it
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # -------------------------------------------------------------------------
    # Register Routers
    # -------------------------------------------------------------------------
    # prefix="/api/v1" creates versioned URLs: /api/v1/books, /api/v1/reviews
    api_prefix = f"/api/{settings.api_version}"

    app.include_router(auth_router, prefix=api_prefix)
    app.include_router(books_router, prefix=api_prefix)
    app.include_router(reviews_router, prefix=api_prefix)
    app.include_router(users_router, prefix=api_prefix)

    # -------------------------------------------------------------------------
    # Health Check Endpoint
    # -------------------------------------------------------------------------
    @app.get(
        "/health",
        tags=["Health"],
        summary="Health check",
        description="Check if the API is running and healthy.",
    )
    async def health_check() -> dict:
        """
        Used by load balancers, container health checks and monitoring.
        """
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.api_version,
            "environment": settings.environment,
            "rate_limiting": {
                "enabled": settings.rate_limit_enabled,
                "default_limit": settings.rate_limit_default,
                "write_limit": settings.rate_limit_write,
            },
        }

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Welcome message and API information.",
    )
    async def root() -> dict:
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    return app


# =============================================================================
# Application Instance
# =============================================================================
# This is what uvicorn imports: uvicorn app.main:app
app = create_app()


# This allows running the app directly with: python -m app.main
# In production, use: uvicorn app.main:app --host 0.0.0.0 --port 5000
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
