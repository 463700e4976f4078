"""
Authentication Router

Handles user authentication endpoints:
- Registration (name/email/password -> token + user)
- Login (email/password JSON -> token + user)
- Token (OAuth2 password form, used by the Swagger UI "Authorize" button)
- Get current user (from JWT token)

Security:
=========
- Passwords are hashed with bcrypt before storage
- Plain text passwords are never logged or stored
- Access tokens are JWTs carrying the user id
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import OAuth2PasswordRequestForm

from app.config import get_settings
from app.dependencies import CurrentUserId, DbSession
from app.schemas.common import ErrorResponse
from app.schemas.user import AuthResponse, LoginRequest, UserCreate, UserResponse
from app.services import auth as auth_service
from app.services.rate_limiter import WRITE_LIMIT, limiter
from app.services.security import create_access_token

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        422: {"model": ErrorResponse, "description": "Validation error"},
    },
)


def _auth_response(user) -> AuthResponse:
    return AuthResponse(
        token=create_access_token(user.id),
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    responses={409: {"model": ErrorResponse, "description": "Email already registered"}},
)
@limiter.limit(WRITE_LIMIT)
async def register(
    request: Request,
    user_data: UserCreate,
    db: DbSession,
) -> AuthResponse:
    """
    Register a new user and log them in.

    Returns a token so the client doesn't need a separate login call.
    """
    user = await auth_service.register_user(
        db,
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
    )
    return _auth_response(user)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login with email and password",
    description="""
    Authenticate with email and password.

    **Usage:**
    Include the returned token in the Authorization header:
    ```
    Authorization: Bearer <token>
    ```
    """,
)
@limiter.limit(WRITE_LIMIT)
async def login(
    request: Request,
    credentials: LoginRequest,
    db: DbSession,
) -> AuthResponse:
    user = await auth_service.authenticate_user(db, credentials.email, credentials.password)
    return _auth_response(user)


@router.post(
    "/token",
    summary="OAuth2 password flow login",
    description="Form-based login for the interactive docs. Put the email in 'username'.",
)
@limiter.limit(WRITE_LIMIT)
async def token(
    request: Request,
    db: DbSession,
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> dict:
    user = await auth_service.authenticate_user(db, form_data.username, form_data.password)
    return {"access_token": create_access_token(user.id), "token_type": "bearer"}


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
)
@limiter.limit(settings.rate_limit_default)
async def get_me(
    request: Request,
    db: DbSession,
    user_id: CurrentUserId,
) -> UserResponse:
    """Profile of the user the Bearer token belongs to."""
    user = await auth_service.get_user(db, user_id)
    return UserResponse.model_validate(user)
