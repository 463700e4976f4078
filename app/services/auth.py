"""
Authentication Service

Registration and credential checks.

Emails are stored lowercased and must be unique. Login failures never
say whether the email or the password was wrong.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, NotFoundError, UnauthenticatedError
from app.models import User
from app.repositories import UserRepository
from app.services.security import hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


async def register_user(db: AsyncSession, name: str, email: str, password: str) -> User:
    """
    Create a user account.

    Raises:
        ConflictError: Email already registered
    """
    users = UserRepository(db)
    email = email.lower()

    if await users.get_by_email(email) is not None:
        raise ConflictError("User already exists with this email")

    try:
        user = await users.create(
            name=name,
            email=email,
            hashed_password=hash_password(password),
        )
    except IntegrityError as e:
        raise ConflictError("User already exists with this email") from e

    logger.info(f"New user registered: {user.id} ({email})")
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Check an email/password pair.

    Raises:
        UnauthenticatedError: Unknown email or wrong password
    """
    user = await UserRepository(db).get_by_email(email.lower())

    if user is None or not verify_password(password, user.hashed_password):
        logger.info(f"Failed login attempt for {email}")
        raise UnauthenticatedError(INVALID_CREDENTIALS)

    logger.info(f"User {user.id} logged in")
    return user


async def get_user(db: AsyncSession, user_id: int) -> User:
    """
    Raises:
        NotFoundError: No such user
    """
    user = await UserRepository(db).get(user_id)
    if user is None:
        raise NotFoundError(f"User with id {user_id} not found")
    return user
