"""
User Pydantic Schemas

Schemas:
- UserCreate: Registration data (name, email, password)
- LoginRequest: Email + password login
- UserPublic: The {id, name} shape embedded in books and reviews
- UserResponse: The authenticated user's own profile
- AuthResponse: Token plus user, returned by register and login
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.common import CamelModel


class UserCreate(BaseModel):
    """
    Schema for user registration.

    Example request body:
    {
        "name": "Alice Reader",
        "email": "alice@example.com",
        "password": "secret123"
    }
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Display name",
        examples=["Alice Reader"],
    )

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["alice@example.com"],
    )

    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Password (min 6 characters)",
        examples=["secret123"],
    )

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty or whitespace")
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class LoginRequest(BaseModel):
    """Schema for login with email and password."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, description="Account password")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserPublic(CamelModel):
    """Public identity embedded wherever a book or review names its owner."""

    id: int = Field(..., description="Unique user identifier", examples=[7])
    name: str = Field(..., description="Display name", examples=["Alice Reader"])


class UserResponse(UserPublic):
    """The caller's own profile. Never includes the password hash."""

    email: EmailStr = Field(..., description="User's email address")
    created_at: datetime = Field(..., description="When the user registered")


class AuthResponse(CamelModel):
    """Returned by register and login."""

    token: str = Field(..., description="JWT access token for the Authorization header")
    token_type: str = Field(default="bearer", description="Always 'bearer'")
    user: UserResponse
