"""
User Model

Represents a registered user. Users own the books they add and the
reviews they write.

SQLAlchemy 2.0 Features Used:
- mapped_column(): New way to define columns with full type support
- Mapped[]: Type hint wrapper for SQLAlchemy columns
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """
    User model representing registered users in the system.

    Table: users

    Indexes:
    - Primary key on id (automatic)
    - email: Unique index for login lookups

    Users are never deleted by the application, so nothing cascades from
    this table.

    Example:
        user = User(
            name="Sarah Johnson",
            email="sarah@example.com",
            hashed_password=hash_password("SecurePass123"),
        )
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Display name shown next to books and reviews"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="User's email address (used for login)"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
        comment="When the user registered"
    )

    def __repr__(self) -> str:
        return f"User(id={self.id}, email='{self.email}', name='{self.name}')"
