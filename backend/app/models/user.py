"""
RedSocial Backend — User SQLAlchemy Model
===========================================

What:  ORM model representing the `users` table.
Who:   Used by UserService for registration, lookups and profile edits,
       and by AuthService to resolve token subjects.

Table Design:
    - Integer surrogate primary key: referenced by follows, publications, comments
    - username / email: UNIQUE constraints are the source of truth for
      uniqueness; service pre-checks only produce friendlier messages
    - password_hash: bcrypt hash, never serialized (UserResponse has no such field)
    - created_at: UTC with timezone
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UTCDateTime


class User(Base):
    """
    A registered account.

    Lifecycle:
        1. Created on registration (/api/register or /auth/register)
        2. Description and email mutated through PUT /api/{id}/edit/details
        3. Never hard-deleted
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ── Identity ──────────────────────────────────────────────────────────
    username: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
        comment="Public handle, unique across all users",
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Contact email, unique across all users",
    )

    # ── Credentials ───────────────────────────────────────────────────────
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the password; the raw value is never stored",
    )

    # ── Profile ───────────────────────────────────────────────────────────
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
        comment="Free-text profile description",
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When the account was registered (UTC)",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
