"""
RedSocial Backend — Publication SQLAlchemy Model
==================================================

What:  ORM model representing the `publications` table (user posts).
Who:   Used by PublicationService and, for existence checks, CommentService.

Table Design:
    - author_id: FK to users; only the author may edit or delete
    - image_url: optional reference to an externally hosted image
    - created_at / edited_at: edited_at moves on every edit, created_at never does

Index on (author_id, created_at):
    Serves both "publications by user" and the feed query
    (WHERE author_id IN (...) ORDER BY created_at DESC).
"""

from datetime import datetime, timezone

from sqlalchemy import ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UTCDateTime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Publication(Base):
    """
    A post authored by a user.

    Lifecycle:
        1. Created by its author (created_at == edited_at)
        2. Text edited only by its author (edited_at refreshed)
        3. Deleted only by its author; its comments are deleted in the same transaction
    """

    __tablename__ = "publications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Author of the publication",
    )

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Body of the publication",
    )

    image_url: Mapped[str | None] = mapped_column(
        String(512),
        nullable=True,
        default=None,
        comment="Optional image reference",
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
        comment="When the publication was created (UTC)",
    )
    edited_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
        comment="When the publication text was last changed (UTC)",
    )

    __table_args__ = (
        Index("idx_publications_author_created", "author_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Publication(id={self.id}, author_id={self.author_id})>"
