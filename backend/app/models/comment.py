"""
RedSocial Backend — Comment SQLAlchemy Model
==============================================

What:  ORM model for the `comments` table.
How:   publication_id carries ON DELETE CASCADE; PublicationService also
       deletes comments explicitly before the publication so the cascade
       does not depend on the backend enforcing foreign keys (SQLite).
"""

from datetime import datetime, timezone

from sqlalchemy import ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UTCDateTime


class Comment(Base):
    """A comment on a publication; immutable once created."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Author of the comment",
    )
    publication_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("publications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Publication the comment belongs to",
    )

    text: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, publication_id={self.publication_id})>"
