"""
RedSocial Backend — Follow SQLAlchemy Model
=============================================

What:  ORM model for the `follows` table: one row per directed edge
       "follower follows followed".

Constraints:
    uq_follows_pair (follower_id, followed_id):
        At most one edge per ordered pair. Two concurrent follow requests
        that both pass FollowService's existence check still cannot both
        insert; the loser gets an IntegrityError, surfaced as ConflictError.
    ON DELETE CASCADE on both foreign keys: edges disappear with their users.
"""

from datetime import datetime, timezone

from sqlalchemy import ForeignKey, Integer, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UTCDateTime


class Follow(Base):
    """A directed follow edge between two users."""

    __tablename__ = "follows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    follower_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="User who follows",
    )
    followed_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="User being followed",
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("follower_id", "followed_id", name="uq_follows_pair"),
    )

    def __repr__(self) -> str:
        return f"<Follow({self.follower_id} -> {self.followed_id})>"
