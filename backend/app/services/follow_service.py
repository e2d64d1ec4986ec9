"""
RedSocial Backend — Follow Service (Follow Graph)
===================================================

What:  Directed "follower -> followed" edges between users.
Who:   Called by the follows routes; PublicationService.feed_for() reads
       following_ids() to build a user's feed.

Rules:
    - The caller must be the follower (ForbiddenError otherwise)
    - At most one edge per ordered pair (pre-check + UNIQUE constraint)
    - Self-follow is accepted unless ALLOW_SELF_FOLLOW=false
    - unfollow() is idempotent: removing a missing edge is not an error
"""

import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import ConflictError, DatabaseError, ValidationError
from app.models.follow import Follow
from app.models.user import User
from app.schemas.auth import Identity
from app.schemas.user import UserResponse
from app.services.permissions import ensure_acting_user
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


class FollowService:
    """Creates, removes and lists follow relationships."""

    async def follow(
        self,
        db: AsyncSession,
        actor: Identity,
        follower_id: int,
        followed_id: int,
    ) -> None:
        """
        Record that `follower_id` follows `followed_id`.

        Raises:
            ForbiddenError: caller is not `follower_id`
            ValidationError: self-follow while ALLOW_SELF_FOLLOW is off
            NotFoundError: either user does not exist
            ConflictError: the edge already exists
        """
        ensure_acting_user(actor, follower_id, "follow users")

        if follower_id == followed_id and not settings.allow_self_follow:
            raise ValidationError(message="Users cannot follow themselves", field="id")

        await user_service.require_user(db, follower_id)
        await user_service.require_user(db, followed_id)

        try:
            result = await db.execute(
                select(Follow.id).where(
                    Follow.follower_id == follower_id,
                    Follow.followed_id == followed_id,
                )
            )
            if result.scalar_one_or_none() is not None:
                raise ConflictError(
                    message="Already following this user",
                    context={"follower_id": follower_id, "followed_id": followed_id},
                )

            db.add(Follow(follower_id=follower_id, followed_id=followed_id))
            await db.flush()

        except IntegrityError as e:
            raise ConflictError(
                message="Already following this user",
                context={"follower_id": follower_id, "followed_id": followed_id},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating follow %d->%d: %s", follower_id, followed_id, str(e))
            raise DatabaseError(message="Could not follow the user. Please try again.") from e

        logger.info("User %d now follows user %d", follower_id, followed_id)

    async def unfollow(
        self,
        db: AsyncSession,
        actor: Identity,
        follower_id: int,
        followed_id: int,
    ) -> None:
        """Remove the edge if present. Missing edges are ignored."""
        ensure_acting_user(actor, follower_id, "unfollow users")

        try:
            result = await db.execute(
                delete(Follow).where(
                    Follow.follower_id == follower_id,
                    Follow.followed_id == followed_id,
                )
            )
        except SQLAlchemyError as e:
            logger.error("Database error removing follow %d->%d: %s", follower_id, followed_id, str(e))
            raise DatabaseError(message="Could not unfollow the user. Please try again.") from e

        if result.rowcount:
            logger.info("User %d unfollowed user %d", follower_id, followed_id)
        else:
            logger.debug("Unfollow %d->%d: no such edge", follower_id, followed_id)

    async def followers_of(self, db: AsyncSession, user_id: int) -> List[UserResponse]:
        """Users that follow `user_id`, in the order they followed."""
        await user_service.require_user(db, user_id)
        result = await db.execute(
            select(User)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.followed_id == user_id)
            .order_by(Follow.created_at, Follow.id)
        )
        return [UserResponse.model_validate(u) for u in result.scalars().all()]

    async def following_of(self, db: AsyncSession, user_id: int) -> List[UserResponse]:
        """Users that `user_id` follows, in the order they were followed."""
        await user_service.require_user(db, user_id)
        result = await db.execute(
            select(User)
            .join(Follow, Follow.followed_id == User.id)
            .where(Follow.follower_id == user_id)
            .order_by(Follow.created_at, Follow.id)
        )
        return [UserResponse.model_validate(u) for u in result.scalars().all()]

    async def following_ids(self, db: AsyncSession, user_id: int) -> List[int]:
        result = await db.execute(
            select(Follow.followed_id).where(Follow.follower_id == user_id)
        )
        return list(result.scalars().all())


# ── Singleton Instance ────────────────────────────────────────────────────
follow_service = FollowService()
