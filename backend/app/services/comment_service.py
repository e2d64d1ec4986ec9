"""
RedSocial Backend — Comment Service (Comment Store)
=====================================================

What:  Add comments to publications and list them.
Who:   Called by the comments routes.

Comments are immutable: there is no edit, and they disappear only when
their publication is deleted (see PublicationService.delete).
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError
from app.models.comment import Comment
from app.schemas.auth import Identity
from app.schemas.comment import CommentResponse
from app.services.permissions import ensure_acting_user
from app.services.publication_service import publication_service
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


class CommentService:

    async def add(
        self,
        db: AsyncSession,
        actor: Identity,
        user_id: int,
        publication_id: int,
        text: str,
    ) -> CommentResponse:
        """
        Comment on a publication as `user_id`.

        Raises:
            ForbiddenError: caller is not `user_id`
            NotFoundError: the user or the publication does not exist
        """
        ensure_acting_user(actor, user_id, "comment")
        await user_service.require_user(db, user_id)
        await publication_service.require_publication(db, publication_id)

        comment = Comment(user_id=user_id, publication_id=publication_id, text=text)
        try:
            db.add(comment)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error adding comment to publication %d: %s", publication_id, str(e))
            raise DatabaseError(
                message="Could not save the comment. Please try again.",
                context={"publication_id": publication_id},
            ) from e

        logger.info("Comment %d added to publication %d by user %d", comment.id, publication_id, user_id)
        return CommentResponse.model_validate(comment)

    async def list_by_publication(self, db: AsyncSession, publication_id: int) -> List[CommentResponse]:
        """Comments on a publication, oldest first. Unknown ids yield []."""
        result = await db.execute(
            select(Comment)
            .where(Comment.publication_id == publication_id)
            .order_by(Comment.created_at, Comment.id)
        )
        return [CommentResponse.model_validate(c) for c in result.scalars().all()]


# ── Singleton Instance ────────────────────────────────────────────────────
comment_service = CommentService()
