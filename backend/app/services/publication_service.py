"""
RedSocial Backend — Publication Service (Publication Store)
=============================================================

What:  Create, edit, delete and list publications, and build feeds.
Who:   Called by the publications routes; CommentService uses
       require_publication() to validate comment targets.

Ownership:
    Mutations carry two checks. The caller must be the author named in the
    path, and the publication must belong to that author. Either failing
    raises ForbiddenError; a publication that does not exist at all is
    NotFoundError.

Ordering:
    Every listing is newest first (created_at DESC, id DESC). The id tie
    break keeps the order stable when timestamps collide.

Cascade:
    delete() removes the publication's comments first, in the same
    transaction, then the publication itself.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, ForbiddenError, NotFoundError
from app.models.comment import Comment
from app.models.publication import Publication
from app.schemas.auth import Identity
from app.schemas.publication import PublicationResponse
from app.services.follow_service import follow_service
from app.services.permissions import ensure_acting_user
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

_NEWEST_FIRST = (Publication.created_at.desc(), Publication.id.desc())


class PublicationService:
    """
    Business logic for publications.

    Responsibilities:
        - create() / edit() / delete(): author-only mutations
        - get_by_id() / list_all() / list_by_author(): reads
        - feed_for(): publications by everyone a user follows
    """

    async def require_publication(self, db: AsyncSession, publication_id: int) -> Publication:
        result = await db.execute(select(Publication).where(Publication.id == publication_id))
        publication = result.scalar_one_or_none()
        if publication is None:
            raise NotFoundError(resource="publication", resource_id=publication_id)
        return publication

    async def _require_owned(
        self,
        db: AsyncSession,
        actor: Identity,
        author_id: int,
        publication_id: int,
        action: str,
    ) -> Publication:
        ensure_acting_user(actor, author_id, action)
        publication = await self.require_publication(db, publication_id)
        if publication.author_id != author_id:
            logger.warning(
                "User %d tried to %s publication %d owned by user %d",
                author_id, action, publication_id, publication.author_id,
            )
            raise ForbiddenError(
                message=f"Not allowed to {action} another user's publication",
                context={"publication_id": publication_id},
            )
        return publication

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create(
        self,
        db: AsyncSession,
        actor: Identity,
        author_id: int,
        text: str,
        image_url: Optional[str] = None,
    ) -> PublicationResponse:
        """
        Publish a new post for `author_id`.

        Raises:
            ForbiddenError: caller is not `author_id`
            NotFoundError: author does not exist
        """
        ensure_acting_user(actor, author_id, "publish")
        await user_service.require_user(db, author_id)

        now = datetime.now(timezone.utc)
        publication = Publication(
            author_id=author_id,
            text=text,
            image_url=image_url,
            created_at=now,
            edited_at=now,
        )

        try:
            db.add(publication)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating publication for user %d: %s", author_id, str(e))
            raise DatabaseError(
                message="Could not save the publication. Please try again.",
                context={"author_id": author_id},
            ) from e

        logger.info("Publication created: id=%d author=%d", publication.id, author_id)
        return PublicationResponse.model_validate(publication)

    async def edit(
        self,
        db: AsyncSession,
        actor: Identity,
        author_id: int,
        publication_id: int,
        text: str,
    ) -> PublicationResponse:
        """Replace the text of an owned publication and refresh edited_at."""
        publication = await self._require_owned(db, actor, author_id, publication_id, "edit")

        publication.text = text
        publication.edited_at = datetime.now(timezone.utc)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error editing publication %d: %s", publication_id, str(e))
            raise DatabaseError(
                message="Could not update the publication. Please try again.",
                context={"publication_id": publication_id},
            ) from e

        logger.info("Publication edited: id=%d", publication_id)
        return PublicationResponse.model_validate(publication)

    async def delete(
        self,
        db: AsyncSession,
        actor: Identity,
        author_id: int,
        publication_id: int,
    ) -> None:
        """Delete an owned publication together with all of its comments."""
        publication = await self._require_owned(db, actor, author_id, publication_id, "delete")

        try:
            result = await db.execute(
                delete(Comment).where(Comment.publication_id == publication_id)
            )
            await db.delete(publication)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting publication %d: %s", publication_id, str(e))
            raise DatabaseError(
                message="Could not delete the publication. Please try again.",
                context={"publication_id": publication_id},
            ) from e

        logger.info(
            "Publication deleted: id=%d (%d comments removed)",
            publication_id,
            result.rowcount or 0,
        )

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_by_id(self, db: AsyncSession, publication_id: int) -> PublicationResponse:
        publication = await self.require_publication(db, publication_id)
        return PublicationResponse.model_validate(publication)

    async def list_all(self, db: AsyncSession) -> List[PublicationResponse]:
        result = await db.execute(select(Publication).order_by(*_NEWEST_FIRST))
        return [PublicationResponse.model_validate(p) for p in result.scalars().all()]

    async def list_by_author(self, db: AsyncSession, author_id: int) -> List[PublicationResponse]:
        await user_service.require_user(db, author_id)
        result = await db.execute(
            select(Publication)
            .where(Publication.author_id == author_id)
            .order_by(*_NEWEST_FIRST)
        )
        return [PublicationResponse.model_validate(p) for p in result.scalars().all()]

    async def feed_for(self, db: AsyncSession, user_id: int) -> List[PublicationResponse]:
        """
        Publications authored by the users `user_id` follows, newest first.

        A user following nobody gets an empty feed. The user's own posts
        appear only if they follow themselves.
        """
        await user_service.require_user(db, user_id)
        followed_ids = await follow_service.following_ids(db, user_id)
        if not followed_ids:
            return []

        result = await db.execute(
            select(Publication)
            .where(Publication.author_id.in_(followed_ids))
            .order_by(*_NEWEST_FIRST)
        )
        return [PublicationResponse.model_validate(p) for p in result.scalars().all()]


# ── Singleton Instance ────────────────────────────────────────────────────
publication_service = PublicationService()
