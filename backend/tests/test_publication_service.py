"""
RedSocial Backend — Publication & Comment Service Unit Tests
==============================================================

What we test:
    ✅ Create / edit / delete restricted to the author
    ✅ Edit refreshes edited_at and keeps created_at
    ✅ Deleting a publication deletes its comments
    ✅ Listings newest first; feed == publications of followed users
    ✅ Comments: oldest first, unknown publication → []
"""

from datetime import timedelta

import pytest

from app.exceptions import ForbiddenError, NotFoundError
from app.schemas.auth import Identity
from app.services.comment_service import CommentService
from app.services.follow_service import follow_service
from app.services.publication_service import PublicationService
from app.services.user_service import user_service


async def _register(db, username):
    user = await user_service.register(
        db, username=username, email=f"{username}@example.com", password="password1"
    )
    return Identity(user_id=user.id, username=username)


class TestPublicationMutations:

    def setup_method(self):
        self.service = PublicationService()

    @pytest.mark.asyncio
    async def test_create(self, db_session):
        alice = await _register(db_session, "alice")

        publication = await self.service.create(
            db_session, alice, alice.user_id, text="hello", image_url="https://img.example.com/1.png"
        )

        assert publication.author_id == alice.user_id
        assert publication.text == "hello"
        assert publication.image_url == "https://img.example.com/1.png"
        assert publication.created_at == publication.edited_at

    @pytest.mark.asyncio
    async def test_create_for_someone_else_forbidden(self, db_session):
        alice = await _register(db_session, "alice")
        bob = await _register(db_session, "bob")

        with pytest.raises(ForbiddenError):
            await self.service.create(db_session, bob, alice.user_id, text="hello")

    @pytest.mark.asyncio
    async def test_edit_updates_text_and_edited_at(self, db_session):
        alice = await _register(db_session, "alice")
        created = await self.service.create(db_session, alice, alice.user_id, text="hello")

        edited = await self.service.edit(db_session, alice, alice.user_id, created.id, text="hello again")

        assert edited.text == "hello again"
        assert edited.created_at == created.created_at
        assert edited.edited_at >= created.edited_at

    @pytest.mark.asyncio
    async def test_reloaded_timestamps_stay_utc(self, db_session):
        alice = await _register(db_session, "alice")
        created = await self.service.create(db_session, alice, alice.user_id, text="hello")
        db_session.expunge_all()

        reloaded = await self.service.get_by_id(db_session, created.id)

        assert reloaded.created_at.tzinfo is not None
        assert reloaded.created_at.utcoffset() == timedelta(0)
        assert reloaded.created_at == created.created_at

    @pytest.mark.asyncio
    async def test_edit_by_non_author_forbidden(self, db_session):
        alice = await _register(db_session, "alice")
        bob = await _register(db_session, "bob")
        created = await self.service.create(db_session, alice, alice.user_id, text="hello")

        # bob acting as himself on alice's publication
        with pytest.raises(ForbiddenError):
            await self.service.edit(db_session, bob, bob.user_id, created.id, text="mine now")
        # bob claiming to be alice
        with pytest.raises(ForbiddenError):
            await self.service.edit(db_session, bob, alice.user_id, created.id, text="mine now")

    @pytest.mark.asyncio
    async def test_edit_missing_publication(self, db_session):
        alice = await _register(db_session, "alice")

        with pytest.raises(NotFoundError):
            await self.service.edit(db_session, alice, alice.user_id, 9999, text="x")

    @pytest.mark.asyncio
    async def test_delete_by_non_author_forbidden(self, db_session):
        alice = await _register(db_session, "alice")
        bob = await _register(db_session, "bob")
        created = await self.service.create(db_session, alice, alice.user_id, text="hello")

        with pytest.raises(ForbiddenError):
            await self.service.delete(db_session, bob, bob.user_id, created.id)

        assert (await self.service.get_by_id(db_session, created.id)).text == "hello"

    @pytest.mark.asyncio
    async def test_delete_cascades_to_comments(self, db_session):
        alice = await _register(db_session, "alice")
        bob = await _register(db_session, "bob")
        created = await self.service.create(db_session, alice, alice.user_id, text="hello")
        comments = CommentService()
        await comments.add(db_session, bob, bob.user_id, created.id, text="nice")
        await comments.add(db_session, alice, alice.user_id, created.id, text="thanks")

        await self.service.delete(db_session, alice, alice.user_id, created.id)

        with pytest.raises(NotFoundError):
            await self.service.get_by_id(db_session, created.id)
        assert await comments.list_by_publication(db_session, created.id) == []


class TestPublicationReads:

    def setup_method(self):
        self.service = PublicationService()

    @pytest.mark.asyncio
    async def test_list_by_author_newest_first(self, db_session):
        alice = await _register(db_session, "alice")
        bob = await _register(db_session, "bob")
        await self.service.create(db_session, alice, alice.user_id, text="first")
        await self.service.create(db_session, alice, alice.user_id, text="second")
        await self.service.create(db_session, bob, bob.user_id, text="bob's")

        by_alice = await self.service.list_by_author(db_session, alice.user_id)
        everything = await self.service.list_all(db_session)

        assert [p.text for p in by_alice] == ["second", "first"]
        assert [p.text for p in everything] == ["bob's", "second", "first"]

    @pytest.mark.asyncio
    async def test_list_by_unknown_author(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.list_by_author(db_session, 9999)

    @pytest.mark.asyncio
    async def test_feed_is_publications_of_followed_users(self, db_session):
        alice = await _register(db_session, "alice")
        bob = await _register(db_session, "bob")
        carol = await _register(db_session, "carol")
        await self.service.create(db_session, alice, alice.user_id, text="from alice")
        await self.service.create(db_session, carol, carol.user_id, text="from carol")
        await self.service.create(db_session, bob, bob.user_id, text="from bob")

        assert await self.service.feed_for(db_session, bob.user_id) == []

        await follow_service.follow(db_session, bob, bob.user_id, alice.user_id)
        await follow_service.follow(db_session, bob, bob.user_id, carol.user_id)
        feed = await self.service.feed_for(db_session, bob.user_id)

        assert [p.text for p in feed] == ["from carol", "from alice"]

    @pytest.mark.asyncio
    async def test_feed_includes_own_posts_only_with_self_follow(self, db_session):
        alice = await _register(db_session, "alice")
        await self.service.create(db_session, alice, alice.user_id, text="mine")

        assert await self.service.feed_for(db_session, alice.user_id) == []

        await follow_service.follow(db_session, alice, alice.user_id, alice.user_id)
        assert [p.text for p in await self.service.feed_for(db_session, alice.user_id)] == ["mine"]


class TestComments:

    def setup_method(self):
        self.service = CommentService()

    @pytest.mark.asyncio
    async def test_comments_oldest_first(self, db_session):
        alice = await _register(db_session, "alice")
        bob = await _register(db_session, "bob")
        publication = await PublicationService().create(db_session, alice, alice.user_id, text="hello")

        await self.service.add(db_session, bob, bob.user_id, publication.id, text="nice")
        await self.service.add(db_session, alice, alice.user_id, publication.id, text="thanks")

        comments = await self.service.list_by_publication(db_session, publication.id)
        assert [(c.user_id, c.text) for c in comments] == [(bob.user_id, "nice"), (alice.user_id, "thanks")]

    @pytest.mark.asyncio
    async def test_comment_on_missing_publication(self, db_session):
        bob = await _register(db_session, "bob")

        with pytest.raises(NotFoundError):
            await self.service.add(db_session, bob, bob.user_id, 9999, text="nice")

    @pytest.mark.asyncio
    async def test_comment_as_someone_else_forbidden(self, db_session):
        alice = await _register(db_session, "alice")
        bob = await _register(db_session, "bob")
        publication = await PublicationService().create(db_session, alice, alice.user_id, text="hello")

        with pytest.raises(ForbiddenError):
            await self.service.add(db_session, bob, alice.user_id, publication.id, text="nice")

    @pytest.mark.asyncio
    async def test_unknown_publication_has_no_comments(self, db_session):
        assert await self.service.list_by_publication(db_session, 9999) == []
