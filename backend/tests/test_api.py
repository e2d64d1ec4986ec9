"""
RedSocial Backend — End-to-End API Tests
==========================================

What:  Drive the FastAPI app over HTTP (httpx + ASGITransport) against the
       SQLite test database, the way a client would.

What we test:
    ✅ Register → login → publish → follow → feed
    ✅ Publish → comment → list comments
    ✅ Error kinds map to 400 / 401 / 403 / 404 / 409 with ErrorResponse bodies
    ✅ Public routes accept anonymous callers but reject invalid tokens
    ✅ /auth endpoints require the API gate secret
    ✅ Health check, request ID propagation and the 429 ErrorResponse
    ✅ Timestamps serialize identically on create and on later reads
"""

from datetime import timedelta

import pytest

from app.config import settings
from app.security import create_access_token


# ══════════════════════════════════════════════════════════════════════════
# Registration & Login
# ══════════════════════════════════════════════════════════════════════════

class TestRegistration:

    @pytest.mark.asyncio
    async def test_register_never_exposes_password(self, client):
        response = await client.post(
            "/api/register",
            json={"username": "alice", "email": "a@x.com", "password": "password1", "description": "hi"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["username"] == "alice"
        assert body["description"] == "hi"
        assert "password" not in body
        assert "password_hash" not in body

    @pytest.mark.asyncio
    async def test_duplicate_username_and_email(self, client, make_user):
        await make_user("alice", email="a@x.com")

        same_name = await client.post(
            "/api/register", json={"username": "alice", "email": "new@x.com", "password": "password1"}
        )
        same_email = await client.post(
            "/api/register", json={"username": "alicia", "email": "a@x.com", "password": "password1"}
        )

        for response in (same_name, same_email):
            assert response.status_code == 409
            assert response.json()["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_short_password(self, client):
        response = await client.post(
            "/api/register", json={"username": "alice", "email": "a@x.com", "password": "short"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "password"

    @pytest.mark.asyncio
    async def test_malformed_email_rejected_by_schema(self, client):
        response = await client.post(
            "/api/register", json={"username": "alice", "email": "not-an-email", "password": "password1"}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_login(self, client, make_user):
        await make_user("alice")

        ok = await client.post("/api/login", json={"username": "alice", "password": "s3cret-pass"})
        wrong = await client.post("/api/login", json={"username": "alice", "password": "wrong-pass"})
        unknown = await client.post("/api/login", json={"username": "nobody", "password": "s3cret-pass"})

        assert ok.status_code == 200
        assert ok.json()["token_type"] == "bearer"
        assert "password_hash" not in ok.json()
        assert wrong.status_code == 401
        assert wrong.json()["error"] == "unauthorized"
        assert unknown.status_code == 404


# ══════════════════════════════════════════════════════════════════════════
# Authentication Gate
# ══════════════════════════════════════════════════════════════════════════

class TestAuthentication:

    @pytest.mark.asyncio
    async def test_me_requires_token(self, client):
        response = await client.get("/api/me")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_me_with_token(self, client, make_user):
        alice = await make_user("alice")

        response = await client.get("/api/me", headers=alice.headers)

        assert response.status_code == 200
        assert response.json()["id"] == alice.id

    @pytest.mark.asyncio
    async def test_invalid_and_expired_tokens(self, client, make_user):
        await make_user("alice")
        expired = create_access_token(subject="alice", expires_delta=timedelta(seconds=-10))

        for token in ("garbage", expired):
            response = await client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
            assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_public_routes(self, client, make_user):
        alice = await make_user("alice")

        profile = await client.get("/api/profile/alice")
        publications = await client.get(f"/api/user/{alice.id}/publications")
        bad_token = await client.get("/api/profile/alice", headers={"Authorization": "Bearer garbage"})

        assert profile.status_code == 200
        assert profile.json()["username"] == "alice"
        assert publications.status_code == 200
        assert publications.json() == []
        assert bad_token.status_code == 401

    @pytest.mark.asyncio
    async def test_protected_routes_reject_anonymous(self, client, make_user):
        alice = await make_user("alice")

        for path in ("/api/user/all", f"/api/user/{alice.id}", "/api/publication", f"/api/user/{alice.id}/feed"):
            response = await client.get(path)
            assert response.status_code == 401, path


class TestApiGate:

    @pytest.mark.asyncio
    async def test_gate_requires_secret(self, client):
        payload = {"username": "svc", "email": "svc@example.com", "password": "password1"}

        missing = await client.post("/auth/register", json=payload)
        wrong = await client.post(
            "/auth/register", json=payload, headers={"Authorization": "Bearer wrong"}
        )

        assert missing.status_code == 401
        assert wrong.status_code == 401

    @pytest.mark.asyncio
    async def test_gate_tokens_work_on_api(self, client, gate_headers):
        registered = await client.post(
            "/auth/register",
            json={"username": "svc", "email": "svc@example.com", "password": "password1"},
            headers=gate_headers,
        )
        logged_in = await client.post(
            "/auth/login",
            json={"username": "svc", "password": "password1"},
            headers=gate_headers,
        )

        assert registered.status_code == 200
        assert logged_in.status_code == 200
        assert set(logged_in.json()) == {"access_token", "token_type"}

        me = await client.get(
            "/api/me", headers={"Authorization": f"Bearer {logged_in.json()['access_token']}"}
        )
        assert me.json()["username"] == "svc"


# ══════════════════════════════════════════════════════════════════════════
# Users
# ══════════════════════════════════════════════════════════════════════════

class TestUsers:

    @pytest.mark.asyncio
    async def test_list_and_get(self, client, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")

        everyone = await client.get("/api/user/all", headers=alice.headers)
        one = await client.get(f"/api/user/{bob.id}", headers=alice.headers)
        missing = await client.get("/api/user/9999", headers=alice.headers)

        assert [u["username"] for u in everyone.json()] == ["alice", "bob"]
        assert one.json()["username"] == "bob"
        assert missing.status_code == 404
        assert missing.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_edit_details(self, client, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob", email="b@x.com")

        edited = await client.put(
            f"/api/{alice.id}/edit/details",
            json={"newDescription": "about me"},
            headers=alice.headers,
        )
        taken = await client.put(
            f"/api/{alice.id}/edit/details",
            json={"newEmail": "b@x.com"},
            headers=alice.headers,
        )
        not_mine = await client.put(
            f"/api/{alice.id}/edit/details",
            json={"newDescription": "hacked"},
            headers=bob.headers,
        )

        assert edited.status_code == 200
        assert edited.json() == {"newDescription": "about me"}
        assert taken.status_code == 409
        assert not_mine.status_code == 403
        assert not_mine.json()["error"] == "forbidden"

        profile = await client.get("/api/profile/alice")
        assert profile.json()["description"] == "about me"
        assert profile.json()["email"] == alice.email


# ══════════════════════════════════════════════════════════════════════════
# Follow Graph, Publications & Feed
# ══════════════════════════════════════════════════════════════════════════

class TestFeedScenario:

    @pytest.mark.asyncio
    async def test_bob_sees_alices_publication(self, client, make_user):
        alice = await make_user("alice")
        created = await client.post(
            f"/api/user/{alice.id}/publication", json={"text": "hello"}, headers=alice.headers
        )
        assert created.status_code == 201

        bob = await make_user("bob")
        followed = await client.post(f"/api/user/{bob.id}/follow/{alice.id}", headers=bob.headers)
        assert followed.status_code == 200
        assert followed.json() == {"follower_id": bob.id, "followed_id": alice.id}

        feed = await client.get(f"/api/user/{bob.id}/feed", headers=bob.headers)

        assert feed.status_code == 200
        assert [(p["author_id"], p["text"]) for p in feed.json()] == [(alice.id, "hello")]

    @pytest.mark.asyncio
    async def test_follow_rules(self, client, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")

        first = await client.post(f"/api/user/{bob.id}/follow/{alice.id}", headers=bob.headers)
        second = await client.post(f"/api/user/{bob.id}/follow/{alice.id}", headers=bob.headers)
        impersonated = await client.post(f"/api/user/{alice.id}/follow/{bob.id}", headers=bob.headers)
        unknown = await client.post(f"/api/user/{bob.id}/follow/9999", headers=bob.headers)

        assert first.status_code == 200
        assert second.status_code == 409
        assert impersonated.status_code == 403
        assert unknown.status_code == 404

        followers = await client.get(f"/api/user/{alice.id}/followers", headers=bob.headers)
        following = await client.get(f"/api/user/{bob.id}/following", headers=bob.headers)
        assert [u["username"] for u in followers.json()] == ["bob"]
        assert [u["username"] for u in following.json()] == ["alice"]

    @pytest.mark.asyncio
    async def test_unfollow_is_idempotent(self, client, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        await client.post(f"/api/user/{bob.id}/follow/{alice.id}", headers=bob.headers)

        for _ in range(2):
            response = await client.delete(f"/api/user/{bob.id}/unfollow/{alice.id}", headers=bob.headers)
            assert response.status_code == 204

        followers = await client.get(f"/api/user/{alice.id}/followers", headers=bob.headers)
        assert followers.json() == []

    @pytest.mark.asyncio
    async def test_feed_empty_without_follows(self, client, make_user):
        alice = await make_user("alice")
        await client.post(f"/api/user/{alice.id}/publication", json={"text": "hello"}, headers=alice.headers)

        feed = await client.get(f"/api/user/{alice.id}/feed", headers=alice.headers)

        assert feed.json() == []


class TestPublications:

    @pytest.mark.asyncio
    async def test_only_author_can_edit_or_delete(self, client, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        created = await client.post(
            f"/api/user/{alice.id}/publication", json={"text": "hello"}, headers=alice.headers
        )
        pub_id = created.json()["id"]

        as_bob = await client.put(
            f"/api/user/{bob.id}/publication/{pub_id}", json={"text": "mine"}, headers=bob.headers
        )
        impersonating = await client.put(
            f"/api/user/{alice.id}/publication/{pub_id}", json={"text": "mine"}, headers=bob.headers
        )
        delete_as_bob = await client.delete(f"/api/user/{bob.id}/publication/{pub_id}", headers=bob.headers)

        assert as_bob.status_code == 403
        assert impersonating.status_code == 403
        assert delete_as_bob.status_code == 403

        edited = await client.put(
            f"/api/user/{alice.id}/publication/{pub_id}", json={"text": "hello, edited"}, headers=alice.headers
        )
        assert edited.status_code == 200
        assert edited.json()["text"] == "hello, edited"

        missing = await client.put(
            f"/api/user/{alice.id}/publication/9999", json={"text": "x"}, headers=alice.headers
        )
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_list_and_get(self, client, make_user):
        alice = await make_user("alice")
        for text in ("first", "second"):
            await client.post(f"/api/user/{alice.id}/publication", json={"text": text}, headers=alice.headers)

        listed = await client.get("/api/publication", headers=alice.headers)
        by_author = await client.get(f"/api/user/{alice.id}/publications")
        single = await client.get(f"/api/publication/{listed.json()[0]['id']}", headers=alice.headers)
        unknown_author = await client.get("/api/user/9999/publications")

        assert [p["text"] for p in listed.json()] == ["second", "first"]
        assert [p["text"] for p in by_author.json()] == ["second", "first"]
        assert single.json()["text"] == "second"
        assert unknown_author.status_code == 404

    @pytest.mark.asyncio
    async def test_timestamps_identical_on_write_and_read(self, client, make_user):
        alice = await make_user("alice")
        created = await client.post(
            f"/api/user/{alice.id}/publication", json={"text": "hello"}, headers=alice.headers
        )
        pub_id = created.json()["id"]

        fetched = await client.get(f"/api/publication/{pub_id}", headers=alice.headers)
        listed = await client.get(f"/api/user/{alice.id}/publications")

        for field in ("created_at", "edited_at"):
            assert fetched.json()[field] == created.json()[field]
            assert listed.json()[0][field] == created.json()[field]
        assert created.json()["created_at"].endswith("Z")

    @pytest.mark.asyncio
    async def test_empty_text_rejected(self, client, make_user):
        alice = await make_user("alice")

        response = await client.post(
            f"/api/user/{alice.id}/publication", json={"text": ""}, headers=alice.headers
        )

        assert response.status_code == 422


class TestCommentScenario:

    @pytest.mark.asyncio
    async def test_bob_comments_nice(self, client, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        created = await client.post(
            f"/api/user/{alice.id}/publication", json={"text": "P"}, headers=alice.headers
        )
        pub_id = created.json()["id"]

        comment = await client.post(
            f"/api/publication/{pub_id}/comments/user/{bob.id}", json={"text": "nice"}, headers=bob.headers
        )
        listed = await client.get(f"/api/publication/{pub_id}/comments", headers=alice.headers)

        assert comment.status_code == 200
        assert [(c["user_id"], c["text"]) for c in listed.json()] == [(bob.id, "nice")]

    @pytest.mark.asyncio
    async def test_delete_publication_removes_comments(self, client, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        created = await client.post(
            f"/api/user/{alice.id}/publication", json={"text": "P"}, headers=alice.headers
        )
        pub_id = created.json()["id"]
        await client.post(
            f"/api/publication/{pub_id}/comments/user/{bob.id}", json={"text": "nice"}, headers=bob.headers
        )

        deleted = await client.delete(f"/api/user/{alice.id}/publication/{pub_id}", headers=alice.headers)

        assert deleted.status_code == 204
        gone = await client.get(f"/api/publication/{pub_id}", headers=alice.headers)
        comments = await client.get(f"/api/publication/{pub_id}/comments", headers=alice.headers)
        assert gone.status_code == 404
        assert comments.json() == []

    @pytest.mark.asyncio
    async def test_comment_rules(self, client, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        created = await client.post(
            f"/api/user/{alice.id}/publication", json={"text": "P"}, headers=alice.headers
        )
        pub_id = created.json()["id"]

        as_alice = await client.post(
            f"/api/publication/{pub_id}/comments/user/{alice.id}", json={"text": "fake"}, headers=bob.headers
        )
        missing_pub = await client.post(
            f"/api/publication/9999/comments/user/{bob.id}", json={"text": "nice"}, headers=bob.headers
        )

        assert as_alice.status_code == 403
        assert missing_pub.status_code == 404


# ══════════════════════════════════════════════════════════════════════════
# Operational Surface
# ══════════════════════════════════════════════════════════════════════════

class TestOperational:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client):
        generated = await client.get("/api/profile/nobody")
        supplied = await client.get("/api/profile/nobody", headers={"X-Request-ID": "trace-123"})

        assert generated.headers["X-Request-ID"]
        assert supplied.headers["X-Request-ID"] == "trace-123"
        assert supplied.json()["request_id"] == "trace-123"

    @pytest.mark.asyncio
    async def test_rate_limited_response_is_an_error_response(self, client, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_requests", 2)

        responses = [
            await client.get("/api/profile/nobody", headers={"X-Request-ID": "trace-429"})
            for _ in range(3)
        ]

        limited = responses[-1]
        assert limited.status_code == 429
        assert limited.headers["Retry-After"]
        assert limited.headers["X-Request-ID"] == "trace-429"
        body = limited.json()
        assert body["error"] == "rate_limit_exceeded"
        assert body["request_id"] == "trace-429"
        assert body["details"]["retry_after"] >= 1
