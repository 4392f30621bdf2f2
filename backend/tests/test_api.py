"""
Murmur Backend — API Endpoint Tests
=====================================

What:  Exercises every route through the real app against a temporary
       SQLite database: status codes, response shapes, auth gate behavior,
       and the register → login → post → follow → feed flow.
"""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from murmur.services.feed_service import MAX_OFFSET


class TestWelcomeRoutes:

    @pytest.mark.asyncio
    async def test_root(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert "message" in response.json()

    @pytest.mark.asyncio
    async def test_api_root(self, test_client):
        response = await test_client.get("/api")
        assert response.status_code == 200
        assert response.json()["message"] == "API running successfully"

    @pytest.mark.asyncio
    async def test_health_reports_database(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/api", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_public_identity(self, test_client):
        response = await test_client.post(
            "/api/register", json={"username": "alice", "password": "pw1"}
        )
        assert response.status_code == 201
        body = response.json()
        assert body["username"] == "alice"
        assert isinstance(body["id"], int)
        assert set(body) == {"id", "username"}

    @pytest.mark.asyncio
    async def test_duplicate_username_conflicts(self, test_client):
        first = await test_client.post(
            "/api/register", json={"username": "alice", "password": "pw1"}
        )
        second = await test_client.post(
            "/api/register", json={"username": "alice", "password": "other"}
        )
        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error"] == "conflict"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [{}, {"username": "alice"}, {"password": "pw1"}, {"username": "", "password": "pw1"}],
    )
    async def test_missing_fields_rejected(self, test_client, body):
        response = await test_client.post("/api/register", json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input"

    @pytest.mark.asyncio
    async def test_malformed_json_rejected(self, test_client):
        response = await test_client.post(
            "/api/register",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input"


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_returns_token(self, test_client, register_user):
        await register_user("alice", "pw1")
        response = await test_client.post(
            "/api/login", json={"username": "alice", "password": "pw1"}
        )
        assert response.status_code == 200
        assert response.json()["token"]

    @pytest.mark.asyncio
    async def test_unknown_user_and_wrong_password_look_the_same(self, test_client, register_user):
        await register_user("alice", "pw1")
        unknown = await test_client.post(
            "/api/login", json={"username": "nobody", "password": "pw1"}
        )
        wrong = await test_client.post(
            "/api/login", json={"username": "alice", "password": "nope"}
        )
        assert unknown.status_code == 401
        assert wrong.status_code == 401
        assert unknown.json()["message"] == wrong.json()["message"]


class TestTokenGuard:

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, test_client):
        response = await test_client.get("/api/feed")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_bearer_without_token_is_401(self, test_client):
        response = await test_client.get("/api/feed", headers={"Authorization": "Bearer "})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_bearer_scheme_is_401(self, test_client):
        response = await test_client.get("/api/feed", headers={"Authorization": "Token abc"})
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_malformed_token_is_403(self, test_client):
        response = await test_client.post(
            "/api/posts",
            json={"content": "hi"},
            headers={"Authorization": "Bearer not.a.jwt"},
        )
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    @pytest.mark.asyncio
    async def test_expired_token_is_403(self, app, test_client, register_user):
        user_id = await register_user("alice", "pw1")
        expired = app.state.tokens.issue(user_id, "alice", expires_delta=timedelta(seconds=-10))
        response = await test_client.get(
            "/api/feed", headers={"Authorization": f"Bearer {expired}"}
        )
        assert response.status_code == 403


class TestPosts:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("length", [1, 200])
    async def test_boundary_lengths_accepted(self, test_client, register_user, login_headers, length):
        user_id = await register_user("alice", "pw1")
        headers = await login_headers("alice", "pw1")
        response = await test_client.post(
            "/api/posts", json={"content": "x" * length}, headers=headers
        )
        assert response.status_code == 201
        body = response.json()
        assert body["userid"] == user_id
        assert body["content"] == "x" * length
        assert set(body) == {"id", "userid", "content", "createdat"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"content": ""}, {"content": "x" * 201}, {}])
    async def test_invalid_length_rejected(self, test_client, register_user, login_headers, body):
        await register_user("alice", "pw1")
        headers = await login_headers("alice", "pw1")
        response = await test_client.post("/api/posts", json=body, headers=headers)
        assert response.status_code == 422
        assert response.json()["error"] == "unprocessable_entity"


class TestFollow:

    @pytest.mark.asyncio
    async def test_self_follow_rejected(self, test_client, register_user, login_headers):
        alice = await register_user("alice", "pw1")
        headers = await login_headers("alice", "pw1")
        response = await test_client.post(f"/api/follow/{alice}", headers=headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_follow_unknown_user(self, test_client, register_user, login_headers):
        await register_user("alice", "pw1")
        headers = await login_headers("alice", "pw1")
        response = await test_client.post("/api/follow/9999", headers=headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_duplicate_follow_conflicts(self, test_client, register_user, login_headers):
        await register_user("alice", "pw1")
        bob = await register_user("bob", "pw2")
        headers = await login_headers("alice", "pw1")
        first = await test_client.post(f"/api/follow/{bob}", headers=headers)
        second = await test_client.post(f"/api/follow/{bob}", headers=headers)
        assert first.status_code == 200
        assert first.json()["message"] == f"You are now following user {bob}"
        assert second.status_code == 409

    @pytest.mark.asyncio
    async def test_follow_then_unfollow(self, test_client, register_user, login_headers):
        await register_user("alice", "pw1")
        bob = await register_user("bob", "pw2")
        headers = await login_headers("alice", "pw1")

        assert (await test_client.post(f"/api/follow/{bob}", headers=headers)).status_code == 200
        removed = await test_client.delete(f"/api/follow/{bob}", headers=headers)
        assert removed.status_code == 200
        assert removed.json()["message"] == f"You unfollowed user {bob}"

        # Edge is gone: a second unfollow finds nothing
        again = await test_client.delete(f"/api/follow/{bob}", headers=headers)
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_user_id_beyond_column_range_is_404(self, test_client, register_user, login_headers):
        await register_user("alice", "pw1")
        headers = await login_headers("alice", "pw1")
        followed = await test_client.post("/api/follow/99999999999999999999", headers=headers)
        removed = await test_client.delete("/api/follow/99999999999999999999", headers=headers)
        assert followed.status_code == 404
        assert removed.status_code == 404

    @pytest.mark.asyncio
    async def test_non_integer_user_id(self, test_client, register_user, login_headers):
        await register_user("alice", "pw1")
        headers = await login_headers("alice", "pw1")
        response = await test_client.post("/api/follow/abc", headers=headers)
        assert response.status_code == 400


class TestFeed:

    @pytest.mark.asyncio
    async def test_empty_feed(self, test_client, register_user, login_headers):
        await register_user("alice", "pw1")
        headers = await login_headers("alice", "pw1")
        response = await test_client.get("/api/feed", headers=headers)
        assert response.status_code == 200
        body = response.json()
        assert body["page"] == 1
        assert body["posts"] == []

    @pytest.mark.asyncio
    async def test_pagination_is_disjoint_and_newest_first(self, test_client, register_user, login_headers):
        await register_user("alice", "pw1")
        bob = await register_user("bob", "pw2")
        alice_headers = await login_headers("alice", "pw1")
        bob_headers = await login_headers("bob", "pw2")

        for i in range(7):
            response = await test_client.post(
                "/api/posts", json={"content": f"post {i}"}, headers=bob_headers
            )
            assert response.status_code == 201
        await test_client.post(f"/api/follow/{bob}", headers=alice_headers)

        page1 = (await test_client.get("/api/feed?page=1&limit=5", headers=alice_headers)).json()
        page2 = (await test_client.get("/api/feed?page=2&limit=5", headers=alice_headers)).json()

        ids1 = [p["id"] for p in page1["posts"]]
        ids2 = [p["id"] for p in page2["posts"]]
        assert len(ids1) == 5
        assert len(ids2) == 2
        assert not set(ids1) & set(ids2)

        combined = page1["posts"] + page2["posts"]
        assert [p["content"] for p in combined] == [f"post {i}" for i in reversed(range(7))]
        timestamps = [p["createdat"] for p in combined]
        assert timestamps == sorted(timestamps, reverse=True)

    @pytest.mark.asyncio
    async def test_non_numeric_paging_falls_back_to_defaults(self, test_client, register_user, login_headers):
        await register_user("alice", "pw1")
        headers = await login_headers("alice", "pw1")
        response = await test_client.get("/api/feed?page=abc&limit=xyz", headers=headers)
        assert response.status_code == 200
        assert response.json()["page"] == 1
        assert response.json()["limit"] == 10

    @pytest.mark.asyncio
    async def test_limit_is_capped(self, test_client, register_user, login_headers):
        await register_user("alice", "pw1")
        headers = await login_headers("alice", "pw1")
        response = await test_client.get("/api/feed?limit=100000", headers=headers)
        assert response.json()["limit"] == 100

    @pytest.mark.asyncio
    async def test_huge_page_is_clamped_not_an_error(self, test_client, register_user, login_headers):
        await register_user("alice", "pw1")
        bob = await register_user("bob", "pw2")
        alice_headers = await login_headers("alice", "pw1")
        bob_headers = await login_headers("bob", "pw2")
        await test_client.post("/api/posts", json={"content": "hello"}, headers=bob_headers)
        await test_client.post(f"/api/follow/{bob}", headers=alice_headers)

        response = await test_client.get(
            "/api/feed?page=99999999999999999999&limit=10", headers=alice_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["page"] == MAX_OFFSET // 100 + 1
        assert body["posts"] == []

    @pytest.mark.asyncio
    async def test_unfollowed_authors_are_excluded(self, test_client, register_user, login_headers):
        await register_user("alice", "pw1")
        await register_user("carol", "pw3")
        carol_headers = await login_headers("carol", "pw3")
        alice_headers = await login_headers("alice", "pw1")
        await test_client.post("/api/posts", json={"content": "unseen"}, headers=carol_headers)

        response = await test_client.get("/api/feed", headers=alice_headers)
        assert response.json()["posts"] == []


class TestEndToEnd:

    @pytest.mark.asyncio
    async def test_alice_sees_bobs_post(self, test_client, register_user, login_headers):
        await register_user("alice", "pw1")
        bob = await register_user("bob", "pw2")
        alice_headers = await login_headers("alice", "pw1")
        bob_headers = await login_headers("bob", "pw2")

        created = await test_client.post("/api/posts", json={"content": "hello"}, headers=bob_headers)
        assert created.status_code == 201

        followed = await test_client.post(f"/api/follow/{bob}", headers=alice_headers)
        assert followed.status_code == 200

        feed = await test_client.get("/api/feed?page=1&limit=10", headers=alice_headers)
        assert feed.status_code == 200
        posts = feed.json()["posts"]
        assert len(posts) == 1
        assert posts[0]["content"] == "hello"
        assert posts[0]["username"] == "bob"
        assert posts[0]["userid"] == bob


class TestStoreTimeout:

    @pytest.mark.asyncio
    async def test_stalled_store_returns_503(self, app, test_client, register_user, login_headers, monkeypatch):
        await register_user("alice", "pw1")
        headers = await login_headers("alice", "pw1")

        async def stalled_execute(self, *args, **kwargs):
            await asyncio.sleep(5)

        monkeypatch.setattr(AsyncSession, "execute", stalled_execute)
        monkeypatch.setattr(app.state.database, "timeout", 0.05)

        response = await test_client.get("/api/feed", headers=headers)
        assert response.status_code == 503
        assert response.headers["Retry-After"] == "1"
        assert response.json()["error"] == "service_unavailable"
