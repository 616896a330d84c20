"""Tests for the JSON auth endpoints."""
from manavault.models import User


def test_register_logs_in(client):
    resp = client.post("/auth/register", json={
        "username": "alice", "email": "Alice@Example.com", "password": "password123",
    })
    assert resp.status_code == 201
    assert resp.get_json()["user"]["email"] == "alice@example.com"

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.get_json()["user"]["username"] == "alice"


def test_register_hashes_password(client):
    client.post("/auth/register", json={
        "username": "alice", "email": "alice@example.com", "password": "password123",
    })
    user = User.query.filter_by(username="alice").one()
    assert user.password_hash != "password123"
    assert user.check_password("password123")
    assert not user.check_password("wrong-password")


def test_register_rejects_duplicates(client, make_user):
    make_user("alice")
    resp = client.post("/auth/register", json={
        "username": "Alice", "email": "new@example.com", "password": "password123",
    })
    assert resp.status_code == 409


def test_register_validates_fields(client):
    resp = client.post("/auth/register", json={
        "username": "a", "email": "not-an-email", "password": "short",
    })
    assert resp.status_code == 400
    fields = resp.get_json()["fields"]
    assert {"username", "email", "password"} <= set(fields)


def test_login_with_email(client, make_user):
    make_user("alice")
    resp = client.post("/auth/login", json={"login": "alice@example.com", "password": "password123"})
    assert resp.status_code == 200
    assert User.query.filter_by(username="alice").one().last_login is not None


def test_login_bad_password(client, make_user):
    make_user("alice")
    resp = client.post("/auth/login", json={"login": "alice", "password": "nope-nope"})
    assert resp.status_code == 401


def test_me_requires_login(client):
    resp = client.get("/auth/me")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Unauthorized"


def test_logout(client, login):
    login()
    assert client.post("/auth/logout").get_json() == {"success": True}


def test_csrf_token_endpoint(client):
    resp = client.get("/auth/csrf-token")
    assert resp.status_code == 200
    assert resp.get_json()["csrf_token"]


class TestProfile:

    def test_profile_counts(self, client, login):
        login()
        client.post("/api/collections", json={"name": "Modern"})
        client.post("/api/collections", json={"name": "Binder"})
        client.post("/api/decks", json={"name": "Burn", "format": "Modern"})

        resp = client.get("/api/user/profile")

        assert resp.status_code == 200
        user = resp.get_json()["user"]
        assert user["username"] == "alice"
        assert user["language"] == "en"
        assert user["collection_count"] == 2
        assert user["deck_count"] == 1

    def test_update_name_and_language(self, client, login):
        login()
        resp = client.patch("/api/user/profile", json={"name": "Alice L.", "language": "fr"})

        assert resp.status_code == 200
        user = User.query.filter_by(username="alice").one()
        assert (user.display_name, user.language) == ("Alice L.", "fr")

    def test_update_leaves_missing_fields(self, client, login):
        login()
        client.patch("/api/user/profile", json={"name": "Alice", "language": "de"})

        client.patch("/api/user/profile", json={"language": "ja"})

        user = User.query.filter_by(username="alice").one()
        assert (user.display_name, user.language) == ("Alice", "ja")

    def test_invalid_language(self, client, login):
        login()
        resp = client.patch("/api/user/profile", json={"language": "xx"})
        assert resp.status_code == 400
        assert "language" in resp.get_json()["fields"]

    def test_requires_login(self, client):
        assert client.get("/api/user/profile").status_code == 401
