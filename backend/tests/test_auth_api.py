"""API tests for registration, login and the bearer token gate."""

from sqlalchemy import func, select

from devterminal.core.config import get_settings
from devterminal.core.security import TokenSigner
from devterminal.models.user import User


class TestRegister:
    def test_register_returns_token_and_user(self, client):
        response = client.post("/api/auth/register", json={"username": "alice", "password": "pw1"})
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["username"] == "alice"
        assert isinstance(data["user"]["id"], int)
        assert TokenSigner(get_settings()).verify(data["token"]) == data["user"]["id"]

    def test_password_is_stored_hashed(self, client, db):
        client.post("/api/auth/register", json={"username": "alice", "password": "pw1"})
        user = db.execute(select(User).where(User.username == "alice")).scalar_one()
        assert user.password_hash != "pw1"

    def test_duplicate_username_rejected_without_second_row(self, client, db):
        first = client.post("/api/auth/register", json={"username": "alice", "password": "pw1"})
        second = client.post("/api/auth/register", json={"username": "alice", "password": "other"})

        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json() == {"message": "Username already exists"}
        count = db.execute(select(func.count()).select_from(User).where(User.username == "alice")).scalar_one()
        assert count == 1

    def test_missing_password_is_a_bad_request(self, client):
        response = client.post("/api/auth/register", json={"username": "alice"})
        assert response.status_code == 400
        assert "password" in response.json()["message"]


class TestLogin:
    def test_login_with_correct_password(self, client, register):
        user_id, _ = register("alice", "pw1")
        response = client.post("/api/auth/login", json={"username": "alice", "password": "pw1"})
        assert response.status_code == 200
        assert response.json()["user"] == {"id": user_id, "username": "alice"}

    def test_wrong_password_and_unknown_user_look_identical(self, client, register):
        register("alice", "pw1")
        wrong_password = client.post("/api/auth/login", json={"username": "alice", "password": "nope"})
        unknown_user = client.post("/api/auth/login", json={"username": "mallory", "password": "pw1"})

        assert wrong_password.status_code == unknown_user.status_code == 400
        assert wrong_password.json() == unknown_user.json() == {"message": "Invalid credentials"}

    def test_login_token_opens_protected_routes(self, client, register):
        register("alice", "pw1")
        token = client.post("/api/auth/login", json={"username": "alice", "password": "pw1"}).json()["token"]
        response = client.get("/api/posts/feed", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200


class TestAuthGate:
    def test_missing_header_is_401(self, client):
        response = client.get("/api/posts/feed")
        assert response.status_code == 401
        assert response.json() == {"message": "Access denied. No token provided."}

    def test_scheme_without_token_is_401(self, client):
        response = client.get("/api/posts/feed", headers={"Authorization": "Bearer"})
        assert response.status_code == 401

    def test_invalid_token_is_403(self, client):
        response = client.get("/api/posts/feed", headers={"Authorization": "Bearer not-a-real-token"})
        assert response.status_code == 403
        assert response.json() == {"message": "Invalid token"}

    def test_token_signed_with_other_key_is_403(self, client, register):
        user_id, _ = register("alice")
        forged = TokenSigner(get_settings().model_copy(update={"secret_key": "guessed"})).issue(user_id)
        response = client.get("/api/posts/feed", headers={"Authorization": f"Bearer {forged}"})
        assert response.status_code == 403

    def test_every_protected_route_is_gated(self, client):
        for method, path in [
            ("POST", "/api/posts"),
            ("GET", "/api/posts/feed"),
            ("POST", "/api/posts/1/like"),
            ("POST", "/api/users/follow/1"),
            ("GET", "/api/users/profile/alice"),
        ]:
            response = client.request(method, path, json={"content": "x"} if path == "/api/posts" else None)
            assert response.status_code == 401, (method, path)


def test_health_needs_no_token(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
