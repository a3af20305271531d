import asyncio

from mobile_order import LoginResult
from security import decrypt_token, encrypt_token
from services import users_service


class FakeLoginClient:
    def __init__(self, identity):
        self.identity = identity
        self.closed = False

    def login(self):
        return LoginResult(user_id="42", session_id="1700000000000", login_token="LT-1")

    def close(self):
        self.closed = True


def test_login_stores_encrypted_token(monkeypatch):
    stored = []
    clients = []

    def fake_open_session(identity):
        client = FakeLoginClient(identity)
        clients.append(client)
        return client

    monkeypatch.setattr(users_service, "open_session", fake_open_session)
    monkeypatch.setattr(users_service, "upsert_user", stored.append)

    response = asyncio.run(users_service.login("jdoe", "hunter2"))

    assert response.user_id == "42"
    assert response.email == "jdoe@scu.edu"
    assert clients[0].identity.username == "jdoe"
    assert clients[0].closed
    record = stored[0]
    assert record["login_token_encrypted"] != "LT-1"
    assert decrypt_token(record["login_token_encrypted"]) == "LT-1"
    assert "password" not in record


def _row(session_id="1700000000000"):
    return {
        "user_id": "42",
        "name": "jdoe",
        "email": "jdoe@scu.edu",
        "session_id": session_id,
        "login_token_encrypted": encrypt_token("LT-1"),
        "is_active": True,
    }


def test_authenticate_accepts_matching_session(monkeypatch):
    monkeypatch.setattr(users_service, "fetch_active_user", lambda user_id: _row())

    user = asyncio.run(users_service.authenticate("42", "LT-1", "1700000000000"))

    assert user is not None
    assert user.token.login_token == "LT-1"
    assert user.token.session_id == "1700000000000"


def test_authenticate_rejects_wrong_token_or_session(monkeypatch):
    monkeypatch.setattr(users_service, "fetch_active_user", lambda user_id: _row())

    assert asyncio.run(users_service.authenticate("42", "LT-2", "1700000000000")) is None
    assert asyncio.run(users_service.authenticate("42", "LT-1", "other")) is None


def test_authenticate_rejects_inactive_user(monkeypatch):
    monkeypatch.setattr(users_service, "fetch_active_user", lambda user_id: None)

    assert asyncio.run(users_service.authenticate("42", "LT-1", "1700000000000")) is None
