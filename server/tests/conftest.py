import sqlite3
from datetime import date
from typing import List, Optional

import jwt
import pytest
from fastapi.testclient import TestClient

from chronochat.config import get_settings
from chronochat.db.session import reset_engine
from chronochat.main import create_app
from chronochat.providers.base import Generation, GenerationConfig, Turn
from chronochat.providers.router import get_provider

JWT_SECRET = "test-jwt-secret-0123456789abcdef-0123456789"


class FakeProvider:
    id = "fake"

    def __init__(self, text: str = "Hi! How can I help?", tokens: int = 42, error: Optional[Exception] = None) -> None:
        self.text = text
        self.tokens = tokens
        self.error = error
        self.calls: List[tuple] = []

    async def generate(self, turns: List[Turn], config: GenerationConfig) -> Generation:
        self.calls.append((turns, config))
        if self.error is not None:
            raise self.error
        return Generation(text=self.text, tokens_used=self.tokens)


def _reset_caches() -> None:
    get_settings.cache_clear()
    get_provider.cache_clear()
    reset_engine()


@pytest.fixture()
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "chronochat.sqlite3"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{path}")
    monkeypatch.setenv("AUTH_JWT_SECRET", JWT_SECRET)
    for var in (
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "AUTH_JWT_AUDIENCE",
        "HISTORY_LIMIT",
        "ENFORCE_BOOST_BALANCE",
        "FAIL_ON_USER_MESSAGE_WRITE",
    ):
        monkeypatch.delenv(var, raising=False)
    _reset_caches()
    yield path
    _reset_caches()


@pytest.fixture()
def configure(monkeypatch):
    """Set environment-backed settings mid-test."""

    def _configure(**env: str) -> None:
        for key, value in env.items():
            monkeypatch.setenv(key.upper(), value)
        get_settings.cache_clear()

    return _configure


@pytest.fixture()
def provider():
    return FakeProvider()


@pytest.fixture()
def client(db_path, provider):
    app = create_app()
    app.dependency_overrides[get_provider] = lambda: provider
    with TestClient(app) as c:
        yield c


def make_token(user_id: str, **claims) -> str:
    payload = {"sub": user_id, "aud": "authenticated", **claims}
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


@pytest.fixture()
def auth_headers():
    def _headers(user_id: str = "user-1") -> dict:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers


@pytest.fixture()
def new_conversation(client, auth_headers):
    def _create(user_id: str = "user-1", title: str = "New Conversation") -> str:
        resp = client.post("/api/v1/conversations", json={"title": title}, headers=auth_headers(user_id))
        assert resp.status_code == 201
        return resp.json()["id"]

    return _create


@pytest.fixture()
def seed_ledger(db_path):
    """Write a ledger row directly, the way an earlier session would have left it."""

    def _seed(user_id: str = "user-1", total: int = 0, spent: int = 0, streak: int = 0,
              last_activity: Optional[date] = None) -> None:
        with sqlite3.connect(db_path) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO user_points"
                "(user_id,total_points,points_spent,current_streak,last_activity_date) VALUES (?,?,?,?,?)",
                (user_id, total, spent, streak, last_activity.isoformat() if last_activity else None),
            )
            conn.commit()

    return _seed
