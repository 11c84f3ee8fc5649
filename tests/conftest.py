"""
Shared fixtures: an in-memory database per test, a TestClient wired to it,
and helpers to seed users and fake outbound HTTP.
"""
from datetime import datetime, timedelta
import secrets

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from resumesync.database import Base, get_db
from resumesync.deps import get_http_client, get_sync_locks
from resumesync.main import app
from resumesync.models import Account, AuthSession, User
from resumesync.services.github import SyncLocks


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def client(session_factory):
    def _override_get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    locks = SyncLocks()
    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_sync_locks] = lambda: locks
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create a user with a live session; returns (user, auth headers)."""
    def _make(name="Ada", username="ada", github_token="gho_test"):
        user = User(name=name, username=username, email=f"{name.lower()}@example.com")
        db.add(user); db.commit(); db.refresh(user)
        if github_token is not None:
            db.add(Account(user_id=user.id, provider="github",
                           provider_account_id=str(user.id), access_token=github_token))
        token = secrets.token_hex(8)
        db.add(AuthSession(session_token=token, user_id=user.id,
                           expires=datetime.utcnow() + timedelta(days=1)))
        db.commit()
        return user, {"Authorization": f"Bearer {token}"}
    return _make


@pytest.fixture
def fake_http():
    """Route every outbound httpx call through `handler`; returns the list of seen requests."""
    seen = []

    def _install(handler):
        def _recording(request: httpx.Request):
            seen.append(request)
            return handler(request)

        async def _client():
            async with httpx.AsyncClient(transport=httpx.MockTransport(_recording)) as c:
                yield c

        app.dependency_overrides[get_http_client] = _client
        return seen
    return _install


def github_event(i: int, type_: str = "PushEvent", repo: str = "ada/engine"):
    return {
        "id": str(1000 + i),
        "type": type_,
        "actor": {"login": "ada"},
        "repo": {"id": 1, "name": repo, "url": f"https://api.github.com/repos/{repo}"},
        "payload": {"commits": [{"message": f"commit {i}"}]},
        "public": True,
        "created_at": f"2026-10-0{(i % 9) + 1}T12:00:00Z",
    }
