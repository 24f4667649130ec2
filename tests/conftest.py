"""
Pytest configuration and shared fixtures for Support Chat testing.
"""

import os

# Must be set before the app modules build their engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import json
from typing import Any, Dict, Generator, List

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.core.security import create_access_token, hash_password
from app.core.webhooks import WebhookManager, WebhookRegistry, get_webhook_manager
from app.core.webhooks.models import WebhookCreate
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.user import User, UserRole


class RecordingTransport:
    """
    Fake receiver for outbound webhook calls.

    Responses are looked up by URL; unknown URLs answer 200. A response
    entry may be an exception instance, which is raised as a transport
    failure.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responses: Dict[str, Any] = {}

    def respond(self, url: str, status_code: int = 200, text: str = "ok"):
        self.responses[url] = (status_code, text)

    def fail(self, url: str, error: Exception):
        self.responses[url] = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses.get(str(request.url), (200, "ok"))
        if isinstance(outcome, Exception):
            raise outcome
        status_code, text = outcome
        return httpx.Response(status_code, text=text)

    def bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]


@pytest.fixture
def engine():
    """In-memory SQLite shared across connections for one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def registry(db_session) -> WebhookRegistry:
    return WebhookRegistry(db_session)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def webhook_manager(transport, session_factory) -> WebhookManager:
    client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
    return WebhookManager(client=client, session_factory=session_factory)


@pytest.fixture
def make_webhook(registry):
    """Factory creating webhooks with sensible defaults."""
    def _make(**overrides):
        data = {
            "name": "CRM",
            "url": "https://hooks.example.com/crm",
            "auth_type": "none",
            "events": ["conversation.created"],
        }
        data.update(overrides)
        return registry.create_webhook(WebhookCreate(**data))
    return _make


def _make_user(db: Session, email: str, role: UserRole) -> User:
    user = User(
        email=email,
        display_name=email.split("@")[0].title(),
        hashed_password=hash_password("Secret123"),
        role=role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session) -> User:
    return _make_user(db_session, "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def attendant_user(db_session) -> User:
    return _make_user(db_session, "attendant@example.com", UserRole.ATTENDANT)


@pytest.fixture
def admin_headers(admin_user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(admin_user.id, admin_user.role)}"}


@pytest.fixture
def attendant_headers(attendant_user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(attendant_user.id, attendant_user.role)}"}


@pytest.fixture
def test_client(db_session, webhook_manager) -> Generator[TestClient, None, None]:
    """Create a test client with database and webhook manager overrides."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_webhook_manager] = lambda: webhook_manager

    yield TestClient(app)

    # Clean up overrides
    app.dependency_overrides.clear()
