# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up test environment variables before any imports
# - Gives every API test a fresh in-memory store, metrics and sink
# - Helpers to register users and build Authorization headers
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ["STORE_BACKEND"] = "memory"
os.environ["ENVIRONMENT"] = "development"
os.environ["ALERTS_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789")
os.environ.setdefault("DEBUG", "false")

from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from core.alerts import AlertNotifier, AlertThresholds
from core.metrics import MetricsRecorder
from core.services.token_service import TokenService
from lib.memory_store import InMemoryStore
from lib.observability import ObservabilitySink, SafeSink
from lib.security import PasswordHasher

TEST_SECRET = "test-secret-key-0123456789"
DEFAULT_PASSWORD = "Passw0rd"


class RecordingSink(ObservabilitySink):
    """Keeps every event in memory so tests can assert on them."""

    def __init__(self):
        self.breadcrumbs: list[dict[str, Any]] = []
        self.exceptions: list[BaseException] = []
        self.messages: list[str] = []

    def add_breadcrumb(self, category, message, level="info", data=None):
        self.breadcrumbs.append(
            {"category": category, "message": message, "level": level, "data": data or {}}
        )

    def capture_exception(self, exc, tags=None):
        self.exceptions.append(exc)

    def capture_message(self, message, level="info", tags=None, extra=None):
        self.messages.append(message)


# =============================================================================
# Core Fixtures
# =============================================================================

@pytest.fixture
def store() -> InMemoryStore:
    """Empty in-memory document store."""
    return InMemoryStore()


@pytest.fixture
def metrics() -> MetricsRecorder:
    return MetricsRecorder()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def sink(recording_sink) -> SafeSink:
    return SafeSink(recording_sink)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret=TEST_SECRET)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(["pbkdf2_sha256"])


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def app(store, metrics, sink, tokens, hasher):
    """The FastAPI app wired to fresh test resources."""
    from app.main import app as fastapi_app

    state = fastapi_app.state
    saved = dict(state._state)

    state.store = store
    state.metrics = metrics
    state.sink = sink
    state.tokens = tokens
    state.hasher = hasher
    state.notifier = AlertNotifier(metrics, AlertThresholds(), dispatch=None, sink=sink)
    state.rate_limiter = None

    yield fastapi_app

    state._state.clear()
    state._state.update(saved)
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """Test client (lifespan not started, so no background reset task)."""
    return TestClient(app)


@pytest.fixture
def register_user(client) -> Callable[..., dict[str, Any]]:
    """
    Register a user through the API.

    Returns the response body: {"success", "message", "token", "user"}.
    """

    def _register(email: str = "alice@example.com", password: str = DEFAULT_PASSWORD) -> dict[str, Any]:
        response = client.post("/api/auth/register", json={"email": email, "password": password})
        assert response.status_code == 201, response.text
        return response.json()

    return _register


def bearer(token: str) -> dict[str, str]:
    """Authorization header for a token."""
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(register_user) -> dict[str, Any]:
    """A registered user with ready-made auth headers."""
    body = register_user("alice@example.com")
    return {"id": body["user"]["id"], "token": body["token"], "headers": bearer(body["token"])}


@pytest.fixture
def bob(register_user) -> dict[str, Any]:
    body = register_user("bob@example.com")
    return {"id": body["user"]["id"], "token": body["token"], "headers": bearer(body["token"])}
