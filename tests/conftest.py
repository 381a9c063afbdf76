"""Pytest configuration and fixtures."""

import functools
import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import httpx
import pytest
from keyring.errors import PasswordDeleteError

import jira_mcp.mcp.handlers
from jira_mcp.auth.jira_auth import JiraOAuth
from jira_mcp.auth.session import SessionManager
from jira_mcp.auth.token_store import CredentialStore
from jira_mcp.clients.jira_client import JiraClient
from jira_mcp.config import JiraSettings
from jira_mcp.mcp.handlers import set_session

JIRA_ENV_VARS = [
    "JIRA_BASE_URL",
    "JIRA_EMAIL",
    "JIRA_API_TOKEN",
    "JIRA_OAUTH_CLIENT_ID",
    "JIRA_OAUTH_CLIENT_SECRET",
    "JIRA_OAUTH_ACCESS_TOKEN",
    "JIRA_OAUTH_REFRESH_TOKEN",
    "JIRA_CLOUD_ID",
    "JIRA_ACCEPTANCE_CRITERIA_FIELD",
    "JIRA_MCP_LOG_LEVEL",
    "JIRA_MCP_HTTP_TIMEOUT",
]

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


class FakeVault:
    """In-memory stand-in for the keyring module."""

    def __init__(self):
        self.entries: dict[tuple[str, str], str] = {}

    def get_password(self, service_name: str, username: str) -> str | None:
        return self.entries.get((service_name, username))

    def set_password(self, service_name: str, username: str, password: str) -> None:
        self.entries[(service_name, username)] = password

    def delete_password(self, service_name: str, username: str) -> None:
        if (service_name, username) not in self.entries:
            raise PasswordDeleteError("Password not found")
        del self.entries[(service_name, username)]


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


Responder = Callable[[httpx.Request], httpx.Response]


class RecordingTransport:
    """Routes requests by (method, path) and records every request sent.

    Unrouted requests get a 404 so a test never silently hits the network.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], Responder] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status_code: int = 200, json: Any = None, **kwargs: Any) -> None:
        self.routes[(method, path)] = lambda request: httpx.Response(status_code, json=json, **kwargs)

    def add_handler(self, method: str, path: str, responder: Responder) -> None:
        self.routes[(method, path)] = responder

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self.routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, json={"errorMessages": ["Not routed"]})
        return responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate every test from real JIRA_* variables and any local .env file."""
    for name in JIRA_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def basic_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Basic auth credentials in the environment."""
    monkeypatch.setenv("JIRA_BASE_URL", "https://acme.atlassian.net")
    monkeypatch.setenv("JIRA_EMAIL", "a@acme.com")
    monkeypatch.setenv("JIRA_API_TOKEN", "T")


@pytest.fixture
def oauth_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """OAuth credentials in the environment."""
    monkeypatch.setenv("JIRA_OAUTH_CLIENT_ID", "env-client")
    monkeypatch.setenv("JIRA_OAUTH_CLIENT_SECRET", "env-secret")
    monkeypatch.setenv("JIRA_OAUTH_ACCESS_TOKEN", "env-access")
    monkeypatch.setenv("JIRA_CLOUD_ID", "env-cloud")


@pytest.fixture
def vault() -> FakeVault:
    return FakeVault()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def oauth_server() -> RecordingTransport:
    """Mock Atlassian auth endpoints (token and accessible-resources)."""
    return RecordingTransport()


@pytest.fixture
def jira_server() -> RecordingTransport:
    """Mock Jira REST API."""
    return RecordingTransport()


@pytest.fixture
def session(vault: FakeVault, clock: FakeClock, oauth_server: RecordingTransport) -> SessionManager:
    """Session with a fake keyring, mock OAuth endpoints and a fixed clock."""
    return SessionManager(
        store=CredentialStore(vault=vault),
        oauth=JiraOAuth(transport=oauth_server.transport),
        settings_factory=lambda: JiraSettings(_env_file=None),
        clock=clock,
    )


@pytest.fixture
def active_session(
    session: SessionManager,
    jira_server: RecordingTransport,
    monkeypatch: pytest.MonkeyPatch,
):
    """Install ``session`` for dispatch_tool, with Jira calls going to ``jira_server``."""
    monkeypatch.setattr(
        jira_mcp.mcp.handlers,
        "JiraClient",
        functools.partial(JiraClient, transport=jira_server.transport),
    )
    set_session(session)
    yield session
    set_session(None)
