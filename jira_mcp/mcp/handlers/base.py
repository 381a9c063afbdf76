"""Shared plumbing for tool handlers: the session and confirmation checks."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from ...auth.jira_auth import JiraOAuth
from ...auth.session import SessionManager
from ...auth.token_store import CredentialStore
from ...clients.jira_client import JiraClient
from ...config import JiraSettings, get_settings
from ...utils.errors import ConfirmationRequiredError

JiraHandler = Callable[[JiraClient, dict[str, Any]], Awaitable[Any]]
SessionHandler = Callable[[SessionManager, dict[str, Any]], Awaitable[Any]]

_session: SessionManager | None = None


def create_session(settings: JiraSettings | None = None) -> SessionManager:
    """Build a session backed by the system keyring (when available)."""
    settings = settings or get_settings()
    return SessionManager(
        store=CredentialStore.from_system(),
        oauth=JiraOAuth(timeout=settings.http_timeout),
    )


def get_session() -> SessionManager:
    """Get the process-wide session, creating it on first use."""
    global _session
    if _session is None:
        _session = create_session()
    return _session


def set_session(session: SessionManager | None) -> None:
    """Replace the process-wide session (None resets to lazy creation)."""
    global _session
    _session = session


def current_settings() -> JiraSettings:
    """Settings as the active session sees them."""
    return get_session().settings()


@dataclass(frozen=True)
class Confirmation:
    """Confirmation flag a destructive tool must receive before doing anything.

    Attributes:
        flag: Argument that must be true.
        message: Refusal message.
        context_key: Output key echoing the target identifier.
        argument: Input argument holding the target identifier.
    """

    flag: str
    message: str
    context_key: str
    argument: str

    def check(self, arguments: dict[str, Any]) -> None:
        """Raise ConfirmationRequiredError unless the flag is true."""
        if arguments.get(self.flag) is not True:
            raise ConfirmationRequiredError(
                self.message,
                context={self.context_key: arguments.get(self.argument)},
            )


def join_list(values: list[Any] | None) -> str | None:
    """Comma-join an optional list for use as a query parameter."""
    if not values:
        return None
    return ",".join(str(value) for value in values)
