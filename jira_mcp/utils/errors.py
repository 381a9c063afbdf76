"""Error types for Jira MCP tool calls.

Every failure a tool can report is one of the classes below. Handlers raise
them; the dispatcher turns them into ``{"error": kind, "message": ...}``
payloads with :func:`error_to_result`, so no exception escapes a tool call.

Messages must never contain access tokens, API tokens or client secrets.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class JiraMCPError(Exception):
    """Base exception for all Jira MCP errors."""

    kind = "unknown"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ):
        """Initialize error.

        Args:
            message: Human-readable error message.
            details: Diagnostic details kept for logging (status code, body).
            context: Extra keys merged into the tool result payload.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.context = context or {}

    def __str__(self) -> str:
        return self.message

    def to_result(self) -> dict[str, Any]:
        """Render the error as a tool result payload."""
        return {"error": self.kind, "message": self.message, **self.context}


class MissingAuthError(JiraMCPError):
    """No credential source resolved."""

    kind = "unauthorized"

    def __init__(self, message: str = "Jira credentials are missing. Provide credentials explicitly to authenticate."):
        super().__init__(message)


class UnauthorizedError(JiraMCPError):
    """Jira rejected the credential (HTTP 401)."""

    kind = "unauthorized"


class ForbiddenError(JiraMCPError):
    """Credential valid but lacks permission (HTTP 403)."""

    kind = "forbidden"


class NotFoundError(JiraMCPError):
    """Resource absent or not visible to this identity (HTTP 404)."""

    kind = "not_found"


class RateLimitedError(JiraMCPError):
    """Jira rate limit exceeded (HTTP 429). Not retried here."""

    kind = "rate_limited"


class ServerError(JiraMCPError):
    """Jira returned a 5xx response."""

    kind = "server_error"


class JiraAPIError(JiraMCPError):
    """Any other non-success HTTP status from Jira."""

    kind = "jira_error"


class ValidationError(JiraMCPError):
    """Tool input failed its declared constraints."""

    kind = "invalid_input"


class ConfirmationRequiredError(JiraMCPError):
    """A destructive tool was called without its confirmation flag."""

    kind = "confirmation_required"


class PersistenceUnavailableError(JiraMCPError):
    """Durable storage was requested but no secret vault is available."""

    kind = "persistence_unavailable"

    def __init__(
        self,
        message: str = "OS secret storage is not available to persist credentials. "
        "Credentials were loaded for this session only.",
    ):
        super().__init__(message)


class ToolError(JiraMCPError):
    """Semantic failure reported by a specific tool (no_changes, invalid_auth_type, ...)."""

    def __init__(self, kind: str, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, context=context)
        self.kind = kind


def _unauthorized_message(auth_type: str | None) -> str:
    if auth_type == "oauth":
        return (
            "Jira rejected the OAuth access token. The token may have expired; "
            "refresh it with jira_oauth_refresh or re-run the OAuth flow."
        )
    if auth_type == "basic":
        return (
            "Jira rejected the email/API token. Check the credentials or issue a new API token."
        )
    return "Jira credentials are missing or invalid. If using OAuth, the token may have expired."


def raise_for_http_status(status_code: int, response_text: str, auth_type: str | None = None) -> None:
    """Raise the error class matching an HTTP failure status.

    Args:
        status_code: HTTP status code.
        response_text: Response body text (never the request).
        auth_type: "basic" or "oauth" when known, to tailor 401 guidance.

    Raises:
        JiraMCPError: Always, as the subclass matching ``status_code``.
    """
    details = {"status_code": status_code, "response": response_text}

    if status_code == 401:
        raise UnauthorizedError(_unauthorized_message(auth_type), details=details)
    if status_code == 403:
        raise ForbiddenError("You do not have permission to access this Jira resource.", details=details)
    if status_code == 404:
        raise NotFoundError("The Jira resource does not exist or is not visible.", details=details)
    if status_code == 429:
        raise RateLimitedError("Jira rate limit exceeded. Please retry later.", details=details)
    if status_code >= 500:
        raise ServerError("Jira server error. Please retry later.", details=details)

    detail = response_text or "no response body"
    raise JiraAPIError(f"Jira API error ({status_code}): {detail}", details=details)


def error_to_result(error: BaseException) -> dict[str, Any]:
    """Convert any exception into a structured tool error payload.

    Args:
        error: Exception raised while handling a tool call.

    Returns:
        Dict with ``error`` (kind) and ``message`` keys.
    """
    if isinstance(error, JiraMCPError):
        if error.details:
            logger.debug(f"{type(error).__name__}: {error.details}")
        return error.to_result()

    logger.exception("Unexpected error in tool call", exc_info=error)
    return {"error": "unknown", "message": str(error) or "Unknown error"}
