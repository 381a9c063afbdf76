"""Tool handlers for MCP server."""

from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from ...clients.jira_client import JiraClient
from ...utils.errors import ValidationError, error_to_result
from ...utils.logger import ToolCallLogger
from ..tools import get_tool_schema
from . import agile, auth, bulk, collaboration, filters, issues, metadata, worklogs
from .base import Confirmation, JiraHandler, SessionHandler, create_session, get_session, set_session

__all__ = ["dispatch_tool", "create_session", "get_session", "set_session"]

SESSION_HANDLERS: dict[str, SessionHandler] = auth.HANDLERS

JIRA_HANDLERS: dict[str, JiraHandler] = {
    **issues.HANDLERS,
    **worklogs.HANDLERS,
    **metadata.HANDLERS,
    **agile.HANDLERS,
    **collaboration.HANDLERS,
    **filters.HANDLERS,
    **bulk.HANDLERS,
}

CONFIRMATIONS: dict[str, Confirmation] = {
    **issues.CONFIRMATIONS,
    **agile.CONFIRMATIONS,
    **collaboration.CONFIRMATIONS,
    **filters.CONFIRMATIONS,
}


def validate_arguments(schema: dict[str, Any], arguments: dict[str, Any]) -> None:
    """Check arguments against a tool's input schema.

    Only the offending argument path and the violated constraint are
    reported; argument values never appear in the message.

    Raises:
        ValidationError: On the first violation found.
    """
    validator = Draft202012Validator(schema, format_checker=Draft202012Validator.FORMAT_CHECKER)
    error = best_match(validator.iter_errors(arguments))
    if error is None:
        return

    if error.validator == "required":
        raise ValidationError(error.message)

    path = ".".join(str(part) for part in error.absolute_path) or "arguments"
    raise ValidationError(f"Invalid value for '{path}' ({error.validator} {error.validator_value})")


async def dispatch_tool(name: str, arguments: dict[str, Any] | None) -> Any:
    """Dispatch a tool call to the appropriate handler.

    Every failure after the tool is identified comes back as an error payload
    instead of an exception.

    Args:
        name: Tool name.
        arguments: Tool arguments.

    Returns:
        Tool result, or ``{"error": kind, "message": ...}`` on failure.

    Raises:
        ValueError: If tool name is unknown.
    """
    schema = get_tool_schema(name)
    if schema is None or (name not in SESSION_HANDLERS and name not in JIRA_HANDLERS):
        raise ValueError(f"Unknown tool: {name}")

    arguments = arguments or {}
    tool_logger = ToolCallLogger(name)
    tool_logger.call(arguments)

    try:
        validate_arguments(schema["inputSchema"], arguments)
        session = get_session()

        if name in SESSION_HANDLERS:
            return await SESSION_HANDLERS[name](session, arguments)

        if name in CONFIRMATIONS:
            CONFIRMATIONS[name].check(arguments)

        credential = await session.resolve()
        async with JiraClient(credential, timeout=session.settings().http_timeout) as client:
            return await JIRA_HANDLERS[name](client, arguments)
    except Exception as e:
        result = error_to_result(e)
        if result["error"] == "unknown":
            tool_logger.error("failed with an unexpected error", exc=e)
        else:
            tool_logger.warning(f"failed with {result['error']}")
        return result
