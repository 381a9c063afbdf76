"""Bulk operation tool handlers.

Jira runs bulk operations asynchronously and hands back a task ID; progress
is polled with ``jira_get_bulk_operation_progress``.
"""

from typing import Any

from ...clients.jira_client import API, JiraClient, path_param
from .base import JiraHandler

PROGRESS_HINT = "Use jira_get_bulk_operation_progress with taskId to track progress."


async def bulk_edit_issues(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issues = arguments["issueIdsOrKeys"]
    data = await client.post(
        f"{API}/bulk/issues/fields",
        json={
            "issueIdsOrKeys": issues,
            "editedFieldsInput": arguments["editedFieldsInput"],
            "sendNotifications": arguments.get("sendNotifications", True),
        },
    )
    return {
        "success": True,
        "taskId": data.get("taskId"),
        "message": f"Bulk edit initiated for {len(issues)} issues. {PROGRESS_HINT}",
    }


async def _bulk_watchers(client: JiraClient, arguments: dict[str, Any], action: str) -> dict[str, Any]:
    issues = arguments["issueIdsOrKeys"]
    payload: dict[str, Any] = {"issueIdsOrKeys": issues}
    if arguments.get("accountIds"):
        payload["accountIds"] = arguments["accountIds"]

    data = await client.post(f"{API}/bulk/issues/{action}", json=payload)
    return {
        "success": True,
        "taskId": data.get("taskId"),
        "message": f"Bulk {action} initiated for {len(issues)} issues. {PROGRESS_HINT}",
    }


async def bulk_watch_issues(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    return await _bulk_watchers(client, arguments, "watch")


async def bulk_unwatch_issues(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    return await _bulk_watchers(client, arguments, "unwatch")


async def get_bulk_operation_progress(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(f"{API}/bulk/queue/{path_param(arguments['taskId'])}")
    successful = data.get("successfulIssues") or []
    failed = data.get("failedIssues") or []
    return {
        "taskId": data.get("taskId"),
        "status": data.get("status"),
        "progress": data.get("progress"),
        "submittedBy": data.get("submittedBy"),
        "created": data.get("created"),
        "started": data.get("started"),
        "finished": data.get("finished"),
        "successfulIssues": successful,
        "failedIssues": failed,
        "totalIssues": len(successful) + len(failed),
    }


HANDLERS: dict[str, JiraHandler] = {
    "jira_bulk_edit_issues": bulk_edit_issues,
    "jira_bulk_watch_issues": bulk_watch_issues,
    "jira_bulk_unwatch_issues": bulk_unwatch_issues,
    "jira_get_bulk_operation_progress": get_bulk_operation_progress,
}
