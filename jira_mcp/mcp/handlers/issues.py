"""Issue tool handlers: read, search, create, edit, workflow and labels."""

import logging
import re
from typing import Any

from ...clients.formatters import (
    format_change,
    format_comment,
    format_transition,
    pick_issue_search_summary,
    pick_issue_summary,
)
from ...clients.jira_client import API, JiraClient, path_param
from ...utils.adf import text_to_adf
from ...utils.errors import ToolError, ValidationError
from .base import Confirmation, JiraHandler, current_settings

logger = logging.getLogger(__name__)

MY_OPEN_ISSUES_JQL = "assignee = currentUser() AND statusCategory != Done ORDER BY updated DESC"

SUMMARY_FIELDS = ["summary", "status"]

_NUMERIC_ID = re.compile(r"^\d+$")


def id_or_name(value: str) -> dict[str, str]:
    """Reference a Jira entity by ID when the value is all digits, else by name."""
    return {"id": value} if _NUMERIC_ID.match(value) else {"name": value}


def custom_field_key(key: str) -> str:
    return key if key.startswith("customfield_") else f"customfield_{key}"


def build_issue_fields(params: dict[str, Any]) -> dict[str, Any]:
    """Build the ``fields`` object for creating an issue.

    Only keys present in ``params`` are emitted. Plain-text description and
    environment are converted to ADF; custom field keys get the
    ``customfield_`` prefix when missing.

    Args:
        params: Tool arguments using the tool's camelCase names.

    Returns:
        Jira ``fields`` payload.
    """
    fields: dict[str, Any] = {}

    if params.get("projectKey"):
        fields["project"] = {"key": params["projectKey"]}
    if params.get("issueType"):
        fields["issuetype"] = id_or_name(params["issueType"])
    if "summary" in params:
        fields["summary"] = params["summary"]
    if "description" in params:
        fields["description"] = text_to_adf(params["description"]) if params["description"] else None
    if "assignee" in params:
        fields["assignee"] = None if params["assignee"] is None else {"accountId": params["assignee"]}
    if params.get("reporter"):
        fields["reporter"] = {"accountId": params["reporter"]}
    if params.get("priority"):
        fields["priority"] = id_or_name(params["priority"])
    if params.get("labels"):
        fields["labels"] = params["labels"]
    if params.get("components"):
        fields["components"] = [id_or_name(c) for c in params["components"]]
    if params.get("fixVersions"):
        fields["fixVersions"] = [id_or_name(v) for v in params["fixVersions"]]
    if params.get("affectsVersions"):
        fields["versions"] = [id_or_name(v) for v in params["affectsVersions"]]
    if "dueDate" in params:
        fields["duedate"] = params["dueDate"]
    if params.get("parentKey"):
        fields["parent"] = {"key": params["parentKey"]}
    if params.get("environment"):
        fields["environment"] = text_to_adf(params["environment"])

    timetracking = {
        key: params[key] for key in ("originalEstimate", "remainingEstimate") if params.get(key)
    }
    if timetracking:
        fields["timetracking"] = timetracking

    for key, value in (params.get("customFields") or {}).items():
        fields[custom_field_key(key)] = value

    return fields


def _operations(spec: dict[str, list[str]], wrap) -> list[dict[str, Any]]:
    ops: list[dict[str, Any]] = []
    for value in spec.get("add") or []:
        ops.append({"add": wrap(value)})
    for value in spec.get("remove") or []:
        ops.append({"remove": wrap(value)})
    if spec.get("set") is not None:
        ops.append({"set": [wrap(value) for value in spec["set"]]})
    return ops


def build_update_operations(params: dict[str, Any]) -> dict[str, list[dict[str, Any]]]:
    """Build the ``update`` object for add/remove/set edits of list fields.

    Labels are plain strings; components and versions are referenced by ID
    or name.

    Args:
        params: Tool arguments; each of labels, components, fixVersions and
            affectsVersions may be ``{"add": [...], "remove": [...], "set": [...]}``.

    Returns:
        Jira ``update`` payload (empty when nothing was requested).
    """
    update: dict[str, list[dict[str, Any]]] = {}

    if params.get("labels") is not None:
        update["labels"] = _operations(params["labels"], lambda label: label)
    if params.get("components") is not None:
        update["components"] = _operations(params["components"], id_or_name)
    if params.get("fixVersions") is not None:
        update["fixVersions"] = _operations(params["fixVersions"], id_or_name)
    if params.get("affectsVersions") is not None:
        update["versions"] = _operations(params["affectsVersions"], id_or_name)

    return update


# =========== Read ===========


async def whoami(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    return await client.get_myself()


async def get_issue(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Get an issue's summary, description and acceptance criteria."""
    settings = current_settings()
    fields = arguments.get("fields") or settings.default_issue_fields()
    issue = await client.get_issue(arguments["issueIdOrKey"], fields, expand=arguments.get("expand"))
    return pick_issue_summary(issue, settings.acceptance_criteria_field)


async def get_issue_summary(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    settings = current_settings()
    issue = await client.get_issue(arguments["issueIdOrKey"], settings.default_issue_fields())
    return pick_issue_summary(issue, settings.acceptance_criteria_field)


async def search_issues(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Search issues with JQL.

    Args:
        client: Jira client.
        arguments: Tool arguments with 'jql' and optional paging, fields and
            enhanced-search options (nextPageToken, reconcileIssues).

    Returns:
        Dict with total, issue summaries and the next page token if any.
    """
    settings = current_settings()
    data = await client.search_issues(
        arguments["jql"],
        max_results=arguments.get("maxResults"),
        start_at=arguments.get("startAt"),
        fields=arguments.get("fields") or settings.default_issue_fields(),
        expand=arguments.get("expand"),
        nextPageToken=arguments.get("nextPageToken"),
        reconcileIssues=arguments.get("reconcileIssues"),
    )

    issues = [pick_issue_summary(issue, settings.acceptance_criteria_field) for issue in data.get("issues") or []]
    result: dict[str, Any] = {"total": data.get("total", len(issues)), "issues": issues}
    if data.get("nextPageToken"):
        result["nextPageToken"] = data["nextPageToken"]
    return result


async def search_issues_summary(client: JiraClient, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    data = await client.search_issues(
        arguments["jql"],
        max_results=arguments.get("maxResults", 10),
        fields=SUMMARY_FIELDS,
    )
    return [pick_issue_search_summary(issue) for issue in data.get("issues") or []]


async def get_my_open_issues(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    settings = current_settings()
    data = await client.search_issues(
        MY_OPEN_ISSUES_JQL,
        max_results=arguments.get("maxResults", 20),
        fields=settings.default_issue_fields(),
    )
    issues = [pick_issue_summary(issue, settings.acceptance_criteria_field) for issue in data.get("issues") or []]
    return {"total": data.get("total", len(issues)), "issues": issues}


async def resolve_intent(client: JiraClient, arguments: dict[str, Any]) -> Any:
    """Route a loosely specified request to get-issue, search or my-issues.

    Raises:
        ValidationError: If the intent's required argument is missing.
    """
    intent = arguments["intent"]

    if intent == "get_issue":
        if not arguments.get("issueKey"):
            raise ValidationError("issueKey is required when intent is get_issue.")
        return await get_issue_summary(client, {"issueIdOrKey": arguments["issueKey"]})

    if intent == "search":
        if not arguments.get("jql"):
            raise ValidationError("jql is required when intent is search.")
        return await search_issues_summary(client, arguments)

    return await get_my_open_issues(client, arguments)


async def get_issue_comments(client: JiraClient, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    data = await client.get(
        f"{API}/issue/{path_param(arguments['issueIdOrKey'])}/comment",
        params={"startAt": arguments.get("startAt"), "maxResults": arguments.get("maxResults")},
    )
    return [format_comment(comment) for comment in data.get("comments") or []]


async def add_comment(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    comment = await client.add_comment(arguments["issueIdOrKey"], arguments["body"])
    return {"id": comment.get("id", ""), "created": comment.get("created", "")}


async def get_changelog(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(
        f"{API}/issue/{path_param(arguments['issueIdOrKey'])}/changelog",
        params={"startAt": arguments.get("startAt"), "maxResults": arguments.get("maxResults", 20)},
    )
    changes = [format_change(change) for change in data.get("values") or []]
    return {
        "total": data.get("total", len(changes)),
        "startAt": data.get("startAt", 0),
        "changes": changes,
    }


# =========== Create and edit ===========


async def create_issue(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Create an issue from the supplied fields."""
    fields = build_issue_fields(arguments)
    created = await client.post(f"{API}/issue", json={"fields": fields})
    logger.info(f"Created issue {created.get('key')}")
    return {
        "success": True,
        "id": created.get("id", ""),
        "key": created.get("key", ""),
        "self": created.get("self", ""),
        "message": f"Issue {created.get('key')} created successfully",
    }


async def update_issue(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Update only the fields supplied.

    Direct field values go under ``fields``; list edits go under ``update``.

    Raises:
        ToolError: ``no_changes`` if nothing to update was supplied.
    """
    issue_key = arguments["issueIdOrKey"]

    fields: dict[str, Any] = {}
    if "summary" in arguments:
        fields["summary"] = arguments["summary"]
    if "description" in arguments:
        fields["description"] = text_to_adf(arguments["description"]) if arguments["description"] else None
    if "assignee" in arguments:
        fields["assignee"] = None if arguments["assignee"] is None else {"accountId": arguments["assignee"]}
    if "priority" in arguments:
        fields["priority"] = id_or_name(arguments["priority"])
    if "dueDate" in arguments:
        fields["duedate"] = arguments["dueDate"]
    for key, value in (arguments.get("customFields") or {}).items():
        fields[custom_field_key(key)] = value

    payload: dict[str, Any] = {}
    if fields:
        payload["fields"] = fields

    update = build_update_operations(arguments)
    if update:
        payload["update"] = update

    if not payload:
        raise ToolError("no_changes", "No fields provided to update")

    await client.put(
        f"{API}/issue/{path_param(issue_key)}",
        json=payload,
        params={"notifyUsers": arguments.get("notifyUsers", True)},
    )
    return {"success": True, "key": issue_key, "message": f"Issue {issue_key} updated successfully"}


async def delete_issue(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issue_key = arguments["issueIdOrKey"]
    delete_subtasks = arguments.get("deleteSubtasks", False)

    await client.delete(f"{API}/issue/{path_param(issue_key)}", params={"deleteSubtasks": delete_subtasks})

    suffix = " (including subtasks)" if delete_subtasks else ""
    return {"success": True, "message": f"Issue {issue_key} deleted successfully{suffix}"}


async def assign_issue(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issue_key = arguments["issueIdOrKey"]
    account_id = arguments.get("accountId")

    await client.assign_issue(issue_key, account_id)

    action = "unassigned" if account_id is None else "assigned"
    return {
        "success": True,
        "key": issue_key,
        "message": f"Issue {issue_key} {action} successfully",
        "assignee": account_id,
    }


# =========== Workflow ===========


async def get_transitions(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    transitions = await client.get_issue_transitions(arguments["issueIdOrKey"], expand=arguments.get("expand"))
    return {
        "issueKey": arguments["issueIdOrKey"],
        "transitions": [format_transition(t) for t in transitions],
    }


async def transition_issue(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Execute a workflow transition, with optional fields, resolution and comment."""
    issue_key = arguments["issueIdOrKey"]
    transition_id = arguments["transitionId"]

    payload: dict[str, Any] = {"transition": {"id": transition_id}}

    if arguments.get("fields") or arguments.get("resolution"):
        fields = dict(arguments.get("fields") or {})
        if arguments.get("resolution"):
            fields["resolution"] = {"name": arguments["resolution"]}
        payload["fields"] = fields

    if arguments.get("comment"):
        payload["update"] = {"comment": [{"add": {"body": text_to_adf(arguments["comment"])}}]}

    await client.transition_issue(issue_key, payload)
    return {
        "success": True,
        "key": issue_key,
        "transitionId": transition_id,
        "message": f"Issue {issue_key} transitioned successfully",
    }


# =========== Labels ===========


async def get_all_labels(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(
        f"{API}/label",
        params={"startAt": arguments.get("startAt", 0), "maxResults": arguments.get("maxResults", 1000)},
    )
    return {
        "total": data.get("total"),
        "maxResults": data.get("maxResults"),
        "startAt": data.get("startAt"),
        "labels": data.get("values") or [],
    }


_LABEL_MESSAGES = {"add": "added to", "remove": "removed from", "set": "set on"}


async def add_labels(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Add, remove or replace labels on an issue."""
    issue_key = arguments["issueIdOrKey"]
    labels = arguments["labels"]
    operation = arguments.get("operation", "add")

    if operation == "set":
        payload: dict[str, Any] = {"fields": {"labels": labels}}
    else:
        payload = {"update": {"labels": [{operation: label} for label in labels]}}

    await client.put(f"{API}/issue/{path_param(issue_key)}", json=payload)
    return {
        "success": True,
        "message": f"Labels {_LABEL_MESSAGES[operation]} issue {issue_key}",
        "labels": labels,
        "operation": operation,
    }


CONFIRMATIONS = {
    "jira_delete_issue": Confirmation(
        flag="confirmDelete",
        message="Deletion not confirmed. Set confirmDelete: true to proceed. This action cannot be undone.",
        context_key="issueKey",
        argument="issueIdOrKey",
    ),
}

HANDLERS: dict[str, JiraHandler] = {
    "jira_whoami": whoami,
    "jira_get_issue": get_issue,
    "jira_search_issues": search_issues,
    "jira_search_issues_summary": search_issues_summary,
    "jira_resolve": resolve_intent,
    "jira_get_issue_summary": get_issue_summary,
    "jira_get_my_open_issues": get_my_open_issues,
    "jira_get_issue_comments": get_issue_comments,
    "jira_add_comment": add_comment,
    "jira_get_changelog": get_changelog,
    "jira_create_issue": create_issue,
    "jira_update_issue": update_issue,
    "jira_delete_issue": delete_issue,
    "jira_assign_issue": assign_issue,
    "jira_get_transitions": get_transitions,
    "jira_transition_issue": transition_issue,
    "jira_get_all_labels": get_all_labels,
    "jira_add_labels": add_labels,
}
