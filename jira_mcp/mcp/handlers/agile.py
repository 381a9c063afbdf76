"""Agile tool handlers: boards, sprints, backlog, ranking and epics."""

import logging
from datetime import datetime, timezone
from typing import Any

from ...clients.formatters import (
    format_agile_issue,
    format_backlog_issue,
    format_board,
    format_epic,
    format_sprint,
)
from ...clients.jira_client import AGILE, JiraClient, path_param
from ...utils.errors import ToolError
from .base import Confirmation, JiraHandler, join_list

logger = logging.getLogger(__name__)


def _page(data: dict[str, Any], items: list[dict[str, Any]]) -> dict[str, Any]:
    return {"total": data.get("total", len(items)), "startAt": data.get("startAt", 0)}


# =========== Boards ===========


async def get_boards(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(
        f"{AGILE}/board",
        params={
            "projectKeyOrId": arguments.get("projectKeyOrId"),
            "type": arguments.get("type"),
            "name": arguments.get("name"),
            "startAt": arguments.get("startAt"),
            "maxResults": arguments.get("maxResults", 50),
        },
    )
    boards = [format_board(board) for board in data.get("values") or []]
    return {**_page(data, boards), "boards": boards}


async def get_board(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(f"{AGILE}/board/{arguments['boardId']}")
    return {key: data.get(key) for key in ("id", "name", "type", "self", "location")}


async def get_board_configuration(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(f"{AGILE}/board/{arguments['boardId']}/configuration")
    return {
        key: data.get(key)
        for key in ("id", "name", "type", "filter", "columnConfig", "estimation", "ranking")
    }


# =========== Sprints ===========


async def get_sprints(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(
        f"{AGILE}/board/{arguments['boardId']}/sprint",
        params={
            "state": arguments.get("state"),
            "startAt": arguments.get("startAt"),
            "maxResults": arguments.get("maxResults", 50),
        },
    )
    sprints = [format_sprint(sprint) for sprint in data.get("values") or []]
    return {**_page(data, sprints), "sprints": sprints}


async def get_sprint(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    return format_sprint(await client.get(f"{AGILE}/sprint/{arguments['sprintId']}"))


async def create_sprint(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = {
        "originBoardId": arguments["boardId"],
        "name": arguments["name"],
        "startDate": arguments.get("startDate"),
        "endDate": arguments.get("endDate"),
        "goal": arguments.get("goal"),
    }
    sprint = await client.post(f"{AGILE}/sprint", json={k: v for k, v in payload.items() if v is not None})
    return {
        "success": True,
        "id": sprint.get("id"),
        "name": sprint.get("name"),
        "state": sprint.get("state"),
        "message": f'Sprint "{arguments["name"]}" created successfully',
    }


async def update_sprint(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Partially update a sprint.

    Raises:
        ToolError: ``no_changes`` if no sprint field was supplied.
    """
    sprint_id = arguments["sprintId"]
    payload = {
        key: arguments[key] for key in ("name", "state", "startDate", "endDate", "goal") if key in arguments
    }
    if not payload:
        raise ToolError("no_changes", "No fields provided to update")

    sprint = await client.put(f"{AGILE}/sprint/{sprint_id}", json=payload)
    return {
        "success": True,
        "id": sprint.get("id", sprint_id),
        "name": sprint.get("name"),
        "state": sprint.get("state"),
        "message": f"Sprint {sprint_id} updated successfully",
    }


async def start_sprint(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    sprint_id = arguments["sprintId"]
    start_date = arguments.get("startDate") or datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    sprint = await client.post(
        f"{AGILE}/sprint/{sprint_id}",
        json={"state": "active", "startDate": start_date, "endDate": arguments["endDate"]},
    )
    return {
        "success": True,
        "id": sprint.get("id", sprint_id),
        "name": sprint.get("name"),
        "state": sprint.get("state"),
        "message": f"Sprint {sprint_id} started successfully",
    }


async def complete_sprint(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    sprint_id = arguments["sprintId"]
    sprint = await client.post(f"{AGILE}/sprint/{sprint_id}", json={"state": "closed"})
    return {
        "success": True,
        "id": sprint.get("id", sprint_id),
        "name": sprint.get("name"),
        "state": sprint.get("state"),
        "message": f"Sprint {sprint_id} completed successfully",
        "incompleteIssuesMovedTo": arguments.get("moveIncompleteIssuesTo") or "backlog",
    }


async def delete_sprint(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    sprint_id = arguments["sprintId"]
    await client.delete(f"{AGILE}/sprint/{sprint_id}")
    return {"success": True, "message": f"Sprint {sprint_id} deleted successfully"}


async def get_sprint_issues(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    sprint_id = arguments["sprintId"]
    data = await client.get(
        f"{AGILE}/sprint/{sprint_id}/issue",
        params={
            "jql": arguments.get("jql"),
            "fields": join_list(arguments.get("fields")),
            "startAt": arguments.get("startAt"),
            "maxResults": arguments.get("maxResults", 50),
        },
    )
    issues = [format_agile_issue(issue, story_points=True) for issue in data.get("issues") or []]
    return {**_page(data, issues), "sprintId": sprint_id, "issues": issues}


async def move_issues_to_sprint(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    sprint_id = arguments["sprintId"]
    issue_keys = arguments["issueKeys"]
    await client.post(f"{AGILE}/sprint/{sprint_id}/issue", json={"issues": issue_keys})
    return {
        "success": True,
        "sprintId": sprint_id,
        "issuesMoved": issue_keys,
        "message": f"{len(issue_keys)} issue(s) moved to sprint {sprint_id}",
    }


# =========== Backlog and ranking ===========


async def get_backlog_issues(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    board_id = arguments["boardId"]
    data = await client.get(
        f"{AGILE}/board/{board_id}/backlog",
        params={
            "jql": arguments.get("jql"),
            "fields": join_list(arguments.get("fields")),
            "startAt": arguments.get("startAt"),
            "maxResults": arguments.get("maxResults", 50),
        },
    )
    issues = [format_backlog_issue(issue) for issue in data.get("issues") or []]
    return {**_page(data, issues), "boardId": board_id, "issues": issues}


async def move_issues_to_backlog(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issue_keys = arguments["issueKeys"]
    await client.post(f"{AGILE}/backlog/issue", json={"issues": issue_keys})
    return {
        "success": True,
        "issuesMoved": issue_keys,
        "message": f"{len(issue_keys)} issue(s) moved to backlog",
    }


async def rank_issues(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Rank issues before or after another issue.

    Raises:
        ToolError: ``invalid_parameters`` unless exactly one anchor is given.
    """
    issue_keys = arguments["issueKeys"]
    before = arguments.get("rankBeforeIssue")
    after = arguments.get("rankAfterIssue")

    if bool(before) == bool(after):
        raise ToolError(
            "invalid_parameters",
            "Provide exactly one of rankBeforeIssue or rankAfterIssue",
        )

    payload: dict[str, Any] = {"issues": issue_keys}
    if before:
        payload["rankBeforeIssue"] = before
        position = f"before {before}"
    else:
        payload["rankAfterIssue"] = after
        position = f"after {after}"

    await client.put(f"{AGILE}/issue/rank", json=payload)
    return {
        "success": True,
        "issuesRanked": issue_keys,
        "message": f"{len(issue_keys)} issue(s) ranked {position}",
    }


# =========== Epics ===========


async def get_epics(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    board_id = arguments["boardId"]
    data = await client.get(
        f"{AGILE}/board/{board_id}/epic",
        params={
            "done": arguments.get("done"),
            "startAt": arguments.get("startAt"),
            "maxResults": arguments.get("maxResults", 50),
        },
    )
    epics = [format_epic(epic) for epic in data.get("values") or []]
    return {**_page(data, epics), "boardId": board_id, "epics": epics}


async def get_epic_issues(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    epic = arguments["epicIdOrKey"]
    data = await client.get(
        f"{AGILE}/epic/{path_param(epic)}/issue",
        params={
            "jql": arguments.get("jql"),
            "fields": join_list(arguments.get("fields")),
            "startAt": arguments.get("startAt"),
            "maxResults": arguments.get("maxResults", 50),
        },
    )
    issues = [format_agile_issue(issue) for issue in data.get("issues") or []]
    return {**_page(data, issues), "epicKey": epic, "issues": issues}


async def move_issues_to_epic(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    epic = arguments["epicIdOrKey"]
    issue_keys = arguments["issueKeys"]
    await client.post(f"{AGILE}/epic/{path_param(epic)}/issue", json={"issues": issue_keys})
    return {
        "success": True,
        "epicKey": epic,
        "issuesMoved": issue_keys,
        "message": f"{len(issue_keys)} issue(s) moved to epic {epic}",
    }


async def remove_issues_from_epic(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issue_keys = arguments["issueKeys"]
    await client.post(f"{AGILE}/epic/none/issue", json={"issues": issue_keys})
    return {
        "success": True,
        "issuesRemoved": issue_keys,
        "message": f"{len(issue_keys)} issue(s) removed from epic",
    }


CONFIRMATIONS = {
    "jira_delete_sprint": Confirmation(
        flag="confirmDelete",
        message="Deletion not confirmed. Set confirmDelete: true to proceed.",
        context_key="sprintId",
        argument="sprintId",
    ),
}

HANDLERS: dict[str, JiraHandler] = {
    "jira_get_boards": get_boards,
    "jira_get_board": get_board,
    "jira_get_board_configuration": get_board_configuration,
    "jira_get_sprints": get_sprints,
    "jira_get_sprint": get_sprint,
    "jira_create_sprint": create_sprint,
    "jira_update_sprint": update_sprint,
    "jira_start_sprint": start_sprint,
    "jira_complete_sprint": complete_sprint,
    "jira_delete_sprint": delete_sprint,
    "jira_get_sprint_issues": get_sprint_issues,
    "jira_move_issues_to_sprint": move_issues_to_sprint,
    "jira_get_backlog_issues": get_backlog_issues,
    "jira_move_issues_to_backlog": move_issues_to_backlog,
    "jira_rank_issues": rank_issues,
    "jira_get_epics": get_epics,
    "jira_get_epic_issues": get_epic_issues,
    "jira_move_issues_to_epic": move_issues_to_epic,
    "jira_remove_issues_from_epic": remove_issues_from_epic,
}
