"""Response shaping for Jira payloads.

Each function maps one raw Jira JSON object to the smaller dict a tool
returns. They take plain dicts and do no I/O, so tests can feed them canned
API responses directly.
"""

from typing import Any

from ..utils.adf import normalize_field_text


def _get(data: Any, *path: str) -> Any:
    """Walk nested dicts, returning None as soon as a key is missing."""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _values(data: Any, key: str = "values") -> list[dict[str, Any]]:
    items = _get(data, key)
    return items if isinstance(items, list) else []


def _person(user: Any) -> str:
    """Display name, falling back to email, for a Jira user object."""
    return _get(user, "displayName") or _get(user, "emailAddress") or ""


# =========== Issues ===========


def pick_issue_summary(issue: dict[str, Any], acceptance_field: str = "") -> dict[str, Any]:
    """Key, summary, description and acceptance criteria of an issue.

    Args:
        issue: Raw issue from the REST API.
        acceptance_field: Custom field id holding acceptance criteria, if configured.

    Returns:
        Flat summary; ``acceptanceCriteria`` is None when the field is not
        configured or empty.
    """
    fields = _get(issue, "fields") or {}
    acceptance = normalize_field_text(fields.get(acceptance_field)) if acceptance_field else ""
    return {
        "key": _get(issue, "key") or "",
        "summary": fields.get("summary") or "",
        "description": normalize_field_text(fields.get("description")),
        "acceptanceCriteria": acceptance or None,
    }


def pick_issue_search_summary(issue: dict[str, Any]) -> dict[str, Any]:
    fields = _get(issue, "fields") or {}
    return {
        "key": _get(issue, "key") or "",
        "summary": fields.get("summary") or "",
        "status": _get(fields, "status", "name") or "",
    }


def format_comment(comment: dict[str, Any]) -> dict[str, Any]:
    author = _get(comment, "author")
    return {
        "author": _person(author) or _get(author, "accountId") or "",
        "created": _get(comment, "created") or "",
        "body": normalize_field_text(_get(comment, "body")),
    }


def format_transition(transition: dict[str, Any]) -> dict[str, Any]:
    fields = transition.get("fields")
    return {
        "id": transition.get("id"),
        "name": transition.get("name"),
        "to": {
            "id": _get(transition, "to", "id"),
            "name": _get(transition, "to", "name"),
            "statusCategory": _get(transition, "to", "statusCategory", "name"),
        },
        "hasScreen": transition.get("hasScreen", False),
        "isGlobal": transition.get("isGlobal", False),
        "isInitial": transition.get("isInitial", False),
        "isConditional": transition.get("isConditional", False),
        "fields": list(fields.keys()) if isinstance(fields, dict) else [],
    }


def format_change(change: dict[str, Any]) -> dict[str, Any]:
    """One changelog history entry with its field-level items."""
    return {
        "id": change.get("id"),
        "author": _person(change.get("author")),
        "created": change.get("created"),
        "items": [
            {
                "field": item.get("field"),
                "fieldtype": item.get("fieldtype"),
                "from": item.get("fromString") or item.get("from"),
                "to": item.get("toString") or item.get("to"),
            }
            for item in change.get("items") or []
        ],
    }


# =========== Worklogs ===========


def format_worklog(worklog: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": worklog.get("id") or "",
        "author": _person(worklog.get("author")),
        "timeSpent": worklog.get("timeSpent") or "",
        "timeSpentSeconds": worklog.get("timeSpentSeconds") or 0,
        "started": worklog.get("started") or "",
        "created": worklog.get("created") or "",
        "comment": normalize_field_text(worklog.get("comment")),
    }


def format_worklog_detail(worklog: dict[str, Any]) -> dict[str, Any]:
    """Worklog from the bulk list endpoint, keeping author identities."""
    return {
        "id": worklog.get("id"),
        "issueId": worklog.get("issueId"),
        "author": {
            "accountId": _get(worklog, "author", "accountId"),
            "displayName": _get(worklog, "author", "displayName"),
            "emailAddress": _get(worklog, "author", "emailAddress"),
        },
        "updateAuthor": {
            "accountId": _get(worklog, "updateAuthor", "accountId"),
            "displayName": _get(worklog, "updateAuthor", "displayName"),
        },
        "timeSpent": worklog.get("timeSpent"),
        "timeSpentSeconds": worklog.get("timeSpentSeconds"),
        "started": worklog.get("started"),
        "created": worklog.get("created"),
        "updated": worklog.get("updated"),
        "comment": normalize_field_text(worklog.get("comment")),
    }


def format_duration(seconds: int) -> str:
    """Render seconds as ``Xh Ym``, or ``Xh`` when there are no spare minutes."""
    hours, remainder = divmod(int(seconds), 3600)
    minutes = remainder // 60
    return f"{hours}h {minutes}m" if minutes > 0 else f"{hours}h"


# =========== Projects and metadata ===========


def format_issue_type(issue_type: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": issue_type.get("id"),
        "name": issue_type.get("name"),
        "description": issue_type.get("description") or "",
        "subtask": issue_type.get("subtask", False),
        "hierarchyLevel": issue_type.get("hierarchyLevel"),
    }


def format_priority(priority: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": priority.get("id"),
        "name": priority.get("name"),
        "description": priority.get("description") or "",
        "iconUrl": priority.get("iconUrl"),
    }


def format_status(status: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": status.get("id"),
        "name": status.get("name"),
        "description": status.get("description") or "",
        "statusCategory": _get(status, "statusCategory", "name"),
    }


def format_component(component: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": component.get("id"),
        "name": component.get("name"),
        "description": component.get("description") or "",
        "lead": _get(component, "lead", "displayName"),
        "assigneeType": component.get("assigneeType"),
    }


def format_version(version: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": version.get("id"),
        "name": version.get("name"),
        "description": version.get("description") or "",
        "released": version.get("released", False),
        "archived": version.get("archived", False),
        "releaseDate": version.get("releaseDate"),
        "startDate": version.get("startDate"),
    }


def format_user(user: dict[str, Any]) -> dict[str, Any]:
    return {
        "accountId": user.get("accountId"),
        "displayName": user.get("displayName"),
        "emailAddress": user.get("emailAddress"),
        "active": user.get("active", True),
        "avatarUrl": _get(user, "avatarUrls", "48x48"),
    }


def format_field(field: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": field.get("id"),
        "key": field.get("key"),
        "name": field.get("name"),
        "custom": field.get("custom", False),
        "orderable": field.get("orderable", False),
        "navigable": field.get("navigable", False),
        "searchable": field.get("searchable", False),
        "clauseNames": field.get("clauseNames") or [],
        "schema": field.get("schema"),
    }


# =========== Agile ===========


def format_board(board: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": board.get("id"),
        "name": board.get("name"),
        "type": board.get("type"),
        "projectKey": _get(board, "location", "projectKey"),
        "projectName": _get(board, "location", "displayName"),
    }


def format_sprint(sprint: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": sprint.get("id"),
        "name": sprint.get("name"),
        "state": sprint.get("state"),
        "startDate": sprint.get("startDate"),
        "endDate": sprint.get("endDate"),
        "completeDate": sprint.get("completeDate"),
        "originBoardId": sprint.get("originBoardId"),
        "goal": sprint.get("goal"),
    }


def format_agile_issue(issue: dict[str, Any], story_points: bool = False) -> dict[str, Any]:
    """Issue row for sprint, backlog and epic listings.

    Args:
        issue: Raw issue from the Agile API.
        story_points: Include the story points field (customfield_10016).
    """
    fields = _get(issue, "fields") or {}
    row = {
        "key": _get(issue, "key"),
        "summary": fields.get("summary"),
        "status": _get(fields, "status", "name"),
        "assignee": _get(fields, "assignee", "displayName"),
        "issueType": _get(fields, "issuetype", "name"),
    }
    if story_points:
        row["priority"] = _get(fields, "priority", "name")
        row["storyPoints"] = fields.get("customfield_10016")
    return row


def format_backlog_issue(issue: dict[str, Any]) -> dict[str, Any]:
    fields = _get(issue, "fields") or {}
    return {
        **format_agile_issue(issue),
        "priority": _get(fields, "priority", "name"),
    }


def format_epic(epic: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": epic.get("id"),
        "key": epic.get("key"),
        "name": epic.get("name"),
        "summary": epic.get("summary"),
        "done": epic.get("done", False),
    }


# =========== Collaboration ===========


def format_issue_link(link: dict[str, Any]) -> dict[str, Any]:
    """An issue link seen from the issue that owns it.

    Jira sets exactly one of ``inwardIssue``/``outwardIssue`` on each link;
    the direction follows whichever is present.
    """
    inward = bool(link.get("inwardIssue"))
    linked = link.get("inwardIssue") if inward else link.get("outwardIssue")
    return {
        "id": link.get("id"),
        "type": _get(link, "type", "name"),
        "direction": "inward" if inward else "outward",
        "description": _get(link, "type", "inward" if inward else "outward"),
        "linkedIssue": {
            "key": _get(linked, "key"),
            "summary": _get(linked, "fields", "summary"),
            "status": _get(linked, "fields", "status", "name"),
            "issueType": _get(linked, "fields", "issuetype", "name"),
        },
    }


def format_link_type(link_type: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": link_type.get("id"),
        "name": link_type.get("name"),
        "inward": link_type.get("inward"),
        "outward": link_type.get("outward"),
    }


def format_watcher(user: dict[str, Any]) -> dict[str, Any]:
    return {
        "accountId": user.get("accountId"),
        "displayName": user.get("displayName"),
        "emailAddress": user.get("emailAddress"),
    }


def format_attachment(attachment: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": attachment.get("id"),
        "filename": attachment.get("filename"),
        "size": attachment.get("size"),
        "mimeType": attachment.get("mimeType"),
        "content": attachment.get("content"),
        "thumbnail": attachment.get("thumbnail"),
        "author": _get(attachment, "author", "displayName"),
        "created": attachment.get("created"),
    }


def format_attachment_metadata(attachment: dict[str, Any]) -> dict[str, Any]:
    author = attachment.get("author")
    return {
        "id": attachment.get("id"),
        "filename": attachment.get("filename"),
        "size": attachment.get("size"),
        "mimeType": attachment.get("mimeType"),
        "created": attachment.get("created"),
        "author": (
            {"accountId": author.get("accountId"), "displayName": author.get("displayName")}
            if isinstance(author, dict)
            else None
        ),
        "content": attachment.get("content"),
        "thumbnail": attachment.get("thumbnail"),
        "self": attachment.get("self"),
    }


# =========== Filters and dashboards ===========


def format_filter(saved_filter: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": saved_filter.get("id"),
        "name": saved_filter.get("name"),
        "description": saved_filter.get("description"),
        "owner": _get(saved_filter, "owner", "displayName"),
        "jql": saved_filter.get("jql"),
        "favourite": saved_filter.get("favourite", False),
        "favouritedCount": saved_filter.get("favouritedCount", 0),
    }


def format_dashboard(dashboard: dict[str, Any]) -> dict[str, Any]:
    owner = dashboard.get("owner")
    return {
        "id": dashboard.get("id"),
        "name": dashboard.get("name"),
        "description": dashboard.get("description"),
        "owner": (
            {"accountId": owner.get("accountId"), "displayName": owner.get("displayName")}
            if isinstance(owner, dict)
            else None
        ),
        "isFavourite": dashboard.get("isFavourite"),
        "popularity": dashboard.get("popularity"),
        "view": dashboard.get("view"),
    }


def format_gadget(gadget: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": gadget.get("id"),
        "moduleKey": gadget.get("moduleKey"),
        "uri": gadget.get("uri"),
        "color": gadget.get("color"),
        "position": gadget.get("position"),
        "title": gadget.get("title"),
    }
