"""Project, field, user and JQL metadata tool handlers."""

import logging
from typing import Any

from ...clients.formatters import (
    format_component,
    format_field,
    format_issue_type,
    format_priority,
    format_status,
    format_user,
    format_version,
)
from ...clients.jira_client import API, JiraClient, path_param
from ...utils.errors import JiraMCPError
from .base import JiraHandler, join_list

logger = logging.getLogger(__name__)


# =========== Projects ===========


async def list_projects(client: JiraClient, arguments: dict[str, Any]) -> Any:
    return await client.get(
        f"{API}/project/search",
        params={"startAt": arguments.get("startAt"), "maxResults": arguments.get("maxResults")},
    )


async def get_project(client: JiraClient, arguments: dict[str, Any]) -> Any:
    return await client.get(f"{API}/project/{path_param(arguments['projectIdOrKey'])}")


async def get_issue_types(client: JiraClient, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    """Issue types for one project, or every issue type on the site."""
    project_key = arguments.get("projectKey")
    if project_key:
        project = await client.get(f"{API}/project/{path_param(project_key)}")
        issue_types = project.get("issueTypes") or []
    else:
        issue_types = await client.get(f"{API}/issuetype") or []
    return [format_issue_type(issue_type) for issue_type in issue_types]


async def get_priorities(client: JiraClient, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    priorities = await client.get(f"{API}/priority") or []
    return [format_priority(priority) for priority in priorities]


async def get_statuses(client: JiraClient, arguments: dict[str, Any]) -> Any:
    """Statuses for the site, or a project's statuses grouped by issue type (unshaped)."""
    project_key = arguments.get("projectKey")
    if project_key:
        return await client.get(f"{API}/project/{path_param(project_key)}/statuses") or []
    statuses = await client.get(f"{API}/status") or []
    return [format_status(status) for status in statuses]


async def get_components(client: JiraClient, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    components = await client.get(f"{API}/project/{path_param(arguments['projectKey'])}/components") or []
    return [format_component(component) for component in components]


async def get_versions(client: JiraClient, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    versions = await client.get(f"{API}/project/{path_param(arguments['projectKey'])}/versions") or []
    if arguments.get("released") is not None:
        versions = [v for v in versions if v.get("released") == arguments["released"]]
    return [format_version(version) for version in versions]


# =========== Users ===========


async def search_users(client: JiraClient, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    """Find users by name or email.

    With a project key, results are narrowed to users assignable in that
    project; if that second lookup fails the plain search results are kept.
    """
    query = arguments["query"]
    max_results = arguments.get("maxResults", 10)
    project_key = arguments.get("projectKey")

    users = await client.get(f"{API}/user/search", params={"query": query, "maxResults": max_results}) or []

    if project_key and users:
        try:
            users = (
                await client.get(
                    f"{API}/user/assignable/search",
                    params={"query": query, "project": project_key, "maxResults": max_results},
                )
                or []
            )
        except JiraMCPError as e:
            logger.debug(f"Assignable user search failed for {project_key}, keeping plain results: {e}")

    return [format_user(user) for user in users]


# =========== Fields ===========


async def get_fields(client: JiraClient, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    fields = await client.get(f"{API}/field") or []
    return [format_field(field) for field in fields]


async def get_create_metadata(client: JiraClient, arguments: dict[str, Any]) -> Any:
    return await client.get(
        f"{API}/issue/createmeta",
        params={
            "projectKeys": join_list(arguments.get("projectKeys")),
            "projectIds": join_list(arguments.get("projectIds")),
            "issuetypeNames": join_list(arguments.get("issuetypeNames")),
            "expand": arguments.get("expand") or "projects.issuetypes.fields",
        },
    )


async def get_edit_metadata(client: JiraClient, arguments: dict[str, Any]) -> Any:
    return await client.get(f"{API}/issue/{path_param(arguments['issueIdOrKey'])}/editmeta")


# =========== JQL ===========


async def autocomplete_jql(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(
        f"{API}/jql/autocompletedata/suggestions",
        params={
            "fieldName": arguments.get("fieldName"),
            "fieldValue": arguments.get("fieldValue"),
            "predicateName": arguments.get("predicateName"),
            "predicateValue": arguments.get("predicateValue"),
        },
    )
    return {
        "results": [
            {"value": result.get("value"), "displayName": result.get("displayName")}
            for result in data.get("results") or []
        ]
    }


async def validate_jql(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Check JQL queries; a query is valid when Jira reports no errors for it."""
    data = await client.post(
        f"{API}/jql/parse",
        json={"queries": arguments["queries"], "validation": arguments.get("validation", "strict")},
    )
    queries = []
    for parsed in data.get("queries") or []:
        errors = parsed.get("errors") or []
        queries.append(
            {
                "query": parsed.get("query"),
                "errors": errors,
                "warnings": parsed.get("warnings") or [],
                "isValid": not errors,
            }
        )
    return {"queries": queries}


async def parse_jql(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.post(
        f"{API}/jql/parse",
        json={"queries": arguments["queries"], "validation": arguments.get("validation", "none")},
    )
    return {
        "queries": [
            {
                "query": parsed.get("query"),
                "structure": parsed.get("structure"),
                "errors": parsed.get("errors") or [],
            }
            for parsed in data.get("queries") or []
        ]
    }


HANDLERS: dict[str, JiraHandler] = {
    "jira_list_projects": list_projects,
    "jira_get_project": get_project,
    "jira_get_issue_types": get_issue_types,
    "jira_get_priorities": get_priorities,
    "jira_get_statuses": get_statuses,
    "jira_get_components": get_components,
    "jira_get_versions": get_versions,
    "jira_search_users": search_users,
    "jira_get_fields": get_fields,
    "jira_get_create_metadata": get_create_metadata,
    "jira_get_edit_metadata": get_edit_metadata,
    "jira_autocomplete_jql": autocomplete_jql,
    "jira_validate_jql": validate_jql,
    "jira_parse_jql": parse_jql,
}
