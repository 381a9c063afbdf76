"""Saved filter and dashboard tool handlers."""

import logging
from typing import Any

from ...clients.formatters import format_dashboard, format_filter, format_gadget
from ...clients.jira_client import API, JiraClient, path_param
from ...utils.errors import ToolError, ValidationError
from .base import Confirmation, JiraHandler, join_list

logger = logging.getLogger(__name__)

FILTER_FIELDS = ("name", "jql", "description", "favourite")


def _owner(owner: Any) -> dict[str, Any] | None:
    if not isinstance(owner, dict):
        return None
    return {"accountId": owner.get("accountId"), "displayName": owner.get("displayName")}


# =========== Filters ===========


async def get_filters(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(
        f"{API}/filter/search",
        params={
            "filterName": arguments.get("filterName"),
            "owner": arguments.get("owner"),
            "expand": arguments.get("expand"),
            "startAt": arguments.get("startAt"),
            "maxResults": arguments.get("maxResults", 50),
        },
    )
    filters = [format_filter(saved) for saved in data.get("values") or []]
    return {
        "total": data.get("total", len(filters)),
        "startAt": data.get("startAt", 0),
        "filters": filters,
    }


async def get_filter(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    saved = await client.get(
        f"{API}/filter/{path_param(arguments['filterId'])}",
        params={"expand": arguments.get("expand")},
    )
    return {
        "id": saved.get("id"),
        "name": saved.get("name"),
        "description": saved.get("description"),
        "owner": (saved.get("owner") or {}).get("displayName"),
        "jql": saved.get("jql"),
        "favourite": saved.get("favourite"),
        "sharePermissions": saved.get("sharePermissions"),
    }


async def create_filter(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    payload = {key: arguments[key] for key in FILTER_FIELDS if key in arguments}
    saved = await client.post(f"{API}/filter", json=payload)
    return {
        "success": True,
        "id": saved.get("id"),
        "name": saved.get("name"),
        "jql": saved.get("jql"),
        "message": f'Filter "{arguments["name"]}" created successfully',
    }


async def update_filter(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Update only the filter fields that were supplied.

    Raises:
        ToolError: ``no_changes`` if nothing was supplied.
    """
    filter_id = arguments["filterId"]
    payload = {key: arguments[key] for key in FILTER_FIELDS if key in arguments}
    if not payload:
        raise ToolError("no_changes", "No fields provided to update")

    saved = await client.put(f"{API}/filter/{path_param(filter_id)}", json=payload)
    return {
        "success": True,
        "id": saved.get("id", filter_id),
        "name": saved.get("name"),
        "message": "Filter updated successfully",
    }


async def delete_filter(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    filter_id = arguments["filterId"]
    await client.delete(f"{API}/filter/{path_param(filter_id)}")
    return {"success": True, "message": f"Filter {filter_id} deleted successfully"}


async def get_my_filters(client: JiraClient, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    filters = await client.get(f"{API}/filter/my", params={"expand": arguments.get("expand")}) or []
    return [
        {
            "id": saved.get("id"),
            "name": saved.get("name"),
            "description": saved.get("description"),
            "jql": saved.get("jql"),
            "favourite": saved.get("favourite"),
        }
        for saved in filters
    ]


async def get_favourite_filters(client: JiraClient, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    filters = await client.get(f"{API}/filter/favourite", params={"expand": arguments.get("expand")}) or []
    return [
        {
            "id": saved.get("id"),
            "name": saved.get("name"),
            "description": saved.get("description"),
            "owner": (saved.get("owner") or {}).get("displayName"),
            "jql": saved.get("jql"),
        }
        for saved in filters
    ]


# =========== Dashboards ===========


async def get_dashboards(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(
        f"{API}/dashboard",
        params={
            "filter": arguments.get("filter"),
            "startAt": arguments.get("startAt", 0),
            "maxResults": arguments.get("maxResults", 50),
        },
    )
    return {
        "total": data.get("total"),
        "startAt": data.get("startAt"),
        "maxResults": data.get("maxResults"),
        "dashboards": [
            {
                "id": dashboard.get("id"),
                "name": dashboard.get("name"),
                "self": dashboard.get("self"),
                "isFavourite": dashboard.get("isFavourite"),
                "view": dashboard.get("view"),
            }
            for dashboard in data.get("dashboards") or []
        ],
    }


async def search_dashboards(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(
        f"{API}/dashboard/search",
        params={
            "dashboardName": arguments.get("dashboardName"),
            "accountId": arguments.get("accountId"),
            "groupname": arguments.get("groupname"),
            "orderBy": arguments.get("orderBy"),
            "startAt": arguments.get("startAt", 0),
            "maxResults": arguments.get("maxResults", 50),
            "expand": arguments.get("expand"),
        },
    )
    return {
        "total": data.get("total"),
        "startAt": data.get("startAt"),
        "maxResults": data.get("maxResults"),
        "dashboards": [format_dashboard(dashboard) for dashboard in data.get("values") or []],
    }


async def get_dashboard(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    dashboard = await client.get(f"{API}/dashboard/{path_param(arguments['id'])}")
    return {
        "id": dashboard.get("id"),
        "name": dashboard.get("name"),
        "description": dashboard.get("description"),
        "self": dashboard.get("self"),
        "isFavourite": dashboard.get("isFavourite"),
        "owner": _owner(dashboard.get("owner")),
        "popularity": dashboard.get("popularity"),
        "view": dashboard.get("view"),
        "editPermissions": dashboard.get("editPermissions"),
        "sharePermissions": dashboard.get("sharePermissions"),
    }


async def get_dashboard_gadgets(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(
        f"{API}/dashboard/{path_param(arguments['dashboardId'])}/gadget",
        params={
            "moduleKey": join_list(arguments.get("moduleKey")),
            "uri": arguments.get("uri"),
            "gadgetId": join_list(arguments.get("gadgetId")),
        },
    )
    return {"gadgets": [format_gadget(gadget) for gadget in data.get("gadgets") or []]}


async def add_dashboard_gadget(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Add a gadget identified by module key or URI.

    Raises:
        ValidationError: If neither moduleKey nor uri is given.
    """
    if not arguments.get("moduleKey") and not arguments.get("uri"):
        raise ValidationError("Either moduleKey or uri must be provided")

    payload = {
        key: arguments[key]
        for key in ("moduleKey", "uri", "color", "position", "title")
        if arguments.get(key) is not None
    }
    payload["ignoreUriAndModuleKeyValidation"] = arguments.get("ignoreUriAndModuleKeyValidation", False)

    gadget = await client.post(f"{API}/dashboard/{path_param(arguments['dashboardId'])}/gadget", json=payload)
    return {"success": True, "gadget": format_gadget(gadget)}


CONFIRMATIONS = {
    "jira_delete_filter": Confirmation(
        flag="confirmDelete",
        message="Deletion not confirmed. Set confirmDelete: true to proceed.",
        context_key="filterId",
        argument="filterId",
    ),
}

HANDLERS: dict[str, JiraHandler] = {
    "jira_get_filters": get_filters,
    "jira_get_filter": get_filter,
    "jira_create_filter": create_filter,
    "jira_update_filter": update_filter,
    "jira_delete_filter": delete_filter,
    "jira_get_my_filters": get_my_filters,
    "jira_get_favourite_filters": get_favourite_filters,
    "jira_get_dashboards": get_dashboards,
    "jira_search_dashboards": search_dashboards,
    "jira_get_dashboard": get_dashboard,
    "jira_get_dashboard_gadgets": get_dashboard_gadgets,
    "jira_add_dashboard_gadget": add_dashboard_gadget,
}
