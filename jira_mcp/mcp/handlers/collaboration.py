"""Collaboration tool handlers: links, watchers, votes and attachments."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from ...clients.formatters import (
    format_attachment,
    format_attachment_metadata,
    format_issue_link,
    format_link_type,
    format_watcher,
)
from ...clients.jira_client import API, JiraClient, path_param
from ...utils.adf import text_to_adf
from ...utils.errors import ValidationError
from .base import Confirmation, JiraHandler

logger = logging.getLogger(__name__)


# =========== Issue links ===========


async def get_issue_links(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issue_key = arguments["issueIdOrKey"]
    issue = await client.get(f"{API}/issue/{path_param(issue_key)}", params={"fields": "issuelinks"})
    links = (issue.get("fields") or {}).get("issuelinks") or []
    return {"issueKey": issue_key, "links": [format_issue_link(link) for link in links]}


async def create_issue_link(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    inward = arguments["inwardIssue"]
    outward = arguments["outwardIssue"]
    link_type = arguments["linkType"]

    payload: dict[str, Any] = {
        "type": {"name": link_type},
        "inwardIssue": {"key": inward},
        "outwardIssue": {"key": outward},
    }
    if arguments.get("comment"):
        payload["comment"] = {"body": text_to_adf(arguments["comment"])}

    await client.post(f"{API}/issueLink", json=payload)
    return {
        "success": True,
        "message": f"Link created: {inward} {link_type} {outward}",
        "inwardIssue": inward,
        "outwardIssue": outward,
        "linkType": link_type,
    }


async def delete_issue_link(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    link_id = arguments["linkId"]
    await client.delete(f"{API}/issueLink/{path_param(link_id)}")
    return {"success": True, "message": f"Link {link_id} deleted successfully"}


async def get_link_types(client: JiraClient, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    data = await client.get(f"{API}/issueLinkType")
    return [format_link_type(link_type) for link_type in data.get("issueLinkTypes") or []]


# =========== Watchers ===========


async def get_watchers(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issue_key = arguments["issueIdOrKey"]
    data = await client.get(f"{API}/issue/{path_param(issue_key)}/watchers")
    watchers = [format_watcher(user) for user in data.get("watchers") or []]
    return {
        "issueKey": issue_key,
        "watchCount": data.get("watchCount", len(watchers)),
        "isWatching": data.get("isWatching", False),
        "watchers": watchers,
    }


async def add_watcher(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issue_key = arguments["issueIdOrKey"]
    account_id = arguments["accountId"]
    # Jira expects the bare account ID as a JSON string body
    await client.post(
        f"{API}/issue/{path_param(issue_key)}/watchers",
        content=json.dumps(account_id),
        headers={"Content-Type": "application/json"},
    )
    return {
        "success": True,
        "issueKey": issue_key,
        "accountId": account_id,
        "message": "User added as watcher",
    }


async def remove_watcher(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issue_key = arguments["issueIdOrKey"]
    account_id = arguments["accountId"]
    await client.delete(f"{API}/issue/{path_param(issue_key)}/watchers", params={"accountId": account_id})
    return {
        "success": True,
        "issueKey": issue_key,
        "accountId": account_id,
        "message": "User removed from watchers",
    }


# =========== Votes ===========


async def get_votes(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issue_key = arguments["issueIdOrKey"]
    data = await client.get(f"{API}/issue/{path_param(issue_key)}/votes")
    return {
        "issueKey": issue_key,
        "votes": data.get("votes", 0),
        "hasVoted": data.get("hasVoted", False),
        "voters": [
            {"accountId": voter.get("accountId"), "displayName": voter.get("displayName")}
            for voter in data.get("voters") or []
        ],
    }


async def add_vote(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issue_key = arguments["issueIdOrKey"]
    await client.post(f"{API}/issue/{path_param(issue_key)}/votes")
    return {"success": True, "issueKey": issue_key, "message": "Vote added successfully"}


async def remove_vote(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issue_key = arguments["issueIdOrKey"]
    await client.delete(f"{API}/issue/{path_param(issue_key)}/votes")
    return {"success": True, "issueKey": issue_key, "message": "Vote removed successfully"}


# =========== Attachments ===========


async def get_attachments(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    issue_key = arguments["issueIdOrKey"]
    issue = await client.get(f"{API}/issue/{path_param(issue_key)}", params={"fields": "attachment"})
    attachments = (issue.get("fields") or {}).get("attachment") or []
    return {"issueKey": issue_key, "attachments": [format_attachment(a) for a in attachments]}


async def delete_attachment(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    attachment_id = arguments["attachmentId"]
    await client.delete(f"{API}/attachment/{path_param(attachment_id)}")
    return {"success": True, "message": f"Attachment {attachment_id} deleted successfully"}


async def upload_attachment(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Upload a local file to an issue.

    Raises:
        ValidationError: If the file does not exist.
    """
    issue_key = arguments["issueIdOrKey"]
    file_path = Path(arguments["filePath"]).expanduser()

    if not file_path.is_file():
        raise ValidationError(f"File not found: {arguments['filePath']}")

    filename = arguments.get("filename") or file_path.name
    logger.info(f"Uploading {filename} to {issue_key}")

    uploaded = await client.post(
        f"{API}/issue/{path_param(issue_key)}/attachments",
        files={"file": (filename, await asyncio.to_thread(file_path.read_bytes))},
        headers={"X-Atlassian-Token": "no-check"},
    )

    return {
        "success": True,
        "attachments": [
            {
                "id": attachment.get("id"),
                "filename": attachment.get("filename"),
                "size": attachment.get("size"),
                "mimeType": attachment.get("mimeType"),
                "created": attachment.get("created"),
                "author": (attachment.get("author") or {}).get("displayName"),
                "content": attachment.get("content"),
            }
            for attachment in uploaded or []
        ],
    }


async def get_attachment_metadata(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    return format_attachment_metadata(await client.get(f"{API}/attachment/{path_param(arguments['id'])}"))


async def get_attachment_content(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Return the download URL for an attachment, or the content headers.

    With ``redirect`` true (the default) Jira answers with a redirect whose
    target is the download URL; the redirect is not followed.
    """
    redirect = arguments.get("redirect", True)
    response = await client.send(
        "GET",
        f"{API}/attachment/content/{path_param(arguments['id'])}",
        params={"redirect": "true" if redirect else "false"},
        follow_redirects=not redirect,
    )
    client.check(response)

    location = response.headers.get("location")
    if response.status_code == 302 or location:
        return {
            "downloadUrl": location or response.text,
            "message": "Use this URL to download the attachment content",
        }

    return {
        "contentType": response.headers.get("content-type"),
        "contentLength": response.headers.get("content-length"),
        "message": "Content retrieved. For binary files, use the download URL instead.",
    }


CONFIRMATIONS = {
    "jira_delete_attachment": Confirmation(
        flag="confirmDelete",
        message="Deletion not confirmed. Set confirmDelete: true to proceed.",
        context_key="attachmentId",
        argument="attachmentId",
    ),
}

HANDLERS: dict[str, JiraHandler] = {
    "jira_get_issue_links": get_issue_links,
    "jira_create_issue_link": create_issue_link,
    "jira_delete_issue_link": delete_issue_link,
    "jira_get_link_types": get_link_types,
    "jira_get_watchers": get_watchers,
    "jira_add_watcher": add_watcher,
    "jira_remove_watcher": remove_watcher,
    "jira_get_votes": get_votes,
    "jira_add_vote": add_vote,
    "jira_remove_vote": remove_vote,
    "jira_get_attachments": get_attachments,
    "jira_delete_attachment": delete_attachment,
    "jira_upload_attachment": upload_attachment,
    "jira_get_attachment_metadata": get_attachment_metadata,
    "jira_get_attachment_content": get_attachment_content,
}
