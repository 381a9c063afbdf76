"""Worklog tool handlers: logging time and worklog reporting."""

import calendar
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any

from ...clients.formatters import format_duration, format_worklog, format_worklog_detail
from ...clients.jira_client import API, JiraClient, path_param
from ...utils.adf import normalize_field_text, text_to_adf
from ...utils.errors import JiraMCPError, ValidationError
from .base import JiraHandler

logger = logging.getLogger(__name__)

# Jira's bulk worklog endpoint accepts at most 1000 IDs per request
WORKLOG_BATCH_SIZE = 1000
ISSUE_BATCH_SIZE = 50
MAX_UPDATED_PAGES = 10

_RELATIVE_DATE = re.compile(r"^(\d+)\s*(days?|weeks?|months?)\s*ago$", re.IGNORECASE)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_date(value: str) -> datetime:
    """Parse an ISO 8601 date or datetime; naive values are taken as UTC.

    Raises:
        ValidationError: If the value is not a recognizable date.
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid date: {value}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def subtract_months(moment: datetime, months: int) -> datetime:
    """Step back whole calendar months, clamping to the last day of short months."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def parse_since(value: str, now: datetime | None = None) -> datetime:
    """Parse a report start such as '30 days ago', '2 weeks ago' or '2026-01-15'."""
    now = now or _utc_now()
    match = _RELATIVE_DATE.match(value.strip())
    if not match:
        return parse_date(value)

    amount = int(match.group(1))
    unit = match.group(2).lower()
    if unit.startswith("day"):
        return now - timedelta(days=amount)
    if unit.startswith("week"):
        return now - timedelta(weeks=amount)
    return subtract_months(now, amount)


def started_at(worklog: dict[str, Any], default: datetime) -> datetime:
    """Start instant of a worklog for ordering; unparseable values sort as ``default``."""
    try:
        return parse_date(worklog.get("started") or "")
    except ValidationError:
        return default


def to_epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def from_epoch_ms(value: int | None) -> str | None:
    """ISO 8601 (UTC, millisecond precision) for an epoch-millisecond timestamp."""
    if value is None:
        return None
    moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> int:
    """Epoch milliseconds from either a digit string or an ISO 8601 date."""
    if value.strip().isdigit():
        return int(value.strip())
    return to_epoch_ms(parse_date(value))


# =========== Issue worklogs ===========


async def add_worklog(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Log time against an issue."""
    payload: dict[str, Any] = {"timeSpent": arguments["timeSpent"]}
    if arguments.get("started"):
        payload["started"] = arguments["started"]
    if arguments.get("comment"):
        payload["comment"] = text_to_adf(arguments["comment"])

    worklog = await client.post(f"{API}/issue/{path_param(arguments['issueIdOrKey'])}/worklog", json=payload)
    author = worklog.get("author") or {}
    return {
        "id": worklog.get("id", ""),
        "issueId": worklog.get("issueId", ""),
        "timeSpent": worklog.get("timeSpent", ""),
        "started": worklog.get("started", ""),
        "author": author.get("displayName") or author.get("emailAddress") or "",
        "created": worklog.get("created", ""),
    }


async def get_worklogs(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.get(
        f"{API}/issue/{path_param(arguments['issueIdOrKey'])}/worklog",
        params={"startAt": arguments.get("startAt"), "maxResults": arguments.get("maxResults")},
    )
    worklogs = [format_worklog(worklog) for worklog in data.get("worklogs") or []]
    return {"total": data.get("total", len(worklogs)), "worklogs": worklogs}


# =========== Reporting ===========


async def get_updated_worklog_ids(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    since = parse_timestamp(arguments["since"])
    data = await client.get(
        f"{API}/worklog/updated",
        params={"since": since, "expand": arguments.get("expand") or None},
    )
    values = data.get("values") or []
    return {
        "since": since,
        "sinceDate": from_epoch_ms(since),
        "until": data.get("until"),
        "untilDate": from_epoch_ms(data.get("until")) if data.get("until") else None,
        "lastPage": data.get("lastPage"),
        "nextPage": data.get("nextPage"),
        "worklogIds": [
            {
                "worklogId": value.get("worklogId"),
                "updatedTime": value.get("updatedTime"),
                "updatedDate": from_epoch_ms(value.get("updatedTime")),
            }
            for value in values
        ],
        "total": len(values),
    }


async def get_worklogs_by_ids(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await client.post(
        f"{API}/worklog/list",
        json={"ids": arguments["ids"]},
        params={"expand": arguments.get("expand") or None},
    )
    worklogs = [format_worklog_detail(worklog) for worklog in data] if isinstance(data, list) else []
    return {"worklogs": worklogs, "total": len(worklogs)}


async def get_deleted_worklog_ids(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    since = parse_timestamp(arguments["since"])
    data = await client.get(f"{API}/worklog/deleted", params={"since": since})
    values = data.get("values") or []
    return {
        "since": since,
        "sinceDate": from_epoch_ms(since),
        "until": data.get("until"),
        "lastPage": data.get("lastPage"),
        "nextPage": data.get("nextPage"),
        "deletedWorklogIds": [
            {"worklogId": value.get("worklogId"), "updatedTime": value.get("updatedTime")} for value in values
        ],
        "total": len(values),
    }


async def collect_updated_worklog_ids(client: JiraClient, since_ms: int, until_ms: int | None) -> list[int]:
    """Page through updated worklog IDs, following ``nextPage`` links.

    At most MAX_UPDATED_PAGES pages are read. IDs updated after ``until_ms``
    are skipped.
    """
    ids: list[int] = []
    page: str | None = f"{API}/worklog/updated"
    params: dict[str, Any] | None = {"since": since_ms}
    pages = 0

    while page and pages < MAX_UPDATED_PAGES:
        data = await client.get(page, params=params)
        for value in data.get("values") or []:
            if until_ms and value.get("updatedTime", 0) > until_ms:
                continue
            ids.append(value.get("worklogId"))

        if data.get("lastPage"):
            break
        # nextPage is an absolute URL carrying its own query string
        page = data.get("nextPage")
        params = None
        pages += 1

    return ids


async def fetch_issue_titles(client: JiraClient, issue_ids: list[str]) -> dict[str, dict[str, str]]:
    """Map issue ID to key and summary, in JQL batches.

    A batch that fails is skipped; the report is still produced without it.
    """
    titles: dict[str, dict[str, str]] = {}
    for i in range(0, len(issue_ids), ISSUE_BATCH_SIZE):
        batch = issue_ids[i : i + ISSUE_BATCH_SIZE]
        try:
            data = await client.search_issues(
                f"id in ({','.join(str(issue_id) for issue_id in batch)})",
                max_results=ISSUE_BATCH_SIZE,
                fields=["summary"],
            )
        except JiraMCPError as e:
            logger.warning(f"Could not fetch issue details for {len(batch)} worklog issues: {e}")
            continue

        for issue in data.get("issues") or []:
            titles[str(issue.get("id"))] = {
                "key": issue.get("key"),
                "summary": (issue.get("fields") or {}).get("summary") or "",
            }
    return titles


async def get_user_worklogs(client: JiraClient, arguments: dict[str, Any]) -> dict[str, Any]:
    """Time report for one user over a period.

    Discovers worklogs updated since the start date, fetches their details
    in bulk, keeps the ones authored by the user and totals them.

    Args:
        client: Jira client.
        arguments: Tool arguments with 'since' and optional 'accountId',
            'until' and 'includeIssueDetails'.

    Returns:
        Dict with user, period, worklogs (sorted by start) and a summary.
    """
    account_id = arguments.get("accountId")
    user_name = ""
    if not account_id:
        me = await client.get_myself()
        account_id = me.get("accountId")
        user_name = me.get("displayName") or me.get("emailAddress") or ""

    now = _utc_now()
    since = parse_since(arguments["since"], now)
    until = parse_date(arguments["until"]) if arguments.get("until") else None
    include_details = arguments.get("includeIssueDetails", False)

    period = {
        "since": from_epoch_ms(to_epoch_ms(since)),
        "until": from_epoch_ms(to_epoch_ms(until or now)),
    }
    report: dict[str, Any] = {"user": user_name or account_id, "accountId": account_id, "period": period}

    worklog_ids = await collect_updated_worklog_ids(client, to_epoch_ms(since), to_epoch_ms(until) if until else None)
    if not worklog_ids:
        return {
            **report,
            "worklogs": [],
            "summary": {"totalWorklogs": 0, "totalTimeSpentSeconds": 0, "totalTimeSpent": "0h"},
        }

    details: list[dict[str, Any]] = []
    for i in range(0, len(worklog_ids), WORKLOG_BATCH_SIZE):
        batch = await client.post(f"{API}/worklog/list", json={"ids": worklog_ids[i : i + WORKLOG_BATCH_SIZE]})
        if isinstance(batch, list):
            details.extend(batch)

    user_worklogs = [w for w in details if (w.get("author") or {}).get("accountId") == account_id]

    titles: dict[str, dict[str, str]] = {}
    if include_details and user_worklogs:
        unique_ids = list(dict.fromkeys(str(w.get("issueId")) for w in user_worklogs))
        titles = await fetch_issue_titles(client, unique_ids)

    worklogs = []
    for w in user_worklogs:
        row = {
            "id": w.get("id"),
            "issueId": w.get("issueId"),
            "timeSpent": w.get("timeSpent"),
            "timeSpentSeconds": w.get("timeSpentSeconds"),
            "started": w.get("started"),
            "created": w.get("created"),
            "comment": normalize_field_text(w.get("comment")),
        }
        title = titles.get(str(w.get("issueId")))
        if include_details and title:
            row["issueKey"] = title["key"]
            row["issueSummary"] = title["summary"]
        worklogs.append(row)

    worklogs.sort(key=lambda row: started_at(row, since))

    total_seconds = sum(w.get("timeSpentSeconds") or 0 for w in user_worklogs)
    summary: dict[str, Any] = {
        "totalWorklogs": len(worklogs),
        "totalTimeSpentSeconds": total_seconds,
        "totalTimeSpent": format_duration(total_seconds),
    }

    if include_details:
        by_issue: dict[str, dict[str, Any]] = {}
        for row in worklogs:
            issue_id = str(row["issueId"])
            entry = by_issue.setdefault(
                issue_id,
                {
                    "key": row.get("issueKey") or issue_id,
                    "summary": row.get("issueSummary") or "",
                    "totalSeconds": 0,
                    "totalTime": "",
                },
            )
            entry["totalSeconds"] += row.get("timeSpentSeconds") or 0
        for entry in by_issue.values():
            entry["totalTime"] = format_duration(entry["totalSeconds"])
        summary["byIssue"] = list(by_issue.values())

    return {**report, "worklogs": worklogs, "summary": summary}


HANDLERS: dict[str, JiraHandler] = {
    "jira_add_worklog": add_worklog,
    "jira_get_worklogs": get_worklogs,
    "jira_get_updated_worklog_ids": get_updated_worklog_ids,
    "jira_get_worklogs_by_ids": get_worklogs_by_ids,
    "jira_get_user_worklogs": get_user_worklogs,
    "jira_get_deleted_worklog_ids": get_deleted_worklog_ids,
}
