"""Tests for worklog date handling and the user time report."""

from datetime import datetime, timezone

import pytest

from jira_mcp.auth.credentials import BasicCredential
from jira_mcp.clients.jira_client import JiraClient
from jira_mcp.mcp.handlers.worklogs import (
    from_epoch_ms,
    get_updated_worklog_ids,
    get_user_worklogs,
    parse_date,
    parse_since,
    parse_timestamp,
    subtract_months,
)
from jira_mcp.utils.errors import ValidationError

NOW = datetime(2026, 3, 31, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
async def client(jira_server):
    credential = BasicCredential("https://acme.atlassian.net", "a@acme.com", "T")
    async with JiraClient(credential, transport=jira_server.transport) as jira:
        yield jira


def _worklog(worklog_id: str, issue_id: str, account_id: str, started: str, seconds: int) -> dict:
    return {
        "id": worklog_id,
        "issueId": issue_id,
        "author": {"accountId": account_id, "displayName": account_id},
        "timeSpent": f"{seconds // 60}m",
        "timeSpentSeconds": seconds,
        "started": started,
        "created": started,
    }


class TestDateParsing:
    """Tests for the date helpers used by worklog reports."""

    def test_parse_date_naive_is_utc(self):
        assert parse_date("2026-01-15") == datetime(2026, 1, 15, tzinfo=timezone.utc)

    def test_parse_date_with_z(self):
        assert parse_date("2026-01-15T10:00:00Z") == datetime(2026, 1, 15, 10, tzinfo=timezone.utc)

    def test_parse_date_invalid(self):
        with pytest.raises(ValidationError):
            parse_date("last tuesday")

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("7 days ago", datetime(2026, 3, 24, 9, 30, tzinfo=timezone.utc)),
            ("1 day ago", datetime(2026, 3, 30, 9, 30, tzinfo=timezone.utc)),
            ("2 weeks ago", datetime(2026, 3, 17, 9, 30, tzinfo=timezone.utc)),
            ("1 month ago", datetime(2026, 2, 28, 9, 30, tzinfo=timezone.utc)),
            ("2026-01-15", datetime(2026, 1, 15, tzinfo=timezone.utc)),
        ],
    )
    def test_parse_since(self, value: str, expected: datetime):
        assert parse_since(value, NOW) == expected

    def test_subtract_months_across_year(self):
        assert subtract_months(datetime(2026, 1, 31, tzinfo=timezone.utc), 2) == datetime(
            2025, 11, 30, tzinfo=timezone.utc
        )

    def test_parse_timestamp(self):
        assert parse_timestamp("1700000000000") == 1700000000000
        assert parse_timestamp("2026-01-01T00:00:00Z") == int(datetime(2026, 1, 1, tzinfo=timezone.utc).timestamp() * 1000)

    def test_from_epoch_ms(self):
        assert from_epoch_ms(None) is None
        assert from_epoch_ms(0) == "1970-01-01T00:00:00.000Z"


class TestUpdatedWorklogIds:
    """Tests for jira_get_updated_worklog_ids."""

    async def test_converts_iso_since(self, client, jira_server):
        jira_server.add(
            "GET",
            "/rest/api/3/worklog/updated",
            json={"values": [{"worklogId": 1, "updatedTime": 0}], "lastPage": True, "until": 0},
        )

        result = await get_updated_worklog_ids(client, {"since": "1970-01-01"})

        assert jira_server.requests[0].url.params["since"] == "0"
        assert result["total"] == 1
        assert result["worklogIds"][0]["updatedDate"] == "1970-01-01T00:00:00.000Z"


class TestUserWorklogs:
    """Tests for jira_get_user_worklogs."""

    async def test_report_for_current_user(self, client, jira_server):
        jira_server.add("GET", "/rest/api/3/myself", json={"accountId": "me", "displayName": "Me"})
        jira_server.add(
            "GET",
            "/rest/api/3/worklog/updated",
            json={"values": [{"worklogId": 1}, {"worklogId": 2}, {"worklogId": 3}], "lastPage": True},
        )
        jira_server.add(
            "POST",
            "/rest/api/3/worklog/list",
            json=[
                _worklog("2", "100", "me", "2026-03-20T10:00:00.000+00:00", 1800),
                _worklog("1", "100", "me", "2026-03-10T10:00:00.000+00:00", 3600),
                _worklog("3", "200", "someone-else", "2026-03-11T10:00:00.000+00:00", 600),
            ],
        )
        jira_server.add(
            "GET",
            "/rest/api/3/search/jql",
            json={"issues": [{"id": "100", "key": "PROJ-1", "fields": {"summary": "Fix login"}}]},
        )

        report = await get_user_worklogs(client, {"since": "2026-03-01", "includeIssueDetails": True})

        assert report["user"] == "Me"
        assert report["accountId"] == "me"
        assert [w["id"] for w in report["worklogs"]] == ["1", "2"]
        assert report["worklogs"][0]["issueKey"] == "PROJ-1"
        assert report["summary"]["totalWorklogs"] == 2
        assert report["summary"]["totalTimeSpentSeconds"] == 5400
        assert report["summary"]["totalTimeSpent"] == "1h 30m"
        assert report["summary"]["byIssue"][0]["key"] == "PROJ-1"
        assert jira_server.json_body(2) == {"ids": [1, 2, 3]}

    async def test_empty_period(self, client, jira_server):
        jira_server.add("GET", "/rest/api/3/worklog/updated", json={"values": [], "lastPage": True})

        report = await get_user_worklogs(client, {"accountId": "abc", "since": "2026-03-01"})

        assert report["worklogs"] == []
        assert report["summary"] == {"totalWorklogs": 0, "totalTimeSpentSeconds": 0, "totalTimeSpent": "0h"}
        assert report["period"]["since"] == "2026-03-01T00:00:00.000Z"

    async def test_invalid_until(self, client):
        with pytest.raises(ValidationError):
            await get_user_worklogs(client, {"accountId": "abc", "since": "2026-03-01", "until": "soon"})
