"""Tests for tool dispatch: validation, confirmation, auth and Jira calls."""

import base64
from datetime import timedelta
from urllib.parse import parse_qs, urlsplit

import pytest

from jira_mcp.auth.credentials import BasicCredential, OAuthCredential
from jira_mcp.mcp.handlers import dispatch_tool
from jira_mcp.utils.adf import text_to_adf

ISSUE_PATH = "/rest/api/3/issue/PROJ-1"
TOKEN_PATH = "/oauth/token"
RESOURCES_PATH = "/oauth/token/accessible-resources"
SITES = [
    {"id": "cloud-1", "name": "Acme", "url": "https://acme.atlassian.net", "scopes": ["read:jira-work"]},
    {"id": "cloud-2", "name": "Other", "url": "https://other.atlassian.net", "scopes": []},
]


def _basic_header(email: str, token: str) -> str:
    return "Basic " + base64.b64encode(f"{email}:{token}".encode()).decode()


class TestGetIssue:
    """End-to-end get-issue calls with Basic credentials from the environment."""

    async def test_single_get_with_basic_auth(self, active_session, jira_server, basic_env):
        jira_server.add(
            "GET",
            ISSUE_PATH,
            json={"key": "PROJ-1", "fields": {"summary": "Fix login", "description": text_to_adf("Broken")}},
        )

        result = await dispatch_tool("jira_get_issue", {"issueIdOrKey": "PROJ-1"})

        assert result == {
            "key": "PROJ-1",
            "summary": "Fix login",
            "description": "Broken",
            "acceptanceCriteria": None,
        }
        assert len(jira_server.requests) == 1
        request = jira_server.requests[0]
        assert request.method == "GET"
        assert str(request.url).startswith("https://acme.atlassian.net/rest/api/3/issue/PROJ-1")
        assert request.headers["Authorization"] == _basic_header("a@acme.com", "T")
        assert request.url.params["fields"] == "summary,description"

    async def test_acceptance_criteria_field(self, active_session, jira_server, basic_env, monkeypatch):
        monkeypatch.setenv("JIRA_ACCEPTANCE_CRITERIA_FIELD", "customfield_10042")
        jira_server.add(
            "GET",
            ISSUE_PATH,
            json={"key": "PROJ-1", "fields": {"summary": "x", "customfield_10042": text_to_adf("It works")}},
        )

        result = await dispatch_tool("jira_get_issue", {"issueIdOrKey": "PROJ-1"})

        assert result["acceptanceCriteria"] == "It works"
        assert jira_server.requests[0].url.params["fields"] == "summary,description,customfield_10042"

    async def test_issue_key_is_path_encoded(self, active_session, jira_server, basic_env):
        await dispatch_tool("jira_get_issue", {"issueIdOrKey": "PROJ 1/2"})
        assert jira_server.requests[0].url.raw_path.startswith(b"/rest/api/3/issue/PROJ%201%2F2")

    @pytest.mark.parametrize(
        "status_code, kind",
        [(401, "unauthorized"), (403, "forbidden"), (404, "not_found"), (429, "rate_limited"), (500, "server_error")],
    )
    async def test_http_errors_become_payloads(self, active_session, jira_server, basic_env, status_code, kind):
        jira_server.add("GET", ISSUE_PATH, status_code=status_code, json={"errorMessages": ["nope"]})

        result = await dispatch_tool("jira_get_issue", {"issueIdOrKey": "PROJ-1"})

        assert result["error"] == kind
        assert len(jira_server.requests) == 1

    async def test_missing_auth(self, active_session, jira_server):
        result = await dispatch_tool("jira_get_issue", {"issueIdOrKey": "PROJ-1"})

        assert result["error"] == "unauthorized"
        assert "credentials are missing" in result["message"]
        assert jira_server.requests == []

    async def test_malformed_env_base_url(self, active_session, jira_server, basic_env, monkeypatch):
        monkeypatch.setenv("JIRA_BASE_URL", "acme")

        result = await dispatch_tool("jira_whoami", {})

        assert result["error"] == "invalid_input"
        assert jira_server.requests == []


class TestValidation:
    """Tests for argument validation before any network call."""

    async def test_missing_required_argument(self, active_session, jira_server, basic_env):
        result = await dispatch_tool("jira_get_issue", {})

        assert result == {"error": "invalid_input", "message": "'issueIdOrKey' is a required property"}
        assert jira_server.requests == []

    async def test_bad_type(self, active_session, jira_server, basic_env):
        result = await dispatch_tool("jira_search_issues", {"jql": "project = PROJ", "maxResults": 0})

        assert result["error"] == "invalid_input"
        assert "maxResults" in result["message"]
        assert jira_server.requests == []

    async def test_value_not_echoed(self, active_session):
        result = await dispatch_tool(
            "_internal_jira_set_auth",
            {"baseUrl": "https://acme.atlassian.net", "email": "super-secret-value", "apiToken": "t"},
        )

        assert result["error"] == "invalid_input"
        assert "super-secret-value" not in result["message"]
        assert active_session.store.current is None

    async def test_malformed_redirect_uri(self, active_session, oauth_server):
        result = await dispatch_tool("jira_oauth_get_auth_url", {"clientId": "c", "redirectUri": "not a url"})

        assert result["error"] == "invalid_input"
        assert "redirectUri" in result["message"]
        assert "authUrl" not in result

    async def test_malformed_uri_stops_code_exchange(self, active_session, oauth_server):
        result = await dispatch_tool(
            "jira_oauth_exchange_code",
            {"clientId": "c", "clientSecret": "s", "code": "auth-code", "redirectUri": "::::"},
        )

        assert result["error"] == "invalid_input"
        assert oauth_server.requests == []
        assert active_session.store.current is None

    async def test_unknown_tool(self, active_session):
        with pytest.raises(ValueError, match="Unknown tool: jira_nope"):
            await dispatch_tool("jira_nope", {})

    async def test_none_arguments(self, active_session, jira_server, basic_env):
        jira_server.add("GET", "/rest/api/3/myself", json={"accountId": "abc"})
        assert await dispatch_tool("jira_whoami", None) == {"accountId": "abc"}


class TestConfirmation:
    """Tests for destructive tools requiring confirmDelete."""

    @pytest.mark.parametrize(
        "tool, arguments, context",
        [
            ("jira_delete_issue", {"issueIdOrKey": "PROJ-1"}, {"issueKey": "PROJ-1"}),
            ("jira_delete_sprint", {"sprintId": 7}, {"sprintId": 7}),
            ("jira_delete_filter", {"filterId": "10000"}, {"filterId": "10000"}),
            ("jira_delete_attachment", {"attachmentId": "55"}, {"attachmentId": "55"}),
        ],
    )
    async def test_refused_without_flag(self, active_session, jira_server, oauth_server, tool, arguments, context):
        for flag in ({}, {"confirmDelete": False}):
            result = await dispatch_tool(tool, {**arguments, **flag})

            assert result["error"] == "confirmation_required"
            assert "confirmDelete" in result["message"]
            for key, value in context.items():
                assert result[key] == value

        assert jira_server.requests == []
        assert oauth_server.requests == []

    async def test_confirmed_delete(self, active_session, jira_server, basic_env):
        jira_server.add("DELETE", ISSUE_PATH, status_code=204)

        result = await dispatch_tool("jira_delete_issue", {"issueIdOrKey": "PROJ-1", "confirmDelete": True})

        assert result == {"success": True, "message": "Issue PROJ-1 deleted successfully"}
        assert jira_server.requests[0].url.params["deleteSubtasks"] == "false"


class TestIssueWrites:
    """Tests for create/update/transition handlers."""

    async def test_create_issue_converts_description(self, active_session, jira_server, basic_env):
        jira_server.add("POST", "/rest/api/3/issue", status_code=201, json={"id": "10001", "key": "PROJ-2"})

        result = await dispatch_tool(
            "jira_create_issue",
            {
                "projectKey": "PROJ",
                "issueType": "Task",
                "summary": "New",
                "description": "Details",
                "priority": "3",
                "customFields": {"10016": 5},
            },
        )

        assert result["key"] == "PROJ-2"
        fields = jira_server.json_body()["fields"]
        assert fields["description"] == text_to_adf("Details")
        assert fields["issuetype"] == {"name": "Task"}
        assert fields["priority"] == {"id": "3"}
        assert fields["customfield_10016"] == 5

    async def test_update_without_changes(self, active_session, jira_server, basic_env):
        result = await dispatch_tool("jira_update_issue", {"issueIdOrKey": "PROJ-1"})

        assert result["error"] == "no_changes"
        assert jira_server.requests == []

    async def test_update_list_operations(self, active_session, jira_server, basic_env):
        jira_server.add("PUT", ISSUE_PATH, status_code=204)

        await dispatch_tool(
            "jira_update_issue",
            {"issueIdOrKey": "PROJ-1", "summary": "Renamed", "labels": {"add": ["a"], "remove": ["b"]}},
        )

        body = jira_server.json_body()
        assert body["fields"] == {"summary": "Renamed"}
        assert body["update"]["labels"] == [{"add": "a"}, {"remove": "b"}]

    async def test_transition_with_comment(self, active_session, jira_server, basic_env):
        jira_server.add("POST", f"{ISSUE_PATH}/transitions", status_code=204)

        result = await dispatch_tool(
            "jira_transition_issue",
            {"issueIdOrKey": "PROJ-1", "transitionId": "31", "resolution": "Done", "comment": "Shipped"},
        )

        assert result["success"] is True
        body = jira_server.json_body()
        assert body["transition"] == {"id": "31"}
        assert body["fields"] == {"resolution": {"name": "Done"}}
        assert body["update"]["comment"][0]["add"]["body"] == text_to_adf("Shipped")

    async def test_search_sends_jql(self, active_session, jira_server, basic_env):
        jira_server.add(
            "GET",
            "/rest/api/3/search/jql",
            json={"issues": [{"key": "PROJ-1", "fields": {"summary": "x"}}], "nextPageToken": "abc"},
        )

        result = await dispatch_tool("jira_search_issues", {"jql": "project = PROJ", "maxResults": 5})

        assert result["total"] == 1
        assert result["nextPageToken"] == "abc"
        params = jira_server.requests[0].url.params
        assert params["jql"] == "project = PROJ"
        assert params["maxResults"] == "5"


class TestAgileAndCollaboration:
    """Tests for a sample of agile, collaboration and filter handlers."""

    async def test_rank_requires_one_anchor(self, active_session, jira_server, basic_env):
        for anchors in ({}, {"rankBeforeIssue": "PROJ-1", "rankAfterIssue": "PROJ-2"}):
            result = await dispatch_tool("jira_rank_issues", {"issueKeys": ["PROJ-3"], **anchors})
            assert result["error"] == "invalid_parameters"
        assert jira_server.requests == []

    async def test_rank_before(self, active_session, jira_server, basic_env):
        jira_server.add("PUT", "/rest/agile/1.0/issue/rank", status_code=204)

        result = await dispatch_tool("jira_rank_issues", {"issueKeys": ["PROJ-3"], "rankBeforeIssue": "PROJ-1"})

        assert result["message"] == "1 issue(s) ranked before PROJ-1"
        assert jira_server.json_body() == {"issues": ["PROJ-3"], "rankBeforeIssue": "PROJ-1"}

    async def test_update_sprint_without_changes(self, active_session, jira_server, basic_env):
        result = await dispatch_tool("jira_update_sprint", {"sprintId": 3})
        assert result["error"] == "no_changes"

    async def test_add_watcher_sends_json_string(self, active_session, jira_server, basic_env):
        jira_server.add("POST", f"{ISSUE_PATH}/watchers", status_code=204)

        result = await dispatch_tool("jira_add_watcher", {"issueIdOrKey": "PROJ-1", "accountId": "abc"})

        assert result["success"] is True
        assert jira_server.requests[0].content == b'"abc"'
        assert jira_server.requests[0].headers["Content-Type"] == "application/json"

    async def test_upload_missing_file(self, active_session, jira_server, basic_env, tmp_path):
        result = await dispatch_tool(
            "jira_upload_attachment",
            {"issueIdOrKey": "PROJ-1", "filePath": str(tmp_path / "missing.txt")},
        )

        assert result["error"] == "invalid_input"
        assert jira_server.requests == []

    async def test_upload_file(self, active_session, jira_server, basic_env, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        jira_server.add(
            "POST",
            f"{ISSUE_PATH}/attachments",
            json=[{"id": "9", "filename": "notes.txt", "size": 5, "author": {"displayName": "Me"}}],
        )

        result = await dispatch_tool("jira_upload_attachment", {"issueIdOrKey": "PROJ-1", "filePath": str(path)})

        assert result["attachments"][0]["author"] == "Me"
        request = jira_server.requests[0]
        assert request.headers["X-Atlassian-Token"] == "no-check"
        assert b"hello" in request.content

    async def test_attachment_content_redirect(self, active_session, jira_server, basic_env):
        jira_server.add(
            "GET",
            "/rest/api/3/attachment/content/9",
            status_code=303,
            headers={"Location": "https://files.example.com/9"},
        )

        result = await dispatch_tool("jira_get_attachment_content", {"id": "9"})

        assert result["downloadUrl"] == "https://files.example.com/9"
        assert len(jira_server.requests) == 1

    async def test_gadget_requires_module_key_or_uri(self, active_session, jira_server, basic_env):
        result = await dispatch_tool("jira_add_dashboard_gadget", {"dashboardId": "1"})

        assert result == {"error": "invalid_input", "message": "Either moduleKey or uri must be provided"}
        assert jira_server.requests == []


class TestAuthTools:
    """Tests for the auth management tools."""

    async def test_set_status_clear(self, active_session, jira_server):
        result = await dispatch_tool(
            "_internal_jira_set_auth",
            {"baseUrl": "https://acme.atlassian.net/", "email": "a@acme.com", "apiToken": "secret-token"},
        )
        assert result["success"] is True

        status = await dispatch_tool("jira_auth_status", {})
        assert status == {
            "authenticated": True,
            "type": "basic",
            "baseUrl": "https://acme.atlassian.net",
            "email": "a@acme.com",
        }

        await dispatch_tool("jira_clear_auth", {})
        status = await dispatch_tool("jira_auth_status", {})
        assert status["authenticated"] is False

    async def test_set_auth_rejects_malformed_url(self, active_session):
        result = await dispatch_tool(
            "_internal_jira_set_auth",
            {"baseUrl": "acme.atlassian.net", "email": "a@acme.com", "apiToken": "t"},
        )

        assert result["error"] == "invalid_input"
        assert active_session.store.current is None

    async def test_persist_without_vault(self, active_session):
        active_session.store.vault = None

        result = await dispatch_tool(
            "_internal_jira_set_auth",
            {"baseUrl": "https://acme.atlassian.net", "email": "a@acme.com", "apiToken": "t", "persist": True},
        )

        assert result["error"] == "persistence_unavailable"
        assert isinstance(active_session.store.current, BasicCredential)

    async def test_persist_with_vault(self, active_session, vault):
        await dispatch_tool(
            "_internal_jira_set_auth",
            {"baseUrl": "https://acme.atlassian.net", "email": "a@acme.com", "apiToken": "t", "persist": True},
        )
        assert len(vault.entries) == 1

    async def test_get_auth_url(self, active_session):
        result = await dispatch_tool(
            "jira_oauth_get_auth_url",
            {"clientId": "client", "redirectUri": "https://localhost/callback", "state": "xyz"},
        )

        query = parse_qs(urlsplit(result["authUrl"]).query)
        assert query["state"] == ["xyz"]
        assert query["response_type"] == ["code"]
        assert query["prompt"] == ["consent"]
        assert query["audience"] == ["api.atlassian.com"]
        assert "offline_access" in query["scope"][0].split()
        assert result["state"] == "xyz"

    async def test_get_auth_url_generates_state(self, active_session):
        result = await dispatch_tool(
            "jira_oauth_get_auth_url",
            {"clientId": "client", "redirectUri": "https://localhost/callback"},
        )
        assert result["state"]
        assert f"state={result['state']}" in result["authUrl"]

    async def test_exchange_code_matches_site(self, active_session, oauth_server, clock):
        oauth_server.add(
            "POST",
            TOKEN_PATH,
            json={"access_token": "access-1", "refresh_token": "refresh-1", "expires_in": 3600},
        )
        oauth_server.add("GET", RESOURCES_PATH, json=SITES)

        result = await dispatch_tool(
            "jira_oauth_exchange_code",
            {
                "clientId": "client",
                "clientSecret": "secret",
                "code": "auth-code",
                "redirectUri": "https://localhost/callback",
                "siteUrl": "https://other.atlassian.net/",
            },
        )

        assert result["site"] == {"name": "Other", "url": "https://other.atlassian.net", "cloudId": "cloud-2"}
        assert result["hasRefreshToken"] is True
        credential = active_session.store.current
        assert isinstance(credential, OAuthCredential)
        assert credential.cloud_id == "cloud-2"
        assert credential.expires_at == clock() + timedelta(seconds=3600)
        assert oauth_server.json_body(0)["grant_type"] == "authorization_code"

    async def test_exchange_code_unknown_site(self, active_session, oauth_server):
        oauth_server.add("POST", TOKEN_PATH, json={"access_token": "access-1", "expires_in": 3600})
        oauth_server.add("GET", RESOURCES_PATH, json=SITES)

        result = await dispatch_tool(
            "jira_oauth_exchange_code",
            {
                "clientId": "client",
                "clientSecret": "secret",
                "code": "auth-code",
                "redirectUri": "https://localhost/callback",
                "siteUrl": "https://missing.atlassian.net",
            },
        )

        assert result["error"] == "site_not_found"
        assert "https://acme.atlassian.net" in result["message"]
        assert active_session.store.current is None

    async def test_set_tokens_without_sites(self, active_session, oauth_server):
        oauth_server.add("GET", RESOURCES_PATH, json=[])

        result = await dispatch_tool(
            "jira_oauth_set_tokens",
            {"clientId": "client", "clientSecret": "secret", "accessToken": "access-1"},
        )

        assert result["error"] == "no_accessible_sites"

    async def test_set_tokens_with_cloud_id(self, active_session, oauth_server):
        result = await dispatch_tool(
            "jira_oauth_set_tokens",
            {"clientId": "client", "clientSecret": "secret", "accessToken": "access-1", "cloudId": "cloud-9"},
        )

        assert result["cloudId"] == "cloud-9"
        assert oauth_server.requests == []
        assert active_session.store.current.expires_at is None

    async def test_refresh_requires_oauth(self, active_session, basic_env):
        result = await dispatch_tool("jira_oauth_refresh", {})
        assert result["error"] == "invalid_auth_type"

    async def test_refresh_requires_refresh_token(self, active_session):
        active_session.store.set(OAuthCredential("client", "secret", "access-1", "cloud"))
        result = await dispatch_tool("jira_oauth_refresh", {})
        assert result["error"] == "no_refresh_token"

    async def test_manual_refresh(self, active_session, oauth_server):
        oauth_server.add("POST", TOKEN_PATH, json={"access_token": "access-2", "expires_in": 3600})
        active_session.store.set(OAuthCredential("client", "secret", "access-1", "cloud", refresh_token="r"))

        result = await dispatch_tool("jira_oauth_refresh", {})

        assert result == {"success": True, "message": "OAuth token refreshed successfully", "expiresIn": 3600}
        assert active_session.store.current.access_token == "access-2"

    async def test_manual_refresh_inside_window_refreshes_once(self, active_session, oauth_server, clock):
        oauth_server.add("POST", TOKEN_PATH, json={"access_token": "access-2", "expires_in": 3600})
        active_session.store.set(
            OAuthCredential(
                "client",
                "secret",
                "access-1",
                "cloud",
                refresh_token="r",
                expires_at=clock() + timedelta(minutes=2),
            )
        )

        result = await dispatch_tool("jira_oauth_refresh", {})

        assert result["success"] is True
        assert len(oauth_server.requests) == 1
        assert active_session.store.current.expires_at == clock() + timedelta(seconds=3600)

    async def test_list_sites(self, active_session, oauth_server):
        oauth_server.add("GET", RESOURCES_PATH, json=SITES)
        active_session.store.set(OAuthCredential("client", "secret", "access-1", "cloud-1"))

        result = await dispatch_tool("jira_oauth_list_sites", {})

        assert result["currentCloudId"] == "cloud-1"
        assert [site["cloudId"] for site in result["sites"]] == ["cloud-1", "cloud-2"]
        assert oauth_server.requests[0].headers["Authorization"] == "Bearer access-1"


class TestOAuthSession:
    """Tool calls made with an in-memory OAuth credential."""

    async def test_refresh_before_tool_call(self, active_session, jira_server, oauth_server, clock):
        oauth_server.add("POST", TOKEN_PATH, json={"access_token": "access-2", "expires_in": 3600})
        jira_server.add("GET", "/ex/jira/cloud-1/rest/api/3/myself", json={"accountId": "abc"})
        credential = OAuthCredential(
            "client",
            "secret",
            "access-1",
            "cloud-1",
            refresh_token="refresh-1",
            expires_at=clock() + timedelta(minutes=2),
        )
        active_session.store.set(credential)

        result = await dispatch_tool("jira_whoami", {})

        assert result == {"accountId": "abc"}
        assert len(oauth_server.requests) == 1
        assert credential.access_token == "access-2"
        request = jira_server.requests[0]
        assert request.url.host == "api.atlassian.com"
        assert request.headers["Authorization"] == "Bearer access-2"

    async def test_failed_refresh_still_calls_jira(self, active_session, jira_server, oauth_server, clock):
        oauth_server.add("POST", TOKEN_PATH, status_code=400, json={"error": "invalid_grant"})
        jira_server.add("GET", "/ex/jira/cloud-1/rest/api/3/myself", status_code=401)
        active_session.store.set(
            OAuthCredential(
                "client",
                "secret",
                "access-1",
                "cloud-1",
                refresh_token="refresh-1",
                expires_at=clock() - timedelta(minutes=1),
            )
        )

        result = await dispatch_tool("jira_whoami", {})

        assert result["error"] == "unauthorized"
        assert "OAuth" in result["message"]
        assert jira_server.requests[0].headers["Authorization"] == "Bearer access-1"
