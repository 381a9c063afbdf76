"""Tests for the error taxonomy."""

import pytest

from jira_mcp.utils.errors import (
    ConfirmationRequiredError,
    ForbiddenError,
    JiraAPIError,
    MissingAuthError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    ToolError,
    UnauthorizedError,
    error_to_result,
    raise_for_http_status,
)


class TestRaiseForHttpStatus:
    """Tests for mapping HTTP statuses to error kinds."""

    @pytest.mark.parametrize(
        "status_code, error_class, kind",
        [
            (401, UnauthorizedError, "unauthorized"),
            (403, ForbiddenError, "forbidden"),
            (404, NotFoundError, "not_found"),
            (429, RateLimitedError, "rate_limited"),
            (500, ServerError, "server_error"),
            (503, ServerError, "server_error"),
            (400, JiraAPIError, "jira_error"),
            (409, JiraAPIError, "jira_error"),
        ],
    )
    def test_status_mapping(self, status_code: int, error_class: type, kind: str):
        with pytest.raises(error_class) as exc_info:
            raise_for_http_status(status_code, "body")
        assert exc_info.value.kind == kind
        assert exc_info.value.details["status_code"] == status_code

    def test_unauthorized_guidance_depends_on_auth_type(self):
        with pytest.raises(UnauthorizedError) as oauth_error:
            raise_for_http_status(401, "", auth_type="oauth")
        with pytest.raises(UnauthorizedError) as basic_error:
            raise_for_http_status(401, "", auth_type="basic")

        assert "jira_oauth_refresh" in oauth_error.value.message
        assert "API token" in basic_error.value.message

    def test_client_error_includes_body(self):
        with pytest.raises(JiraAPIError) as exc_info:
            raise_for_http_status(400, '{"errorMessages":["Field summary is required"]}')
        assert "Field summary is required" in exc_info.value.message
        assert exc_info.value.message.startswith("Jira API error (400)")

    def test_server_error_hides_body(self):
        with pytest.raises(ServerError) as exc_info:
            raise_for_http_status(502, "<html>stack trace</html>")
        assert "stack trace" not in exc_info.value.message


class TestErrorToResult:
    """Tests for error_to_result."""

    def test_missing_auth(self):
        result = error_to_result(MissingAuthError())
        assert result["error"] == "unauthorized"
        assert "credentials are missing" in result["message"]

    def test_context_merged(self):
        error = ConfirmationRequiredError("Not confirmed", context={"issueKey": "PROJ-1"})
        assert error_to_result(error) == {
            "error": "confirmation_required",
            "message": "Not confirmed",
            "issueKey": "PROJ-1",
        }

    def test_tool_error_kind(self):
        assert error_to_result(ToolError("no_changes", "No fields provided to update")) == {
            "error": "no_changes",
            "message": "No fields provided to update",
        }

    def test_unknown_exception(self):
        assert error_to_result(RuntimeError("boom")) == {"error": "unknown", "message": "boom"}
        assert error_to_result(RuntimeError())["message"] == "Unknown error"
