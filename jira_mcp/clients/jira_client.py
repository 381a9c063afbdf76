"""Jira REST API client scoped to one resolved credential."""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..auth.credentials import BasicCredential, Credential, OAuthCredential
from ..utils.adf import text_to_adf
from ..utils.errors import raise_for_http_status

logger = logging.getLogger(__name__)

OAUTH_API_URL = "https://api.atlassian.com"

API = "/rest/api/3"
AGILE = "/rest/agile/1.0"


def path_param(value: Any) -> str:
    """URL-encode a value for use as a single path segment."""
    return quote(str(value), safe="")


def clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    """Drop unset query parameters so they are not sent as empty strings."""
    if params is None:
        return None
    return {key: value for key, value in params.items() if value is not None}


def base_url_for(credential: Credential) -> str:
    """Root URL that REST paths are appended to for this credential."""
    if isinstance(credential, OAuthCredential):
        return f"{OAUTH_API_URL}/ex/jira/{credential.cloud_id}"
    return credential.base_url


class JiraClient:
    """Client for Jira REST API.

    Basic credentials talk to the site URL with HTTP basic auth; OAuth
    credentials go through the Atlassian API gateway with a bearer token.
    """

    def __init__(
        self,
        credential: Credential,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Jira client.

        Args:
            credential: Resolved credential.
            timeout: HTTP timeout in seconds.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self.credential = credential
        self.auth_type = credential.auth_type
        self.base_url = base_url_for(credential)
        self.headers = {"Accept": "application/json"}

        auth: tuple[str, str] | None = None
        if isinstance(credential, BasicCredential):
            auth = (credential.email, credential.api_token)
        else:
            self.headers["Authorization"] = f"Bearer {credential.access_token}"

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "JiraClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def send(self, method: str, path: str, params: dict[str, Any] | None = None, **kwargs) -> httpx.Response:
        """Send a request and return the raw response without status checks."""
        return await self._client.request(method, path, params=clean_params(params), **kwargs)

    def check(self, response: httpx.Response) -> None:
        """Raise the matching JiraMCPError for an error response."""
        if response.is_error:
            logger.debug(f"Jira returned {response.status_code} for {response.request.method} {response.url.path}")
            raise_for_http_status(response.status_code, response.text, auth_type=self.auth_type)

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        **kwargs,
    ) -> Any:
        """Make an HTTP request.

        Args:
            method: HTTP method.
            path: Path below the credential's base URL (e.g. /rest/api/3/myself).
            params: Query parameters; None values are dropped.
            **kwargs: Additional request arguments (json, files, headers).

        Returns:
            Parsed JSON body, or {} for empty responses.

        Raises:
            JiraMCPError: If Jira returns an error status.
        """
        response = await self.send(method, path, params=params, **kwargs)
        self.check(response)

        if response.status_code == 204 or not response.content:
            return {}

        return response.json()

    async def get(self, path: str, params: dict[str, Any] | None = None, **kwargs) -> Any:
        return await self._request("GET", path, params=params, **kwargs)

    async def post(self, path: str, json: Any = None, params: dict[str, Any] | None = None, **kwargs) -> Any:
        return await self._request("POST", path, params=params, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, params: dict[str, Any] | None = None, **kwargs) -> Any:
        return await self._request("PUT", path, params=params, json=json, **kwargs)

    async def delete(self, path: str, params: dict[str, Any] | None = None, **kwargs) -> Any:
        return await self._request("DELETE", path, params=params, **kwargs)

    async def get_myself(self) -> dict[str, Any]:
        """Get the profile of the authenticated user."""
        return await self.get(f"{API}/myself")

    async def get_issue(
        self,
        issue_key: str,
        fields: list[str],
        expand: str | None = None,
    ) -> dict[str, Any]:
        """Get issue details.

        Args:
            issue_key: Issue key or ID (e.g., PROJ-123).
            fields: Fields to return.
            expand: Optional expand options.

        Returns:
            Issue data.
        """
        params = {"fields": ",".join(fields), "expand": expand}
        return await self.get(f"{API}/issue/{path_param(issue_key)}", params=params)

    async def search_issues(
        self,
        jql: str,
        max_results: int | None = None,
        start_at: int | None = None,
        fields: list[str] | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        """Search issues using JQL.

        Args:
            jql: JQL query string.
            max_results: Maximum results.
            start_at: Offset for pagination.
            fields: Fields to return.
            **extra: Other query parameters (expand, nextPageToken, reconcileIssues).

        Returns:
            Raw search response.
        """
        params = {
            "jql": jql,
            "maxResults": max_results,
            "startAt": start_at,
            **extra,
        }
        if fields:
            params["fields"] = ",".join(fields)
        return await self.get(f"{API}/search/jql", params=params)

    async def add_comment(self, issue_key: str, body: str) -> dict[str, Any]:
        """Add a plain-text comment to an issue.

        Args:
            issue_key: Issue key.
            body: Comment text, converted to ADF.

        Returns:
            Created comment data.
        """
        return await self.post(f"{API}/issue/{path_param(issue_key)}/comment", json={"body": text_to_adf(body)})

    async def get_issue_transitions(self, issue_key: str, expand: str | None = None) -> list[dict[str, Any]]:
        """Get available transitions for an issue."""
        data = await self.get(f"{API}/issue/{path_param(issue_key)}/transitions", params={"expand": expand})
        return data.get("transitions", []) if isinstance(data, dict) else []

    async def transition_issue(self, issue_key: str, payload: dict[str, Any]) -> None:
        """Execute a transition. ``payload`` carries transition, fields and update."""
        await self.post(f"{API}/issue/{path_param(issue_key)}/transitions", json=payload)

    async def assign_issue(self, issue_key: str, account_id: str | None) -> None:
        """Assign an issue to a user.

        Args:
            issue_key: Issue key.
            account_id: User's account ID, "-1" for automatic, or None to unassign.
        """
        await self.put(f"{API}/issue/{path_param(issue_key)}/assignee", json={"accountId": account_id})
