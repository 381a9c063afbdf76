"""Atlassian OAuth 2.0 (3LO) token endpoints."""

import logging
import secrets
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

import httpx

from ..utils.errors import ToolError, raise_for_http_status
from .credentials import normalize_base_url

logger = logging.getLogger(__name__)


@dataclass
class TokenGrant:
    """Tokens returned by the Atlassian token endpoint."""

    access_token: str = field(repr=False)
    expires_in: int | None
    refresh_token: str | None = field(default=None, repr=False)


@dataclass
class AccessibleSite:
    """A Jira site the access token can reach."""

    cloud_id: str
    name: str
    url: str
    scopes: list[str]


class JiraOAuth:
    """Client for the Atlassian OAuth 2.0 (3LO) endpoints."""

    AUTH_URL = "https://auth.atlassian.com/authorize"
    TOKEN_URL = "https://auth.atlassian.com/oauth/token"
    RESOURCES_URL = "https://api.atlassian.com/oauth/token/accessible-resources"

    SCOPES = [
        "read:jira-work",
        "read:jira-user",
        "write:jira-work",
        "offline_access",
    ]

    def __init__(self, timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize Jira OAuth.

        Args:
            timeout: HTTP timeout in seconds.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    @staticmethod
    def generate_state() -> str:
        """Random anti-forgery value for the authorization request."""
        return secrets.token_urlsafe(16)

    def build_authorization_url(
        self,
        client_id: str,
        redirect_uri: str,
        scopes: list[str] | None = None,
        state: str | None = None,
    ) -> str:
        """Build the URL the user visits to grant access.

        Args:
            client_id: OAuth app client ID.
            redirect_uri: Callback URL registered with the OAuth app.
            scopes: Scopes to request (defaults to SCOPES).
            state: Anti-forgery state echoed back on the redirect.

        Returns:
            Authorization URL.
        """
        params = {
            "audience": "api.atlassian.com",
            "client_id": client_id,
            "scope": " ".join(scopes or self.SCOPES),
            "redirect_uri": redirect_uri,
            "state": state or "",
            "response_type": "code",
            "prompt": "consent",
        }
        return f"{self.AUTH_URL}?{urlencode(params)}"

    async def _post_token(self, payload: dict[str, Any]) -> TokenGrant:
        async with self._client() as client:
            response = await client.post(
                self.TOKEN_URL,
                json=payload,
                headers={"Content-Type": "application/json", "Accept": "application/json"},
            )

        if response.is_error:
            raise_for_http_status(response.status_code, response.text, auth_type="oauth")

        data = response.json()
        return TokenGrant(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=data.get("expires_in"),
        )

    async def exchange_code(self, client_id: str, client_secret: str, code: str, redirect_uri: str) -> TokenGrant:
        """Exchange an authorization code for tokens.

        Args:
            client_id: OAuth app client ID.
            client_secret: OAuth app client secret.
            code: Authorization code from the callback.
            redirect_uri: Redirect URI used in authorization.

        Returns:
            Token grant with access_token, refresh_token, expires_in.
        """
        logger.info("Exchanging OAuth authorization code for tokens")
        return await self._post_token(
            {
                "grant_type": "authorization_code",
                "client_id": client_id,
                "client_secret": client_secret,
                "code": code,
                "redirect_uri": redirect_uri,
            }
        )

    async def refresh(self, client_id: str, client_secret: str, refresh_token: str) -> TokenGrant:
        """Obtain a new access token with the refresh_token grant.

        Args:
            client_id: OAuth app client ID.
            client_secret: OAuth app client secret.
            refresh_token: Current refresh token.

        Returns:
            Token grant. ``refresh_token`` is None when Atlassian did not rotate it.
        """
        logger.info("Refreshing OAuth access token")
        return await self._post_token(
            {
                "grant_type": "refresh_token",
                "client_id": client_id,
                "client_secret": client_secret,
                "refresh_token": refresh_token,
            }
        )

    async def get_accessible_resources(self, access_token: str) -> list[AccessibleSite]:
        """List the Jira sites the access token can reach.

        Args:
            access_token: Valid access token.

        Returns:
            Accessible sites.
        """
        async with self._client() as client:
            response = await client.get(
                self.RESOURCES_URL,
                headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
            )

        if response.is_error:
            raise_for_http_status(response.status_code, response.text, auth_type="oauth")

        return [
            AccessibleSite(
                cloud_id=resource["id"],
                name=resource.get("name", ""),
                url=resource.get("url", ""),
                scopes=resource.get("scopes", []),
            )
            for resource in response.json() or []
        ]

    async def resolve_site(self, access_token: str, site_url: str | None = None) -> AccessibleSite:
        """Pick the Jira site (and so the cloud ID) for an access token.

        Args:
            access_token: Valid access token.
            site_url: Optional site URL to match; otherwise the first site wins.

        Returns:
            The matching site.

        Raises:
            ToolError: If no site is accessible or none matches ``site_url``.
        """
        sites = await self.get_accessible_resources(access_token)

        if not sites:
            raise ToolError(
                "no_accessible_sites",
                "No accessible Jira sites found. Make sure your OAuth app has the correct scopes "
                "and you have granted access.",
            )

        if site_url:
            wanted = normalize_base_url(site_url)
            for site in sites:
                if site.url and normalize_base_url(site.url) == wanted:
                    return site
            available = ", ".join(site.url for site in sites)
            raise ToolError(
                "site_not_found",
                f"Site {site_url} not found in accessible resources. Available sites: {available}",
            )

        return sites[0]
