"""Auth management tool handlers.

These operate on the session itself rather than on a Jira client, so they
take the SessionManager instead of a JiraClient.
"""

import logging
from typing import Any

from ...auth.credentials import BasicCredential, OAuthCredential, normalize_base_url
from ...auth.jira_auth import JiraOAuth
from ...auth.session import SessionManager
from ...utils.errors import MissingAuthError, ToolError
from .base import SessionHandler

logger = logging.getLogger(__name__)

AUTH_URL_INSTRUCTIONS = (
    "1. Visit the authUrl in your browser\n"
    "2. Grant access to your Jira site\n"
    "3. Copy the 'code' parameter from the redirect URL\n"
    "4. Use jira_oauth_exchange_code to exchange it for tokens"
)


async def set_basic_auth(session: SessionManager, arguments: dict[str, Any]) -> dict[str, Any]:
    """Load Basic credentials into the session, optionally persisting them.

    Raises:
        ValidationError: If baseUrl is malformed (nothing is stored).
        PersistenceUnavailableError: If persist was requested without a keyring;
            the credential is still active for this session.
    """
    credential = BasicCredential(
        base_url=normalize_base_url(arguments["baseUrl"]),
        email=arguments["email"],
        api_token=arguments["apiToken"],
    )
    session.store.set(credential, persist=arguments.get("persist", False))
    return {"success": True, "message": "Jira credentials loaded (Basic Auth)."}


async def oauth_get_auth_url(session: SessionManager, arguments: dict[str, Any]) -> dict[str, Any]:
    state = arguments.get("state") or JiraOAuth.generate_state()
    auth_url = session.oauth.build_authorization_url(
        client_id=arguments["clientId"],
        redirect_uri=arguments["redirectUri"],
        scopes=arguments.get("scopes"),
        state=state,
    )
    return {"authUrl": auth_url, "state": state, "instructions": AUTH_URL_INSTRUCTIONS}


async def oauth_exchange_code(session: SessionManager, arguments: dict[str, Any]) -> dict[str, Any]:
    """Finish the authorization-code flow and activate the resulting credential."""
    grant = await session.oauth.exchange_code(
        client_id=arguments["clientId"],
        client_secret=arguments["clientSecret"],
        code=arguments["code"],
        redirect_uri=arguments["redirectUri"],
    )
    site = await session.oauth.resolve_site(grant.access_token, arguments.get("siteUrl"))

    credential = OAuthCredential(
        client_id=arguments["clientId"],
        client_secret=arguments["clientSecret"],
        access_token=grant.access_token,
        refresh_token=grant.refresh_token,
        cloud_id=site.cloud_id,
        expires_at=session.expiry_from(grant.expires_in),
    )
    session.store.set(credential, persist=arguments.get("persist", False))
    logger.info(f"Authenticated with OAuth to site {site.name}")

    return {
        "success": True,
        "message": f"Successfully authenticated with OAuth to {site.name}",
        "site": {"name": site.name, "url": site.url, "cloudId": site.cloud_id},
        "hasRefreshToken": bool(grant.refresh_token),
    }


async def oauth_set_tokens(session: SessionManager, arguments: dict[str, Any]) -> dict[str, Any]:
    """Activate OAuth tokens obtained elsewhere.

    The cloud ID is looked up from the token's accessible resources when not
    supplied. ``expiresIn`` is optional; without it the token is never
    refreshed ahead of time.
    """
    cloud_id = arguments.get("cloudId")
    site_name = ""
    site_url = arguments.get("siteUrl") or ""

    if not cloud_id:
        site = await session.oauth.resolve_site(arguments["accessToken"], arguments.get("siteUrl"))
        cloud_id, site_name, site_url = site.cloud_id, site.name, site.url

    credential = OAuthCredential(
        client_id=arguments["clientId"],
        client_secret=arguments["clientSecret"],
        access_token=arguments["accessToken"],
        refresh_token=arguments.get("refreshToken") or None,
        cloud_id=cloud_id,
        expires_at=session.expiry_from(arguments.get("expiresIn")),
    )
    session.store.set(credential, persist=arguments.get("persist", False))

    return {
        "success": True,
        "message": f"OAuth tokens set for {site_name}" if site_name else "OAuth tokens set successfully",
        "cloudId": cloud_id,
        "siteUrl": site_url,
    }


async def oauth_refresh(session: SessionManager, arguments: dict[str, Any]) -> dict[str, Any]:
    """Refresh the active OAuth credential now and keep the result in memory."""
    # resolve() would already refresh an in-window in-memory credential
    credential = session.store.current or await session.resolve()

    if not isinstance(credential, OAuthCredential):
        raise ToolError(
            "invalid_auth_type",
            "Current authentication is not OAuth. Use basic auth credentials directly.",
        )
    if not credential.refresh_token:
        raise ToolError(
            "no_refresh_token",
            "No refresh token available. You need to re-authenticate with 'offline_access' scope.",
        )

    grant = await session.refresh(credential)
    session.store.set(credential)

    return {
        "success": True,
        "message": "OAuth token refreshed successfully",
        "expiresIn": grant.expires_in,
    }


async def oauth_list_sites(session: SessionManager, arguments: dict[str, Any]) -> dict[str, Any]:
    credential = await session.resolve()

    if not isinstance(credential, OAuthCredential):
        raise ToolError(
            "invalid_auth_type",
            "This tool requires OAuth authentication. Current auth is basic auth.",
        )

    sites = await session.oauth.get_accessible_resources(credential.access_token)
    return {
        "currentCloudId": credential.cloud_id,
        "sites": [
            {"cloudId": site.cloud_id, "name": site.name, "url": site.url, "scopes": site.scopes}
            for site in sites
        ],
    }


async def clear_auth(session: SessionManager, arguments: dict[str, Any]) -> dict[str, Any]:
    session.store.clear()
    return {"success": True, "message": "Jira credentials cleared."}


async def auth_status(session: SessionManager, arguments: dict[str, Any]) -> dict[str, Any]:
    """Describe the credential a tool call would use right now, without secrets."""
    try:
        credential = await session.resolve()
    except MissingAuthError:
        return {
            "authenticated": False,
            "message": "No authentication configured. Use basic auth or OAuth to authenticate.",
        }

    if isinstance(credential, BasicCredential):
        return {
            "authenticated": True,
            "type": "basic",
            "baseUrl": credential.base_url,
            "email": credential.email,
        }

    return {
        "authenticated": True,
        "type": "oauth",
        "cloudId": credential.cloud_id,
        "hasRefreshToken": bool(credential.refresh_token),
        "expiresAt": credential.expires_at.isoformat() if credential.expires_at else None,
    }


HANDLERS: dict[str, SessionHandler] = {
    "_internal_jira_set_auth": set_basic_auth,
    "jira_oauth_get_auth_url": oauth_get_auth_url,
    "jira_oauth_exchange_code": oauth_exchange_code,
    "jira_oauth_set_tokens": oauth_set_tokens,
    "jira_oauth_refresh": oauth_refresh,
    "jira_oauth_list_sites": oauth_list_sites,
    "jira_clear_auth": clear_auth,
    "jira_auth_status": auth_status,
}
