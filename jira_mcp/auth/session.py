"""Session manager: picks the active Jira credential and keeps OAuth tokens fresh.

Resolution order when nothing was set in memory: OAuth from the environment,
Basic from the environment, then the credential persisted in the system
keyring. Environment and keyring credentials are re-read on every call and
never cached.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from ..config import JiraSettings
from ..utils.errors import MissingAuthError
from .credentials import Credential, OAuthCredential
from .jira_auth import JiraOAuth, TokenGrant
from .token_store import CredentialStore

logger = logging.getLogger(__name__)

REFRESH_WINDOW = timedelta(minutes=5)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """Owns the process's credential state.

    One instance is shared by every tool handler. There is no locking: two
    concurrent calls near expiry may both refresh, and the last one wins.
    """

    def __init__(
        self,
        store: CredentialStore,
        oauth: JiraOAuth | None = None,
        settings_factory: Callable[[], JiraSettings] = JiraSettings,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize session manager.

        Args:
            store: Credential store (in-memory slot plus optional keyring).
            oauth: OAuth endpoint client used for refreshes.
            settings_factory: Builds settings from the environment on each resolve.
            clock: Returns the current timezone-aware UTC time.
        """
        self.store = store
        self.oauth = oauth or JiraOAuth()
        self.settings_factory = settings_factory
        self.clock = clock

    def settings(self) -> JiraSettings:
        """Current settings, read fresh from the environment."""
        return self.settings_factory()

    def needs_refresh(self, credential: Credential) -> bool:
        """Check if an OAuth credential is inside the early-refresh window."""
        if not isinstance(credential, OAuthCredential):
            return False
        if credential.expires_at is None or not credential.refresh_token:
            return False
        return self.clock() >= credential.expires_at - REFRESH_WINDOW

    def expiry_from(self, expires_in: int | None) -> datetime | None:
        """Absolute expiry for a token lifetime in seconds."""
        if expires_in is None:
            return None
        return self.clock() + timedelta(seconds=expires_in)

    def apply_grant(self, credential: OAuthCredential, grant: TokenGrant) -> None:
        """Update an OAuth credential in place with refreshed tokens.

        Client ID, client secret and cloud ID are left untouched; the refresh
        token is only replaced when a new one was issued.
        """
        credential.access_token = grant.access_token
        if grant.refresh_token:
            credential.refresh_token = grant.refresh_token
        credential.expires_at = self.expiry_from(grant.expires_in)

    async def refresh(self, credential: OAuthCredential) -> TokenGrant:
        """Refresh ``credential`` now and update it in place.

        Raises:
            JiraMCPError: If the token endpoint rejects the refresh.
        """
        grant = await self.oauth.refresh(
            credential.client_id,
            credential.client_secret,
            credential.refresh_token or "",
        )
        self.apply_grant(credential, grant)
        return grant

    async def resolve(self) -> Credential:
        """Return the credential to use for the current tool call.

        Returns:
            The in-memory credential (refreshed if near expiry), else the first
            of OAuth env, Basic env, keyring that is fully specified.

        Raises:
            MissingAuthError: If no source yields a credential.
            ValidationError: If JIRA_BASE_URL is set but malformed.
        """
        current = self.store.current
        if current is not None:
            if self.needs_refresh(current):
                try:
                    await self.refresh(current)
                    logger.info("Refreshed OAuth access token before expiry")
                except Exception as e:
                    # The held token may still be accepted for a few minutes
                    logger.warning(f"Failed to refresh OAuth token, continuing with existing token: {e}")
            return current

        settings = self.settings()

        oauth_env = settings.oauth_credential()
        if oauth_env is not None:
            return oauth_env

        basic_env = settings.basic_credential()
        if basic_env is not None:
            return basic_env

        stored = self.store.get()
        if stored is not None:
            return stored

        raise MissingAuthError()

    async def status(self) -> Credential | None:
        """Resolve without failing: the active credential or None."""
        try:
            return await self.resolve()
        except MissingAuthError:
            return None
