"""Server configuration loaded from the environment."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .auth.credentials import BasicCredential, OAuthCredential, normalize_base_url


class JiraSettings(BaseSettings):
    """Settings for the Jira MCP server.

    Credentials come from the standard ``JIRA_*`` variables (or a ``.env``
    file in the working directory). A credential source is only usable when
    all of its required variables are set.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Basic auth
    base_url: str = Field(default="", description="Jira site URL", alias="JIRA_BASE_URL")
    email: str = Field(default="", description="Atlassian account email", alias="JIRA_EMAIL")
    api_token: str = Field(default="", description="Atlassian API token", alias="JIRA_API_TOKEN")

    # OAuth 2.0 (3LO)
    oauth_client_id: str = Field(default="", description="OAuth app client ID", alias="JIRA_OAUTH_CLIENT_ID")
    oauth_client_secret: str = Field(
        default="", description="OAuth app client secret", alias="JIRA_OAUTH_CLIENT_SECRET"
    )
    oauth_access_token: str = Field(default="", description="OAuth access token", alias="JIRA_OAUTH_ACCESS_TOKEN")
    oauth_refresh_token: str = Field(
        default="", description="OAuth refresh token (optional)", alias="JIRA_OAUTH_REFRESH_TOKEN"
    )
    cloud_id: str = Field(default="", description="Jira Cloud ID for OAuth API calls", alias="JIRA_CLOUD_ID")

    # Issue fields
    acceptance_criteria_field: str = Field(
        default="",
        description="Custom field ID holding acceptance criteria (e.g. customfield_10042)",
        alias="JIRA_ACCEPTANCE_CRITERIA_FIELD",
    )

    # Server
    log_level: str = Field(default="INFO", description="Logging level", alias="JIRA_MCP_LOG_LEVEL")
    http_timeout: float = Field(
        default=30.0, description="Timeout in seconds for Jira and OAuth HTTP calls", alias="JIRA_MCP_HTTP_TIMEOUT"
    )

    @field_validator("acceptance_criteria_field")
    @classmethod
    def _strip_field_id(cls, value: str) -> str:
        return value.strip()

    @property
    def has_basic_auth(self) -> bool:
        """Check if all Basic auth variables are set."""
        return bool(self.base_url and self.email and self.api_token)

    @property
    def has_oauth(self) -> bool:
        """Check if all required OAuth variables are set (refresh token is optional)."""
        return bool(
            self.oauth_client_id and self.oauth_client_secret and self.oauth_access_token and self.cloud_id
        )

    def basic_credential(self) -> BasicCredential | None:
        """Build the Basic credential from the environment.

        Raises:
            ValidationError: If JIRA_BASE_URL is set but malformed.
        """
        if not self.has_basic_auth:
            return None
        return BasicCredential(
            base_url=normalize_base_url(self.base_url),
            email=self.email,
            api_token=self.api_token,
        )

    def oauth_credential(self) -> OAuthCredential | None:
        """Build the OAuth credential from the environment."""
        if not self.has_oauth:
            return None
        return OAuthCredential(
            client_id=self.oauth_client_id,
            client_secret=self.oauth_client_secret,
            access_token=self.oauth_access_token,
            refresh_token=self.oauth_refresh_token or None,
            cloud_id=self.cloud_id,
        )

    def default_issue_fields(self) -> list[str]:
        """Fields fetched when a tool does not ask for specific ones."""
        fields = ["summary", "description"]
        if self.acceptance_criteria_field:
            fields.append(self.acceptance_criteria_field)
        return fields


def get_settings() -> JiraSettings:
    """Get settings freshly read from the environment."""
    return JiraSettings()
