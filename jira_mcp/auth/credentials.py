"""Credential types for Jira authentication.

A credential is exactly one of :class:`BasicCredential` or
:class:`OAuthCredential`. Code that needs to tell them apart uses
``isinstance``; there is no shared optional-field record.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union
from urllib.parse import urlsplit

from ..utils.errors import ValidationError

INVALID_BASE_URL_MESSAGE = "baseUrl must be a valid URL like https://your-domain.atlassian.net"

_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_base_url(value: str) -> str:
    """Normalize a Jira site URL to scheme://host[:port]/path without trailing slash.

    Query strings and fragments are dropped.

    Args:
        value: URL as typed by the user.

    Returns:
        Normalized base URL.

    Raises:
        ValidationError: If the value is not an absolute http(s) URL.
    """
    try:
        parts = urlsplit(value.strip())
        port = parts.port
    except (AttributeError, ValueError):
        raise ValidationError(INVALID_BASE_URL_MESSAGE) from None

    scheme = parts.scheme.lower()
    host = parts.hostname
    if scheme not in _DEFAULT_PORTS or not host:
        raise ValidationError(INVALID_BASE_URL_MESSAGE)

    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        host = f"{host}:{port}"

    return f"{scheme}://{host}{parts.path.rstrip('/')}"


@dataclass(frozen=True)
class BasicCredential:
    """Email + API token against a Jira site URL. Never refreshed."""

    base_url: str
    email: str
    api_token: str = field(repr=False)

    auth_type = "basic"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.auth_type,
            "baseUrl": self.base_url,
            "email": self.email,
            "apiToken": self.api_token,
        }


@dataclass
class OAuthCredential:
    """Atlassian OAuth 2.0 (3LO) tokens scoped to one cloud ID.

    ``access_token``, ``refresh_token`` and ``expires_at`` are replaced in
    place on refresh; the other fields never change.
    """

    client_id: str
    client_secret: str = field(repr=False)
    access_token: str = field(repr=False)
    cloud_id: str
    refresh_token: str | None = field(default=None, repr=False)
    expires_at: datetime | None = None

    auth_type = "oauth"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.auth_type,
            "clientId": self.client_id,
            "clientSecret": self.client_secret,
            "accessToken": self.access_token,
            "cloudId": self.cloud_id,
        }
        if self.refresh_token:
            data["refreshToken"] = self.refresh_token
        if self.expires_at is not None:
            data["expiresAt"] = int(self.expires_at.timestamp() * 1000)
        return data


Credential = Union[BasicCredential, OAuthCredential]


def credential_from_dict(data: Any) -> Credential | None:
    """Rebuild a credential from its serialized dict.

    Args:
        data: Parsed JSON blob.

    Returns:
        The credential, or None if the blob is not a recognizable credential.
    """
    if not isinstance(data, dict):
        return None

    try:
        if data.get("type") == "basic":
            return BasicCredential(
                base_url=normalize_base_url(data["baseUrl"]),
                email=data["email"],
                api_token=data["apiToken"],
            )

        if data.get("type") == "oauth":
            expires_at = None
            if data.get("expiresAt") is not None:
                expires_at = datetime.fromtimestamp(data["expiresAt"] / 1000, tz=timezone.utc)
            return OAuthCredential(
                client_id=data["clientId"],
                client_secret=data["clientSecret"],
                access_token=data["accessToken"],
                cloud_id=data["cloudId"],
                refresh_token=data.get("refreshToken") or None,
                expires_at=expires_at,
            )
    except (KeyError, TypeError, ValueError, OverflowError, ValidationError):
        return None

    return None


def serialize_credential(credential: Credential) -> str:
    """Serialize a credential to the JSON blob stored in the secret vault."""
    return json.dumps(credential.to_dict())


def deserialize_credential(blob: str | None) -> Credential | None:
    """Parse a stored JSON blob; corrupt or foreign data yields None."""
    if not blob:
        return None
    try:
        data = json.loads(blob)
    except (TypeError, ValueError):
        return None
    return credential_from_dict(data)
