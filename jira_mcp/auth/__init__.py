"""Authentication for Jira: credentials, storage, OAuth and session state."""

from .credentials import BasicCredential, Credential, OAuthCredential, normalize_base_url
from .token_store import CredentialStore

__all__ = ["BasicCredential", "Credential", "CredentialStore", "OAuthCredential", "normalize_base_url"]
