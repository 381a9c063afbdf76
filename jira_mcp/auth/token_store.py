"""Credential storage: an in-memory slot mirrored to the OS keyring."""

import logging
from typing import Protocol

import keyring
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError

from ..utils.errors import PersistenceUnavailableError
from .credentials import Credential, deserialize_credential, serialize_credential

logger = logging.getLogger(__name__)


class SecretVault(Protocol):
    """The subset of the ``keyring`` API the store relies on."""

    def get_password(self, service_name: str, username: str) -> str | None: ...

    def set_password(self, service_name: str, username: str, password: str) -> None: ...

    def delete_password(self, service_name: str, username: str) -> None: ...


def default_vault() -> SecretVault | None:
    """Return the system keyring if a usable backend is installed.

    Returns:
        The ``keyring`` module, or None when only the fail backend is present.
    """
    try:
        backend = keyring.get_keyring()
    except Exception:
        logger.debug("Keyring backend could not be loaded", exc_info=True)
        return None

    if isinstance(backend, fail.Keyring):
        return None
    return keyring


class CredentialStore:
    """Holds the active credential for this process.

    The vault is optional: when it is None, credentials live only in memory
    and any request to persist them fails with PersistenceUnavailableError.
    """

    SERVICE_NAME = "jira-mcp"
    ACCOUNT_NAME = "default"

    def __init__(self, vault: SecretVault | None = None):
        """Initialize credential store.

        Args:
            vault: Secret vault (normally the ``keyring`` module), or None.
        """
        self.vault = vault
        self._current: Credential | None = None

    @classmethod
    def from_system(cls) -> "CredentialStore":
        """Create a store backed by the system keyring when one is available."""
        return cls(vault=default_vault())

    @property
    def has_vault(self) -> bool:
        """Check if durable storage is available."""
        return self.vault is not None

    @property
    def current(self) -> Credential | None:
        """The in-memory credential, if one was set during this process."""
        return self._current

    @current.setter
    def current(self, credential: Credential | None) -> None:
        self._current = credential

    def get(self) -> Credential | None:
        """Load the persisted credential.

        Returns:
            The stored credential, or None if there is no vault, no entry,
            or the entry cannot be parsed.
        """
        if self.vault is None:
            return None

        try:
            blob = self.vault.get_password(self.SERVICE_NAME, self.ACCOUNT_NAME)
        except KeyringError:
            logger.warning("Could not read credentials from the system keyring", exc_info=True)
            return None

        credential = deserialize_credential(blob)
        if blob and credential is None:
            logger.warning("Ignoring unreadable credential entry in the system keyring")
        return credential

    def set(self, credential: Credential, persist: bool = False) -> None:
        """Make ``credential`` the active one, optionally persisting it.

        The in-memory slot is always updated first, so a persistence failure
        still leaves the credential usable for this session.

        Args:
            credential: Credential to activate.
            persist: Also write it to the system keyring.

        Raises:
            PersistenceUnavailableError: If persist is requested without a vault,
                or the vault refuses the write.
        """
        self._current = credential
        if not persist:
            return

        if self.vault is None:
            raise PersistenceUnavailableError()

        try:
            self.vault.set_password(self.SERVICE_NAME, self.ACCOUNT_NAME, serialize_credential(credential))
        except KeyringError as e:
            raise PersistenceUnavailableError(
                f"The system keyring refused to store credentials ({type(e).__name__}). "
                "Credentials were loaded for this session only."
            ) from None
        logger.info(f"Persisted {credential.auth_type} credentials to the system keyring")

    def clear(self) -> None:
        """Forget the in-memory credential and delete the persisted one, if any."""
        self._current = None
        if self.vault is None:
            return

        try:
            self.vault.delete_password(self.SERVICE_NAME, self.ACCOUNT_NAME)
        except PasswordDeleteError:
            pass
        except KeyringError:
            logger.warning("Could not delete credentials from the system keyring", exc_info=True)
