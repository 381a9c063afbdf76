"""Tests for the credential store."""

import pytest
from keyring.errors import KeyringError

from jira_mcp.auth.credentials import BasicCredential, OAuthCredential, serialize_credential
from jira_mcp.auth.token_store import CredentialStore
from jira_mcp.utils.errors import PersistenceUnavailableError

KEY = (CredentialStore.SERVICE_NAME, CredentialStore.ACCOUNT_NAME)


@pytest.fixture
def basic() -> BasicCredential:
    return BasicCredential("https://x.atlassian.net", "a@x.com", "token")


class BrokenVault:
    """Vault whose backend refuses every operation."""

    def get_password(self, service_name, username):
        raise KeyringError("locked")

    def set_password(self, service_name, username, password):
        raise KeyringError("locked")

    def delete_password(self, service_name, username):
        raise KeyringError("locked")


class TestCredentialStore:
    """Tests for CredentialStore."""

    def test_set_without_persist_stays_in_memory(self, vault, basic: BasicCredential):
        store = CredentialStore(vault=vault)
        store.set(basic)

        assert store.current == basic
        assert vault.entries == {}

    def test_set_with_persist_writes_vault(self, vault, basic: BasicCredential):
        store = CredentialStore(vault=vault)
        store.set(basic, persist=True)

        assert vault.entries[KEY] == serialize_credential(basic)
        assert CredentialStore(vault=vault).get() == basic

    def test_persist_without_vault_keeps_memory_copy(self, basic: BasicCredential):
        store = CredentialStore(vault=None)

        with pytest.raises(PersistenceUnavailableError) as exc_info:
            store.set(basic, persist=True)

        assert exc_info.value.kind == "persistence_unavailable"
        assert store.current == basic
        assert store.has_vault is False

    def test_vault_refusing_write_is_persistence_unavailable(self, basic: BasicCredential):
        store = CredentialStore(vault=BrokenVault())

        with pytest.raises(PersistenceUnavailableError) as exc_info:
            store.set(basic, persist=True)

        assert "token" not in exc_info.value.message
        assert store.current == basic

    def test_get_without_vault(self):
        assert CredentialStore(vault=None).get() is None

    def test_get_corrupt_entry_is_absent(self, vault):
        vault.entries[KEY] = "{not json"
        assert CredentialStore(vault=vault).get() is None

    def test_get_unreadable_vault_is_absent(self):
        assert CredentialStore(vault=BrokenVault()).get() is None

    def test_get_oauth_entry(self, vault):
        oauth = OAuthCredential("client", "secret", "access", "cloud", refresh_token="refresh")
        vault.entries[KEY] = serialize_credential(oauth)

        assert CredentialStore(vault=vault).get() == oauth

    def test_clear_removes_memory_and_vault(self, vault, basic: BasicCredential):
        store = CredentialStore(vault=vault)
        store.set(basic, persist=True)

        store.clear()

        assert store.current is None
        assert store.get() is None
        assert vault.entries == {}

    def test_clear_without_entry_or_vault(self, vault, basic: BasicCredential):
        CredentialStore(vault=vault).clear()

        store = CredentialStore(vault=None)
        store.set(basic)
        store.clear()
        assert store.current is None

    def test_clear_tolerates_broken_vault(self, basic: BasicCredential):
        store = CredentialStore(vault=BrokenVault())
        store.set(basic)
        store.clear()
        assert store.current is None
