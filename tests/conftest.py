"""Shared fixtures for the sidecar_core test suite."""
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordDeleteError

from sidecar_core.conf import SidecarConfig
from sidecar_core.credentials import CredentialStore
from sidecar_core.database import Database
from sidecar_core.state import AppState


class MemoryKeyring(KeyringBackend):
    """Keyring backend keeping entries in a dict."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.entries: dict[tuple[str, str], str] = {}

    def get_password(self, service, username):
        return self.entries.get((service, username))

    def set_password(self, service, username, password):
        self.entries[(service, username)] = password

    def delete_password(self, service, username):
        try:
            del self.entries[(service, username)]
        except KeyError:
            raise PasswordDeleteError("Password not found") from None


class LockedKeyring(KeyringBackend):
    """Keyring backend whose every operation fails."""

    priority = 1

    def get_password(self, service, username):
        raise KeyringError("keychain is locked")

    def set_password(self, service, username, password):
        raise KeyringError("keychain is locked")

    def delete_password(self, service, username):
        raise KeyringError("keychain is locked")


@pytest.fixture
def memory_keyring():
    return MemoryKeyring()


@pytest.fixture
def locked_keyring():
    return LockedKeyring()


@pytest.fixture
def credentials(memory_keyring):
    """CredentialStore backed by an in-memory keyring."""
    return CredentialStore(backend=memory_keyring)


@pytest.fixture
def config(tmp_path):
    """Config pointing the default data directory into tmp_path."""
    return SidecarConfig(data_dir=str(tmp_path / "appdata"))


@pytest.fixture
def db(tmp_path, config):
    """Initialized Database on a temporary file."""
    database = Database(config)
    database.initialize(str(tmp_path / "test.db"))
    yield database
    database.close()


@pytest.fixture
def app_state(config, credentials):
    """Fresh AppState with nothing initialized."""
    state = AppState(config=config, credentials=credentials)
    yield state
    state.close()
