"""
AppState — Process-wide resources for the sidecar backend.

Holds three independently locked resources:
- the relational connection (inside :class:`Database`),
- the passphrase-derived encryption key,
- the OAuth state map (inside :class:`OAuthStateGuard`).

Usage::

    state = AppState()
    state.db_init("/tmp/sidecar.db")
    state.init_encryption("correct horse battery staple")
    token = state.encrypt_data("hello")

Resources must be initialized before use; calling an operation early
raises a tagged error instead of failing hard. No operation holds more
than one lock at a time.
"""
import logging
import threading
from collections.abc import Sequence
from typing import Any, Optional

from .codec import Value
from .conf import SidecarConfig
from .credentials import CredentialStore
from .crypto import derive_key, encrypt, decrypt
from .database import Database
from .exceptions import EncryptionError
from .oauth import OAuthStateGuard

logger = logging.getLogger("sidecar.state")


class AppState:
    """Explicit context object for the sidecar backend."""

    def __init__(
        self,
        config: Optional[SidecarConfig] = None,
        credentials: Optional[CredentialStore] = None,
    ):
        self.config = config or SidecarConfig()
        self.db = Database(self.config)
        self.credentials = credentials or CredentialStore(
            service=self.config.keyring_service
        )
        self.oauth = OAuthStateGuard()
        self._key_lock = threading.Lock()
        self._key: Optional[bytes] = None

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    def db_init(self, path: Optional[str] = None) -> None:
        self.db.initialize(path)

    def db_execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        return self.db.execute(sql, params)

    def db_query(
        self, sql: str, params: Optional[Sequence[Any]] = None
    ) -> list[dict[str, Value]]:
        return self.db.query(sql, params)

    def db_execute_batch(self, sql: str) -> None:
        self.db.execute_batch(sql)

    # ------------------------------------------------------------------
    # Encryption
    # ------------------------------------------------------------------

    def init_encryption(self, password: str) -> None:
        """Derive the session key from ``password`` and install it."""
        key = derive_key(password)
        with self._key_lock:
            self._key = key
        logger.info("Encryption key initialized")

    def encryption_initialized(self) -> bool:
        with self._key_lock:
            return self._key is not None

    def clear_encryption(self) -> None:
        """Forget the session key."""
        with self._key_lock:
            self._key = None

    def _require_key(self) -> bytes:
        with self._key_lock:
            key = self._key
        if key is None:
            raise EncryptionError("Encryption not initialized")
        return key

    def encrypt_data(self, plaintext: str) -> str:
        return encrypt(self._require_key(), plaintext)

    def decrypt_data(self, ciphertext: str) -> str:
        return decrypt(self._require_key(), ciphertext)

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def store_credentials(self, provider: str, credentials: str) -> None:
        self.credentials.store(provider, credentials)

    def get_credentials(self, provider: str) -> Optional[str]:
        return self.credentials.retrieve(provider)

    def delete_credentials(self, provider: str) -> None:
        self.credentials.delete(provider)

    # ------------------------------------------------------------------
    # OAuth
    # ------------------------------------------------------------------

    def store_oauth_state(self, provider: str, state: str) -> None:
        self.oauth.issue(provider, state)

    def validate_oauth_state(self, provider: str, state: str) -> bool:
        return self.oauth.validate(provider, state)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the connection and forget the key."""
        self.db.close()
        self.clear_encryption()
