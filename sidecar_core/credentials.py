"""
Credential Store — One secret per provider in the OS keychain.

Entries are addressed by (service id, provider name). The service id
defaults to ``sidecar-app``. The backend is whatever ``keyring``
selects for the platform unless one is passed in explicitly.

Security Note:
    Never log secret values. Only log provider names and operations.
"""
import logging
from typing import Optional

import keyring
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError as BackendError, PasswordDeleteError

from .conf import KEYRING_SERVICE
from .exceptions import KeyringError

logger = logging.getLogger("sidecar.credentials")


class CredentialStore:
    """Facade over the OS-managed secret vault."""

    def __init__(
        self,
        service: str = KEYRING_SERVICE,
        backend: Optional[KeyringBackend] = None,
    ):
        self._service = service
        self._backend = backend

    @property
    def service(self) -> str:
        return self._service

    @property
    def backend(self) -> KeyringBackend:
        """The keyring backend in use."""
        if self._backend is not None:
            return self._backend
        try:
            return keyring.get_keyring()
        except BackendError as err:
            raise KeyringError(err) from err

    def store(self, provider: str, secret: str) -> None:
        """Create or replace the secret for ``provider``.

        Raises:
            KeyringError: If the vault cannot be written.
        """
        backend = self.backend
        try:
            backend.set_password(self._service, provider, secret)
        except BackendError as err:
            raise KeyringError(err) from err
        logger.debug("Stored credentials for provider=%s", provider)

    def retrieve(self, provider: str) -> Optional[str]:
        """Return the secret for ``provider``, or ``None`` if absent.

        Raises:
            KeyringError: If the vault cannot be read.
        """
        backend = self.backend
        try:
            return backend.get_password(self._service, provider)
        except BackendError as err:
            raise KeyringError(err) from err

    def delete(self, provider: str) -> None:
        """Remove the secret for ``provider``.

        Deleting an entry that does not exist succeeds.

        Raises:
            KeyringError: If an existing entry cannot be removed.
        """
        backend = self.backend
        try:
            backend.delete_password(self._service, provider)
        except PasswordDeleteError as err:
            # keyring reports a missing entry the same way as a failed delete
            if self.retrieve(provider) is not None:
                raise KeyringError(err) from err
            logger.debug("No credentials to delete for provider=%s", provider)
            return
        except BackendError as err:
            raise KeyringError(err) from err
        logger.debug("Deleted credentials for provider=%s", provider)
