"""Sidecar Core — Local data and secret management for the Sidecar assistant.

Security Note (Threat Model):
    The encryption key and decrypted values live in process memory for
    the session. A memory dump of the process could expose them.
    OAuth state tokens never expire on their own; they are removed only
    when validated or replaced.
"""

from .version import __version__
from .conf import SidecarConfig
from .exceptions import (
    SidecarError,
    DatabaseError,
    EncryptionError,
    KeyringError,
    InvalidStateError,
    NotFoundError,
    SerializationError,
)
from .database import Database
from .credentials import CredentialStore
from .oauth import OAuthStateGuard
from .state import AppState
from .commands import invoke

__all__ = [
    "__version__",
    "SidecarConfig",
    "SidecarError",
    "DatabaseError",
    "EncryptionError",
    "KeyringError",
    "InvalidStateError",
    "NotFoundError",
    "SerializationError",
    "Database",
    "CredentialStore",
    "OAuthStateGuard",
    "AppState",
    "invoke",
]
