"""
Sidecar Errors — Tagged error taxonomy surfaced to callers.

Every failure crossing the boundary is one of the classes below. The
string form is ``"<Kind> error: <message>"`` so the command layer can
hand it to the front-end as a single human-readable line.
"""
from typing import Any


class SidecarError(Exception):
    """Base class for all errors raised by sidecar_core."""

    kind: str = "Sidecar"

    def __init__(self, message: Any = "") -> None:
        self.message = str(message)
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.kind} error: {self.message}"

    def as_dict(self) -> dict[str, str]:
        """Return the error as a ``{"kind", "message"}`` mapping."""
        return {"kind": self.kind, "message": self.message}


class DatabaseError(SidecarError):
    """Store open/prepare/execute/query failure (message passed through)."""

    kind = "Database"


class EncryptionError(SidecarError):
    """Missing key, malformed envelope, authentication or decoding failure."""

    kind = "Encryption"


class KeyringError(SidecarError):
    """OS credential vault access failure."""

    kind = "Keyring"


class InvalidStateError(SidecarError):
    """Operation invoked before initialization, or unusable environment."""

    kind = "Invalid state"


class NotFoundError(SidecarError):
    """Lookup with no match."""

    kind = "Not found"


class SerializationError(SidecarError):
    """Malformed structured payload."""

    kind = "Serialization"
