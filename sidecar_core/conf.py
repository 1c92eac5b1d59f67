"""
Sidecar Configuration — Defaults and validated settings.

Reads optional overrides from environment variables:
    SIDECAR_DATA_DIR = <directory holding the database file>
    SIDECAR_DB_FILENAME = <database file name>
    SIDECAR_KEYRING_SERVICE = <service id used for keychain entries>
    SIDECAR_JOURNAL_MODE = <SQLite journal mode, default WAL>
    SIDECAR_BUSY_TIMEOUT = <seconds to wait on a locked database file>

Security Note:
    No secret material is configurable here. The encryption context and
    all passphrases stay out of the environment.
"""
import os
import logging
from typing import Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("sidecar.conf")

APP_DIR_NAME = "sidecar"
DEFAULT_DB_FILENAME = "sidecar.db"
KEYRING_SERVICE = "sidecar-app"
OAUTH_STATE_LENGTH = 32

_JOURNAL_MODES = ("DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF")


class SidecarConfig(BaseModel):
    """Validated sidecar configuration."""

    data_dir: Optional[str] = None
    db_filename: str = Field(default=DEFAULT_DB_FILENAME, min_length=1)
    keyring_service: str = Field(default=KEYRING_SERVICE, min_length=1)
    journal_mode: str = Field(default="WAL")
    foreign_keys: bool = True
    busy_timeout: float = Field(default=5.0, ge=0)

    @field_validator("journal_mode")
    @classmethod
    def validate_journal_mode(cls, v: str) -> str:
        """Validate the journal mode is one SQLite understands."""
        mode = v.upper()
        if mode not in _JOURNAL_MODES:
            raise ValueError(f"Unsupported journal mode: {v}")
        return mode

    @field_validator("db_filename")
    @classmethod
    def validate_db_filename(cls, v: str) -> str:
        """Database file name must not carry a directory part."""
        if os.path.basename(v) != v:
            raise ValueError(
                f"db_filename must be a bare file name, got {v!r}"
            )
        return v

    def pragmas(self) -> str:
        """Return the PRAGMA script run on every new connection."""
        fk = "ON" if self.foreign_keys else "OFF"
        return (
            f"PRAGMA journal_mode={self.journal_mode}; "
            f"PRAGMA foreign_keys={fk};"
        )

    @classmethod
    def from_env(cls) -> "SidecarConfig":
        """Create SidecarConfig by loading values from environment.

        Returns:
            Populated SidecarConfig instance.
        """
        values: dict = {}
        env_map = {
            "SIDECAR_DATA_DIR": "data_dir",
            "SIDECAR_DB_FILENAME": "db_filename",
            "SIDECAR_KEYRING_SERVICE": "keyring_service",
            "SIDECAR_JOURNAL_MODE": "journal_mode",
            "SIDECAR_BUSY_TIMEOUT": "busy_timeout",
        }
        for name, field in env_map.items():
            raw = os.environ.get(name)
            if raw is not None:
                values[field] = raw
        if values:
            logger.debug("Config overrides from environment: %s", sorted(values))
        return cls(**values)
