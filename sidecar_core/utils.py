"""Stateless helpers consumed by the command layer."""
import os
import sys
import uuid
import string
import secrets
import logging
import webbrowser
from typing import Optional

from .conf import APP_DIR_NAME
from .exceptions import InvalidStateError

logger = logging.getLogger("sidecar.utils")

RANDOM_CHARSET = string.ascii_lowercase + string.ascii_uppercase + string.digits


def generate_random_string(length: int) -> str:
    """Return a cryptographically random alphanumeric string."""
    if length < 0:
        raise ValueError("length must be non-negative")
    return "".join(secrets.choice(RANDOM_CHARSET) for _ in range(length))


def generate_secure_id() -> str:
    """Return a random (version 4) UUID in its canonical text form."""
    return str(uuid.uuid4())


def _local_data_dir() -> str:
    """Per-user local data directory for the running platform."""
    if sys.platform.startswith("win"):
        base = os.environ.get("LOCALAPPDATA")
        if base:
            return base
        return os.path.join(os.path.expanduser("~"), "AppData", "Local")
    if sys.platform == "darwin":
        return os.path.join(
            os.path.expanduser("~"), "Library", "Application Support"
        )
    return os.environ.get("XDG_DATA_HOME") or os.path.join(
        os.path.expanduser("~"), ".local", "share"
    )


def get_app_data_dir(base: Optional[str] = None) -> str:
    """Return the application data directory, creating it if absent.

    Args:
        base: Directory to use instead of ``<local data dir>/sidecar``.

    Raises:
        InvalidStateError: If the directory cannot be created.
    """
    path = base or os.path.join(_local_data_dir(), APP_DIR_NAME)
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as err:
        raise InvalidStateError(err) from err
    return path


def open_browser(url: str) -> None:
    """Open ``url`` in the system browser.

    Raises:
        InvalidStateError: If no browser could be launched.
    """
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as err:
        raise InvalidStateError(err) from err
    if not opened:
        raise InvalidStateError(f"Unable to open browser for {url}")
    logger.debug("Opened system browser")
