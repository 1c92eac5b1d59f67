"""
OAuth State Guard — Single-use CSRF tokens for the authorization flow.

A token is issued per provider before redirecting to the authorization
server and must be echoed back exactly once on the callback. Successful
validation consumes the token; a wrong guess leaves it in place.

Tokens do not expire on their own: an entry lives until it is
validated or overwritten by a new issue for the same provider.
"""
import hmac
import logging
import threading

from .conf import OAUTH_STATE_LENGTH
from .utils import generate_random_string

logger = logging.getLogger("sidecar.oauth")


class OAuthStateGuard:
    """In-memory provider -> token map with consume-on-validate semantics."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._states: dict[str, str] = {}

    def issue(self, provider: str, token: str) -> None:
        """Record ``token`` for ``provider``, replacing any previous one."""
        with self._lock:
            self._states[provider] = token
        logger.debug("Issued OAuth state for provider=%s", provider)

    def issue_new(self, provider: str, length: int = OAUTH_STATE_LENGTH) -> str:
        """Generate a random token, issue it and return it."""
        token = generate_random_string(length)
        self.issue(provider, token)
        return token

    def validate(self, provider: str, candidate: str) -> bool:
        """Check ``candidate`` against the token issued for ``provider``.

        Returns:
            True (and the token is consumed) on an exact match,
            False otherwise with any stored token left untouched.
        """
        with self._lock:
            stored = self._states.get(provider)
            if stored is None:
                return False
            if not hmac.compare_digest(
                stored.encode("utf-8"), candidate.encode("utf-8")
            ):
                logger.warning("OAuth state mismatch for provider=%s", provider)
                return False
            del self._states[provider]
        logger.debug("OAuth state validated for provider=%s", provider)
        return True

    def pending(self, provider: str) -> bool:
        """Whether a token is outstanding for ``provider``."""
        with self._lock:
            return provider in self._states
