"""
Sidecar Crypto — Passphrase key derivation and AES-GCM envelopes.

Envelope format (base64 text):
    [nonce 12B][encrypted_payload + GCM_tag 16B]

The key is SHA-256(passphrase || fixed context). It is deterministic on
purpose: the same passphrase always unlocks the same data. It is held
in memory only and never written anywhere.

Security Note:
    Never log plaintext, ciphertext or key material.
    Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os
import base64
import binascii
import logging

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .exceptions import EncryptionError

logger = logging.getLogger("sidecar.crypto")

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16  # GCM tag
KEY_LENGTH = 32  # AES-256
MIN_ENVELOPE_SIZE = NONCE_SIZE + TAG_SIZE

KEY_CONTEXT = b"sidecar-encryption-salt-v1"


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(passphrase: str) -> bytes:
    """Derive the 32-byte session key from a passphrase.

    Args:
        passphrase: User passphrase.

    Returns:
        SHA-256 digest of the passphrase bytes followed by ``KEY_CONTEXT``.
    """
    digest = hashes.Hash(hashes.SHA256())
    digest.update(passphrase.encode("utf-8"))
    digest.update(KEY_CONTEXT)
    return digest.finalize()


def _cipher(key: bytes) -> AESGCM:
    try:
        return AESGCM(key)
    except (TypeError, ValueError) as err:
        raise EncryptionError(err) from err


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------

def _b64decode(envelope: str) -> bytes:
    """Strict base64 decode; rejects anything but the canonical encoding."""
    try:
        raw = base64.b64decode(envelope, validate=True)
    except (binascii.Error, ValueError) as err:
        raise EncryptionError(err) from err
    # unused trailing bits are ignored by the decoder
    if base64.b64encode(raw).decode("ascii") != envelope:
        raise EncryptionError("Non-canonical envelope encoding")
    return raw


def encrypt(key: bytes, plaintext: str) -> str:
    """Encrypt text into a self-contained envelope.

    Args:
        key: 32-byte key from :func:`derive_key`.
        plaintext: Text to protect.

    Returns:
        base64 text of ``nonce + ciphertext + tag``.

    Raises:
        EncryptionError: If the cipher cannot be built or fails.
    """
    cipher = _cipher(key)
    nonce = os.urandom(NONCE_SIZE)
    try:
        ct = cipher.encrypt(nonce, plaintext.encode("utf-8"), None)
    except (OverflowError, ValueError) as err:
        raise EncryptionError(err) from err
    return base64.b64encode(nonce + ct).decode("ascii")


def decrypt(key: bytes, envelope: str) -> str:
    """Open an envelope produced by :func:`encrypt`.

    Either the full plaintext is returned or an error is raised; tampered
    or foreign envelopes never yield data.

    Raises:
        EncryptionError: On malformed encoding, short input, tag mismatch
            (tampering or wrong key) or non UTF-8 plaintext.
    """
    data = _b64decode(envelope)
    if len(data) < MIN_ENVELOPE_SIZE:
        raise EncryptionError(
            f"Invalid ciphertext: {len(data)} bytes "
            f"(minimum {MIN_ENVELOPE_SIZE})"
        )
    cipher = _cipher(key)
    nonce = data[:NONCE_SIZE]
    ct = data[NONCE_SIZE:]
    try:
        plaintext = cipher.decrypt(nonce, ct, None)
    except InvalidTag as err:
        raise EncryptionError("Authentication failed") from err
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as err:
        raise EncryptionError(err) from err
