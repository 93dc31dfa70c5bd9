"""
Email encryption and lookup hashing.

Two representations of a normalized email are derived from one secret
(EMAIL_ENCRYPTION_KEY):

- ``encrypt_email``: AES-256-GCM with a fresh 12-byte nonce per call, so
  the same email encrypts differently every time. Stored as
  ``base64(nonce || tag || ciphertext)``. Reversible, used for export.
- ``lookup_hash``: hex HMAC-SHA256, deterministic, used as the indexed
  search key. Not reversible without the secret.

The AES key and the HMAC key are both SHA-256 of the configured secret.
"""

import base64
import binascii
import functools
import hashlib
import hmac
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from django.conf import settings

from apps.core.exceptions import CryptoError
from apps.core.logging import get_logger

logger = get_logger(__name__)

NONCE_SIZE = 12
TAG_SIZE = 16

# Used only when EMAIL_ENCRYPTION_KEY is unset. Production settings refuse
# to start without a key.
DEVELOPMENT_FALLBACK_SECRET = "member-check-development-key-do-not-use-in-production"


class EmailDecryptionError(CryptoError):
    """Ciphertext is malformed, was tampered with, or was made with another key."""

    pass


def normalize_email(email: str) -> str:
    """Lowercase and strip surrounding whitespace."""
    return email.strip().lower()


@functools.cache
def _warn_insecure_key() -> None:
    logger.warning(
        "email_encryption_key_missing",
        detail="EMAIL_ENCRYPTION_KEY is not set; using the development fallback key",
    )


def _derive_key() -> bytes:
    secret: str = getattr(settings, "EMAIL_ENCRYPTION_KEY", "")
    if not secret:
        _warn_insecure_key()
        secret = DEVELOPMENT_FALLBACK_SECRET
    return hashlib.sha256(secret.encode("utf-8")).digest()


def encrypt_email(email: str) -> str:
    """
    Encrypt a normalized email for storage.

    Args:
        email: Email address (normalized before encryption)

    Returns:
        base64 text of nonce + tag + ciphertext, or "" for empty input
    """
    normalized = normalize_email(email)
    if not normalized:
        return ""

    nonce = os.urandom(NONCE_SIZE)
    # AESGCM appends the tag to the ciphertext
    sealed = AESGCM(_derive_key()).encrypt(nonce, normalized.encode("utf-8"), None)
    ciphertext, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
    return base64.b64encode(nonce + tag + ciphertext).decode("ascii")


def decrypt_email(token: str) -> str:
    """
    Decrypt a value produced by ``encrypt_email``.

    Returns:
        The normalized email, or "" for empty input

    Raises:
        EmailDecryptionError: If the token is malformed, tampered or keyed differently
    """
    if not token:
        return ""

    try:
        raw = base64.b64decode(token, validate=True)
    except (binascii.Error, ValueError):
        raise EmailDecryptionError("Ciphertext is not valid base64") from None

    if len(raw) < NONCE_SIZE + TAG_SIZE:
        raise EmailDecryptionError("Ciphertext is too short")

    nonce = raw[:NONCE_SIZE]
    tag = raw[NONCE_SIZE : NONCE_SIZE + TAG_SIZE]
    ciphertext = raw[NONCE_SIZE + TAG_SIZE :]

    try:
        plaintext = AESGCM(_derive_key()).decrypt(nonce, ciphertext + tag, None)
    except InvalidTag:
        raise EmailDecryptionError("Ciphertext failed authentication") from None

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError:
        raise EmailDecryptionError("Decrypted value is not UTF-8") from None


def lookup_hash(email: str) -> str:
    """
    Deterministic keyed hash of a normalized email.

    Returns:
        64-character hex digest, or "" for empty input
    """
    normalized = normalize_email(email)
    if not normalized:
        return ""
    return hmac.new(_derive_key(), normalized.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_lookup(email: str, stored_hash: str) -> bool:
    """Constant-time check that ``email`` hashes to ``stored_hash``."""
    if not email or not stored_hash:
        return False
    return hmac.compare_digest(lookup_hash(email), stored_hash)
