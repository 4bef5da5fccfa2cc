"""Cryptographic primitives for sealkey.

Key derivation: bcrypt (cost 5-31, 16-byte salt) -> SHA-256 of the hash text.
Encryption:     AES-256-GCM-SIV (12-byte nonce, 16-byte tag).

The result of :func:`encrypt` is a complete :class:`~sealkey.models.Envelope`
in serialized form; nothing else is needed to decrypt it but the password.
"""

from __future__ import annotations

import base64
import logging
import os

import bcrypt
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCMSIV

from .errors import AuthenticationFailed, KeyDerivationFailed
from .models import NONCE_SIZE, SALT_SIZE, Envelope

logger = logging.getLogger("sealkey.crypto")

MIN_COST = 5
MAX_COST = 31
KEY_SIZE = 32

# bcrypt ignores everything past 72 bytes of password.
_BCRYPT_MAX_PASSWORD = 72

_STD_B64 = b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BCRYPT_B64 = b"./ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
_TO_BCRYPT_B64 = bytes.maketrans(_STD_B64, _BCRYPT_B64)


def generate_salt() -> bytes:
    """Return a cryptographically-random 16-byte salt."""
    return os.urandom(SALT_SIZE)


def generate_nonce() -> bytes:
    """Return a cryptographically-random 12-byte nonce."""
    return os.urandom(NONCE_SIZE)


def _bcrypt_salt(salt: bytes, cost: int) -> bytes:
    encoded = base64.b64encode(salt).rstrip(b"=").translate(_TO_BCRYPT_B64)
    return b"$2b$%02d$" % cost + encoded


def derive_key(password: str, salt: bytes, cost: int) -> bytes:
    """Derive a 32-byte AEAD key from *password*, *salt* and bcrypt *cost*."""
    if not MIN_COST <= cost <= MAX_COST:
        raise KeyDerivationFailed(f"password hashing failed: cost {cost} outside {MIN_COST}-{MAX_COST}")
    if len(salt) != SALT_SIZE:
        raise KeyDerivationFailed()

    secret = password.encode("utf-8")[:_BCRYPT_MAX_PASSWORD]
    try:
        hashed = bcrypt.hashpw(secret, _bcrypt_salt(salt, cost))
    except ValueError as exc:
        raise KeyDerivationFailed() from exc

    digest = hashes.Hash(hashes.SHA256())
    digest.update(hashed)
    return digest.finalize()


def encrypt(plaintext: bytes, password: str, cost: int) -> bytes:
    """Encrypt *plaintext* into a serialized envelope under *password*."""
    salt = generate_salt()
    nonce = generate_nonce()
    key = derive_key(password, salt, cost)
    ciphertext = AESGCMSIV(key).encrypt(nonce, plaintext, None)
    logger.debug("Sealed %d bytes (cost=%d)", len(plaintext), cost)
    return Envelope(cost=cost, salt=salt, nonce=nonce, ciphertext=ciphertext).to_bytes()


def decrypt(envelope: bytes, password: str) -> bytes:
    """Decrypt a serialized envelope.

    Raises :class:`~sealkey.errors.MalformedEnvelope` if *envelope* is too
    short to parse, and :class:`~sealkey.errors.AuthenticationFailed` if the
    tag does not verify.
    """
    parsed = Envelope.from_bytes(envelope)
    key = derive_key(password, parsed.salt, parsed.cost)
    try:
        return AESGCMSIV(key).decrypt(parsed.nonce, parsed.ciphertext, None)
    except (InvalidTag, ValueError) as exc:
        raise AuthenticationFailed() from exc
