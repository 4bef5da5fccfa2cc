"""Exception types raised by sealkey.

Every error carries a short, stable message suitable for printing as-is.
Underlying I/O failures are not wrapped: they surface as :class:`OSError`.
"""

from __future__ import annotations

from typing import Optional


class VaultError(Exception):
    """Base class for every sealkey error."""

    message = "vault error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)


# ---------------------------------------------------------------------------
# Crypto / format
# ---------------------------------------------------------------------------


class KeyDerivationFailed(VaultError):
    message = "password hashing failed"


class AuthenticationFailed(VaultError, ValueError):
    """Wrong password or corrupted ciphertext. The two are never told apart."""

    message = "decrypt failed (bad password?)"


class MalformedEnvelope(VaultError):
    message = "vault file is truncated or corrupt"


# ---------------------------------------------------------------------------
# Files & session state
# ---------------------------------------------------------------------------


class PathTaken(VaultError):
    message = "path is occupied"

    def __init__(self, path) -> None:
        self.path = path
        super().__init__(f"{self.message}: {path}")


class PathEmpty(VaultError):
    message = "file not found"

    def __init__(self, path) -> None:
        self.path = path
        super().__init__(f"{self.message}: {path}")


class SessionClosed(VaultError):
    message = "vault session is closed"


class NoActiveVault(VaultError):
    message = "no active vault"


class BadPointer(VaultError):
    message = "active vault pointer is corrupt"


class ClipboardUnavailable(VaultError):
    message = "clipboard unavailable"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class KeyDuplicate(VaultError):
    message = "key with that name exists"

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"{self.message}: {key}")


class KeyNonExist(VaultError):
    message = "no key with that name exists"

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"{self.message}: {key}")
