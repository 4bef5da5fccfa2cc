"""sealkey — a password vault in a single encrypted file."""

from __future__ import annotations

__version__ = "0.1.0"


def get_secret(key: str, password: str, vault=None) -> str:
    """Fetch one secret from a vault — the one-liner for scripts and notebooks.

    Opens the vault, reads *key* and closes it again without touching the
    vault file.

    Args:
        key:      Name of the secret.
        password: Master password of the vault.
        vault:    Path to the vault file. Defaults to the active vault.

    Returns:
        The stored secret.

    Raises:
        KeyError: If *key* is not in the vault.
        sealkey.errors.NoActiveVault: If *vault* is omitted and none is active.
        sealkey.errors.AuthenticationFailed: If *password* is wrong.

    Example::

        from sealkey import get_secret

        token = get_secret("github", os.environ["VAULT_PASSWORD"])
    """
    from .config import get_active_vault
    from .errors import NoActiveVault
    from .vault import Vault

    path = vault if vault is not None else get_active_vault()
    if path is None:
        raise NoActiveVault()

    with Vault.open(path, password) as session:
        value = session.key_get(key)

    if value is None:
        raise KeyError(f"Key {key!r} not found in vault {path}")
    return value
