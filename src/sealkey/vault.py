"""Vault file lifecycle.

A vault file is exactly one envelope (see :mod:`sealkey.models`) wrapping a
SQLite database. Opening a vault decrypts it into a working copy next to the
vault file (``<path>.temp``); closing it deletes the working copy and, when
asked to, seals its contents back into the vault file.

The working copy doubles as an advisory lock: while it exists, the vault
cannot be opened again. A crash between open and close leaves it behind and
it must be removed by hand.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

from .crypto import decrypt, encrypt
from .errors import KeyDuplicate, KeyNonExist, PathEmpty, PathTaken, SessionClosed
from .models import Envelope
from .records import RecordStore

logger = logging.getLogger("sealkey.vault")

TEMP_SUFFIX = ".temp"
_NEW_SUFFIX = ".new"
_FILE_MODE = 0o600

PathLike = Union[str, os.PathLike]


def _write_exclusive(path: Path, data: bytes) -> None:
    """Create *path* holding *data*; refuse if it exists, remove it on failure."""
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0), _FILE_MODE)
    except FileExistsError as exc:
        raise PathTaken(path) from exc
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
    except BaseException:
        path.unlink(missing_ok=True)
        raise


class Vault:
    """An open vault session.

    Create a vault::

        Vault.create("./myvault.db", "mypassword", 12)

    Open it and work with it::

        vault = Vault.open("./myvault.db", "mypassword")
        vault.key_new("github", "password123!")
        assert vault.key_get("github") == "password123!"
        vault.close(changed=True)

    or let the context manager decide whether to re-seal::

        with Vault.open("./myvault.db", "mypassword") as vault:
            vault.key_del("github")

    One session is meant to be used from one thread.
    """

    def __init__(self, path: Path, password: str, cost: int, records: RecordStore) -> None:
        self.path = path
        self.path_temp = temp_path_for(path)
        self.cost = cost
        self.changed = False
        self._password: Optional[str] = password
        self._records: Optional[RecordStore] = records

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, path: PathLike, password: str, cost: int) -> None:
        """Create a new, empty vault at *path* protected by *password*.

        *cost* is the bcrypt work factor and is kept for the vault's lifetime.
        Raises :class:`~sealkey.errors.PathTaken` rather than overwrite.
        """
        path = Path(path)
        if path.exists():
            raise PathTaken(path)

        data = encrypt(RecordStore.blank(), password, cost)

        path.parent.mkdir(parents=True, exist_ok=True)
        _write_exclusive(path, data)
        logger.info("Created vault %s (cost=%d)", path, cost)

    @classmethod
    def open(cls, path: PathLike, password: str) -> "Vault":
        """Decrypt the vault at *path* into its working copy."""
        path = Path(path)
        path_temp = temp_path_for(path)
        if not path.exists():
            raise PathEmpty(path)
        if path_temp.exists():
            raise PathTaken(path_temp)

        raw = path.read_bytes()
        plaintext = decrypt(raw, password)
        cost = Envelope.from_bytes(raw).cost

        _write_exclusive(path_temp, plaintext)
        try:
            records = RecordStore(path_temp)
        except BaseException:
            path_temp.unlink(missing_ok=True)
            raise

        logger.debug("Opened vault %s -> %s", path, path_temp)
        return cls(path, password, cost, records)

    def close(self, changed: bool = False) -> None:
        """End the session, sealing the working copy back first if *changed*.

        The working copy is always removed once the vault file is safe. If
        re-sealing fails, the vault file is untouched, the working copy is
        kept and the session stays open.
        """
        records = self._require_open()

        if changed:
            self._seal()

        records.close()
        self._records = None
        self._password = None
        self.path_temp.unlink()
        logger.debug("Closed vault %s (changed=%s)", self.path, changed)

    @property
    def closed(self) -> bool:
        return self._records is None

    def __enter__(self) -> "Vault":
        self._require_open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.closed:
            return
        self.close(changed=self.changed and exc_type is None)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def key_new(self, key: str, value: str) -> None:
        """Store *value* under *key*; raises :class:`KeyDuplicate` if taken."""
        if self.key_get(key) is not None:
            raise KeyDuplicate(key)
        self._require_open().insert(key, value)
        self.changed = True

    def key_get(self, key: str) -> Optional[str]:
        """Return the value stored under *key*, or ``None``."""
        record = self._require_open().get(key)
        return record.value if record is not None else None

    def key_del(self, key: str) -> None:
        """Remove *key*; raises :class:`KeyNonExist` if absent."""
        if self.key_get(key) is None:
            raise KeyNonExist(key)
        self._require_open().delete(key)
        self.changed = True

    def key_ls(self) -> list[str]:
        return self._require_open().keys()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_open(self) -> RecordStore:
        if self._records is None:
            raise SessionClosed()
        return self._records

    def _seal(self) -> None:
        data = encrypt(self.path_temp.read_bytes(), self._password, self.cost)

        # Write beside the vault, then swap in one step.
        tmp = self.path.with_name(self.path.name + _NEW_SUFFIX)
        try:
            tmp.write_bytes(data)
            os.chmod(tmp, _FILE_MODE)
            tmp.replace(self.path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        logger.info("Sealed vault %s (%d bytes)", self.path, len(data))

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Vault {self.path} {state}>"


def temp_path_for(path: PathLike) -> Path:
    """Return the working-copy path for the vault at *path*."""
    path = Path(path)
    return path.with_name(path.name + TEMP_SUFFIX)
