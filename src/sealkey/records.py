"""Key/value record table held inside a decrypted vault.

The working copy is an ordinary SQLite database file, so the bytes on disk
and the plaintext sealed into the envelope are the same thing.
"""

from __future__ import annotations

import sqlite3
import tempfile
from pathlib import Path
from typing import Optional

from .models import Record

_CREATE_SQL = "CREATE TABLE records (key TEXT, value TEXT);"
_INSERT_SQL = "INSERT INTO records VALUES (?, ?);"
_GET_SQL = "SELECT key, value FROM records WHERE key = ?;"
_DELETE_SQL = "DELETE FROM records WHERE key = ?;"
_KEYS_SQL = "SELECT key FROM records;"


class RecordStore:
    """Thin wrapper over one SQLite database file.

    Statements run in autocommit mode so the file is always complete between
    calls. Uniqueness of keys is left to the caller.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._conn: Optional[sqlite3.Connection] = sqlite3.connect(
            str(path), isolation_level=None
        )

    @staticmethod
    def blank() -> bytes:
        """Return the bytes of a fresh database holding an empty table."""
        with tempfile.TemporaryDirectory(prefix="sealkey-") as scratch:
            path = Path(scratch) / "blank.db"
            conn = sqlite3.connect(str(path), isolation_level=None)
            try:
                conn.execute(_CREATE_SQL)
            finally:
                conn.close()
            return path.read_bytes()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise sqlite3.ProgrammingError("record store is closed")
        return self._conn

    def insert(self, key: str, value: str) -> None:
        self.conn.execute(_INSERT_SQL, (key, value))

    def get(self, key: str) -> Optional[Record]:
        row = self.conn.execute(_GET_SQL, (key,)).fetchone()
        if row is None:
            return None
        return Record(key=row[0], value=row[1])

    def delete(self, key: str) -> None:
        self.conn.execute(_DELETE_SQL, (key,))

    def keys(self) -> list[str]:
        return [row[0] for row in self.conn.execute(_KEYS_SQL)]

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
