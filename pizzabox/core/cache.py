"""
Bucketed key-value store for menus, addresses and saved orders.

Everything lives in one SQLite file. Values are opaque bytes; callers own
serialization. The store is meant for a single process at a time.
"""

import sqlite3
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..errors import NotFoundError
from ..utils.logging_setup import get_logger


DEFAULT_BUCKET = "default"

logger = get_logger(__name__)


class ScopedStore:
    """View of a single bucket of a ``CacheStore``."""

    def __init__(self, db: "CacheStore", bucket: str):
        self.db = db
        self.bucket = bucket

    def get(self, key: str) -> bytes:
        """
        Read a value.

        Raises:
            NotFoundError: the key is not in this bucket
        """
        row = self.db.conn.execute(
            "SELECT value FROM records WHERE bucket = ? AND key = ?", (self.bucket, key)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"no {key!r} in bucket {self.bucket!r}", key=key)
        return bytes(row[0])

    def put(self, key: str, value: bytes) -> None:
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(f"cache values must be bytes, got {type(value).__name__}")
        with self.db.conn:
            self.db.conn.execute(
                "INSERT OR REPLACE INTO records (bucket, key, value) VALUES (?, ?, ?)",
                (self.bucket, key, sqlite3.Binary(bytes(value))),
            )

    def delete(self, key: str) -> bool:
        """Remove a key; returns whether it existed."""
        with self.db.conn:
            cur = self.db.conn.execute(
                "DELETE FROM records WHERE bucket = ? AND key = ?", (self.bucket, key)
            )
        return cur.rowcount > 0

    def exists(self, key: str) -> bool:
        row = self.db.conn.execute(
            "SELECT 1 FROM records WHERE bucket = ? AND key = ?", (self.bucket, key)
        ).fetchone()
        return row is not None

    def keys(self) -> List[str]:
        rows = self.db.conn.execute(
            "SELECT key FROM records WHERE bucket = ? ORDER BY key", (self.bucket,)
        ).fetchall()
        return [row[0] for row in rows]

    def map(self) -> Dict[str, bytes]:
        """Snapshot of every key and value in the bucket."""
        rows = self.db.conn.execute(
            "SELECT key, value FROM records WHERE bucket = ? ORDER BY key", (self.bucket,)
        ).fetchall()
        return {key: bytes(value) for key, value in rows}


class CacheStore:
    """
    Disk-backed store partitioned into named buckets.

    Unscoped ``get``/``put``/``map`` calls use the default bucket; use
    ``with_bucket`` for anything else.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Open (or create) the store.

        Args:
            path: SQLite file location; parent directories are created
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: Optional[sqlite3.Connection] = sqlite3.connect(str(self.path))
        self._init_database()
        self._default = ScopedStore(self, DEFAULT_BUCKET)

    def _init_database(self) -> None:
        with self.conn:
            self.conn.executescript('''
                CREATE TABLE IF NOT EXISTS records (
                    bucket TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value BLOB NOT NULL,
                    PRIMARY KEY (bucket, key)
                );
            ''')

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError(f"cache store {self.path} is closed")
        return self._conn

    @property
    def closed(self) -> bool:
        return self._conn is None

    def with_bucket(self, name: str) -> ScopedStore:
        return ScopedStore(self, name)

    def get(self, key: str) -> bytes:
        return self._default.get(key)

    def put(self, key: str, value: bytes) -> None:
        self._default.put(key, value)

    def delete(self, key: str) -> bool:
        return self._default.delete(key)

    def exists(self, key: str) -> bool:
        return self._default.exists(key)

    def keys(self) -> List[str]:
        return self._default.keys()

    def map(self) -> Dict[str, bytes]:
        return self._default.map()

    def buckets(self) -> List[str]:
        rows = self.conn.execute("SELECT DISTINCT bucket FROM records ORDER BY bucket").fetchall()
        return [row[0] for row in rows]

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def destroy(self) -> None:
        """Close the store and delete its file. Safe to call more than once."""
        self.close()
        try:
            self.path.unlink()
            logger.debug(f"removed cache store {self.path}")
        except FileNotFoundError:
            pass

    def __enter__(self) -> "CacheStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"CacheStore({str(self.path)!r})"
