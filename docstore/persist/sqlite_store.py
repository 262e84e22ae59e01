"""
SQLite-backed storage for serialized collections.

Uses a single table:
- collections: storage key → JSON array of records

Values are stored as TEXT with a timestamp of the last write.
"""

import sqlite3
import time
from pathlib import Path
from typing import Optional

from docstore.errors import StorageUnavailable
from .storage import StorageAdapter

TABLE = "collections"


class SQLiteStorage(StorageAdapter):
    """
    File-backed SQLite key-value store for collections.

    Every sqlite3 error is reported as StorageUnavailable.
    """

    def __init__(self, db_path: Path):
        """
        Initialize storage at given path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path), timeout=10.0)
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._init_tables()
        except (OSError, sqlite3.Error) as e:
            self.close()
            raise StorageUnavailable(f"Cannot open SQLite storage at {self.db_path}: {e}") from e

    def _init_tables(self) -> None:
        """Create the collections table if it doesn't exist."""
        self._conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {TABLE} (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                ts INTEGER NOT NULL
            )
        """)
        self._conn.commit()

    def _execute(self, sql: str, params: tuple = (), key: Optional[str] = None) -> sqlite3.Cursor:
        if self._conn is None:
            raise StorageUnavailable("SQLite storage is closed", key=key)
        try:
            cursor = self._conn.execute(sql, params)
            self._conn.commit()
            return cursor
        except sqlite3.Error as e:
            raise StorageUnavailable(f"SQLite error: {e}", key=key) from e

    def save(self, key: str, serialized: str) -> None:
        """
        Store a serialized collection.

        Args:
            key: Storage key
            serialized: JSON array of records
        """
        self._execute(
            f"INSERT OR REPLACE INTO {TABLE} (key, value, ts) VALUES (?, ?, ?)",
            (key, serialized, int(time.time())),
            key=key,
        )

    def load(self, key: str) -> Optional[str]:
        """
        Get the serialized collection for a key.

        Returns:
            JSON text if found, None otherwise
        """
        row = self._execute(
            f"SELECT value FROM {TABLE} WHERE key = ?", (key,), key=key
        ).fetchone()
        return row[0] if row else None

    def delete(self, key: str) -> bool:
        cursor = self._execute(f"DELETE FROM {TABLE} WHERE key = ?", (key,), key=key)
        return cursor.rowcount > 0

    def keys(self, prefix: str = "") -> list[str]:
        rows = self._execute(f"SELECT key FROM {TABLE} ORDER BY key").fetchall()
        return [row[0] for row in rows if row[0].startswith(prefix)]

    def purge(self) -> int:
        """
        Delete every stored collection.

        Returns:
            Number of rows deleted
        """
        count = self._execute(f"SELECT COUNT(*) FROM {TABLE}").fetchone()[0]
        self._execute(f"DELETE FROM {TABLE}")
        return count

    def stats(self) -> dict:
        """
        Get statistics for the collections table.

        Returns:
            Dict with count, total_bytes, oldest_ts, newest_ts
        """
        row = self._execute(f"""
            SELECT
                COUNT(*) as count,
                SUM(LENGTH(CAST(value AS BLOB))) as total_bytes,
                MIN(ts) as oldest_ts,
                MAX(ts) as newest_ts
            FROM {TABLE}
        """).fetchone()

        return {
            "count": row[0] or 0,
            "total_bytes": row[1] or 0,
            "oldest_ts": row[2] or 0,
            "newest_ts": row[3] or 0,
        }

    def vacuum(self) -> None:
        """Reclaim space after large deletions."""
        self._execute("VACUUM")

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
