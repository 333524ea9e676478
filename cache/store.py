"""
cache/store.py -- SQLite-backed cache for GraphQL responses.

Avoids redundant upstream calls by storing the `data` object of each GraphQL
response locally with a configurable TTL (default 10 minutes). Every
(endpoint, query, variables) combination is its own entry, so two pages of the
same list are cached side by side and never merged.

Usage:
    cache = QueryCache()
    key = QueryCache.key_for(url, query, {"page": 2})
    data = cache.get(key)                # returns dict or None
    cache.set(key, data)
    cache.purge_expired()                # call periodically to trim old entries
"""

import hashlib
import json
import sqlite3
import time
from pathlib import Path
from typing import Any, Optional, Union

_DEFAULT_DB = Path(__file__).parent / "webteam_cache.db"
_DEFAULT_TTL = 60 * 10  # 10 minutes in seconds

_DDL = """
CREATE TABLE IF NOT EXISTS query_cache (
    cache_key   TEXT PRIMARY KEY,
    data        TEXT NOT NULL,
    cached_at   REAL NOT NULL
);
"""


class QueryCache:
    def __init__(self, db_path: Union[Path, str] = _DEFAULT_DB, ttl: int = _DEFAULT_TTL) -> None:
        self.ttl = ttl
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute(_DDL)
        self._conn.commit()

    @staticmethod
    def key_for(endpoint: str, query: str, variables: dict[str, Any]) -> str:
        """Stable cache key: variables are serialized with sorted keys."""
        raw = json.dumps([endpoint, query.strip(), variables], sort_keys=True)
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    def get(self, key: str) -> Optional[dict]:
        """Return cached data for key if it exists and hasn't expired."""
        row = self._conn.execute(
            "SELECT data, cached_at FROM query_cache WHERE cache_key = ?",
            (key,),
        ).fetchone()
        if row is None:
            return None
        data, cached_at = row
        if time.time() - cached_at > self.ttl:
            self._delete(key)
            return None
        return json.loads(data)

    def set(self, key: str, data: dict) -> None:
        """Store data for key, replacing any existing entry."""
        self._conn.execute(
            "INSERT OR REPLACE INTO query_cache (cache_key, data, cached_at) VALUES (?, ?, ?)",
            (key, json.dumps(data), time.time()),
        )
        self._conn.commit()

    def purge_expired(self) -> int:
        """Delete all entries older than TTL. Returns number of rows removed."""
        cutoff = time.time() - self.ttl
        cursor = self._conn.execute("DELETE FROM query_cache WHERE cached_at < ?", (cutoff,))
        self._conn.commit()
        return cursor.rowcount

    def _delete(self, key: str) -> None:
        self._conn.execute("DELETE FROM query_cache WHERE cache_key = ?", (key,))
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()
