"""In-process cache of parsed query batches.

Parsing is the most expensive step of an analysis run, and the same
query file is often analysed repeatedly (watch loops, editor
integrations).  Entries are keyed by a SHA-256 of the dialect and the raw
SQL text.

Design notes:
    * Thread-safe via a threading lock; this is the only mutable state
      shared across analysis runs.
    * When full, the oldest half of the entries is dropped in one pass.
      Only the capacity bound is guaranteed, not the eviction order.
    * The cache is created by the caller and passed in explicitly.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from typing import Any

from analyzer_engine.models.query import Query
from analyzer_engine.parser.dialect import SqlDialect
from analyzer_engine.parser.queries import parse_queries

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 100


class QueryCache:
    """SHA-256 keyed cache of ``list[Query]`` results.

    Parameters
    ----------
    max_entries:
        Maximum number of cached batches.  Inserting into a full cache
        first evicts the oldest half.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._store: dict[str, list[Query]] = {}
        self._lock = threading.Lock()
        self._max_entries = max_entries

        # Stats
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(sql: str, dialect: SqlDialect = SqlDialect.GENERIC) -> str:
        """Build a deterministic cache key for *sql* parsed as *dialect*."""
        digest = hashlib.sha256()
        digest.update(dialect.value.encode())
        digest.update(b"\x00")
        digest.update(sql.encode())
        return digest.hexdigest()

    def get(self, key: str) -> list[Query] | None:
        """Look up a parsed batch.  Returns ``None`` on miss."""
        with self._lock:
            queries = self._store.get(key)
            if queries is None:
                self._misses += 1
                logger.debug("Cache miss: key=%s", key[:12])
                return None
            self._hits += 1
        logger.debug("Cache hit: key=%s", key[:12])
        return list(queries)

    def put(self, key: str, queries: list[Query]) -> None:
        """Store a parsed batch, evicting the oldest half when full."""
        with self._lock:
            if len(self._store) >= self._max_entries and key not in self._store:
                self._evict_oldest_half()
            self._store[key] = list(queries)

    def clear(self) -> int:
        """Drop every entry and reset the counters.  Returns count removed."""
        with self._lock:
            count = len(self._store)
            self._store.clear()
            self._hits = 0
            self._misses = 0
        logger.debug("Cache cleared: removed %d entries", count)
        return count

    def stats(self) -> dict[str, Any]:
        """Return cache hit/miss statistics."""
        with self._lock:
            total = self._hits + self._misses
            return {
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total, 4) if total > 0 else 0.0,
                "max_entries": self._max_entries,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def _evict_oldest_half(self) -> None:
        """Must be called while holding ``self._lock``."""
        evict_count = max(1, len(self._store) // 2)
        # dicts keep insertion order, so the first keys are the oldest.
        for key in list(self._store)[:evict_count]:
            del self._store[key]
        logger.debug("Cache evicted %d entries", evict_count)


def parse_queries_cached(
    sql: str,
    dialect: SqlDialect = SqlDialect.GENERIC,
    cache: QueryCache | None = None,
) -> list[Query]:
    """Like :func:`parse_queries`, consulting *cache* first when given.

    Parse errors are not cached.
    """
    if cache is None:
        return parse_queries(sql, dialect)

    key = QueryCache.make_key(sql, dialect)
    cached = cache.get(key)
    if cached is not None:
        return cached

    queries = parse_queries(sql, dialect)
    cache.put(key, queries)
    return queries
