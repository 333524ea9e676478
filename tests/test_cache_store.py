"""Unit tests for cache/store.py -- the GraphQL response cache.

Each test gets its own SQLite file under pytest's tmp_path.
"""

from unittest.mock import patch

import pytest

from cache.store import QueryCache


@pytest.fixture
def cache(tmp_path):
    c = QueryCache(db_path=tmp_path / "cache.db", ttl=60)
    yield c
    c.close()


class TestKeyFor:
    def test_variable_order_does_not_change_key(self):
        a = QueryCache.key_for("https://x/graphql", "query Q { a }", {"limit": 10, "offset": 0})
        b = QueryCache.key_for("https://x/graphql", "query Q { a }", {"offset": 0, "limit": 10})
        assert a == b

    def test_pages_get_distinct_keys(self):
        a = QueryCache.key_for("https://x/graphql", "query Q { a }", {"page": 1})
        b = QueryCache.key_for("https://x/graphql", "query Q { a }", {"page": 2})
        assert a != b

    def test_endpoint_is_part_of_key(self):
        a = QueryCache.key_for("https://one/graphql", "query Q { a }", {})
        b = QueryCache.key_for("https://two/graphql", "query Q { a }", {})
        assert a != b


class TestQueryCache:
    def test_miss_returns_none(self, cache):
        assert cache.get("missing") is None

    def test_set_then_get(self, cache):
        cache.set("k", {"characters": {"results": []}})
        assert cache.get("k") == {"characters": {"results": []}}

    def test_set_replaces_existing_entry(self, cache):
        cache.set("k", {"v": 1})
        cache.set("k", {"v": 2})
        assert cache.get("k") == {"v": 2}

    def test_expired_entry_is_dropped_on_read(self, cache):
        with patch("cache.store.time.time", return_value=1000.0):
            cache.set("k", {"v": 1})
        with patch("cache.store.time.time", return_value=1000.0 + 61):
            assert cache.get("k") is None
        assert cache.get("k") is None

    def test_purge_expired_counts_removed_rows(self, cache):
        with patch("cache.store.time.time", return_value=1000.0):
            cache.set("old-1", {"v": 1})
            cache.set("old-2", {"v": 2})
        cache.set("fresh", {"v": 3})
        assert cache.purge_expired() == 2
        assert cache.get("fresh") == {"v": 3}
