"""
Entity Name Cache Tests.
"""

from metric_pipeline import EntityNameCache


class TestEntityNameCache:

    def test_lookup_absent(self):
        assert EntityNameCache().lookup("missing") is None

    def test_insert_and_lookup(self):
        cache = EntityNameCache()
        cache.insert("A", "Alice")

        assert cache.lookup("A") == "Alice"
        assert "A" in cache
        assert len(cache) == 1

    def test_insert_overwrites(self):
        cache = EntityNameCache()
        cache.insert("A", "Alice")
        cache.insert("A", "Alicia")

        assert cache.lookup("A") == "Alicia"
        assert len(cache) == 1

    def test_empty_name_is_cached(self):
        cache = EntityNameCache()
        cache.insert("A", "")

        assert cache.lookup("A") == ""
        assert "A" in cache
