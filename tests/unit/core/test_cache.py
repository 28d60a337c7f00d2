"""
Tests for LocatorRecord and ResolutionCache.
"""

import json
import logging
import threading

import pytest

from locator_iq.core.cache import LocatorRecord, ResolutionCache
from locator_iq.core.keys import CacheKey, KeyNamespace
from locator_iq.exceptions import InvalidCachedRecordError

KEY = CacheKey("loc.search.searchPage.button.proceed")


class TestLocatorRecord:
    """Test LocatorRecord construction and parsing."""

    def test_candidates_are_immutable(self):
        """Test lists are stored as tuples."""
        record = LocatorRecord(["#a", "#b"], "desc")
        assert record.candidates == ("#a", "#b")

    def test_degenerate(self):
        """Test records without a usable selector are degenerate."""
        assert LocatorRecord(()).is_degenerate
        assert LocatorRecord(["", "  "]).is_degenerate
        assert not LocatorRecord(["", "#a"]).is_degenerate

    def test_from_string(self):
        """Test a single selector string."""
        record = LocatorRecord.from_value("#go", key="loc.a")
        assert record.candidates == ("#go",)
        assert record.description == "loc.a"

    def test_from_dict(self):
        """Test a dict with candidates and description."""
        record = LocatorRecord.from_value({"candidates": ["#a"], "description": "Go button"})
        assert record == LocatorRecord(("#a",), "Go button")

    @pytest.mark.parametrize("value", [
        42,
        None,
        {"candidates": "#a"},
        {"candidates": ["#a", 3]},
        {"description": "no candidates"},
        {"candidates": ["#a"], "description": 7},
    ])
    def test_invalid_values(self, value):
        """Test values that cannot be interpreted."""
        with pytest.raises(InvalidCachedRecordError):
            LocatorRecord.from_value(value, key="loc.bad")


class TestResolutionCacheLookup:
    """Test lookups and presence semantics."""

    def test_absent(self):
        """Test an unknown key is absent."""
        cache = ResolutionCache()

        assert cache.lookup(KEY) is None
        assert cache.contains(KEY) is False
        assert cache.stats.misses == 1

    def test_static_hit(self):
        """Test a seeded static record is found under the plain key."""
        cache = ResolutionCache({KEY.path: ["#proceed"]})

        record = cache.lookup(KEY)

        assert record.candidates == ("#proceed",)
        assert cache.stats.static_hits == 1

    def test_partitions_are_separate(self):
        """Test static and generated records with the same path do not collide."""
        cache = ResolutionCache({KEY.path: ["#static"]})
        cache.store_generated(KEY.generated(), LocatorRecord(["#generated"]))

        assert cache.lookup(KEY).candidates == ("#static",)
        assert cache.lookup(KEY.generated()).candidates == ("#generated",)

    def test_single_candidate_record_is_present(self):
        """Test one usable candidate is enough for presence."""
        cache = ResolutionCache()
        cache.store_generated(KEY.generated(), LocatorRecord(["x"]))
        assert cache.contains(KEY.generated())

    def test_degenerate_record_is_absent(self):
        """Test a stored record without usable candidates counts as absent."""
        cache = ResolutionCache()
        cache.store_generated(KEY.generated(), LocatorRecord(()))

        assert cache.lookup(KEY.generated()) is None
        assert cache.contains(KEY.generated()) is False


class TestResolutionCacheWrites:
    """Test seeding and storing."""

    def test_seed_skips_invalid_entries(self):
        """Test invalid static entries are skipped and counted."""
        cache = ResolutionCache()

        added = cache.seed_static({"loc.good": ["#ok"], "loc.bad": 12})

        assert added == 1
        assert cache.stats.invalid_records == 1
        assert cache.contains(CacheKey("loc.good"))

    def test_seed_normalizes_key_paths(self):
        """Test hand-written keys are stored under their canonical path."""
        cache = ResolutionCache()

        cache.seed_static({"loc.search.SearchPage.button.PROCEED": ["#proceed"]})

        assert cache.lookup(KEY).candidates == ("#proceed",)

    def test_seed_warns_on_malformed_key(self, caplog):
        """Test a key that is not a full path is kept verbatim with a warning."""
        cache = ResolutionCache()

        with caplog.at_level(logging.WARNING, logger="locator_iq.core.cache"):
            cache.seed_static({"loc.good": ["#ok"]})

        assert cache.contains(CacheKey("loc.good"))
        assert "loc.good" in caplog.text

    def test_store_never_overwrites_usable_record(self):
        """Test the first usable generated record wins."""
        cache = ResolutionCache()
        first = cache.store_generated(KEY.generated(), LocatorRecord(["#first"]))

        second = cache.store_generated(KEY.generated(), LocatorRecord(["#second"]))

        assert second is first
        assert cache.lookup(KEY.generated()).candidates == ("#first",)
        assert cache.stats.writes == 1

    def test_store_replaces_degenerate_record(self):
        """Test a degenerate record can be replaced."""
        cache = ResolutionCache()
        cache.store_generated(KEY.generated(), LocatorRecord(()))

        stored = cache.store_generated(KEY.generated(), LocatorRecord(["#new"]))

        assert stored.candidates == ("#new",)

    def test_concurrent_writers_agree(self):
        """Test concurrent writers for one key all get the same record back."""
        cache = ResolutionCache()
        results = []

        def writer(i):
            results.append(cache.store_generated(KEY.generated(), LocatorRecord([f"#c{i}"])))

        threads = [threading.Thread(target=writer, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({r.candidates for r in results}) == 1
        assert cache.lookup(KEY.generated()) == results[0]

    def test_concurrent_lookups_counted(self):
        """Test lookup counters stay exact under concurrent readers."""
        cache = ResolutionCache({KEY.path: ["#proceed"]})
        missing = CacheKey("loc.search.searchPage.button.cancel")

        def reader():
            for _ in range(500):
                cache.lookup(KEY)
                cache.lookup(missing)

        threads = [threading.Thread(target=reader) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert cache.stats.static_hits == 4000
        assert cache.stats.misses == 4000

    def test_clear_generated_keeps_static(self):
        """Test clearing generated records leaves static ones."""
        cache = ResolutionCache({KEY.path: ["#static"]})
        cache.store_generated(KEY.generated(), LocatorRecord(["#gen"]))

        cache.clear_generated()

        assert len(cache) == 1
        assert list(cache.entries(KeyNamespace.GENERATED)) == []


class TestResolutionCachePersistence:
    """Test saving and loading generated records."""

    def test_save_and_load(self, tmp_path):
        """Test generated records survive a save/load cycle."""
        path = tmp_path / "cache" / "locators.json"
        cache = ResolutionCache({KEY.path: ["#static"]})
        cache.store_generated(KEY.generated(), LocatorRecord(["#a", "#b"], "Proceed"))
        cache.store_generated(CacheKey("loc.empty").generated(), LocatorRecord(()))

        assert cache.save_generated(path) == 1

        restored = ResolutionCache()
        assert restored.load_generated(path) == 1
        assert restored.lookup(KEY.generated()) == LocatorRecord(("#a", "#b"), "Proceed")
        assert restored.lookup(KEY) is None

    def test_missing_file(self, tmp_path):
        """Test a missing cache file loads nothing."""
        assert ResolutionCache().load_generated(tmp_path / "nope.json") == 0

    def test_unreadable_file(self, tmp_path):
        """Test a corrupt cache file is ignored."""
        path = tmp_path / "locators.json"
        path.write_text("{not json")

        assert ResolutionCache().load_generated(path) == 0

    def test_invalid_records_skipped(self, tmp_path):
        """Test invalid records are skipped and counted."""
        path = tmp_path / "locators.json"
        path.write_text(json.dumps({"loc.good": ["#ok"], "loc.bad": 5}))
        cache = ResolutionCache()

        assert cache.load_generated(path) == 1
        assert cache.stats.invalid_records == 1
        assert cache.contains(CacheKey("loc.good", KeyNamespace.GENERATED))
