"""Tests for selftrack.cache -- content-keyed correlation memoization."""

import dataclasses

import pytest

from selftrack.cache import CorrelationCache, cache_key
from selftrack.config import Settings
from tests.conftest import make_log, make_series


@pytest.fixture
def logs():
    return make_series("Mood", [8, 4, 9]) + make_series("Sleep", [7, 5, 9])


class TestCacheKey:
    def test_equal_content_equal_key(self, logs):
        assert cache_key("u1", logs) == cache_key("u1", list(logs))

    def test_order_independent(self, logs):
        assert cache_key("u1", logs) == cache_key("u1", list(reversed(logs)))

    def test_value_change_changes_key(self, logs):
        edited = logs[:-1] + [make_log("Sleep", "2024-01-03", "8")]
        assert cache_key("u1", logs) != cache_key("u1", edited)

    def test_user_scoped(self, logs):
        assert cache_key("u1", logs) != cache_key("u2", logs)

    def test_extra_parts(self, logs):
        assert cache_key("u1", logs, "a") != cache_key("u1", logs, "b")

    def test_empty_logs(self):
        assert cache_key("u1", []) == cache_key("u1", [])


class TestCorrelationCache:
    def test_hit_on_equal_content(self, logs):
        cache = CorrelationCache()
        first = cache.correlations("u1", logs)
        second = cache.correlations("u1", list(logs))
        assert second == first
        assert second[0] is first[0]
        assert (cache.hits, cache.misses) == (1, 1)

    def test_callers_cannot_alter_cached_results(self, logs):
        cache = CorrelationCache()
        first = cache.correlations("u1", logs)
        first.clear()
        second = cache.correlations("u1", logs)
        assert len(second) == 1
        with pytest.raises(dataclasses.FrozenInstanceError):
            second[0].correlation_coefficient = 0.0
        assert isinstance(second[0].matched, tuple)

    def test_miss_after_edit(self, logs):
        cache = CorrelationCache()
        cache.correlations("u1", logs)
        cache.correlations("u1", logs + [make_log("Mood", "2024-01-04", "5")])
        assert cache.misses == 2
        assert len(cache) == 2

    def test_detail_cached_separately(self, logs):
        cache = CorrelationCache()
        cache.correlations("u1", logs)
        res = cache.detail("u1", logs, "Sleep", "Mood")
        assert res.variable1 == "Sleep"
        assert cache.detail("u1", logs, "Sleep", "Mood") is res
        assert cache.detail("u1", logs, "Mood", "Sleep") is not res
        assert len(cache) == 3

    def test_detail_caches_none(self, logs):
        cache = CorrelationCache()
        assert cache.detail("u1", logs, "Mood", "Steps") is None
        assert cache.detail("u1", logs, "Mood", "Steps") is None
        assert cache.hits == 1

    def test_invalidate_user(self, logs):
        cache = CorrelationCache()
        cache.correlations("u1", logs)
        cache.correlations("u2", logs)
        assert cache.invalidate("u1") == 1
        assert len(cache) == 1
        cache.correlations("u1", logs)
        assert cache.misses == 3

    def test_invalidate_unknown_user(self):
        assert CorrelationCache().invalidate("nobody") == 0

    def test_lru_eviction(self, logs):
        cache = CorrelationCache(maxsize=2)
        cache.correlations("u1", logs)
        cache.correlations("u2", logs)
        cache.correlations("u1", logs)  # refresh u1
        cache.correlations("u3", logs)  # evicts u2
        assert len(cache) == 2
        cache.correlations("u1", logs)
        assert cache.hits == 2
        cache.correlations("u2", logs)
        assert cache.misses == 4

    def test_clear(self, logs):
        cache = CorrelationCache()
        cache.correlations("u1", logs)
        cache.clear()
        assert len(cache) == 0

    def test_min_points_respected(self, logs):
        assert CorrelationCache(min_points=4).correlations("u1", logs) == []

    def test_from_settings(self):
        cache = CorrelationCache.from_settings(Settings(min_points=5, cache_size=3))
        assert cache.maxsize == 3
        assert cache.min_points == 5

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            CorrelationCache(maxsize=0)
