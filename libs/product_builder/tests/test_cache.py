"""Tests TTLCache — horloge injectée, erreurs de chargement en CatalogUnavailable."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from product_builder import CatalogUnavailable, TTLCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


def _counting_loader():
    calls = []

    def load():
        calls.append(1)
        return len(calls)
    return load, calls


class TestTTLCache:
    def test_loads_once_within_ttl(self, clock):
        load, calls = _counting_loader()
        cache = TTLCache(load, ttl=60, clock=clock)
        assert cache.get() == 1
        clock.now = 59
        assert cache.get() == 1
        assert len(calls) == 1

    def test_reloads_after_ttl(self, clock):
        load, _ = _counting_loader()
        cache = TTLCache(load, ttl=60, clock=clock)
        cache.get()
        clock.now = 60
        assert cache.get() == 2

    def test_refresh_and_purge(self, clock):
        load, _ = _counting_loader()
        cache = TTLCache(load, ttl=60, clock=clock)
        cache.get()
        assert cache.refresh() == 2
        cache.purge()
        assert not cache.fresh
        assert cache.get() == 3

    def test_loader_error_wrapped(self, clock):
        def boom():
            raise OSError("disk gone")
        cache = TTLCache(boom, clock=clock)
        with pytest.raises(CatalogUnavailable) as exc:
            cache.get()
        assert "disk gone" in exc.value.message
        assert not cache.fresh

    def test_catalog_unavailable_passes_through(self, clock):
        def boom():
            raise CatalogUnavailable("DB verrouillée")
        with pytest.raises(CatalogUnavailable) as exc:
            TTLCache(boom, clock=clock).get()
        assert exc.value.message == "DB verrouillée"
