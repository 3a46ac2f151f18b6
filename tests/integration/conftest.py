"""
Fixtures for runner-level tests
"""

import pytest

from ingestion.cache.memory_cache import ContactSnapshotCache
from ingestion.extractors.sources import (
    AlternateSource,
    LocalCacheSource,
    PrimarySource,
    ProxyRelaySource,
    SampleDataSource,
)
from ingestion.runner import ContactIngestionRunner

PROXY_HOST = "relay.example.org"
PROXY_TEMPLATE = f"https://{PROXY_HOST}/get?url={{url}}"


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def proxy_host():
    return PROXY_HOST


@pytest.fixture
def build_runner(make_fetcher, make_cache_store, feed_url, fake_clock):
    """Runner wired with the full ladder against one mock handler"""
    def _build(handler, ttl_seconds=300):
        fetcher = make_fetcher(handler)
        store = make_cache_store(fetcher)
        strategies = [
            PrimarySource(fetcher, feed_url),
            LocalCacheSource(store),
            AlternateSource(fetcher, feed_url),
            ProxyRelaySource(fetcher, feed_url, PROXY_TEMPLATE),
            SampleDataSource(),
        ]
        return ContactIngestionRunner(
            strategies=strategies,
            snapshot_cache=ContactSnapshotCache(ttl_seconds=ttl_seconds, clock=fake_clock),
            cache_store=store,
            use_local_csv=False
        )
    return _build
