"""
Tests for failure scenarios and the fallback ladder
"""

import logging
from unittest.mock import MagicMock

import httpx
import pytest

from ingestion.base import AcquisitionStrategy
from ingestion.cache.memory_cache import ContactSnapshotCache
from ingestion.extractors.sources import LocalCacheSource, PrimarySource, SampleDataSource
from ingestion.runner import ContactIngestionRunner
from schemas.cache import CacheEntry
from schemas.contact import AcquisitionStage, ConnectionStatus

SAMPLE_NAMES = ["John Doe", "Jane Smith", "Mike Johnson", "Sarah Wilson", "David Brown"]


class ExplodingSource(AcquisitionStrategy):
    """A rung that fails with something other than a feed error"""
    stage = AcquisitionStage.PRIMARY
    name = "exploding"

    async def acquire(self) -> str:
        raise RuntimeError("unexpected failure")


def _age_sidecar(store, minutes):
    entry = store.info()
    aged = entry.model_copy(update={"timestamp": entry.timestamp - int(minutes * 60 * 1000)})
    store.info_file.write_text(aged.model_dump_json(), encoding="utf-8")


@pytest.mark.asyncio
async def test_everything_down_falls_through_to_sample(build_runner, caplog):
    """
    Test: every network rung fails, the bundled sample data is served
    """
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    runner = build_runner(handler)

    with caplog.at_level(logging.WARNING, logger="ingestion.runner"):
        contacts = await runner.get_contacts()

    assert [c.name for c in contacts] == SAMPLE_NAMES
    assert contacts[0].phone == "+1-555-0123"
    assert runner.last_stage == AcquisitionStage.SAMPLE
    assert runner.connection_status == ConnectionStatus.ERROR

    # 3 primary attempts, cache download, alternate, proxy
    assert len(calls) == 6

    failed_stages = [r.getMessage().split()[1] for r in caplog.records if r.getMessage().startswith("Stage ")]
    assert failed_stages == ["primary", "local_cache", "alternate", "proxy"]


@pytest.mark.asyncio
async def test_alternate_headers_get_through(build_runner, feed_csv):
    """
    Test: server rejects the app user agent but accepts a browser one
    """
    def handler(request):
        if request.headers["User-Agent"].startswith("Mozilla"):
            return httpx.Response(200, text=feed_csv)
        return httpx.Response(403)

    runner = build_runner(handler)
    contacts = await runner.get_contacts()

    assert len(contacts) == 3
    assert runner.last_stage == AcquisitionStage.ALTERNATE
    assert runner.connection_status == ConnectionStatus.CONNECTED


@pytest.mark.asyncio
async def test_proxy_relay_gets_through(build_runner, feed_csv, proxy_host):
    """
    Test: direct requests fail, the relay serves the document
    """
    def handler(request):
        if request.url.host == proxy_host:
            return httpx.Response(200, json={"contents": feed_csv})
        raise httpx.ConnectError("Connection refused", request=request)

    runner = build_runner(handler)
    contacts = await runner.get_contacts()

    assert [c.name for c in contacts] == ["Alice Walker", "Bob Stone", "Carol King"]
    assert runner.last_stage == AcquisitionStage.PROXY
    assert runner.connection_status == ConnectionStatus.CONNECTED


@pytest.mark.asyncio
async def test_stale_disk_cache_while_offline(build_runner, feed_csv):
    """
    Test: network down, an old cached payload is served and reported offline
    """
    runner = build_runner(lambda request: httpx.Response(503))
    runner.cache_store.write(feed_csv)
    _age_sidecar(runner.cache_store, minutes=60)

    contacts = await runner.get_contacts()

    assert len(contacts) == 3
    assert runner.last_stage == AcquisitionStage.LOCAL_CACHE
    assert runner.connection_status == ConnectionStatus.OFFLINE


@pytest.mark.asyncio
async def test_fresh_disk_cache_after_primary_failure(build_runner, feed_csv):
    """
    Test: primary fails, a fresh cached payload is served without a download
    """
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500)

    runner = build_runner(handler)
    runner.cache_store.write(feed_csv)

    contacts = await runner.get_contacts()

    assert len(contacts) == 3
    assert len(calls) == 3
    assert runner.last_stage == AcquisitionStage.LOCAL_CACHE
    assert runner.connection_status == ConnectionStatus.CONNECTED


@pytest.mark.asyncio
async def test_unparseable_payload_moves_down_the_ladder(build_runner):
    """
    Test: the server answers, but nothing in the body is a contact
    """
    body = "City,Zip\n" + "".join(f"Town {i},{10000 + i}\n" for i in range(20))
    runner = build_runner(lambda request: httpx.Response(200, text=body))

    contacts = await runner.get_contacts()

    assert [c.name for c in contacts] == SAMPLE_NAMES
    assert runner.last_stage == AcquisitionStage.SAMPLE
    assert runner.connection_status == ConnectionStatus.ERROR


@pytest.mark.asyncio
async def test_unexpected_error_returns_sample_data():
    """
    Test: an unexpected error never escapes get_contacts
    """
    runner = ContactIngestionRunner(
        strategies=[ExplodingSource()],
        snapshot_cache=ContactSnapshotCache(ttl_seconds=300),
        use_local_csv=False
    )

    contacts = await runner.get_contacts()

    assert [c.name for c in contacts] == SAMPLE_NAMES
    assert runner.last_stage == AcquisitionStage.RESCUE
    assert runner.connection_status == ConnectionStatus.ERROR


@pytest.mark.asyncio
async def test_unexpected_error_prefers_stale_snapshot(fake_clock):
    """
    Test: the rescue path returns the expired snapshot when one exists
    """
    runner = ContactIngestionRunner(
        strategies=[SampleDataSource("Name,Email\nOnly One,only@one.com\n")],
        snapshot_cache=ContactSnapshotCache(ttl_seconds=300, clock=fake_clock),
        use_local_csv=False
    )
    first = await runner.get_contacts()

    runner.strategies = [ExplodingSource()]
    fake_clock.now += 1000
    second = await runner.get_contacts()

    assert second is first
    assert [c.name for c in second] == ["Only One"]
    assert runner.last_stage == AcquisitionStage.RESCUE


@pytest.mark.asyncio
async def test_empty_result_reports_no_data():
    normalizer = MagicMock()
    normalizer.normalize_all.return_value = []
    runner = ContactIngestionRunner(
        strategies=[SampleDataSource()],
        normalizer=normalizer,
        snapshot_cache=ContactSnapshotCache(ttl_seconds=300),
        use_local_csv=False
    )

    contacts = await runner.get_contacts()

    assert contacts == []
    assert runner.connection_status == ConnectionStatus.NO_DATA


@pytest.mark.asyncio
async def test_local_mode_uses_sample_data_only():
    runner = ContactIngestionRunner(
        snapshot_cache=ContactSnapshotCache(ttl_seconds=300),
        use_local_csv=True
    )

    assert runner.connection_status == ConnectionStatus.OFFLINE
    assert [type(s).__name__ for s in runner.strategies] == ["SampleDataSource"]

    contacts = await runner.get_contacts()

    assert [c.name for c in contacts] == SAMPLE_NAMES
    assert runner.last_stage == AcquisitionStage.SAMPLE
    assert runner.connection_status == ConnectionStatus.OFFLINE


def test_cache_entry_age():
    assert CacheEntry(timestamp=1_000, size="10").age_ms(61_000) == 60_000


@pytest.mark.asyncio
async def test_invalid_primary_url_does_not_abort_the_ladder(make_fetcher, make_cache_store, feed_csv):
    """
    Test: a malformed source URL fails its rung like any network error
    """
    fetcher = make_fetcher(lambda request: httpx.Response(503))
    store = make_cache_store(fetcher)
    store.write(feed_csv)
    _age_sidecar(store, minutes=60)

    runner = ContactIngestionRunner(
        strategies=[
            PrimarySource(fetcher, "http://exa mple.com/\x00bad"),
            LocalCacheSource(store),
            SampleDataSource(),
        ],
        snapshot_cache=ContactSnapshotCache(ttl_seconds=300),
        cache_store=store,
        use_local_csv=False
    )

    contacts = await runner.get_contacts()

    assert [c.name for c in contacts] == ["Alice Walker", "Bob Stone", "Carol King"]
    assert runner.last_stage == AcquisitionStage.LOCAL_CACHE
    assert runner.connection_status == ConnectionStatus.OFFLINE
