"""
Concrete acquisition strategies, in the order the runner tries them:

    PrimarySource      direct fetch with retry and backoff
    LocalCacheSource   durable cache (may trigger its own download)
    AlternateSource    single direct fetch with browser-like headers
    ProxyRelaySource   single fetch through the configured relay
    SampleDataSource   bundled sample CSV, never fails
"""

from typing import Optional

from core.config import settings
from ingestion.base import AcquisitionStrategy
from ingestion.cache.file_cache import LocalCacheStore
from ingestion.extractors.http_fetcher import ALTERNATE_HEADERS, CSVFetcher
from ingestion.extractors.sample_data import SAMPLE_CSV
from schemas.contact import AcquisitionStage


class PrimarySource(AcquisitionStrategy):
    stage = AcquisitionStage.PRIMARY
    name = "primary fetch"

    def __init__(self, fetcher: CSVFetcher, url: Optional[str] = None):
        self.fetcher = fetcher
        self.url = url or settings.CSV_URL

    async def acquire(self) -> str:
        return await self.fetcher.fetch(self.url)


class LocalCacheSource(AcquisitionStrategy):
    stage = AcquisitionStage.LOCAL_CACHE
    name = "download and cache"

    def __init__(self, cache_store: LocalCacheStore):
        self.cache_store = cache_store

    async def acquire(self) -> str:
        return await self.cache_store.read_or_download()


class AlternateSource(AcquisitionStrategy):
    stage = AcquisitionStage.ALTERNATE
    name = "alternate fetch"

    def __init__(self, fetcher: CSVFetcher, url: Optional[str] = None):
        self.fetcher = fetcher
        self.url = url or settings.CSV_URL

    async def acquire(self) -> str:
        return await self.fetcher.fetch_once(self.url, headers=ALTERNATE_HEADERS)


class ProxyRelaySource(AcquisitionStrategy):
    stage = AcquisitionStage.PROXY
    name = "proxy relay"

    def __init__(
        self,
        fetcher: CSVFetcher,
        url: Optional[str] = None,
        proxy_template: Optional[str] = None
    ):
        self.fetcher = fetcher
        self.url = url or settings.CSV_URL
        self.proxy_template = proxy_template or settings.CORS_PROXY

    async def acquire(self) -> str:
        return await self.fetcher.fetch_via_proxy(self.url, self.proxy_template)


class SampleDataSource(AcquisitionStrategy):
    stage = AcquisitionStage.SAMPLE
    name = "local sample data"

    def __init__(self, csv_text: str = SAMPLE_CSV):
        self.csv_text = csv_text

    async def acquire(self) -> str:
        return self.csv_text
