"""
Pytest configuration and fixtures
"""

import httpx
import pytest

from ingestion.cache.file_cache import LocalCacheStore
from ingestion.extractors.http_fetcher import CSVFetcher

FEED_URL = "http://feed.example.com/files/Customers.csv"


@pytest.fixture
def feed_url():
    return FEED_URL


@pytest.fixture
def feed_csv():
    """CSV shaped like the real feed: spaced headers, quoted commas, a blank row"""
    return (
        "Name,Company name,Email,Phone,Street Address,City,State,Country,Zip,Open balance\n"
        'Alice Walker,Walker & Sons,alice@walker.com,555-123-4567,"12 High St, Unit 4",Boston,MA,USA,02134,150.00\n'
        "Bob Stone,,bob@stone.io,+44 20 7946 0958,,London,,UK,,0\n"
        "\n"
        ",Acme Holdings,,,,,,,,\n"
        "Carol King,King Ltd,carol@king.co,(555) 987 6543,,Denver,CO,USA,80202,\n"
    )


@pytest.fixture
def mock_feed_rows():
    """Raw records as the structured parser would produce them"""
    return [
        {
            "Name": "Alice Walker",
            "Company_name": "Walker & Sons",
            "Email": "alice@walker.com",
            "Phone": "555-123-4567",
            "Street_Address": "12 High St, Unit 4",
            "City": "Boston",
            "State": "MA",
            "Country": "USA",
            "Zip": "02134",
            "Open_balance": "150.00",
        },
        {
            "Name": "",
            "Company_name": "",
            "Email": "",
            "Phone": "",
            "City": "Nowhere",
        },
    ]


@pytest.fixture
def make_fetcher():
    """Fetcher backed by an httpx.MockTransport around `handler`"""
    def _make(handler, **kwargs):
        kwargs.setdefault("max_retries", 3)
        kwargs.setdefault("retry_delay", 0)
        kwargs.setdefault("timeout", 5.0)
        kwargs.setdefault("min_content_length", 100)
        return CSVFetcher(transport=httpx.MockTransport(handler), **kwargs)
    return _make


@pytest.fixture
def make_cache_store(tmp_path):
    def _make(fetcher, **kwargs):
        kwargs.setdefault("source_url", FEED_URL)
        kwargs.setdefault("cache_dir", str(tmp_path / "cache"))
        kwargs.setdefault("freshness_window", 600)
        return LocalCacheStore(fetcher, **kwargs)
    return _make
