"""
Shared dependencies for the API routes
"""

from functools import lru_cache

from core.config import settings
from ingestion.exporters.csv_exporter import ContactExporter, DirectoryShareService
from ingestion.extractors.http_fetcher import CSVFetcher
from ingestion.runner import ContactIngestionRunner


@lru_cache
def get_runner() -> ContactIngestionRunner:
    """One runner per process so the memory snapshot is shared"""
    return ContactIngestionRunner()


@lru_cache
def get_exporter() -> ContactExporter:
    return ContactExporter(share_service=DirectoryShareService(settings.EXPORT_DIR))


@lru_cache
def get_fetcher() -> CSVFetcher:
    """Fetcher used for the on-demand reachability check"""
    return CSVFetcher()
