"""
Durable cache for the last successfully downloaded CSV payload.

Two artifacts live in the cache directory:
- contacts_cache.csv        the raw CSV text
- contacts_cache_info.json  sidecar {"timestamp": epoch-ms, "size": "...", "url": "..."}

Both are written to a temporary file and moved into place with
os.replace, payload first, so the sidecar never describes a payload
that was not written.
"""

import os
import time
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from core.config import settings
from core.exceptions import CacheError, FetchError
from ingestion.extractors.http_fetcher import CSVFetcher
from schemas.cache import CacheEntry
import logging

logger = logging.getLogger(__name__)

CACHE_FILE_NAME = "contacts_cache.csv"
CACHE_INFO_FILE_NAME = "contacts_cache_info.json"


def _now_ms() -> int:
    return int(time.time() * 1000)


class LocalCacheStore:
    """
    Serve the CSV from disk while it is fresh, otherwise re-download it.

    A failed download falls back to whatever payload is on disk, however
    old; only an empty cache makes `read_or_download` raise.
    """

    def __init__(
        self,
        fetcher: CSVFetcher,
        source_url: Optional[str] = None,
        cache_dir: Optional[str] = None,
        freshness_window: Optional[float] = None
    ):
        self.fetcher = fetcher
        self.source_url = source_url or settings.CSV_URL
        self.cache_dir = Path(cache_dir or settings.CACHE_DIR)
        window = freshness_window if freshness_window is not None else settings.FILE_CACHE_TIMEOUT
        self.freshness_window_ms = int(window * 1000)

        self.cache_file = self.cache_dir / CACHE_FILE_NAME
        self.info_file = self.cache_dir / CACHE_INFO_FILE_NAME

        # Set on every read_or_download: "fresh", "downloaded" or "stale"
        self.last_outcome: Optional[str] = None

    async def read_or_download(self) -> str:
        """
        Return the cached CSV text, downloading a fresh copy when needed.

        Raises:
            CacheError: if the download failed and nothing is cached
        """
        info = self.info()
        if info is not None and info.age_ms(_now_ms()) < self.freshness_window_ms:
            cached = self.read_cached()
            if cached is not None:
                logger.info("Using cached CSV file")
                self.last_outcome = "fresh"
                return cached

        logger.info("Downloading fresh CSV data...")

        try:
            text = await self.fetcher.fetch_once(self.source_url)
        except FetchError as e:
            logger.error(f"Error downloading CSV: {e.message}")

            cached = self.read_cached()
            if cached is not None:
                logger.warning("Using expired cached data as fallback")
                self.last_outcome = "stale"
                return cached

            raise CacheError(
                "CSV download failed and no cached copy exists",
                context={
                    "cache_file": str(self.cache_file),
                    "url": self.source_url,
                },
                original_exception=e
            )

        try:
            self.write(text)
        except CacheError as e:
            # The download itself succeeded; serve it uncached
            logger.error(f"Failed to persist downloaded CSV: {e}")

        logger.info(f"Downloaded and cached {len(text)} characters")
        self.last_outcome = "downloaded"
        return text

    def write(self, text: str):
        """Persist payload and sidecar, payload first."""
        data = text.encode("utf-8")
        entry = CacheEntry(
            timestamp=_now_ms(),
            size=str(len(data)),
            url=self.source_url
        )

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            self._atomic_write(self.cache_file, data)
            self._atomic_write(self.info_file, entry.model_dump_json().encode("utf-8"))
        except OSError as e:
            raise CacheError(
                "Could not write CSV cache",
                context={"cache_dir": str(self.cache_dir)},
                original_exception=e
            )

    def read_cached(self) -> Optional[str]:
        """Cached payload regardless of age, or None."""
        try:
            return self.cache_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cached CSV unreadable: {e}")
            return None

    def info(self) -> Optional[CacheEntry]:
        """Parsed sidecar, or None if missing or corrupt."""
        try:
            return CacheEntry.model_validate_json(self.info_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable cache sidecar: {e}")
            return None

    def invalidate(self):
        """Remove both artifacts; missing files are fine."""
        for path in (self.info_file, self.cache_file):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Error clearing cache file {path}: {e}")
        self.last_outcome = None
        logger.info("Cache cleared")

    def _atomic_write(self, target: Path, data: bytes):
        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=f".{target.name}.")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, target)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
