"""
HTTP fetcher for the remote contacts CSV.

This module provides resilient retrieval with:
- Bounded per-request timeout enforced by cancellation
- Linear backoff between attempts (delay = attempt * retry_delay)
- Rejection of non-success responses and implausibly small bodies
- Comprehensive error handling with custom exceptions
"""

import asyncio
import json
from typing import Dict, Optional
from urllib.parse import quote

import httpx

from core.config import settings
from core.exceptions import (
    BadStatusError,
    FetchError,
    NetworkError,
    PayloadTooSmallError,
)
import logging

logger = logging.getLogger(__name__)

DEFAULT_HEADERS: Dict[str, str] = {
    "Accept": "text/csv, text/plain, */*",
    "Cache-Control": "no-cache",
    "User-Agent": "ContactApp/1.0",
}

# Browser-like request used when the server rejects the default one
ALTERNATE_HEADERS: Dict[str, str] = {
    "Accept": "*/*",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}


class CSVFetcher:
    """
    Fetch CSV text over HTTP.

    Attributes:
        max_retries: Attempt ceiling for `fetch` (default: settings.MAX_RETRIES)
        retry_delay: Backoff base in seconds (default: settings.RETRY_DELAY)
        timeout: Per-request timeout in seconds (default: settings.CONNECTION_TIMEOUT)
        min_content_length: Bodies shorter than this are rejected
        transport: Optional httpx transport, used by tests
    """

    def __init__(
        self,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        timeout: Optional[float] = None,
        min_content_length: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.max_retries = max_retries if max_retries is not None else settings.MAX_RETRIES
        self.retry_delay = retry_delay if retry_delay is not None else settings.RETRY_DELAY
        self.timeout = timeout if timeout is not None else settings.CONNECTION_TIMEOUT
        self.min_content_length = (
            min_content_length if min_content_length is not None else settings.MIN_CONTENT_LENGTH
        )
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.transport
        )

    async def fetch(
        self,
        url: str,
        attempt: int = 1,
        headers: Optional[Dict[str, str]] = None
    ) -> str:
        """
        Fetch CSV text, retrying with linear backoff.

        Args:
            url: Source URL
            attempt: Attempt number to start counting from
            headers: Request headers (default: DEFAULT_HEADERS)

        Returns:
            Response body as text

        Raises:
            FetchError: once `max_retries` attempts have failed; the last
                attempt's error is attached as the cause
        """
        last_exception: Optional[FetchError] = None
        attempts_made = 0

        for current in range(attempt, self.max_retries + 1):
            attempts_made += 1
            try:
                logger.info(f"Fetching CSV from: {url} (Attempt {current}/{self.max_retries})")
                return await self.fetch_once(url, headers=headers)

            except FetchError as e:
                last_exception = e
                logger.warning(f"Attempt {current}/{self.max_retries} failed: {e.message}")

                if current < self.max_retries:
                    delay = current * self.retry_delay
                    logger.info(f"Retrying in {delay} seconds")
                    await asyncio.sleep(delay)

        raise FetchError(
            f"Failed to fetch CSV after {self.max_retries} attempts",
            context={
                "url": url,
                "attempts": attempts_made,
            },
            original_exception=last_exception
        )

    async def fetch_once(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """
        Single request with timeout, status and size checks.

        Raises:
            NetworkError: transport failure or timeout
            BadStatusError: non-success status
            PayloadTooSmallError: body shorter than `min_content_length`
        """
        response = await self._get(url, headers if headers is not None else DEFAULT_HEADERS)
        text = response.text
        logger.debug(f"CSV data received, length: {len(text)} chars")
        self._check_length(text, url)
        return text

    async def fetch_via_proxy(self, url: str, proxy_template: Optional[str] = None) -> str:
        """
        Fetch `url` through a relay such as allorigins.

        The relay answers either with JSON carrying the document under
        `contents`, or with the document itself.
        """
        proxy_url = build_proxy_url(proxy_template or settings.CORS_PROXY, url)
        logger.info(f"Fetching CSV through relay: {proxy_url}")

        response = await self._get(proxy_url, {"Accept": "application/json, text/plain, */*"})
        text = _unwrap_relay_body(response)
        self._check_length(text, url)
        return text

    async def check_connection(self, url: Optional[str] = None, timeout: Optional[float] = None) -> bool:
        """
        HEAD the source to see whether it is reachable right now.

        Does not retry; a failed attempt reads as False.
        """
        url = url or settings.CSV_URL
        timeout = timeout if timeout is not None else settings.CONNECTION_CHECK_TIMEOUT
        try:
            await self._get(url, DEFAULT_HEADERS, method="HEAD", timeout=timeout)
        except FetchError as e:
            logger.warning(f"Connection check failed: {e.message}")
            return False
        return True

    async def _get(
        self,
        url: str,
        headers: Dict[str, str],
        method: str = "GET",
        timeout: Optional[float] = None
    ) -> httpx.Response:
        timeout = timeout if timeout is not None else self.timeout
        try:
            async with self._client() as client:
                # wait_for cancels the request once the timeout elapses
                response = await asyncio.wait_for(
                    client.request(method, url, headers=headers),
                    timeout=timeout
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise NetworkError(
                f"Request timed out after {timeout} seconds",
                context={"url": url, "timeout": timeout},
                original_exception=e
            )
        except httpx.InvalidURL as e:
            # Not an httpx.HTTPError subclass
            raise NetworkError(
                f"Invalid URL: {e}",
                context={"url": url},
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise NetworkError(
                f"Network error: {e}",
                context={"url": url},
                original_exception=e
            )

        if not response.is_success:
            raise BadStatusError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
                context={"url": url}
            )

        return response

    def _check_length(self, text: str, url: str):
        if len(text) < self.min_content_length:
            raise PayloadTooSmallError(
                "CSV file appears to be empty or too small",
                context={
                    "url": url,
                    "length": len(text),
                    "min_length": self.min_content_length,
                }
            )


def build_proxy_url(template: str, url: str) -> str:
    """Substitute the percent-encoded source URL into a relay template"""
    encoded = quote(url, safe="")
    if "{url}" in template:
        return template.replace("{url}", encoded)
    return f"{template}{encoded}"


def _unwrap_relay_body(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text

    if not isinstance(payload, dict):
        return response.text
    if not isinstance(payload.get("contents"), str):
        raise FetchError(
            "Relay response did not include the document contents",
            context={"url": str(response.request.url), "keys": sorted(payload)}
        )
    return payload["contents"]
