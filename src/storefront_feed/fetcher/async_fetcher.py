"""Async source fetcher with timeout and proxy fallback."""

import asyncio
from typing import Optional

import httpx

from storefront_feed.fetcher.http_client import AsyncHTTPClient
from storefront_feed.fetcher.retry_handler import FallbackPolicy, calculate_backoff_delay
from storefront_feed.models.config import SourceDescriptor
from storefront_feed.models.data_models import FetchErrorKind, FetchResult
from storefront_feed.models.errors import ConfigurationError, FetchError
from storefront_feed.monitoring.logger import StructuredLogger


class SourceFetcher:
    """
    Fetches the raw payload of one source.

    Responsibilities:
    - Fetch the source URL directly first
    - Classify failures as network, HTTP status, empty body or timeout
    - Retry once per proxy on failures that look like access restrictions
    - Bound every attempt with a timeout
    """

    def __init__(
        self,
        http_client: AsyncHTTPClient,
        policy: Optional[FallbackPolicy] = None,
        timeout: float = 10.0,
        retry_base_delay: float = 0.25,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Initialize fetcher.

        Args:
            http_client: Makes HTTP requests
            policy: Proxy fallback policy (no fallback when omitted)
            timeout: Upper bound in seconds for a single attempt
            retry_base_delay: Base delay before a fallback attempt
            logger: Optional structured logger for telemetry
        """
        self.http_client = http_client
        self.policy = policy or FallbackPolicy(proxy_templates=[], max_retries=0)
        self.timeout = timeout
        self.retry_base_delay = retry_base_delay
        self.logger = logger

    async def fetch(self, source: SourceDescriptor) -> FetchResult:
        """
        Fetch raw text for a source.

        Args:
            source: Source descriptor

        Returns:
            FetchResult with the payload text

        Raises:
            FetchError: When the direct attempt and every allowed fallback fail
            ConfigurationError: When the source URL cannot be requested at all
        """
        url = source.export_url()
        loop = asyncio.get_running_loop()
        start = loop.time()
        attempt = 0

        try:
            text = await self._attempt(url, attempt, via_proxy=False)
            return FetchResult(
                text=text, url=url, via_proxy=False,
                attempts=1, duration=loop.time() - start
            )
        except FetchError as e:
            last_error = e

        if not self.policy.should_fall_back(last_error):
            raise last_error

        for fallback_url in self.policy.fallback_urls(url):
            attempt += 1
            if self.logger:
                self.logger.fetch_fallback(url=url, proxy_url=fallback_url)
            await self._apply_backoff(attempt - 1)
            try:
                text = await self._attempt(fallback_url, attempt, via_proxy=True)
                return FetchResult(
                    text=text, url=fallback_url, via_proxy=True,
                    attempts=attempt + 1, duration=loop.time() - start
                )
            except FetchError as e:
                last_error = e
                if not self.policy.should_fall_back(e):
                    break

        raise last_error

    async def _attempt(self, url: str, attempt: int, via_proxy: bool) -> str:
        """
        Perform a single bounded GET and classify the outcome.

        Raises:
            FetchError: On timeout, transport error, non-2xx status or empty body
            ConfigurationError: If httpx rejects the URL itself
        """
        if self.logger:
            self.logger.fetch_start(url=url, attempt=attempt, via_proxy=via_proxy)

        loop = asyncio.get_running_loop()
        start = loop.time()
        try:
            response = await asyncio.wait_for(self.http_client.get(url), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise self._failed(
                FetchErrorKind.TIMEOUT,
                f"Timed out after {self.timeout:g}s fetching {url}",
                url, attempt, cause=e
            )
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"Invalid source URL {url!r}: {e}") from e
        except httpx.HTTPError as e:
            raise self._failed(
                FetchErrorKind.NETWORK,
                f"Network error fetching {url}: {e}",
                url, attempt, cause=e
            )

        if not 200 <= response.status_code < 300:
            raise self._failed(
                FetchErrorKind.HTTP_STATUS,
                f"HTTP {response.status_code} fetching {url}",
                url, attempt, status_code=response.status_code
            )

        text = response.text
        if not text or not text.strip():
            raise self._failed(
                FetchErrorKind.EMPTY_BODY,
                f"Empty response body from {url}",
                url, attempt, status_code=response.status_code
            )

        if self.logger:
            self.logger.fetch_success(
                url=url,
                attempt=attempt,
                elapsed_ms=(loop.time() - start) * 1000,
                size=len(text)
            )
        return text

    def _failed(
        self,
        kind: FetchErrorKind,
        message: str,
        url: str,
        attempt: int,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None
    ) -> FetchError:
        if self.logger:
            self.logger.fetch_error(
                url=url,
                attempt=attempt,
                kind=kind.value,
                status=status_code,
                error=message
            )
        error = FetchError(kind, message, url=url, status_code=status_code)
        error.__cause__ = cause
        return error

    async def _apply_backoff(self, attempt: int) -> None:
        delay = calculate_backoff_delay(attempt, base_delay=self.retry_base_delay)
        if delay > 0:
            await asyncio.sleep(delay)
