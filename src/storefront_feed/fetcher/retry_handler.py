"""Fallback policy: which failures get a proxy retry, and how long to wait."""

import random
from typing import Iterable, List
from urllib.parse import quote

from storefront_feed.models.data_models import FetchErrorKind
from storefront_feed.models.errors import FetchError


def calculate_backoff_delay(
    attempt: int,
    base_delay: float = 0.25,
    max_delay: float = 2.0,
    jitter_max: float = 0.1
) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Formula: min(max_delay, (base_delay * (2 ** attempt)) + random_jitter)

    Args:
        attempt: Fallback attempt number (0-indexed)
        base_delay: Base delay in seconds
        max_delay: Maximum delay cap in seconds
        jitter_max: Maximum jitter to add in seconds

    Returns:
        Delay in seconds
    """
    if base_delay <= 0:
        return 0.0
    exponential_delay = base_delay * (2 ** attempt)
    jitter = random.uniform(0, jitter_max)
    return min(max_delay, exponential_delay + jitter)


def proxy_url(template: str, url: str) -> str:
    """Rewrite a source URL through a proxy template; {url} is percent-encoded."""
    return template.replace("{url}", quote(url, safe=""))


class FallbackPolicy:
    """
    Decides whether a failed direct fetch is retried through a proxy.

    Network errors, timeouts and access-style HTTP statuses (the symptoms of
    a cross-origin or access restriction) fall back. Empty bodies never do.
    Each proxy is tried at most once and at most ``max_retries`` proxies
    are used per fetch.
    """

    def __init__(
        self,
        proxy_templates: Iterable[str],
        max_retries: int = 1,
        proxy_status_codes: Iterable[int] = (401, 403, 429, 502, 503, 504),
    ):
        self.proxy_templates = list(proxy_templates)
        self.max_retries = max_retries
        self.proxy_status_codes = frozenset(proxy_status_codes)

    def should_fall_back(self, error: FetchError) -> bool:
        if error.kind is FetchErrorKind.EMPTY_BODY:
            return False
        if error.kind is FetchErrorKind.HTTP_STATUS:
            return error.status_code in self.proxy_status_codes
        return True

    def fallback_urls(self, url: str) -> List[str]:
        """Proxy URLs to try for ``url``, in order, without repeats."""
        urls: List[str] = []
        for template in self.proxy_templates:
            candidate = proxy_url(template, url)
            if candidate != url and candidate not in urls:
                urls.append(candidate)
        return urls[:self.max_retries]
