"""Async source fetching with timeout and proxy fallback."""

from .async_fetcher import SourceFetcher
from .http_client import AsyncHTTPClient
from .retry_handler import FallbackPolicy

__all__ = ["AsyncHTTPClient", "FallbackPolicy", "SourceFetcher"]
