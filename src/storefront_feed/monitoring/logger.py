"""Structured logging for pipeline monitoring."""

import json
import logging
from typing import Any, Dict, Optional


class StructuredLogger:
    """Structured logger with uniform schema."""

    def __init__(self, name: str = "storefront_feed", level: str = "INFO", structured: bool = True):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.structured = structured

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(handler)

    def log(self, event: str, level: int = logging.INFO, **kwargs) -> None:
        """
        Log structured event.

        Standard keys: event, source, url, attempt, status, kind, elapsed_ms,
                      row, reason, products, rejected
        """
        log_data: Dict[str, Any] = {"event": event, **kwargs}
        if self.structured:
            message = json.dumps(log_data, ensure_ascii=False, default=str)
        else:
            details = " ".join(f"{k}={v}" for k, v in kwargs.items())
            message = f"{event} {details}".rstrip()
        self.logger.log(level, message)

    def pipeline_start(self, source: str) -> None:
        self.log("pipeline_start", source=source)

    def fetch_start(self, url: str, attempt: int, via_proxy: bool) -> None:
        self.log("fetch_start", url=url, attempt=attempt, via_proxy=via_proxy)

    def fetch_success(self, url: str, attempt: int, elapsed_ms: float, size: int) -> None:
        self.log("fetch_success", url=url, attempt=attempt, elapsed_ms=elapsed_ms, size=size)

    def fetch_error(self, url: str, attempt: int, kind: str, status: Optional[int], error: str) -> None:
        self.log(
            "fetch_error",
            level=logging.WARNING,
            url=url,
            attempt=attempt,
            kind=kind,
            status=status,
            error=error,
        )

    def fetch_fallback(self, url: str, proxy_url: str) -> None:
        self.log("fetch_fallback", url=url, proxy_url=proxy_url)

    def headers_resolved(self, mapping: Dict[str, int], unmapped: int) -> None:
        self.log("headers_resolved", level=logging.DEBUG, mapping=mapping, unmapped_columns=unmapped)

    def row_rejected(self, row: int, kind: str, reason: str) -> None:
        self.log("row_rejected", level=logging.WARNING, row=row, kind=kind, reason=reason)

    def pipeline_complete(self, products: int, rejected: int, elapsed_ms: float) -> None:
        self.log("pipeline_complete", products=products, rejected=rejected, elapsed_ms=elapsed_ms)

    def pipeline_failed(self, error: str) -> None:
        self.log("pipeline_failed", level=logging.ERROR, error=error)
