"""Error taxonomy for the catalog pipeline.

Row-level errors (ParseError, ValidationError) are recovered by skipping the
row. Batch-level errors (FetchError, ConfigurationError) abort the run and
carry a message suitable for direct display.
"""

from typing import Optional

from storefront_feed.models.data_models import FetchErrorKind


class StorefrontError(Exception):
    """Base class for all pipeline errors."""


class ParseError(StorefrontError):
    """Raised when a row or payload cannot be decoded."""


class ValidationError(StorefrontError):
    """Raised when a candidate product fails a required-field rule."""


class ConfigurationError(StorefrontError):
    """Raised when no usable source or an invalid setting is provided."""


class PipelineBusyError(StorefrontError):
    """Raised when a second run starts while one is still in flight."""


class FetchError(StorefrontError):
    """Raised when raw data could not be fetched from a source."""

    def __init__(
        self,
        kind: FetchErrorKind,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.url = url
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        """Empty bodies are a data problem, everything else may be transient."""
        return self.kind is not FetchErrorKind.EMPTY_BODY

    def __repr__(self) -> str:
        return (
            f"FetchError(kind={self.kind.value!r}, status_code={self.status_code!r}, "
            f"url={self.url!r})"
        )
