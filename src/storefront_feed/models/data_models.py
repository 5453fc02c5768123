"""Core data models for the catalog pipeline."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class CanonicalField(Enum):
    """Canonical product attributes.

    Declaration order is the resolution order used when one header column
    could belong to more than one field.
    """
    ID = "id"
    NAME = "name"
    PRICE = "price"
    IMAGE = "image"
    IMAGE2 = "image2"
    DESCRIPTION = "description"
    CATEGORY = "category"
    CURRENCY = "currency"
    STOCK = "stock"


class FeedFormat(Enum):
    """Shapes of raw tabular input."""
    CSV = "csv"
    VALUES = "values"      # {"values": [[...], ...]}
    ENTRIES = "entries"    # legacy {"feed": {"entry": [{"gsx$col": {"$t": ...}}]}}


class FetchErrorKind(Enum):
    """Reasons a fetch attempt can fail."""
    NETWORK = "network"
    HTTP_STATUS = "http_status"
    EMPTY_BODY = "empty_body"
    TIMEOUT = "timeout"


class RejectionKind(Enum):
    """Why a data row was left out of the output."""
    PARSE = "parse"
    VALIDATION = "validation"


RawTable = List[List[str]]
HeaderMap = Dict[CanonicalField, int]


@dataclass(frozen=True)
class Product:
    """Normalized storefront product."""
    id: str
    name: str
    price: float
    description: str
    image: str
    image2: str
    category: str
    currency: str
    stock: Optional[int] = None  # None means unknown/unlimited, 0 means out of stock

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RejectedRow:
    """A data row skipped during processing."""
    row_number: int
    kind: RejectionKind
    reason: str


@dataclass
class FetchResult:
    """Raw payload fetched from a source."""
    text: str
    url: str
    via_proxy: bool
    attempts: int
    duration: float


@dataclass
class PriceRange:
    """Price statistics over products with a positive price."""
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0


@dataclass
class CatalogSummary:
    """Catalog statistics for one pipeline run."""
    total_products: int
    rejected_rows: int
    with_images: int
    categories: List[str]
    price_range: PriceRange
    processing_time_seconds: float


@dataclass
class PipelineResult:
    """Complete pipeline execution result."""
    summary: CatalogSummary
    products: List[Product]
    rejected: List[RejectedRow] = field(default_factory=list)
    source: Optional[str] = None
