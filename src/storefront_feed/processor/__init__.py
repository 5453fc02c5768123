"""Data processing module."""

from .aggregator import CatalogAggregator
from .headers import HeaderResolver, normalize_header
from .mapper import RowMapper
from .normalizer import FieldNormalizer, IdentifierFactory, parse_price, parse_stock
from .processor import CatalogProcessor
from .splitter import parse_csv, split_line, split_lines
from .validator import ProductValidator

__all__ = [
    "CatalogAggregator",
    "CatalogProcessor",
    "FieldNormalizer",
    "HeaderResolver",
    "IdentifierFactory",
    "ProductValidator",
    "RowMapper",
    "normalize_header",
    "parse_csv",
    "parse_price",
    "parse_stock",
    "split_line",
    "split_lines",
]
