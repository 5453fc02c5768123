"""Spreadsheet-to-storefront product catalog pipeline."""

__version__ = "1.0.0"
