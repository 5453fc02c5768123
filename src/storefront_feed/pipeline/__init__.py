"""Pipeline orchestration, output and CLI."""

from .orchestrator import CatalogPipeline
from .output import JSONOutputFormatter

__all__ = ["CatalogPipeline", "JSONOutputFormatter"]
