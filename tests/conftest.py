"""Pytest configuration and shared fixtures."""

import pytest

from storefront_feed.models.config import PipelineConfig
from storefront_feed.processor import CatalogProcessor


@pytest.fixture
def sample_config():
    """Provide a sample configuration for testing."""
    return PipelineConfig(
        default_currency="$",
        default_category="uncategorized",
        placeholder_image="images/placeholder.jpg",
        image_directory="images/",
        fetch_timeout=10.0,
        max_retries=1,
        retry_base_delay=0.0,
    )


@pytest.fixture
def processor(sample_config):
    """Processor with a fixed load token so synthesized ids are predictable."""
    return CatalogProcessor(sample_config, load_token="run")
