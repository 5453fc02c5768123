"""Aggregator collecting accepted products and rejected rows for one run."""

import time
from typing import List

from storefront_feed.models.data_models import CatalogSummary, PriceRange, Product, RejectedRow


class CatalogAggregator:
    """
    Collects products and rejections in input order.

    A run is single-threaded; the aggregator keeps no state beyond the
    current batch, which is replaced wholesale on the next load.
    """

    def __init__(self, placeholder_image: str = "images/placeholder.jpg"):
        self.placeholder_image = placeholder_image
        self._products: List[Product] = []
        self._rejected: List[RejectedRow] = []
        self._start_time: float = 0.0
        self._end_time: float = 0.0

    def start_timer(self) -> None:
        """Start timing the pipeline execution."""
        self._start_time = time.monotonic()

    def stop_timer(self) -> None:
        """Stop timing the pipeline execution."""
        self._end_time = time.monotonic()

    @property
    def elapsed(self) -> float:
        if self._end_time > 0:
            return self._end_time - self._start_time
        return 0.0

    def add_product(self, product: Product) -> None:
        self._products.append(product)

    def add_rejected(self, rejected: RejectedRow) -> None:
        self._rejected.append(rejected)

    def get_summary(self) -> CatalogSummary:
        """
        Generate catalog statistics.

        Returns:
            Summary with totals, image coverage, categories in first-seen
            order and the price range over positive prices
        """
        categories: List[str] = []
        for product in self._products:
            if product.category and product.category not in categories:
                categories.append(product.category)

        with_images = sum(
            1 for p in self._products
            if p.image and p.image != self.placeholder_image
        )

        return CatalogSummary(
            total_products=len(self._products),
            rejected_rows=len(self._rejected),
            with_images=with_images,
            categories=categories,
            price_range=self._price_range(),
            processing_time_seconds=self.elapsed,
        )

    def _price_range(self) -> PriceRange:
        prices = [p.price for p in self._products if p.price > 0]
        if not prices:
            return PriceRange()
        return PriceRange(
            min=min(prices),
            max=max(prices),
            avg=sum(prices) / len(prices),
        )

    def get_products(self) -> List[Product]:
        """Get all products."""
        return self._products.copy()

    def get_rejected(self) -> List[RejectedRow]:
        """Get all rejected rows."""
        return self._rejected.copy()
