"""Required-field validation for candidate products."""

import math
from typing import Optional

from storefront_feed.models.data_models import Product
from storefront_feed.models.errors import ValidationError


class ProductValidator:
    """Accepts products with a non-blank name and a finite, non-negative price."""

    def failure(self, product: Optional[Product]) -> Optional[str]:
        """Return the first failed rule, or None when the product is valid."""
        if product is None:
            return "no product"
        if not isinstance(product.name, str) or not product.name.strip():
            return "name is blank"
        price = product.price
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            return f"price is not a number: {price!r}"
        if not math.isfinite(price):
            return f"price is not finite: {price!r}"
        if price < 0:
            return f"price is negative: {price!r}"
        return None

    def validate(self, product: Optional[Product]) -> bool:
        return self.failure(product) is None

    def check(self, product: Optional[Product]) -> Product:
        """
        Return the product unchanged if valid.

        Raises:
            ValidationError: Naming the failed rule
        """
        reason = self.failure(product)
        if reason is not None:
            raise ValidationError(reason)
        return product
