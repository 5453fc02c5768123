"""Unit tests for the product validator."""

import pytest

from storefront_feed.models.data_models import Product
from storefront_feed.models.errors import ValidationError
from storefront_feed.processor.validator import ProductValidator


def product(**overrides):
    values = dict(
        id="1", name="Shoe", price=10.0, description="", image="images/a.jpg",
        image2="images/aa.jpg", category="uncategorized", currency="$", stock=None,
    )
    values.update(overrides)
    return Product(**values)


class TestProductValidator:

    @pytest.fixture
    def validator(self):
        return ProductValidator()

    def test_valid(self, validator):
        assert validator.validate(product()) is True
        assert validator.validate(product(price=0.0)) is True

    def test_defaults_pass_through(self, validator):
        assert validator.validate(product(description="", category="", stock=0)) is True

    def test_blank_name(self, validator):
        assert validator.validate(product(name="   ")) is False

    def test_negative_price(self, validator):
        assert validator.validate(product(price=-1.0)) is False

    def test_non_finite_price(self, validator):
        assert validator.validate(product(price=float("nan"))) is False
        assert validator.validate(product(price=float("inf"))) is False

    def test_none(self, validator):
        assert validator.validate(None) is False

    def test_check_raises_with_reason(self, validator):
        with pytest.raises(ValidationError, match="name is blank"):
            validator.check(product(name=""))

    def test_check_returns_product(self, validator):
        p = product()
        assert validator.check(p) is p
