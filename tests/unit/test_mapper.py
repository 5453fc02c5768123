"""Unit tests for row-to-product mapping."""

import pytest

from storefront_feed.models.config import PipelineConfig
from storefront_feed.models.data_models import CanonicalField
from storefront_feed.models.errors import ParseError, ValidationError
from storefront_feed.processor.mapper import RowMapper, cell_value
from storefront_feed.processor.normalizer import FieldNormalizer, IdentifierFactory

HEADERS = {
    CanonicalField.NAME: 0,
    CanonicalField.PRICE: 1,
    CanonicalField.IMAGE: 2,
    CanonicalField.CATEGORY: 3,
    CanonicalField.STOCK: 4,
}


def make_mapper(config=None):
    config = config or PipelineConfig()
    return RowMapper(config, FieldNormalizer(config), IdentifierFactory("t"))


class TestCellValue:

    def test_present(self):
        assert cell_value(["A", " 10 "], HEADERS, CanonicalField.PRICE) == "10"

    def test_unmapped(self):
        assert cell_value(["A"], HEADERS, CanonicalField.CURRENCY) is None

    def test_out_of_range(self):
        assert cell_value(["A"], HEADERS, CanonicalField.STOCK) is None

    def test_blank(self):
        assert cell_value(["A", "  "], HEADERS, CanonicalField.PRICE) is None


class TestRowMapper:

    def test_full_row(self):
        product = make_mapper().map_row(["Shoe", "1500", "shoe.jpg", "Calzado", "3"], HEADERS, 1)

        assert product.id == "t-1"
        assert product.name == "Shoe"
        assert product.price == 1500.0
        assert product.image == "images/shoe.jpg"
        assert product.image2 == "images/shoea.jpg"
        assert product.category == "Calzado"
        assert product.stock == 3
        assert product.currency == "$"
        assert product.description == ""

    def test_defaults_for_short_row(self):
        product = make_mapper().map_row(["Shoe"], HEADERS, 4)

        assert product.price == 0.0
        assert product.image == "images/placeholder.jpg"
        assert product.image2 == "images/placeholder.jpg"
        assert product.category == "uncategorized"
        assert product.stock is None

    def test_missing_name_synthesized(self):
        product = make_mapper().map_row(["", "2000"], HEADERS, 2)
        assert product.name == "Product 2"
        assert product.price == 2000.0

    def test_missing_name_column_synthesized(self):
        headers = {CanonicalField.PRICE: 0}
        product = make_mapper().map_row(["10"], headers, 7)
        assert product.name == "Product 7"

    def test_custom_name_prefix(self):
        mapper = make_mapper(PipelineConfig(name_prefix="Producto"))
        assert mapper.map_row([""], HEADERS, 3).name == "Producto 3"

    def test_missing_name_rejected(self):
        mapper = make_mapper(PipelineConfig(missing_name_policy="reject"))
        with pytest.raises(ValidationError, match="missing product name"):
            mapper.map_row(["  ", "2000"], HEADERS, 2)

    def test_explicit_image2(self):
        headers = {CanonicalField.NAME: 0, CanonicalField.IMAGE: 1, CanonicalField.IMAGE2: 2}
        product = make_mapper().map_row(["Shoe", "a.jpg", "b.png"], headers, 1)
        assert product.image == "images/a.jpg"
        assert product.image2 == "images/b.png"

    def test_id_column(self):
        headers = {CanonicalField.ID: 0, CanonicalField.NAME: 1}
        product = make_mapper().map_row(["SKU-9", "Shoe"], headers, 1)
        assert product.id == "SKU-9"

    def test_name_image_fallback(self):
        mapper = make_mapper(PipelineConfig(name_image_fallback=True))
        product = mapper.map_row(["Zapatilla Roja", "10"], HEADERS, 1)
        assert product.image == "images/zapatilla-roja.jpg"
        assert product.image2 == "images/zapatilla-rojaa.jpg"

    def test_name_image_fallback_skips_synthesized_names(self):
        mapper = make_mapper(PipelineConfig(name_image_fallback=True))
        product = mapper.map_row(["", "10"], HEADERS, 1)
        assert product.image == "images/placeholder.jpg"

    def test_unexpected_cell_type_is_parse_error(self):
        class Broken:
            def __str__(self):
                raise ValueError("unreadable cell")

        with pytest.raises(ParseError, match="Row 5"):
            make_mapper().map_row([Broken()], HEADERS, 5)

    def test_product_is_immutable(self):
        product = make_mapper().map_row(["Shoe"], HEADERS, 1)
        with pytest.raises(AttributeError):
            product.name = "Other"
