"""Unit tests for header normalization and alias resolution."""

import pytest

from storefront_feed.models.data_models import CanonicalField
from storefront_feed.processor.headers import HeaderResolver, normalize_header


class TestNormalizeHeader:

    def test_lowercase_and_diacritics(self):
        assert normalize_header("Descripción") == "descripcion"
        assert normalize_header("CATEGORÍA") == "categoria"

    def test_whitespace_removed(self):
        assert normalize_header(" Imagen 2 ") == "imagen2"
        assert normalize_header("Imagen\tURL") == "imagenurl"

    def test_bom_removed(self):
        assert normalize_header("\ufeffNombre") == "nombre"

    def test_empty(self):
        assert normalize_header("") == ""


class TestHeaderResolver:

    @pytest.fixture
    def resolver(self):
        return HeaderResolver()

    def test_spanish_headers(self, resolver):
        headers = resolver.resolve(["Nombre", "Precio", "Categoria"])
        assert headers == {
            CanonicalField.NAME: 0,
            CanonicalField.PRICE: 1,
            CanonicalField.CATEGORY: 2,
        }

    def test_accent_insensitive(self, resolver):
        accented = resolver.resolve(["Descripción"])
        plain = resolver.resolve(["descripcion"])
        assert accented == plain == {CanonicalField.DESCRIPTION: 0}

    def test_all_fields(self, resolver):
        row = ["SKU", "Title", "Cost", "Photo", "Photo2", "Detail", "Type", "Divisa", "Inventory"]
        headers = resolver.resolve(row)
        assert headers == {
            CanonicalField.ID: 0,
            CanonicalField.NAME: 1,
            CanonicalField.PRICE: 2,
            CanonicalField.IMAGE: 3,
            CanonicalField.IMAGE2: 4,
            CanonicalField.DESCRIPTION: 5,
            CanonicalField.CATEGORY: 6,
            CanonicalField.CURRENCY: 7,
            CanonicalField.STOCK: 8,
        }

    def test_unknown_columns_are_unmapped(self, resolver):
        headers = resolver.resolve(["Nombre", "Color", "Peso"])
        assert headers == {CanonicalField.NAME: 0}

    def test_empty_header_row(self, resolver):
        assert resolver.resolve([]) == {}

    def test_first_alias_wins(self, resolver):
        # "nombre" precedes "title" in the alias list even though it is to the right
        headers = resolver.resolve(["Title", "Nombre"])
        assert headers[CanonicalField.NAME] == 1

    def test_leftmost_duplicate_column_wins(self, resolver):
        headers = resolver.resolve(["Precio", "Precio"])
        assert headers[CanonicalField.PRICE] == 0

    def test_productos_plural(self, resolver):
        assert resolver.resolve(["Producto(s)"]) == {CanonicalField.NAME: 0}

    def test_extra_aliases_appended(self):
        resolver = HeaderResolver(extra_aliases={"price": ["Importe"]})
        assert resolver.resolve(["Artículo", "Importe"]) == {CanonicalField.PRICE: 1}

    def test_unknown_extra_alias_field(self):
        with pytest.raises(ValueError):
            HeaderResolver(extra_aliases={"color": ["colour"]})

    def test_shared_column_allowed_by_default(self):
        resolver = HeaderResolver(extra_aliases={"category": ["nombre"]})
        headers = resolver.resolve(["Nombre"])
        assert headers[CanonicalField.NAME] == 0
        assert headers[CanonicalField.CATEGORY] == 0

    def test_enforce_unique_keeps_higher_priority_field(self):
        resolver = HeaderResolver(extra_aliases={"category": ["nombre"]}, enforce_unique=True)
        headers = resolver.resolve(["Nombre"])
        assert headers == {CanonicalField.NAME: 0}

    def test_enforce_unique_falls_through_to_next_column(self):
        resolver = HeaderResolver(extra_aliases={"category": ["nombre"]}, enforce_unique=True)
        headers = resolver.resolve(["Nombre", "Nombre"])
        assert headers == {CanonicalField.NAME: 0, CanonicalField.CATEGORY: 1}

    def test_describe(self, resolver):
        headers = resolver.resolve(["Nombre", "Precio"])
        assert HeaderResolver.describe(headers) == {"name": 0, "price": 1}
