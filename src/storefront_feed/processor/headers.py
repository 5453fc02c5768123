"""Header resolution: map spreadsheet column titles to canonical fields."""

import re
import unicodedata
from typing import Dict, List, Mapping, Optional, Sequence

from storefront_feed.models.data_models import CanonicalField, HeaderMap

# Per-field spellings, most specific first. Matching is done on
# normalize_header() output, so accents, case and spaces do not matter.
DEFAULT_ALIASES: Dict[CanonicalField, List[str]] = {
    CanonicalField.ID: ["id", "codigo", "sku"],
    CanonicalField.NAME: [
        "nombre", "name", "producto", "product", "title", "titulo",
        "productos", "producto(s)",
    ],
    CanonicalField.PRICE: ["precio", "price", "costo", "cost", "valor", "value"],
    CanonicalField.IMAGE: ["imagen", "image", "foto", "photo", "url", "link", "imagenurl", "imageurl", "img"],
    CanonicalField.IMAGE2: [
        "imagen2", "image2", "foto2", "photo2", "url2", "link2", "imagen_alt", "image_alt",
    ],
    CanonicalField.DESCRIPTION: ["descripcion", "description", "desc", "detalle", "detail"],
    CanonicalField.CATEGORY: ["categoria", "category", "tipo", "type", "clase", "class", "cat"],
    CanonicalField.CURRENCY: ["moneda", "currency", "divisa"],
    CanonicalField.STOCK: ["stock", "cantidad", "inventory"],
}

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_header(header: str) -> str:
    """
    Fold a header for alias lookup.

    Lowercases, strips diacritics (``Descripción`` -> ``descripcion``) and
    removes all whitespace.
    """
    if not header:
        return ""
    decomposed = unicodedata.normalize("NFD", header.replace("\ufeff", "").lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE_RE.sub("", stripped)


class HeaderResolver:
    """
    Resolves a header row into a HeaderMap.

    For every canonical field, aliases are tried in order and the leftmost
    column matching an alias wins; the first alias that matches anything
    decides the field. Fields are resolved in CanonicalField order, so with
    ``enforce_unique`` an earlier field keeps a contested column.
    """

    def __init__(
        self,
        aliases: Optional[Mapping[CanonicalField, Sequence[str]]] = None,
        extra_aliases: Optional[Mapping[str, Sequence[str]]] = None,
        enforce_unique: bool = False,
    ):
        base = aliases if aliases is not None else DEFAULT_ALIASES
        self.aliases: Dict[CanonicalField, List[str]] = {
            field: [normalize_header(alias) for alias in base.get(field, [])]
            for field in CanonicalField
        }
        for field_name, names in (extra_aliases or {}).items():
            field = CanonicalField(field_name)
            for alias in names:
                normalized = normalize_header(alias)
                if normalized and normalized not in self.aliases[field]:
                    self.aliases[field].append(normalized)
        self.enforce_unique = enforce_unique

    def resolve(self, header_row: Sequence[str]) -> HeaderMap:
        """
        Map canonical fields to column indexes.

        Args:
            header_row: Raw header cells (row 0 of the table)

        Returns:
            HeaderMap; fields without a matching column are absent
        """
        normalized = [normalize_header(cell) for cell in header_row]
        claimed = set()
        headers: HeaderMap = {}

        for field in CanonicalField:
            index = self._find_column(field, normalized, claimed)
            if index is None:
                continue
            headers[field] = index
            if self.enforce_unique:
                claimed.add(index)

        return headers

    def _find_column(self, field: CanonicalField, normalized: List[str], claimed: set) -> Optional[int]:
        for alias in self.aliases[field]:
            for index, header in enumerate(normalized):
                if header == alias and index not in claimed:
                    return index
        return None

    @staticmethod
    def describe(headers: HeaderMap) -> Dict[str, int]:
        """Field-name keyed view of a HeaderMap, for logging."""
        return {field.value: index for field, index in headers.items()}
