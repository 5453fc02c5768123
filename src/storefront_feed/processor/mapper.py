"""Row-to-product mapping."""

from typing import Optional, Sequence

from storefront_feed.models.config import PipelineConfig
from storefront_feed.models.data_models import CanonicalField, HeaderMap, Product
from storefront_feed.models.errors import ParseError, ValidationError
from storefront_feed.processor.normalizer import FieldNormalizer, IdentifierFactory, parse_price, parse_stock


def cell_value(row: Sequence[str], headers: HeaderMap, field: CanonicalField) -> Optional[str]:
    """
    Return the stripped cell for a field, or None when absent.

    Unmapped fields, out-of-range columns and blank cells are all "absent".
    """
    index = headers.get(field)
    if index is None or index >= len(row):
        return None
    value = row[index]
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class RowMapper:
    """
    Builds a Product from one data row.

    Starts from a default-valued product and overlays every mapped cell
    through the matching normalizer.
    """

    def __init__(
        self,
        config: PipelineConfig,
        normalizer: FieldNormalizer,
        ids: IdentifierFactory,
    ):
        self.config = config
        self.normalizer = normalizer
        self.ids = ids

    def map_row(self, row: Sequence[str], headers: HeaderMap, row_number: int) -> Product:
        """
        Map one data row to a product.

        Args:
            row: Cells of the data row
            headers: Resolved header map
            row_number: 1-based data row ordinal (header excluded)

        Returns:
            Candidate product (not yet validated)

        Raises:
            ValidationError: If the name is missing and the policy is "reject"
            ParseError: If a cell has an unexpected type
        """
        try:
            return self._build(row, headers, row_number)
        except (TypeError, ValueError, IndexError) as e:
            raise ParseError(f"Row {row_number}: {e}") from e

    def _build(self, row: Sequence[str], headers: HeaderMap, row_number: int) -> Product:
        config = self.config

        def value(field: CanonicalField) -> Optional[str]:
            return cell_value(row, headers, field)

        name = value(CanonicalField.NAME)
        if name is None:
            if config.missing_name_policy == "reject":
                raise ValidationError(f"Row {row_number}: missing product name")
            name = f"{config.name_prefix} {row_number}"

        price_cell = value(CanonicalField.PRICE)
        price = parse_price(price_cell) if price_cell is not None else 0.0

        stock_cell = value(CanonicalField.STOCK)
        stock = parse_stock(stock_cell) if stock_cell is not None else None

        image = self.normalizer.resolve_image(value(CanonicalField.IMAGE))
        image2_cell = value(CanonicalField.IMAGE2)
        if image2_cell is not None:
            image2 = self.normalizer.resolve_image(image2_cell)
        else:
            image2 = self.normalizer.derive_secondary_image(image)

        if config.name_image_fallback and value(CanonicalField.NAME) is not None:
            if image == config.placeholder_image:
                image = self.normalizer.name_image(name)
            if image2 == config.placeholder_image:
                image2 = self.normalizer.name_image(name, secondary=True)

        return Product(
            id=self.ids.make(value(CanonicalField.ID), row_number),
            name=name,
            price=price,
            description=value(CanonicalField.DESCRIPTION) or "",
            image=image,
            image2=image2,
            category=value(CanonicalField.CATEGORY) or config.default_category,
            currency=value(CanonicalField.CURRENCY) or config.default_currency,
            stock=stock,
        )
