"""Catalog processor turning raw tables into validated products."""

import time
from typing import List, Optional, Tuple

from storefront_feed.models.config import PipelineConfig
from storefront_feed.models.data_models import (
    FeedFormat,
    Product,
    RawTable,
    RejectedRow,
    RejectionKind,
)
from storefront_feed.models.errors import ParseError, ValidationError
from storefront_feed.monitoring.logger import StructuredLogger
from storefront_feed.processor.aggregator import CatalogAggregator
from storefront_feed.processor.feeds import decode_table
from storefront_feed.processor.headers import HeaderResolver
from storefront_feed.processor.mapper import RowMapper
from storefront_feed.processor.normalizer import FieldNormalizer, IdentifierFactory
from storefront_feed.processor.validator import ProductValidator


def make_load_token() -> str:
    """Load-time value used to build synthesized product ids."""
    return str(int(time.time() * 1000))


class CatalogProcessor:
    """
    Processes a raw table into products.

    Headers are resolved once from row 0, then rows 1..N are mapped and
    validated in order. Rows failing to parse or validate are logged and
    skipped; they never abort the batch.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        logger: Optional[StructuredLogger] = None,
        load_token: Optional[str] = None,
    ):
        """
        Initialize processor.

        Args:
            config: Pipeline configuration (defaults when omitted)
            logger: Optional structured logger
            load_token: Value mixed into synthesized ids (current time in ms by default)
        """
        self.config = config or PipelineConfig()
        self.logger = logger
        self.resolver = HeaderResolver(
            extra_aliases=self.config.extra_aliases,
            enforce_unique=self.config.enforce_unique_columns,
        )
        self.normalizer = FieldNormalizer(self.config)
        self.validator = ProductValidator()
        self.load_token = load_token

    def process_table(
        self,
        table: RawTable,
        aggregator: Optional[CatalogAggregator] = None,
    ) -> Tuple[List[Product], List[RejectedRow]]:
        """
        Map and validate every data row of a table.

        Args:
            table: Rows of cells, header first
            aggregator: Optional aggregator receiving products and rejections

        Returns:
            Accepted products and rejected rows, both in input order
        """
        aggregator = aggregator or CatalogAggregator(self.config.placeholder_image)
        if not table:
            return aggregator.get_products(), aggregator.get_rejected()

        headers = self.resolver.resolve(table[0])
        if self.logger:
            self.logger.headers_resolved(
                mapping=HeaderResolver.describe(headers),
                unmapped=len(table[0]) - len(set(headers.values())),
            )

        ids = IdentifierFactory(self.load_token or make_load_token())
        mapper = RowMapper(self.config, self.normalizer, ids)

        for row_number, row in enumerate(table[1:], start=1):
            if not row or not any(cell.strip() for cell in row):
                continue
            try:
                product = mapper.map_row(row, headers, row_number)
                self.validator.check(product)
            except ParseError as e:
                self._reject(aggregator, row_number, RejectionKind.PARSE, str(e))
                continue
            except ValidationError as e:
                self._reject(aggregator, row_number, RejectionKind.VALIDATION, str(e))
                continue
            aggregator.add_product(product)

        return aggregator.get_products(), aggregator.get_rejected()

    def process_text(
        self,
        text: str,
        feed_format: Optional[FeedFormat] = None,
        aggregator: Optional[CatalogAggregator] = None,
    ) -> Tuple[List[Product], List[RejectedRow]]:
        """
        Decode a raw payload and process it.

        Raises:
            ParseError: If a JSON payload cannot be decoded at all
        """
        table = decode_table(text, feed_format, trim=self.config.trim_fields)
        return self.process_table(table, aggregator)

    def _reject(self, aggregator: CatalogAggregator, row_number: int, kind: RejectionKind, reason: str) -> None:
        aggregator.add_rejected(RejectedRow(row_number=row_number, kind=kind, reason=reason))
        if self.logger:
            self.logger.row_rejected(row=row_number, kind=kind.value, reason=reason)
