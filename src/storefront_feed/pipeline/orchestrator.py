"""Pipeline orchestrator coordinating fetch and process phases."""

from typing import Optional

from storefront_feed.fetcher.async_fetcher import SourceFetcher
from storefront_feed.fetcher.http_client import AsyncHTTPClient
from storefront_feed.fetcher.retry_handler import FallbackPolicy
from storefront_feed.models.config import PipelineConfig, SourceDescriptor
from storefront_feed.models.data_models import FeedFormat, PipelineResult
from storefront_feed.models.errors import ConfigurationError, PipelineBusyError, StorefrontError
from storefront_feed.monitoring.logger import StructuredLogger
from storefront_feed.processor import CatalogAggregator, CatalogProcessor


class CatalogPipeline:
    """Orchestrates the catalog pipeline: fetch -> decode -> map -> validate."""

    def __init__(
        self,
        config: PipelineConfig,
        logger: Optional[StructuredLogger] = None,
        http_client: Optional[AsyncHTTPClient] = None,
    ):
        """
        Initialize orchestrator with pipeline configuration.

        Args:
            config: Pipeline configuration object
            logger: Structured logger (built from config when omitted)
            http_client: HTTP client to use instead of a fresh one per run
        """
        self.config = config
        self.logger = logger or StructuredLogger(
            level=config.log_level,
            structured=config.structured_logging
        )
        self.http_client = http_client
        self._running = False

    async def run(self, source: Optional[SourceDescriptor] = None) -> PipelineResult:
        """
        Fetch a source and turn it into products.

        Args:
            source: Source to load; falls back to ``config.source``

        Returns:
            PipelineResult with summary, products and rejected rows

        Raises:
            ConfigurationError: If no source is given or configured
            FetchError: If the raw data cannot be fetched
            ParseError: If a JSON feed cannot be decoded
            PipelineBusyError: If a run is already in flight on this instance
        """
        source = source or self.config.source
        if source is None:
            raise ConfigurationError(
                "No data source configured: provide a CSV URL, a sheet id or a feed URL"
            )
        if self._running:
            raise PipelineBusyError("A catalog load is already in progress")

        self._running = True
        try:
            self.logger.pipeline_start(source=source.describe())
            aggregator = CatalogAggregator(self.config.placeholder_image)
            aggregator.start_timer()

            fetch_result = await self._fetch(source)

            processor = CatalogProcessor(self.config, logger=self.logger)
            processor.process_text(fetch_result.text, source.expected_format, aggregator)
            aggregator.stop_timer()

            return self._result(aggregator, source.describe())
        except StorefrontError as e:
            self.logger.pipeline_failed(error=str(e))
            raise
        finally:
            self._running = False

    def run_text(
        self,
        text: str,
        feed_format: Optional[FeedFormat] = None,
        source_name: Optional[str] = None,
    ) -> PipelineResult:
        """
        Process an already available payload (no network).

        Args:
            text: Raw CSV or JSON feed text
            feed_format: Payload shape, detected when None
            source_name: Label recorded in the result

        Raises:
            ParseError: If a JSON feed cannot be decoded
        """
        aggregator = CatalogAggregator(self.config.placeholder_image)
        aggregator.start_timer()
        processor = CatalogProcessor(self.config, logger=self.logger)
        processor.process_text(text, feed_format, aggregator)
        aggregator.stop_timer()
        return self._result(aggregator, source_name)

    async def _fetch(self, source: SourceDescriptor):
        policy = FallbackPolicy(
            proxy_templates=self.config.proxy_templates,
            max_retries=self.config.max_retries,
            proxy_status_codes=self.config.proxy_status_codes,
        )
        if self.http_client is not None:
            return await self._fetcher(self.http_client, policy).fetch(source)

        async with AsyncHTTPClient(timeout=self.config.fetch_timeout) as http_client:
            return await self._fetcher(http_client, policy).fetch(source)

    def _fetcher(self, http_client: AsyncHTTPClient, policy: FallbackPolicy) -> SourceFetcher:
        return SourceFetcher(
            http_client,
            policy=policy,
            timeout=self.config.fetch_timeout,
            retry_base_delay=self.config.retry_base_delay,
            logger=self.logger,
        )

    def _result(self, aggregator: CatalogAggregator, source_name: Optional[str]) -> PipelineResult:
        summary = aggregator.get_summary()
        self.logger.pipeline_complete(
            products=summary.total_products,
            rejected=summary.rejected_rows,
            elapsed_ms=summary.processing_time_seconds * 1000,
        )
        return PipelineResult(
            summary=summary,
            products=aggregator.get_products(),
            rejected=aggregator.get_rejected(),
            source=source_name,
        )
