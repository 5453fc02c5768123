"""CLI entry point for the catalog pipeline.

Loads a product spreadsheet (CSV export, values feed or legacy entry feed),
normalizes it and writes the storefront product list as JSON.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from storefront_feed import __version__
from storefront_feed.models.config import ConfigManager, PipelineConfig, SourceDescriptor
from storefront_feed.models.data_models import FeedFormat, PipelineResult
from storefront_feed.models.errors import ConfigurationError, StorefrontError
from storefront_feed.pipeline.orchestrator import CatalogPipeline
from storefront_feed.pipeline.output import JSONOutputFormatter


console = Console()

PREVIEW_ROWS = 10


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(dir_okay=False, path_type=Path),
    default="config/config.yaml",
    help="Path to configuration YAML file (optional)",
)
@click.option("--csv-url", help="Direct CSV export URL")
@click.option("--sheet-url", help="Spreadsheet URL as copied from the browser")
@click.option("--sheet-id", help="Spreadsheet identifier")
@click.option("--gid", default="0", show_default=True, help="Sheet tab identifier (with --sheet-id)")
@click.option("--feed-url", help="JSON feed URL ({values: [...]} or legacy entry feed)")
@click.option(
    "--feed-format",
    type=click.Choice([f.value for f in FeedFormat], case_sensitive=False),
    help="Payload shape; detected from the content when omitted",
)
@click.option(
    "--input",
    "-i",
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the payload from a local file instead of the network",
)
@click.option(
    "--timeout",
    "-t",
    type=float,
    help="Timeout per fetch attempt in seconds (overrides config)",
)
@click.option(
    "--retries",
    "-r",
    type=int,
    help="Proxy fallback attempts per fetch (overrides config)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output JSON file path (overrides config)",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (overrides config)",
)
@click.option(
    "--no-progress",
    is_flag=True,
    help="Disable progress display (useful for CI/CD)",
)
@click.version_option(version=__version__, prog_name="storefront-feed")
def main(
    config: Path,
    csv_url: Optional[str],
    sheet_url: Optional[str],
    sheet_id: Optional[str],
    gid: str,
    feed_url: Optional[str],
    feed_format: Optional[str],
    input_file: Optional[Path],
    timeout: Optional[float],
    retries: Optional[int],
    output: Optional[Path],
    log_level: Optional[str],
    no_progress: bool,
) -> None:
    """
    Storefront Feed - turn a product spreadsheet into a storefront catalog.

    Examples:

        # Load a public sheet by id and tab
        $ storefront-feed --sheet-id 1V517_5Mb2J3 --gid 0

        # Load a published sheet link
        $ storefront-feed --sheet-url "https://docs.google.com/spreadsheets/d/e/2PACX.../pubhtml"

        # Normalize a local CSV export
        $ storefront-feed --input productos.csv -o out/products.json
    """
    try:
        cli_overrides = {}
        if timeout is not None:
            cli_overrides["fetch_timeout"] = timeout
        if retries is not None:
            cli_overrides["max_retries"] = retries
        if log_level is not None:
            cli_overrides["log_level"] = log_level.upper()

        pipeline_config = ConfigManager(config).load_config(cli_overrides)
        output_path = output if output else pipeline_config.output_path
        fmt = FeedFormat(feed_format.lower()) if feed_format else None

        pipeline = CatalogPipeline(pipeline_config)

        if input_file is not None:
            text = input_file.read_text(encoding="utf-8-sig")
            result = pipeline.run_text(text, fmt, source_name=str(input_file))
        else:
            source = _source_from_options(csv_url, sheet_url, sheet_id, gid, feed_url, fmt)
            result = asyncio.run(
                _run_pipeline_with_progress(pipeline, source, pipeline_config, no_progress)
            )

        JSONOutputFormatter().save(result, str(output_path))
        _display_results(result, output_path, no_progress)
        sys.exit(0)

    except KeyboardInterrupt:
        console.print("\n[yellow]Load interrupted by user[/yellow]")
        sys.exit(130)
    except ConfigurationError as e:
        console.print(f"\n[red]Configuration error:[/red] {e}", style="bold red")
        sys.exit(2)
    except StorefrontError as e:
        console.print(f"\n[red]Error:[/red] {e}", style="bold red")
        sys.exit(1)
    except OSError as e:
        console.print(f"\n[red]Error:[/red] {e}", style="bold red")
        sys.exit(1)


def _source_from_options(
    csv_url: Optional[str],
    sheet_url: Optional[str],
    sheet_id: Optional[str],
    gid: str,
    feed_url: Optional[str],
    feed_format: Optional[FeedFormat],
) -> Optional[SourceDescriptor]:
    """
    Build a source descriptor from CLI options.

    Returns None when no source option was given, so the configured source
    applies.

    Raises:
        ConfigurationError: If an option value is not usable
    """
    try:
        if csv_url:
            return SourceDescriptor(kind="csv_url", url=csv_url)
        if sheet_url:
            return SourceDescriptor.from_sheet_url(sheet_url)
        if sheet_id:
            return SourceDescriptor(kind="sheet", sheet_id=sheet_id, gid=gid)
        if feed_url:
            return SourceDescriptor(kind="feed", url=feed_url, feed_format=feed_format)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid source: {e}") from e
    return None


async def _run_pipeline_with_progress(
    pipeline: CatalogPipeline,
    source: Optional[SourceDescriptor],
    config: PipelineConfig,
    no_progress: bool,
) -> PipelineResult:
    """
    Run the pipeline with a progress spinner.

    Args:
        pipeline: Configured pipeline
        source: Source from CLI options, or None for the configured one
        config: Pipeline configuration
        no_progress: Whether to disable the spinner

    Returns:
        Pipeline execution result
    """
    if no_progress:
        console.print("[cyan]Loading catalog...[/cyan]")
        return await pipeline.run(source)

    active = source or config.source
    label = active.describe() if active else "catalog"
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task_id = progress.add_task(f"[cyan]Loading {label}...", total=None)
        result = await pipeline.run(source)
        progress.update(task_id, completed=True)
        return result


def _display_results(
    result: PipelineResult,
    output_path: Path,
    no_progress: bool,
) -> None:
    """Display final results summary."""
    summary = result.summary
    if no_progress:
        console.print(
            f"✓ Catalog loaded: {summary.total_products} products, "
            f"{summary.rejected_rows} rejected rows"
        )
        console.print(f"✓ Output saved to: {output_path}")
        return

    console.print("\n[bold green]Catalog Loaded![/bold green]\n")

    summary_table = Table(title="Catalog Summary", show_header=False)
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="green")
    summary_table.add_row("Products", str(summary.total_products))
    summary_table.add_row("Rejected Rows", str(summary.rejected_rows))
    summary_table.add_row("With Images", str(summary.with_images))
    summary_table.add_row("Categories", ", ".join(summary.categories) or "-")
    summary_table.add_row(
        "Price Range",
        f"{summary.price_range.min:.2f} - {summary.price_range.max:.2f} "
        f"(avg {summary.price_range.avg:.2f})",
    )
    summary_table.add_row("Processing Time", f"{summary.processing_time_seconds:.2f}s")
    console.print(summary_table)
    console.print()

    if result.products:
        product_table = Table(title="Products")
        product_table.add_column("ID", style="dim")
        product_table.add_column("Name", style="cyan")
        product_table.add_column("Price", justify="right", style="green")
        product_table.add_column("Category", style="magenta")
        product_table.add_column("Stock", justify="right", style="yellow")
        for product in result.products[:PREVIEW_ROWS]:
            product_table.add_row(
                product.id,
                product.name,
                f"{product.currency}{product.price:.2f}",
                product.category,
                "-" if product.stock is None else str(product.stock),
            )
        console.print(product_table)
        if len(result.products) > PREVIEW_ROWS:
            console.print(f"[dim]... and {len(result.products) - PREVIEW_ROWS} more[/dim]")
        console.print()

    console.print(f"[bold]Output saved to:[/bold] {output_path}")
    console.print()


if __name__ == "__main__":
    main()
