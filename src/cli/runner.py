# src/cli/runner.py

"""Service wiring plus the headless one-shot and health-check commands."""

import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.config.settings import ConfigError, Settings
from src.models.catalog_query import CatalogQuery
from src.models.rendered_document import iso_utc
from src.render.xml_renderer import get_schema
from src.services.feed_builder import FeedBuilder, resolve_stock_policy
from src.storage.document_cache import DocumentCache

logger = logging.getLogger("catalog_feed.cli")

# Stderr console for status messages so stdout stays clean for XML
_err = Console(stderr=True)


def build_cache(schema_name: str | None = None) -> DocumentCache:
    """Wire client → builder → cache from the current settings.

    Raises ``ConfigError`` for an unknown schema or stock policy.
    """
    try:
        schema = get_schema(schema_name or Settings.XML_SCHEMA)
        policy = resolve_stock_policy(schema, Settings.STOCK_POLICY)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    builder = FeedBuilder(schema=schema, stock_policy=policy)
    query = CatalogQuery.from_settings(Settings)
    return DocumentCache(builder, query)


def log_banner(schema_name: str) -> None:
    """Log the startup configuration summary."""
    logger.info("=" * 50)
    logger.info("Catalog XML feed starting")
    logger.info("API URL: %s", Settings.API_URL)
    logger.info("Update interval: %d minutes", Settings.UPDATE_INTERVAL_MINUTES)
    logger.info("Product type: %d", Settings.PRODUCT_TYPE)
    logger.info("Categories: %s", Settings.CATEGORY or "all")
    logger.info("Schema: %s", schema_name)
    logger.info("=" * 50)


def serve(schema_name: str | None = None) -> None:
    """Run the HTTP service until interrupted."""
    import uvicorn

    from src.api.app import create_app
    from src.services.scheduler import RefreshScheduler

    cache = build_cache(schema_name)
    builder: FeedBuilder = cache.builder
    log_banner(builder.schema.name)

    scheduler = RefreshScheduler(cache, Settings.UPDATE_INTERVAL_MINUTES)
    app = create_app(
        cache,
        scheduler=scheduler,
        schema_name=builder.schema.name,
        stock_policy=builder.stock_policy.value,
    )
    logger.info(
        "XML URL: http://localhost:%d/products.xml", Settings.SERVER_PORT
    )
    uvicorn.run(
        app,
        host=Settings.SERVER_HOST,
        port=Settings.SERVER_PORT,
        log_level=Settings.LOG_LEVEL.lower(),
    )


def run_once(
    output_path: str | None = None,
    schema_name: str | None = None,
) -> int:
    """Refresh once and write the document; return an exit code."""
    cache = build_cache(schema_name)
    _err.print("[bold]Fetching catalog...[/bold]")
    outcome = cache.refresh()
    document = cache.current_document()

    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(document.content)
        _err.print(f"[dim]Saved → {path}[/dim]")
    else:
        sys.stdout.buffer.write(document.content)
        sys.stdout.flush()

    if not outcome.success:
        _err.print(f"[red]Refresh failed: {outcome.error}[/red]")
        return 1

    _err.print(
        f"[green]✓ {outcome.record_count} products"
        f" at {iso_utc(outcome.updated_at)}[/green]"
    )
    return 0


def run_health_check() -> int:
    """Probe the catalog endpoint and print a one-row table."""
    from src.services.health_checker import HealthChecker

    _err.print("[bold]Running catalog health check...[/bold]")
    result = HealthChecker().check(CatalogQuery.from_settings(Settings))

    table = Table(
        title="Catalog Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Source", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    if result.status == "ok":
        status = "[green]✅ OK[/green]"
    elif result.status == "slow":
        status = "[yellow]⚠️  SLOW[/yellow]"
    else:
        status = "[red]❌ DOWN[/red]"

    latency = (
        f"{result.latency_ms:.0f}ms"
        if result.latency_ms > 0
        else "—"
    )
    table.add_row(result.source_id, status, latency, result.message)

    Console().print(table)
    return 1 if result.status == "down" else 0
