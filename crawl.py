#!/usr/bin/env python3
"""
Eventbrite Events Crawler
=========================

Command-line interface for crawling Eventbrite search listings.

Usage:
    python crawl.py run                          # Crawl using config.yaml
    python crawl.py run --location ca--san-francisco --query jazz --free
    python crawl.py run -u https://www.eventbrite.com/d/online/all-events/
    python crawl.py run --dry-run                # Crawl without writing output
    python crawl.py extract page.html            # Extract events from a saved page
    python crawl.py validate                     # Check configuration
    python crawl.py status                       # Show last crawl results
"""

import json
import signal
import sys
from datetime import UTC, datetime
from pathlib import Path

import click

from eventbrite_crawler.config import (
    ConfigurationError,
    Settings,
    load_settings,
    parse_settings,
)
from eventbrite_crawler.crawler import EventbriteCrawler
from eventbrite_crawler.generators import DatasetWriter
from eventbrite_crawler.ledger import CrawlLedger
from eventbrite_crawler.logger import get_logger, setup_logging
from eventbrite_crawler.utils import HTMLParser, HTTPClient

# Status file for tracking crawl results
STATUS_FILE = ".crawl_status.json"

# Crawler of the run in progress, for interrupt handling
_active_crawler: EventbriteCrawler | None = None
_interrupted = False


def setup_logging_from_config(
    settings: Settings,
    config_dir: Path,
    log_level_override: str | None = None,
    log_file_override: Path | None = None,
) -> None:
    """Configure logging based on config file and CLI overrides."""
    logging_cfg = settings.logging

    effective_log_level = log_level_override or logging_cfg.get("log_level", "INFO")
    effective_log_file = log_file_override or logging_cfg.get("log_file")
    log_dir = config_dir if effective_log_file else None

    setup_logging(
        level=effective_log_level,
        log_file=str(effective_log_file) if effective_log_file else None,
        log_dir=log_dir,
        log_format=logging_cfg.get("log_format", "text"),
        max_bytes=logging_cfg.get("max_file_size", 10 * 1024 * 1024),
        backup_count=logging_cfg.get("backup_count", 5),
    )


def save_status(config_dir: Path, status: dict) -> None:
    """Save crawl status to file."""
    status_path = config_dir / STATUS_FILE
    status["timestamp"] = datetime.now(UTC).isoformat()
    with open(status_path, "w", encoding="utf-8") as f:
        json.dump(status, f, indent=2)


def load_status(config_dir: Path) -> dict | None:
    """Load last crawl status from file."""
    status_path = config_dir / STATUS_FILE
    if not status_path.exists():
        return None
    with open(status_path, encoding="utf-8") as f:
        return json.load(f)


def signal_handler(signum, frame):
    """Stop scheduling new pages; in-flight pages still finish."""
    global _interrupted
    _interrupted = True
    click.echo(
        click.style("\n\nInterrupt received, finishing pages in flight...", fg="yellow")
    )
    if _active_crawler is not None:
        _active_crawler.stop()


# Set up signal handlers
signal.signal(signal.SIGINT, signal_handler)
signal.signal(signal.SIGTERM, signal_handler)


@click.group(invoke_without_command=True)
@click.option(
    "--config",
    "-c",
    type=click.Path(path_type=Path),
    default=Path(__file__).parent / "config.yaml",
    help="Path to configuration file",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(
        ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False
    ),
    default=None,
    help="Override log level from config",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path from config",
)
@click.version_option(version="1.0.0", prog_name="eventbrite-crawler")
@click.pass_context
def cli(ctx, config: Path, log_level: str | None, log_file: Path | None):
    """
    Eventbrite Events Crawler - collect events from Eventbrite search pages.

    Each listing page is read from the embedded server state when present,
    then from JSON-LD, then from the event cards in the HTML.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["config_dir"] = config.parent
    ctx.obj["log_level"] = log_level
    ctx.obj["log_file"] = log_file

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _load_settings_or_exit(ctx) -> Settings:
    config_path = ctx.obj["config_path"]
    if not config_path.exists():
        # Built-in defaults when no file is present
        return parse_settings({})
    try:
        return load_settings(config_path)
    except ConfigurationError as e:
        click.echo(click.style(f"Configuration error: {e}", fg="red"), err=True)
        sys.exit(1)


@cli.command()
@click.option("--results", "-r", type=int, default=None, help="Number of events wanted")
@click.option("--max-pages", "-p", type=int, default=None, help="Maximum pages per seed")
@click.option(
    "--start-url",
    "-u",
    "start_urls",
    multiple=True,
    help="Start URL (repeatable); overrides the search options",
)
@click.option("--location", default=None, help="Search location slug, e.g. ca--san-francisco")
@click.option("--category", default=None, help="Search category slug")
@click.option("--query", default=None, help="Search query slug")
@click.option("--date-filter", default=None, help="Date filter slug, e.g. today")
@click.option("--free", "free_only", is_flag=True, default=False, help="Only free events")
@click.option("--output", "-o", type=click.Path(path_type=Path), default=None, help="Output file")
@click.option("--concurrency", type=int, default=None, help="Max pages fetched at once")
@click.option(
    "--dry-run",
    "-n",
    is_flag=True,
    default=False,
    help="Crawl without writing the output file",
)
@click.pass_context
def run(
    ctx,
    results: int | None,
    max_pages: int | None,
    start_urls: tuple[str, ...],
    location: str | None,
    category: str | None,
    query: str | None,
    date_filter: str | None,
    free_only: bool,
    output: Path | None,
    concurrency: int | None,
    dry_run: bool,
):
    """
    Crawl Eventbrite listings and write normalized events.

    Command-line options override the configuration file.
    """
    global _active_crawler

    settings = _load_settings_or_exit(ctx)
    config_dir = ctx.obj["config_dir"]
    setup_logging_from_config(
        settings, config_dir, ctx.obj["log_level"], ctx.obj["log_file"]
    )
    logger = get_logger(__name__)

    crawl_cfg = settings.crawl
    if results is not None:
        crawl_cfg.results_wanted = max(1, results)
    if max_pages is not None:
        crawl_cfg.max_pages = max(1, max_pages)
    if concurrency is not None:
        crawl_cfg.max_concurrency = max(1, concurrency)
    if start_urls:
        crawl_cfg.start_urls = list(start_urls)

    search = settings.search
    if location:
        search.location = location
    if category:
        search.category = category
    if query:
        search.query = query
    if date_filter:
        search.date_filter = date_filter
    if free_only:
        search.is_free = True

    seeds = settings.seed_urls()
    output_path = output or config_dir / settings.output.path

    if dry_run:
        click.echo(click.style("DRY RUN MODE - No files will be written", fg="yellow"))

    logger.info(f"Starting Eventbrite crawler with {len(seeds)} start URL(s)")
    logger.info(
        f"Target: {crawl_cfg.results_wanted} events, max {crawl_cfg.max_pages} pages"
    )

    http_cfg = settings.http
    ledger = CrawlLedger(crawl_cfg.results_wanted)

    with (
        HTTPClient(
            timeout=http_cfg.timeout,
            retry_count=http_cfg.retry_count,
            retry_delay=http_cfg.retry_delay,
            user_agent=http_cfg.user_agent,
            proxy=http_cfg.proxy,
        ) as http_client,
        DatasetWriter(output_path, settings.output.format, dry_run=dry_run) as writer,
    ):
        crawler = EventbriteCrawler(
            ledger=ledger,
            max_pages=crawl_cfg.max_pages,
            http_client=http_client,
            sink=writer.write,
            max_concurrency=crawl_cfg.max_concurrency,
        )
        _active_crawler = crawler
        try:
            crawler.crawl(seeds)
        finally:
            _active_crawler = None

    stats = crawler.stats

    click.echo("\n" + "=" * 50)
    click.echo(click.style("CRAWL SUMMARY", bold=True))
    click.echo("=" * 50)
    click.echo(f"  Pages processed:    {stats.pages_processed}")
    click.echo(f"  Pages empty:        {stats.pages_empty}")
    click.echo(f"  Pages failed:       {stats.pages_failed}")
    click.echo(f"  Events saved:       {ledger.saved_count}/{ledger.target}")
    click.echo(f"  Output:             {output_path}")
    click.echo("=" * 50)

    if dry_run:
        click.echo(click.style("\nDRY RUN - No files were written", fg="yellow"))

    save_status(
        config_dir,
        {
            **stats.to_dict(),
            "results_wanted": ledger.target,
            "output": str(output_path),
            "dry_run": dry_run,
            "interrupted": _interrupted,
        },
    )

    if _interrupted:
        sys.exit(130)  # Standard exit code for SIGINT
    sys.exit(0)


@cli.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--url", default="https://www.eventbrite.com/d/online/all-events/", help="URL the page came from")
@click.option("--page", "page_no", type=int, default=1, show_default=True, help="Page number of the file")
@click.option("--max-pages", type=int, default=None, help="Page cap for next-page planning")
@click.pass_context
def extract(ctx, html_file: Path, url: str, page_no: int, max_pages: int | None):
    """
    Extract events from a saved listing page and print them as JSON.
    """
    settings = _load_settings_or_exit(ctx)
    setup_logging_from_config(
        settings, ctx.obj["config_dir"], ctx.obj["log_level"] or "ERROR", None
    )

    crawler = EventbriteCrawler(
        ledger=CrawlLedger(settings.crawl.results_wanted),
        max_pages=max_pages or settings.crawl.max_pages,
    )
    html = html_file.read_text(encoding="utf-8")
    result = crawler.process_page(HTMLParser(html, url), url, page_no)

    click.echo(
        json.dumps(
            {
                "extraction_method": result.method.value,
                "events": [event.to_dict() for event in result.events],
                "next_url": result.next_url,
            },
            indent=2,
            ensure_ascii=False,
        )
    )


@cli.command()
@click.pass_context
def validate(ctx):
    """
    Validate the configuration file.
    """
    config_path = ctx.obj["config_path"]

    click.echo(f"\nValidating {config_path}...\n")

    if not config_path.exists():
        click.echo(click.style(f"  ✗ Config file not found: {config_path}", fg="red"))
        sys.exit(1)

    try:
        settings = load_settings(config_path)
    except ConfigurationError as e:
        click.echo(click.style(f"  ✗ {e}", fg="red"))
        click.echo(click.style("\nVALIDATION FAILED", fg="red", bold=True))
        sys.exit(1)

    click.echo(click.style("  ✓ Configuration is valid", fg="green"))
    click.echo(f"  Results wanted:  {settings.crawl.results_wanted}")
    click.echo(f"  Max pages:       {settings.crawl.max_pages}")
    for seed in settings.seed_urls():
        click.echo(f"  Start URL:       {seed}")
    click.echo(click.style("\nVALIDATION PASSED", fg="green", bold=True))
    sys.exit(0)


@cli.command()
@click.pass_context
def status(ctx):
    """
    Show last crawl results.
    """
    status_data = load_status(ctx.obj["config_dir"])

    if not status_data:
        click.echo("No previous crawl status found.")
        click.echo("Run 'python crawl.py run' to perform a crawl.")
        return

    click.echo("\n" + "=" * 50)
    click.echo(click.style("LAST CRAWL STATUS", bold=True))
    click.echo("=" * 50)
    click.echo(f"  Timestamp:          {status_data.get('timestamp', 'Unknown')}")
    click.echo(f"  Pages processed:    {status_data.get('pages_processed', 0)}")
    click.echo(f"  Pages failed:       {status_data.get('pages_failed', 0)}")
    click.echo(
        f"  Events saved:       {status_data.get('events_saved', 0)}"
        f"/{status_data.get('results_wanted', 0)}"
    )

    if status_data.get("dry_run"):
        click.echo(click.style("  Mode:               DRY RUN", fg="yellow"))
    if status_data.get("interrupted"):
        click.echo(click.style("  Status:             INTERRUPTED", fg="yellow"))
    else:
        click.echo(click.style("  Status:             COMPLETED", fg="green"))
    click.echo("=" * 50)


if __name__ == "__main__":
    cli()
