"""Configuration loading and validation for the crawler."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from .logger import get_logger

logger = get_logger(__name__)

SITE_URL = "https://www.eventbrite.com"

DEFAULT_RESULTS_WANTED = 20
DEFAULT_MAX_PAGES = 5
DEFAULT_MAX_CONCURRENCY = 5

SCHEMA_FILENAME = "config.schema.json"

ENV_PREFIX = "EVENTBRITE"


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    pass


def coerce_positive_int(value: Any, default: int) -> int:
    """
    Read a crawl limit leniently.

    Non-numeric values fall back to ``default``; numbers are clamped to 1.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return default
    return max(1, number)


@dataclass
class SearchConfig:
    """Recipe for building a search URL when no start URL is given."""

    location: str = "online"
    category: str = ""
    query: str = "all-events"
    date_filter: str = ""
    is_free: bool = False

    def build_url(self) -> str:
        """
        Build ``/d/{location}/{category--}{free--}{query}{--date_filter}/``.
        """
        path = self.location or "online"

        query_path = ""
        if self.category:
            query_path += f"{self.category}--"
        if self.is_free:
            query_path += "free--"
        query_path += self.query or "all-events"
        if self.date_filter:
            query_path += f"--{self.date_filter}"

        return f"{SITE_URL}/d/{path}/{query_path}/"


@dataclass
class CrawlConfig:
    """Crawl limits and seeds."""

    results_wanted: int = DEFAULT_RESULTS_WANTED
    max_pages: int = DEFAULT_MAX_PAGES
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    start_urls: list[str] = field(default_factory=list)

    def __post_init__(self):
        """Clamp limits and apply environment variable overrides."""
        results_override = os.environ.get(f"{ENV_PREFIX}_RESULTS_WANTED")
        if results_override is not None:
            logger.debug("Overriding results_wanted from environment")
            self.results_wanted = results_override

        pages_override = os.environ.get(f"{ENV_PREFIX}_MAX_PAGES")
        if pages_override is not None:
            logger.debug("Overriding max_pages from environment")
            self.max_pages = pages_override

        urls_override = os.environ.get(f"{ENV_PREFIX}_START_URLS")
        if urls_override:
            logger.debug("Overriding start_urls from environment")
            self.start_urls = [u.strip() for u in urls_override.split(",") if u.strip()]

        self.results_wanted = coerce_positive_int(
            self.results_wanted, DEFAULT_RESULTS_WANTED
        )
        self.max_pages = coerce_positive_int(self.max_pages, DEFAULT_MAX_PAGES)
        self.max_concurrency = coerce_positive_int(
            self.max_concurrency, DEFAULT_MAX_CONCURRENCY
        )


@dataclass
class HttpConfig:
    """Settings for the page fetcher."""

    timeout: int = 30
    retry_count: int = 3
    retry_delay: float = 1.0
    user_agent: str = "Mozilla/5.0 (compatible; EventbriteCrawler/1.0)"
    proxy: str | None = None


@dataclass
class OutputConfig:
    """Where accepted events are written."""

    path: str = "output/events.jsonl"
    format: str = "jsonl"


@dataclass
class Settings:
    """Complete crawler configuration."""

    crawl: CrawlConfig = field(default_factory=CrawlConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: dict = field(default_factory=dict)

    def seed_urls(self) -> list[str]:
        """Configured start URLs, or the search recipe URL if there are none."""
        if self.crawl.start_urls:
            return list(self.crawl.start_urls)
        return [self.search.build_url()]


def collect_start_urls(raw: dict) -> list[str]:
    """
    Gather start URLs from ``start_urls`` and ``start_url``.

    ``start_urls`` entries may be plain strings or mappings with a ``url``.
    """
    urls = []
    for entry in raw.get("start_urls") or []:
        if isinstance(entry, str):
            urls.append(entry)
        elif isinstance(entry, dict) and entry.get("url"):
            urls.append(entry["url"])

    if raw.get("start_url"):
        urls.append(raw["start_url"])
    return urls


def parse_settings(raw: dict | None) -> Settings:
    """Build Settings from an already-loaded configuration mapping."""
    raw = raw or {}
    crawl_raw = raw.get("crawl") or {}
    search_raw = raw.get("search") or {}
    http_raw = raw.get("http") or {}
    output_raw = raw.get("output") or {}

    crawl = CrawlConfig(
        results_wanted=crawl_raw.get("results_wanted", DEFAULT_RESULTS_WANTED),
        max_pages=crawl_raw.get("max_pages", DEFAULT_MAX_PAGES),
        max_concurrency=crawl_raw.get("max_concurrency", DEFAULT_MAX_CONCURRENCY),
        start_urls=collect_start_urls(crawl_raw),
    )

    search = SearchConfig(
        location=search_raw.get("location") or "online",
        category=search_raw.get("category") or "",
        query=search_raw.get("query") or "all-events",
        date_filter=search_raw.get("date_filter") or "",
        is_free=bool(search_raw.get("is_free", False)),
    )

    http = HttpConfig(
        timeout=http_raw.get("timeout", 30),
        retry_count=http_raw.get("retry_count", 3),
        retry_delay=http_raw.get("retry_delay", 1.0),
        user_agent=http_raw.get("user_agent", HttpConfig.user_agent),
        proxy=http_raw.get("proxy"),
    )

    output = OutputConfig(
        path=output_raw.get("path", OutputConfig.path),
        format=output_raw.get("format", OutputConfig.format),
    )
    if output.format not in ("json", "jsonl"):
        raise ConfigurationError(f"Unknown output format: {output.format}")

    return Settings(
        crawl=crawl,
        search=search,
        http=http,
        output=output,
        logging=raw.get("logging") or {},
    )


def load_settings(config_path: Path) -> Settings:
    """
    Load and validate the crawler configuration from a YAML file.

    Args:
        config_path: Path to config.yaml

    Returns:
        Settings object with validated configuration

    Raises:
        ConfigurationError: If configuration is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config: {e}") from e

    if not raw_config:
        raise ConfigurationError("Config file is empty")
    if not isinstance(raw_config, dict):
        raise ConfigurationError("Config file must contain a mapping")

    validate_config(raw_config, config_path.parent)

    return parse_settings(raw_config)


def validate_config(config: dict, config_dir: Path) -> None:
    """
    Validate configuration against the JSON Schema next to it.

    Args:
        config: Parsed configuration dictionary
        config_dir: Directory containing the schema file

    Raises:
        ConfigurationError: If validation fails
    """
    schema_path = Path(config_dir) / SCHEMA_FILENAME

    if not schema_path.exists():
        logger.warning(f"Schema file not found: {schema_path}, skipping validation")
        return

    try:
        with open(schema_path, encoding="utf-8") as f:
            schema = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON schema: {e}") from e

    try:
        jsonschema.validate(instance=config, schema=schema)
    except jsonschema.ValidationError as e:
        path = " -> ".join(str(p) for p in e.absolute_path) if e.absolute_path else "root"
        raise ConfigurationError(
            f"Configuration validation failed at '{path}': {e.message}"
        ) from e

    logger.debug("Configuration validated against schema")
