"""Eventbrite Events Crawler - listing page extraction with layered fallbacks."""

from .crawler import CrawlStats, EventbriteCrawler, PageResult
from .extractors import ExtractionCoordinator, ExtractionResult
from .ledger import CrawlLedger
from .models import ExtractionMethod, NormalizedEvent
from .pagination import PaginationDescriptor, next_page_url

__version__ = "1.0.0"

__all__ = [
    "CrawlLedger",
    "CrawlStats",
    "EventbriteCrawler",
    "ExtractionCoordinator",
    "ExtractionMethod",
    "ExtractionResult",
    "NormalizedEvent",
    "PageResult",
    "PaginationDescriptor",
    "next_page_url",
]
