"""Page processing and the concurrent crawl loop."""

import threading
from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from .extractors.coordinator import ExtractionCoordinator
from .ledger import CrawlLedger
from .logger import get_logger
from .models.event import ExtractionMethod, NormalizedEvent
from .pagination import PaginationDescriptor, next_page_url
from .utils.http import HTTPClient
from .utils.parser import HTMLParser

logger = get_logger(__name__)

EventSink = Callable[[list[NormalizedEvent]], object]


@dataclass
class PageResult:
    """What one listing page yielded and where to go next."""

    url: str
    page_no: int
    events: list[NormalizedEvent] = field(default_factory=list)
    method: ExtractionMethod = ExtractionMethod.UNKNOWN
    next_url: str | None = None
    found: int = 0
    skipped: bool = False

    @property
    def next_page(self) -> int | None:
        return self.page_no + 1 if self.next_url else None


@dataclass
class CrawlStats:
    """Counters for one crawl run."""

    pages_processed: int = 0
    pages_empty: int = 0
    pages_failed: int = 0
    events_saved: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "pages_processed": self.pages_processed,
            "pages_empty": self.pages_empty,
            "pages_failed": self.pages_failed,
            "events_saved": self.events_saved,
        }


class EventbriteCrawler:
    """
    Turns fetched listing pages into saved events and follow-up requests.

    ``process_page`` is the whole per-page decision: extract, deduplicate
    against the run ledger, and plan the next page. ``crawl`` wraps it in
    a bounded thread pool that fetches pages through an HTTPClient.
    """

    def __init__(
        self,
        ledger: CrawlLedger,
        max_pages: int,
        http_client: HTTPClient | None = None,
        coordinator: ExtractionCoordinator | None = None,
        sink: EventSink | None = None,
        max_concurrency: int = 5,
    ):
        """
        Initialize the crawler.

        Args:
            ledger: Run-wide dedup and quota ledger
            max_pages: Page cap applied to every seed
            http_client: Fetcher used by crawl()
            coordinator: Extraction strategies, defaults to all three
            sink: Called with each page's accepted events
            max_concurrency: Max pages in flight at once
        """
        self.ledger = ledger
        self.max_pages = max_pages
        self.http_client = http_client
        self.coordinator = coordinator or ExtractionCoordinator()
        self.sink = sink
        self.max_concurrency = max(1, max_concurrency)
        self.stats = CrawlStats()
        self._stop_requested = threading.Event()

    def process_page(
        self, document: HTMLParser | str, url: str, page_no: int = 1
    ) -> PageResult:
        """
        Extract, deduplicate and paginate one listing page.

        Args:
            document: Parsed page, or raw HTML to parse
            url: URL the page was fetched from
            page_no: Page number this request was made for

        Returns:
            Accepted events and the next page URL, if any
        """
        if self.ledger.is_full:
            logger.info(f"Reached target of {self.ledger.target} events. Skipping {url}")
            return PageResult(url=url, page_no=page_no, skipped=True)

        if isinstance(document, str):
            document = HTMLParser(document, url)

        logger.info(f"Processing page {page_no}: {url}")

        extraction = self.coordinator.extract(document)
        if not extraction.found:
            logger.warning(f"No events found on page {page_no}")
            return PageResult(url=url, page_no=page_no)

        pagination = PaginationDescriptor.from_declared(
            page_no, extraction.declared_total_pages, self.max_pages
        )
        logger.info(
            f"Extracted {len(extraction.events)} events from "
            f"{extraction.method.value} (page {page_no}/{pagination.total_pages})"
        )

        accepted = self.ledger.accept(extraction.events)
        if accepted:
            logger.info(
                f"Saved {len(accepted)} events "
                f"(total: {self.ledger.saved_count}/{self.ledger.target})"
            )

        next_url = None
        if not self.ledger.is_full:
            next_url = next_page_url(
                url, page_no, pagination.total_pages, pagination.max_pages
            )

        return PageResult(
            url=url,
            page_no=page_no,
            events=accepted,
            method=extraction.method,
            next_url=next_url,
            found=len(extraction.events),
        )

    def stop(self):
        """Stop scheduling new pages; pages in flight still complete."""
        self._stop_requested.set()

    @property
    def stopped(self) -> bool:
        return self._stop_requested.is_set()

    def _fetch_and_process(self, url: str, page_no: int) -> PageResult | None:
        result = self.http_client.fetch(url)
        if not result.success or result.html is None:
            logger.error(f"Request failed: {url} ({result.error})")
            return None
        return self.process_page(HTMLParser(result.html, url), url, page_no)

    def crawl(self, start_urls: Iterable[str]) -> list[NormalizedEvent]:
        """
        Crawl from the seed URLs until the target, page caps or stop.

        Each seed starts at page 1. A URL is fetched at most once per run.

        Returns:
            All accepted events in the order their pages completed
        """
        if self.http_client is None:
            raise ValueError("crawl() requires an http_client")

        saved: list[NormalizedEvent] = []
        requested: set[str] = set()
        pending: dict[Future, tuple[str, int]] = {}

        with ThreadPoolExecutor(max_workers=self.max_concurrency) as executor:

            def schedule(url: str, page_no: int):
                if self.stopped or url in requested:
                    return
                requested.add(url)
                future = executor.submit(self._fetch_and_process, url, page_no)
                pending[future] = (url, page_no)

            for url in start_urls:
                schedule(url, 1)

            while pending:
                done, _ = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    url, page_no = pending.pop(future)
                    try:
                        page = future.result()
                    except Exception as e:
                        logger.error(f"Error processing {url}: {e}")
                        self.stats.pages_failed += 1
                        continue

                    if page is None:
                        self.stats.pages_failed += 1
                        continue
                    if page.skipped:
                        continue

                    self.stats.pages_processed += 1
                    if not page.found:
                        self.stats.pages_empty += 1

                    if page.events:
                        saved.extend(page.events)
                        self.stats.events_saved += len(page.events)
                        if self.sink is not None:
                            self.sink(page.events)

                    if page.next_url:
                        schedule(page.next_url, page.next_page)

        logger.info(f"Finished. Saved {self.ledger.saved_count} events")
        return saved
