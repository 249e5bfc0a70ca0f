"""Decides whether and where to fetch the next listing page."""

from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .logger import get_logger

logger = get_logger(__name__)

PAGE_PARAM = "page"


@dataclass
class PaginationDescriptor:
    """
    Page position for one listing page.

    ``total_pages`` never exceeds ``max_pages``; an unknown total is taken
    to be ``max_pages``.
    """

    current_page: int
    total_pages: int
    max_pages: int

    def __post_init__(self):
        self.total_pages = min(self.total_pages, self.max_pages)

    @classmethod
    def from_declared(
        cls, current_page: int, declared_total: int | None, max_pages: int
    ) -> "PaginationDescriptor":
        """Build a descriptor from whatever page count the page reported."""
        total = declared_total if declared_total else max_pages
        return cls(current_page=current_page, total_pages=total, max_pages=max_pages)

    @property
    def has_next(self) -> bool:
        return self.current_page < min(self.total_pages, self.max_pages)


def set_page_param(url: str, page: int) -> str | None:
    """
    Rewrite (or add) the ``page`` query parameter of a URL.

    Returns:
        The new URL, or None when ``url`` is not an absolute URL
    """
    try:
        parts = urlsplit(url)
    except (TypeError, ValueError):
        return None
    if not parts.scheme or not parts.netloc:
        return None

    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != PAGE_PARAM]
    query.append((PAGE_PARAM, str(page)))
    return urlunsplit(parts._replace(query=urlencode(query)))


def next_page_url(
    current_url: str, current_page: int, total_pages: int, max_pages: int
) -> str | None:
    """
    URL of the page after ``current_page``, or None when pagination ends.

    Pagination ends once ``current_page`` reaches the smaller of the
    reported total and the page cap. Callers check the record quota
    themselves before asking.
    """
    descriptor = PaginationDescriptor(current_page, total_pages, max_pages)
    if not descriptor.has_next:
        return None

    url = set_page_param(current_url, current_page + 1)
    if url is None:
        logger.debug(f"Cannot paginate unparseable URL: {current_url!r}")
    return url
