"""Utility modules for the crawler."""

from .http import FetchResult, HTTPClient, SSRFError, validate_url
from .normalize import format_price, normalize_image_url, split_iso_datetime
from .parser import HTMLParser

__all__ = [
    "FetchResult",
    "HTTPClient",
    "HTMLParser",
    "SSRFError",
    "format_price",
    "normalize_image_url",
    "split_iso_datetime",
    "validate_url",
]
