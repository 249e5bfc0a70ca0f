"""Field-level normalization shared by all extraction strategies."""

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import unquote, urlsplit

# Proxy form: https://img.evbuc.com/https%3A%2F%2Fcdn.evbuc.com%2F...?params
_PROXY_IMAGE_RE = re.compile(r"img\.evbuc\.com/(https?%3A%2F%2F[^?]+)", re.IGNORECASE)

CDN_HOST_MARKER = "cdn.evbuc.com"

CURRENCY_SYMBOLS = {
    "USD": "$",
    "GBP": "£",
    "EUR": "€",
}

DEFAULT_CURRENCY = "USD"

# minPriceValue at or above this is a minor-unit amount (2300 -> 23.00)
MINOR_UNIT_THRESHOLD = 100


def first_str(value: Any) -> str | None:
    """
    Read a text field that may be multi-valued.

    Returns the value when it is a non-empty string, the first non-empty
    string of a list, and None for anything else.
    """
    if isinstance(value, str):
        return value or None
    if isinstance(value, list):
        for item in value:
            if isinstance(item, str) and item:
                return item
    return None


def normalize_image_url(url: str | None) -> str | None:
    """
    Return the canonical form of an event image URL.

    Proxy-wrapped URLs are unwrapped to the percent-encoded original they
    embed; CDN URLs lose their query string. Anything else is returned
    unchanged. Never raises; applying it twice gives the same result as
    applying it once.

    Args:
        url: Image URL as found in the page

    Returns:
        Normalized URL, or None for empty input
    """
    if not url or not isinstance(url, str):
        return None

    # Each unwrap strictly shortens the string, so this terminates
    match = _PROXY_IMAGE_RE.search(url)
    while match:
        url = unquote(match.group(1))
        match = _PROXY_IMAGE_RE.search(url)

    if CDN_HOST_MARKER in url:
        try:
            parts = urlsplit(url)
        except ValueError:
            return url
        if parts.scheme and parts.netloc:
            return f"{parts.scheme}://{parts.netloc}{parts.path}"

    return url


def currency_symbol(currency: str | None) -> str:
    """Map an ISO currency code to its display prefix ("$", "£", "€" or "CAD ")."""
    code = currency.upper() if isinstance(currency, str) and currency else DEFAULT_CURRENCY
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def format_amount(value: Any, currency: str | None, minor_units: bool) -> str | None:
    """
    Render a numeric amount as a "From" price string.

    Args:
        value: Numeric amount (int, float or numeric string)
        currency: ISO currency code, USD when missing
        minor_units: Whether value is expressed in cents

    Returns:
        e.g. "From $23.00", or None if value is not numeric
    """
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None

    if minor_units:
        amount = amount / 100
    return f"From {currency_symbol(currency)}{amount:.2f}"


def format_price(event: Mapping[str, Any]) -> str | None:
    """
    Resolve a display price from the price fields of a raw event.

    Preference order: free flag, minPrice structure, ticket availability
    display string, direct price field. A free flag always wins.
    """
    if event.get("is_free") or event.get("isFree"):
        return "Free"

    min_price = event.get("minPrice")
    if isinstance(min_price, Mapping):
        value = min_price.get("minPriceValue")
        if value is not None:
            try:
                minor_units = float(value) >= MINOR_UNIT_THRESHOLD
            except (TypeError, ValueError):
                minor_units = False
            price = format_amount(value, min_price.get("currency"), minor_units)
            if price:
                return price

    ticket_availability = event.get("ticket_availability")
    if isinstance(ticket_availability, Mapping):
        minimum = ticket_availability.get("minimum_ticket_price")
        if isinstance(minimum, Mapping) and first_str(minimum.get("display")):
            return first_str(minimum.get("display"))

    price = event.get("price")
    if isinstance(price, (int, float)) and not isinstance(price, bool):
        return str(price)
    if isinstance(price, str) and price:
        return price

    return None


def split_iso_datetime(value: str | None) -> tuple[str | None, str | None]:
    """
    Split "2026-03-14T19:00:00Z" into ("2026-03-14", "19:00:00").

    No timezone conversion is done; only a trailing UTC marker is dropped.
    """
    if not value or not isinstance(value, str):
        return None, None
    if "T" not in value:
        return value, None

    date_part, time_part = value.split("T", 1)
    time_part = time_part.replace("Z", "")
    return date_part, time_part or None
