"""Fallback extraction by scraping event cards from the listing HTML."""

import re
from urllib.parse import urljoin, urlsplit

from bs4 import Tag

from ..logger import get_logger
from ..models.event import MarkupRawEvent
from ..utils.normalize import normalize_image_url
from ..utils.parser import HTMLParser

logger = get_logger(__name__)

SITE_ORIGIN = "https://www.eventbrite.com"

# Tried in order; the first selector with any match is the only one used
CARD_SELECTORS = [
    '[data-testid="search-event"]',
    "section.discover-vertical-event-card",
    ".event-card-link",
    "[data-event-id]",
]

LINK_SELECTOR = 'a.event-card-link, a[href*="/e/"]'
TITLE_SELECTOR = 'h3, h2, [data-testid="event-title"]'
DATE_SELECTOR = 'p, time, [data-testid="event-date"]'

FREE_RE = re.compile(r"free", re.IGNORECASE)
PRICE_RE = re.compile(r"(?:from\s*)?[$£€][\d,.]+", re.IGNORECASE)
EVENT_ID_RE = re.compile(r"/e/[^/]+-(\d+)")


def _page_origin(base_url: str) -> str:
    try:
        parts = urlsplit(base_url)
    except ValueError:
        return SITE_ORIGIN
    if parts.scheme and parts.netloc:
        return f"{parts.scheme}://{parts.netloc}"
    return SITE_ORIGIN


def qualify_url(href: str | None, origin: str = SITE_ORIGIN) -> str | None:
    """Make a card link absolute against the site origin."""
    if not href:
        return None
    if href.startswith("http"):
        return href
    try:
        return urljoin(origin + "/", href)
    except ValueError:
        logger.debug(f"Unusable card link: {href!r}")
        return None


def event_id_from_url(url: str | None) -> str | None:
    """Numeric id from an event path like /e/some-title-123456789."""
    if not url:
        return None
    match = EVENT_ID_RE.search(url)
    return match.group(1) if match else None


def find_cards(parser: HTMLParser) -> list[Tag]:
    """Return cards for the first selector tier that matches anything."""
    for selector in CARD_SELECTORS:
        cards = parser.select(selector)
        if cards:
            logger.debug(f"Using card selector {selector!r}: {len(cards)} cards")
            return cards
    return []


def parse_card(card: Tag, parser: HTMLParser, origin: str = SITE_ORIGIN) -> MarkupRawEvent:
    """Scrape one event card."""
    if card.name == "a":
        href = parser.get_attr(card, "href")
    else:
        href = parser.get_attr(card, "href", LINK_SELECTOR)

    title = parser.clean_text(parser.get_text(card, TITLE_SELECTOR)) or None
    image_url = normalize_image_url(parser.get_image(card, "img") or None)
    date_text = parser.clean_text(parser.get_text(card, DATE_SELECTOR)) or None

    price = None
    is_free = False
    card_text = card.get_text(" ")
    if FREE_RE.search(card_text):
        is_free = True
        price = "Free"
    else:
        match = PRICE_RE.search(card_text)
        if match:
            price = match.group(0)

    return MarkupRawEvent(
        id=event_id_from_url(href),
        name=title,
        url=qualify_url(href, origin),
        image_url=image_url,
        date_text=date_text,
        price=price,
        is_free=is_free,
    )


def extract_markup(parser: HTMLParser) -> list[MarkupRawEvent] | None:
    """
    Scrape event cards from the page.

    Args:
        parser: Parsed listing page

    Returns:
        Cards with a title or link, or None when no card qualifies
    """
    origin = _page_origin(parser.base_url)
    events = []

    for card in find_cards(parser):
        event = parse_card(card, parser, origin)
        if event.name or event.url:
            events.append(event)

    if not events:
        logger.debug("No event cards found in markup")
        return None
    return events
