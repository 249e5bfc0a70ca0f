"""Shared page fixtures for extractor and crawler tests."""

import json

import pytest


def server_data_page(search_data: dict, trailer: str = ";") -> str:
    """Listing page with a window.__SERVER_DATA__ assignment."""
    blob = json.dumps({"search_data": search_data})
    return f"""
    <html>
    <head>
        <script>window.dataLayer = [];</script>
        <script>
            window.__SERVER_DATA__ = {blob}{trailer}
            window.__REACT_QUERY_STATE__ = {{}};
        </script>
    </head>
    <body><div id="root"></div></body>
    </html>
    """


def json_ld_page(*blocks) -> str:
    """Listing page with one JSON-LD script per block (str blocks kept verbatim)."""
    scripts = []
    for block in blocks:
        body = block if isinstance(block, str) else json.dumps(block)
        scripts.append(f'<script type="application/ld+json">{body}</script>')
    return f"<html><head>{''.join(scripts)}</head><body></body></html>"


@pytest.fixture
def search_data():
    """Search results with overlapping promoted and regular lists."""
    return {
        "events": {
            "promoted_results": [
                {
                    "id": "1001",
                    "name": "Jazz Night",
                    "url": "https://www.eventbrite.com/e/jazz-night-1001",
                    "primary_organizer": {"id": "org-1", "name": "Blue Note"},
                    "ticket_availability": {
                        "is_free": False,
                        "minimum_ticket_price": {
                            "display": "$25.00",
                            "value": 2500,
                            "currency": "USD",
                        },
                    },
                }
            ],
            "results": [
                {
                    "id": "1001",
                    "name": "Jazz Night (regular)",
                    "url": "https://www.eventbrite.com/e/jazz-night-1001",
                },
                {
                    "id": "1002",
                    "name": "Python Meetup",
                    "url": "https://www.eventbrite.com/e/python-meetup-1002",
                    "summary": "Monthly meetup",
                    "start_date": "2026-11-03",
                    "start_time": "18:30",
                    "timezone": "America/New_York",
                    "is_online_event": True,
                    "primary_organizer_id": "org-2",
                    "is_free": True,
                    "image": {
                        "url": "https://img.evbuc.com/https%3A%2F%2Fcdn.evbuc.com%2Fimages%2F1%2F2%2F1%2Foriginal.jpg?w=512"
                    },
                    "tags": [
                        {"prefix": "EventbriteFormat", "tag": "EventbriteFormat/9"},
                        {
                            "prefix": "EventbriteCategory",
                            "tag": "EventbriteCategory/102",
                            "display_name": "Science & Technology",
                        },
                    ],
                },
            ],
            "pagination": {"page_count": 12, "page_number": 1},
        },
        "profiles": {"org-2": {"name": "PyLadies NYC"}},
    }


@pytest.fixture
def json_ld_item_list():
    """ItemList with a wrapped event, a bare event and a non-event."""
    return {
        "@context": "https://schema.org",
        "@type": "ItemList",
        "itemListElement": [
            {
                "@type": "ListItem",
                "position": 1,
                "item": {
                    "@type": "Event",
                    "name": "Rooftop Salsa",
                    "description": "Dance under the stars",
                    "url": "https://www.eventbrite.com/e/rooftop-salsa-2001",
                    "image": "https://cdn.evbuc.com/images/salsa.jpg?h=200",
                    "startDate": "2026-11-07T20:00:00Z",
                    "endDate": "2026-11-07T23:30:00Z",
                    "eventAttendanceMode": "https://schema.org/OfflineEventAttendanceMode",
                    "location": {"@type": "Place", "name": "Sky Bar"},
                },
            },
            {
                "@type": "Event",
                "name": "Online Writing Workshop",
                "url": "https://www.eventbrite.com/e/writing-workshop-2002",
                "image": {"@type": "ImageObject", "url": "https://example.com/w.png"},
                "startDate": "2026-11-08",
                "eventAttendanceMode": "https://schema.org/OnlineEventAttendanceMode",
                "location": {"@type": "VirtualLocation", "url": "https://zoom.us"},
            },
            {"@type": "ListItem", "item": {"@type": "Organization", "name": "Acme"}},
        ],
    }


@pytest.fixture
def cards_html():
    """Listing markup with search-event cards."""
    return """
    <html><body>
    <ul>
      <li data-testid="search-event">
        <a class="event-card-link" href="/e/comedy-open-mic-3001">
          <img src="https://img.evbuc.com/https%3A%2F%2Fcdn.evbuc.com%2Fimages%2F9%2Fcomedy.jpg?w=940" />
        </a>
        <h3>Comedy Open Mic</h3>
        <p>Fri, Nov 13, 8:00 PM</p>
        <p>From $12.50</p>
      </li>
      <li data-testid="search-event">
        <a href="https://www.eventbrite.com/e/free-yoga-in-the-park-3002?aff=ebdssbdestsearch">
          <img data-src="https://cdn.evbuc.com/images/yoga.jpg?auto=format" />
        </a>
        <h2>Yoga in the Park</h2>
        <time>Sat, Nov 14, 9:00 AM</time>
        <span>Free</span>
      </li>
      <li data-testid="search-event">
        <span>Sponsored</span>
      </li>
    </ul>
    <div data-event-id="999"><h3>Should not be used</h3></div>
    </body></html>
    """
