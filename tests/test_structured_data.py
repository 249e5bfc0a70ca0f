"""Tests for the JSON-LD extractor."""

from conftest import json_ld_page

from eventbrite_crawler.extractors.structured_data import (
    extract_structured_data,
    parse_json_ld_event,
)
from eventbrite_crawler.utils.parser import HTMLParser


class TestParseJsonLdEvent:
    """Tests for reading a single schema.org Event."""

    def test_splits_dates_and_times(self):
        event = parse_json_ld_event(
            {
                "@type": "Event",
                "name": "A",
                "startDate": "2026-11-07T20:00:00Z",
                "endDate": "2026-11-08T01:15:00Z",
            }
        )
        assert event.start_date == "2026-11-07"
        assert event.start_time == "20:00:00"
        assert event.end_date == "2026-11-08"
        assert event.end_time == "01:15:00"

    def test_online_attendance_mode(self):
        event = parse_json_ld_event(
            {"name": "A", "eventAttendanceMode": "https://schema.org/OnlineEventAttendanceMode"}
        )
        assert event.is_online_event is True

    def test_mixed_attendance_mode_is_not_online(self):
        event = parse_json_ld_event(
            {"name": "A", "eventAttendanceMode": "https://schema.org/MixedEventAttendanceMode"}
        )
        assert event.is_online_event is False

    def test_virtual_location(self):
        event = parse_json_ld_event(
            {"name": "A", "location": {"@type": "VirtualLocation"}}
        )
        assert event.location == "Online"

    def test_named_location_preferred(self):
        event = parse_json_ld_event(
            {"name": "A", "location": {"@type": "VirtualLocation", "name": "Zoom Room"}}
        )
        assert event.location == "Zoom Room"

    def test_image_object(self):
        event = parse_json_ld_event({"name": "A", "image": {"url": "https://x/i.png"}})
        assert event.image_url == "https://x/i.png"

    def test_multi_valued_properties_use_first_text(self):
        event = parse_json_ld_event(
            {
                "@type": "Event",
                "name": ["Salsa Night", "Noche de Salsa"],
                "url": ["https://www.eventbrite.com/e/salsa-night-77"],
                "image": [{"url": "https://x/a.png"}, "https://x/b.png"],
                "startDate": ["2026-11-07T20:00:00Z"],
                "location": {"name": ["Rooftop", "Azotea"]},
            }
        )
        assert event.name == "Salsa Night"
        assert event.url == "https://www.eventbrite.com/e/salsa-night-77"
        assert event.image_url == "https://x/a.png"
        assert event.start_date == "2026-11-07"
        assert event.location == "Rooftop"

    def test_non_text_properties_dropped(self):
        event = parse_json_ld_event(
            {"name": {"@value": "A"}, "url": {"@id": "x"}, "description": 42}
        )
        assert event.name is None
        assert event.url is None
        assert event.summary is None


class TestExtractStructuredData:
    """Tests for scanning whole pages."""

    def test_item_list(self, json_ld_item_list):
        events = extract_structured_data(HTMLParser(json_ld_page(json_ld_item_list)))

        assert [e.name for e in events] == ["Rooftop Salsa", "Online Writing Workshop"]
        salsa, workshop = events
        assert salsa.summary == "Dance under the stars"
        assert salsa.location == "Sky Bar"
        assert salsa.is_online_event is False
        assert workshop.is_online_event is True
        assert workshop.location == "Online"
        assert workshop.start_date == "2026-11-08"
        assert workshop.start_time is None

    def test_single_event_block(self):
        page = json_ld_page({"@type": "Event", "name": "Solo", "url": "https://x/e/solo"})
        events = extract_structured_data(HTMLParser(page))
        assert len(events) == 1
        assert events[0].name == "Solo"

    def test_broken_block_is_skipped(self, json_ld_item_list):
        page = json_ld_page("{ this is not json", json_ld_item_list)
        events = extract_structured_data(HTMLParser(page))
        assert len(events) == 2

    def test_events_collected_across_blocks(self, json_ld_item_list):
        page = json_ld_page(
            json_ld_item_list, {"@type": "Event", "name": "Extra", "url": "https://x/e/extra"}
        )
        events = extract_structured_data(HTMLParser(page))
        assert [e.name for e in events][-1] == "Extra"
        assert len(events) == 3

    def test_no_events_returns_none(self):
        page = json_ld_page({"@type": "Organization", "name": "Eventbrite"})
        assert extract_structured_data(HTMLParser(page)) is None

    def test_no_blocks_returns_none(self):
        assert extract_structured_data(HTMLParser("<html></html>")) is None

    def test_top_level_list_ignored(self):
        page = json_ld_page([{"@type": "Event", "name": "In a list"}])
        assert extract_structured_data(HTMLParser(page)) is None
