"""Tests for the __SERVER_DATA__ extractor."""

import json

from conftest import server_data_page

from eventbrite_crawler.extractors.embedded_state import (
    extract_embedded_state,
    merge_results,
    parse_server_data,
)
from eventbrite_crawler.utils.parser import HTMLParser


class TestMergeResults:
    """Tests for merging promoted and regular results."""

    def test_promoted_wins_and_order_is_kept(self):
        merged = merge_results(
            [{"id": 1, "name": "A"}],
            [{"id": 1, "name": "B"}, {"id": 2, "name": "C"}],
        )
        assert merged == [{"id": 1, "name": "A"}, {"id": 2, "name": "C"}]

    def test_entries_without_id_are_dropped(self):
        merged = merge_results(None, [{"name": "no id"}, {"id": "5", "name": "E"}])
        assert merged == [{"id": "5", "name": "E"}]

    def test_duplicates_within_one_list(self):
        merged = merge_results([], [{"id": 3}, {"id": 3}])
        assert merged == [{"id": 3}]

    def test_non_mapping_entries_ignored(self):
        assert merge_results(["junk", None], [{"id": 1}]) == [{"id": 1}]


class TestParseServerData:
    """Tests for parsing a single script body."""

    def test_no_assignment(self):
        assert parse_server_data("var x = 1;") is None

    def test_invalid_json(self):
        script = "window.__SERVER_DATA__ = {not json};"
        assert parse_server_data(script) is None

    def test_missing_search_path(self):
        script = 'window.__SERVER_DATA__ = {"user": {"id": 1}};'
        assert parse_server_data(script) is None

    def test_blob_at_end_of_script_without_semicolon(self):
        blob = {"search_data": {"events": {"results": [{"id": "1", "name": "A"}]}}}
        payload = parse_server_data(f"window.__SERVER_DATA__ = {json.dumps(blob)}")
        assert payload is not None
        assert len(payload.records) == 1
        assert payload.declared_total_pages is None

    def test_nested_objects_are_not_cut_short(self):
        blob = {
            "search_data": {
                "events": {"results": [{"id": "1", "name": "A", "meta": {"k": {"v": 1}}}]}
            }
        }
        script = f"window.__SERVER_DATA__ = {json.dumps(blob)};\nwindow.other = 1;"
        payload = parse_server_data(script)
        assert payload.records[0].data["meta"] == {"k": {"v": 1}}


class TestExtractEmbeddedState:
    """Tests for extract_embedded_state on full pages."""

    def test_extracts_merged_records(self, search_data):
        parser = HTMLParser(server_data_page(search_data))
        payload = extract_embedded_state(parser)

        assert payload is not None
        ids = [record.data["id"] for record in payload.records]
        assert ids == ["1001", "1002"]
        # Promoted version of 1001 kept
        assert payload.records[0].data["name"] == "Jazz Night"

    def test_reports_page_count_and_profiles(self, search_data):
        payload = extract_embedded_state(HTMLParser(server_data_page(search_data)))
        assert payload.declared_total_pages == 12
        assert payload.profiles == {"org-2": {"name": "PyLadies NYC"}}
        assert payload.records[1].profiles["org-2"]["name"] == "PyLadies NYC"

    def test_normalized_records(self, search_data):
        payload = extract_embedded_state(HTMLParser(server_data_page(search_data)))
        jazz, meetup = [record.normalize() for record in payload.records]

        assert jazz.organizer_name == "Blue Note"
        assert jazz.price == "$25.00"
        assert jazz.is_free is False

        assert meetup.organizer_name == "PyLadies NYC"
        assert meetup.organizer_id == "org-2"
        assert meetup.price == "Free"
        assert meetup.is_free is True
        assert meetup.category == "Science & Technology"
        assert meetup.timezone == "America/New_York"
        assert meetup.image_url == "https://cdn.evbuc.com/images/1/2/1/original.jpg"

    def test_no_blob(self):
        parser = HTMLParser("<html><script>var a = 1;</script></html>")
        assert extract_embedded_state(parser) is None

    def test_unusable_blob_then_usable_blob(self, search_data):
        good = json.dumps({"search_data": search_data})
        html = f"""
        <html>
        <script>window.__SERVER_DATA__ = {{"broken": ;</script>
        <script>window.__SERVER_DATA__ = {good};</script>
        </html>
        """
        payload = extract_embedded_state(HTMLParser(html))
        assert payload is not None
        assert len(payload.records) == 2

    def test_empty_result_lists(self):
        page = server_data_page({"events": {"results": [], "promoted_results": []}})
        payload = extract_embedded_state(HTMLParser(page))
        assert payload is not None
        assert payload.records == []

    def test_invalid_page_count_ignored(self):
        page = server_data_page(
            {"events": {"results": [{"id": "1", "name": "A"}], "pagination": {"page_count": "many"}}}
        )
        payload = extract_embedded_state(HTMLParser(page))
        assert payload.declared_total_pages is None
