"""Tests for the dataset writer."""

import json

import pytest

from eventbrite_crawler.generators.dataset import DatasetWriter
from eventbrite_crawler.models.event import ExtractionMethod, NormalizedEvent


def _events(*ids):
    return [
        NormalizedEvent(
            id=event_id,
            name=f"Event {event_id}",
            extraction_method=ExtractionMethod.MARKUP,
        )
        for event_id in ids
    ]


class TestDatasetWriter:
    """Tests for DatasetWriter."""

    def test_unknown_format(self, tmp_path):
        with pytest.raises(ValueError):
            DatasetWriter(tmp_path / "out.csv", format="csv")

    def test_jsonl_appends_per_batch(self, tmp_path):
        path = tmp_path / "nested" / "events.jsonl"
        with DatasetWriter(path) as writer:
            assert writer.write(_events("1", "2")) == 2
            assert writer.write(_events("3")) == 1
            assert writer.count == 3

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 3
        first = json.loads(lines[0])
        assert first["id"] == "1"
        assert first["_source"] == "eventbrite"
        assert first["_extraction_method"] == "markup"

    def test_json_writes_array_on_close(self, tmp_path):
        path = tmp_path / "events.json"
        writer = DatasetWriter(path, format="json")
        writer.write(_events("1"))
        writer.write(_events("2"))
        assert not path.exists()
        writer.close()

        data = json.loads(path.read_text(encoding="utf-8"))
        assert [record["id"] for record in data] == ["1", "2"]

    def test_empty_batch(self, tmp_path):
        writer = DatasetWriter(tmp_path / "events.jsonl")
        assert writer.write([]) == 0
        writer.close()
        assert not (tmp_path / "events.jsonl").exists()

    def test_dry_run_writes_nothing(self, tmp_path):
        path = tmp_path / "events.jsonl"
        with DatasetWriter(path, dry_run=True) as writer:
            writer.write(_events("1", "2"))
        assert writer.count == 2
        assert not path.exists()
