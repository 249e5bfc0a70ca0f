"""Tests for the run-wide dedup and quota ledger."""

import threading

import pytest

from eventbrite_crawler.ledger import CrawlLedger
from eventbrite_crawler.models.event import NormalizedEvent


def _events(*keys):
    return [NormalizedEvent(id=key, name=f"Event {key}") for key in keys]


class TestCrawlLedger:
    """Tests for CrawlLedger.accept."""

    def test_rejects_invalid_target(self):
        with pytest.raises(ValueError):
            CrawlLedger(0)

    def test_accepts_distinct_events(self):
        ledger = CrawlLedger(10)
        accepted = ledger.accept(_events("1", "2", "3"))
        assert [e.id for e in accepted] == ["1", "2", "3"]
        assert ledger.saved_count == 3
        assert not ledger.is_full

    def test_skips_repeated_keys_within_and_across_batches(self):
        ledger = CrawlLedger(10)
        first = ledger.accept(_events("1", "2", "1"))
        second = ledger.accept(_events("2", "3"))
        assert [e.id for e in first] == ["1", "2"]
        assert [e.id for e in second] == ["3"]
        assert ledger.saved_count == 3
        assert ledger.accept(_events("2")) == []

    def test_identity_falls_back_to_url_then_name(self):
        ledger = CrawlLedger(10)
        events = [
            NormalizedEvent(url="https://x/e/a", name="A"),
            NormalizedEvent(url="https://x/e/a", name="A again"),
            NormalizedEvent(name="B"),
            NormalizedEvent(name="B"),
        ]
        accepted = ledger.accept(events)
        assert [e.name for e in accepted] == ["A", "B"]

    def test_unkeyed_events_always_accepted(self):
        ledger = CrawlLedger(10)
        accepted = ledger.accept([NormalizedEvent(), NormalizedEvent()])
        assert len(accepted) == 2
        assert ledger.saved_count == 2

    def test_stops_at_target(self):
        ledger = CrawlLedger(3)
        accepted = ledger.accept(_events("1", "2", "3", "4", "5"))
        assert len(accepted) == 3
        assert ledger.is_full
        assert ledger.accept(_events("6")) == []
        assert ledger.saved_count == 3
        # Discarded records were never marked as seen
        assert [e.id for e in ledger.accept(_events("4"), target=4)] == ["4"]

    def test_target_override(self):
        ledger = CrawlLedger(10)
        accepted = ledger.accept(_events("1", "2", "3"), target=2)
        assert len(accepted) == 2

    def test_concurrent_batches_never_overshoot(self):
        ledger = CrawlLedger(50)
        batches = [_events(*[str(i * 20 + j) for j in range(20)]) for i in range(10)]
        # Every batch also repeats keys from the first batch
        for batch in batches:
            batch.extend(_events("0", "1", "2"))

        results = []
        lock = threading.Lock()

        def worker(batch):
            accepted = ledger.accept(batch)
            with lock:
                results.extend(accepted)

        threads = [threading.Thread(target=worker, args=(b,)) for b in batches]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        keys = [e.identity_key for e in results]
        assert len(keys) == 50
        assert len(set(keys)) == 50
        assert ledger.saved_count == 50
