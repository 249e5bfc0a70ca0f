"""Writes accepted events to a JSON or JSON Lines dataset file."""

import json
import threading
from collections.abc import Iterable
from pathlib import Path

from ..logger import get_logger
from ..models.event import NormalizedEvent

logger = get_logger(__name__)

FORMATS = ("json", "jsonl")


class DatasetWriter:
    """
    Append-only event dataset.

    ``jsonl`` writes one record per line as events arrive; ``json`` buffers
    records and writes a single array on close. In dry-run mode nothing
    is written and only the count is kept.
    """

    def __init__(self, path: Path, format: str = "jsonl", dry_run: bool = False):
        if format not in FORMATS:
            raise ValueError(f"Unknown dataset format: {format}")
        self.path = Path(path)
        self.format = format
        self.dry_run = dry_run
        self.count = 0
        self._buffer: list[dict] = []
        self._handle = None
        self._lock = threading.Lock()

    def write(self, events: Iterable[NormalizedEvent]) -> int:
        """
        Write a batch of events.

        Returns:
            Number of events in the batch
        """
        records = [event.to_dict() for event in events]
        if not records:
            return 0

        with self._lock:
            self.count += len(records)
            if self.dry_run:
                logger.info(f"[DRY RUN] Would write {len(records)} events")
                return len(records)

            if self.format == "json":
                self._buffer.extend(records)
            else:
                handle = self._open()
                for record in records:
                    handle.write(json.dumps(record, ensure_ascii=False) + "\n")
                handle.flush()

        return len(records)

    def _open(self):
        if self._handle is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = open(self.path, "a", encoding="utf-8")
        return self._handle

    def close(self):
        """Flush buffered output and close the file."""
        with self._lock:
            if self.dry_run:
                return
            if self.format == "json":
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "w", encoding="utf-8") as f:
                    json.dump(self._buffer, f, ensure_ascii=False, indent=2)
            elif self._handle is not None:
                self._handle.close()
                self._handle = None

        logger.info(f"Wrote {self.count} events to {self.path}")

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
