"""Run-wide record of which events were saved and how many."""

import threading
from collections.abc import Iterable

from .logger import get_logger
from .models.event import NormalizedEvent

logger = get_logger(__name__)


class CrawlLedger:
    """
    Deduplication and quota bookkeeping for one crawl run.

    Pages may finish on several worker threads at once, so every
    read-modify-write of ``seen`` and ``saved_count`` happens under a lock.
    A batch arriving after the target was reached contributes nothing.
    """

    def __init__(self, target: int):
        """
        Initialize an empty ledger.

        Args:
            target: Number of records the run wants in total (>= 1)
        """
        if target < 1:
            raise ValueError("Ledger target must be at least 1")
        self.target = target
        self._seen: set[str] = set()
        self._saved_count = 0
        self._lock = threading.Lock()

    @property
    def saved_count(self) -> int:
        with self._lock:
            return self._saved_count

    @property
    def is_full(self) -> bool:
        with self._lock:
            return self._saved_count >= self.target

    def accept(
        self, events: Iterable[NormalizedEvent], target: int | None = None
    ) -> list[NormalizedEvent]:
        """
        Accept new events in order until the target is reached.

        Events whose identity key was already accepted are skipped. Events
        without any identity key cannot be deduplicated and are always
        accepted while quota remains.

        Args:
            events: Normalized events from one page
            target: Overrides the ledger's target for this call

        Returns:
            The accepted events, in input order
        """
        limit = self.target if target is None else target
        accepted = []

        with self._lock:
            for event in events:
                if self._saved_count >= limit:
                    break

                key = event.identity_key
                if key is not None:
                    if key in self._seen:
                        continue
                    self._seen.add(key)

                accepted.append(event)
                self._saved_count += 1

        if accepted:
            logger.debug(f"Ledger accepted {len(accepted)} events")
        return accepted
