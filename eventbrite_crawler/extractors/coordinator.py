"""Runs the extraction strategies in priority order."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ..logger import get_logger
from ..models.event import ExtractionMethod, NormalizedEvent, RawEvent
from ..utils.parser import HTMLParser
from .embedded_state import extract_embedded_state
from .markup import extract_markup
from .structured_data import extract_structured_data

logger = get_logger(__name__)


@dataclass
class ExtractionResult:
    """Normalized events from one page and the strategy that produced them."""

    events: list[NormalizedEvent] = field(default_factory=list)
    method: ExtractionMethod = ExtractionMethod.UNKNOWN
    declared_total_pages: int | None = None

    @property
    def found(self) -> bool:
        return bool(self.events)


def _normalize_all(
    records: Sequence[RawEvent], method: ExtractionMethod
) -> list[NormalizedEvent]:
    events = []
    for record in records:
        event = record.normalize()
        if event is None:
            continue
        event.extraction_method = method
        events.append(event)
    return events


def _try_embedded_state(parser: HTMLParser) -> ExtractionResult:
    payload = extract_embedded_state(parser)
    if payload is None:
        return ExtractionResult()
    return ExtractionResult(
        events=_normalize_all(payload.records, ExtractionMethod.EMBEDDED_STATE),
        method=ExtractionMethod.EMBEDDED_STATE,
        declared_total_pages=payload.declared_total_pages,
    )


def _try_structured_data(parser: HTMLParser) -> ExtractionResult:
    records = extract_structured_data(parser) or []
    return ExtractionResult(
        events=_normalize_all(records, ExtractionMethod.STRUCTURED_DATA),
        method=ExtractionMethod.STRUCTURED_DATA,
    )


def _try_markup(parser: HTMLParser) -> ExtractionResult:
    records = extract_markup(parser) or []
    return ExtractionResult(
        events=_normalize_all(records, ExtractionMethod.MARKUP),
        method=ExtractionMethod.MARKUP,
    )


Strategy = Callable[[HTMLParser], ExtractionResult]

DEFAULT_STRATEGIES: list[Strategy] = [
    _try_embedded_state,
    _try_structured_data,
    _try_markup,
]


class ExtractionCoordinator:
    """
    Try embedded state, then JSON-LD, then card scraping.

    The first strategy that yields at least one event wins and the rest
    are not run. Every event is stamped with the winning strategy.
    """

    def __init__(self, strategies: Sequence[Strategy] | None = None):
        self.strategies = list(strategies or DEFAULT_STRATEGIES)

    def extract(self, parser: HTMLParser) -> ExtractionResult:
        """
        Extract normalized events from a parsed listing page.

        Returns:
            Result of the first productive strategy, or an empty result
            tagged ``unknown`` when none found anything
        """
        for strategy in self.strategies:
            result = strategy(parser)
            if result.found:
                logger.debug(
                    f"{result.method.value} produced {len(result.events)} events"
                )
                return result
        return ExtractionResult()
