"""Event extraction strategies for Eventbrite listing pages."""

from .coordinator import ExtractionCoordinator, ExtractionResult
from .embedded_state import EmbeddedStatePayload, extract_embedded_state, merge_results
from .markup import extract_markup
from .structured_data import extract_structured_data

__all__ = [
    "EmbeddedStatePayload",
    "ExtractionCoordinator",
    "ExtractionResult",
    "extract_embedded_state",
    "extract_markup",
    "extract_structured_data",
    "merge_results",
]
