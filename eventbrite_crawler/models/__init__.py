"""Data models for crawled events."""

from .event import (
    SOURCE_NAME,
    EmbeddedStateRawEvent,
    ExtractionMethod,
    MarkupRawEvent,
    NormalizedEvent,
    RawEvent,
    StructuredDataRawEvent,
)

__all__ = [
    "SOURCE_NAME",
    "EmbeddedStateRawEvent",
    "ExtractionMethod",
    "MarkupRawEvent",
    "NormalizedEvent",
    "RawEvent",
    "StructuredDataRawEvent",
]
