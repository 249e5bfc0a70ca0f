"""Extraction from the server-rendered ``window.__SERVER_DATA__`` blob.

Eventbrite search pages inline the full search response as a global
assignment in a <script> block. Locating it is a best-effort text scan,
not a JavaScript parse: when the pattern or the expected nested path is
missing the extractor reports nothing and lets the next strategy run.
"""

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..logger import get_logger
from ..models.event import EmbeddedStateRawEvent
from ..utils.parser import HTMLParser

logger = get_logger(__name__)

SERVER_DATA_RE = re.compile(
    r"window\.__SERVER_DATA__\s*=\s*(\{[\s\S]*?\});?\s*(?:window\.|</script|\Z)"
)


@dataclass
class EmbeddedStatePayload:
    """Search results recovered from the state blob."""

    records: list[EmbeddedStateRawEvent] = field(default_factory=list)
    profiles: dict[str, Any] = field(default_factory=dict)
    declared_total_pages: int | None = None


def merge_results(
    promoted: list[Any] | None, regular: list[Any] | None
) -> list[Mapping[str, Any]]:
    """
    Merge promoted and regular result lists, deduplicated by event id.

    Promoted entries come first and win on a shared id: they carry the
    organizer and ticket pricing fields the regular entries lack. Entries
    without an id are dropped.
    """
    merged = []
    seen_ids = set()

    for entries in (promoted or [], regular or []):
        for entry in entries:
            if not isinstance(entry, Mapping):
                continue
            event_id = entry.get("id")
            if not isinstance(event_id, (str, int)) or not event_id:
                continue
            if event_id in seen_ids:
                continue
            seen_ids.add(event_id)
            merged.append(entry)

    return merged


def _declared_page_count(pagination: Any) -> int | None:
    if not isinstance(pagination, Mapping):
        return None
    try:
        page_count = int(pagination.get("page_count"))
    except (TypeError, ValueError):
        return None
    return page_count if page_count > 0 else None


def parse_server_data(script: str) -> EmbeddedStatePayload | None:
    """
    Parse one script body for the state blob.

    Returns:
        Payload, or None when the script holds no usable blob
    """
    match = SERVER_DATA_RE.search(script)
    if not match:
        return None

    json_str = match.group(1).strip().rstrip(";").strip()
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        logger.debug(f"Failed to parse __SERVER_DATA__: {e}")
        return None

    search_data = data.get("search_data") if isinstance(data, Mapping) else None
    events = search_data.get("events") if isinstance(search_data, Mapping) else None
    if not isinstance(events, Mapping):
        logger.debug("__SERVER_DATA__ has no search_data.events")
        return None

    promoted = events.get("promoted_results")
    regular = events.get("results")
    merged = merge_results(
        promoted if isinstance(promoted, list) else None,
        regular if isinstance(regular, list) else None,
    )

    profiles = search_data.get("profiles")
    if not isinstance(profiles, Mapping):
        profiles = {}

    return EmbeddedStatePayload(
        records=[EmbeddedStateRawEvent(entry, profiles) for entry in merged],
        profiles=dict(profiles),
        declared_total_pages=_declared_page_count(events.get("pagination")),
    )


def extract_embedded_state(parser: HTMLParser) -> EmbeddedStatePayload | None:
    """
    Find the first script carrying the state blob with search results.

    Args:
        parser: Parsed listing page

    Returns:
        Payload from the first matching script, or None if not found
    """
    for script in parser.script_texts():
        if "__SERVER_DATA__" not in script:
            continue
        payload = parse_server_data(script)
        if payload is not None:
            return payload

    logger.debug("No __SERVER_DATA__ search results found")
    return None
