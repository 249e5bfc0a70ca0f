"""Extraction from schema.org JSON-LD blocks.

Listing pages carry either an ItemList whose elements are (or wrap under
``item``) Event objects, or a single bare Event. A block that fails to
parse is skipped; the rest of the page is still scanned.
"""

import json
from collections.abc import Mapping
from typing import Any

from ..logger import get_logger
from ..models.event import StructuredDataRawEvent
from ..utils.normalize import first_str, split_iso_datetime
from ..utils.parser import HTMLParser

logger = get_logger(__name__)

JSON_LD_TYPE = "application/ld+json"


def _image_url(image: Any) -> str | None:
    if isinstance(image, list):
        for item in image:
            url = _image_url(item)
            if url:
                return url
        return None
    if isinstance(image, Mapping):
        return first_str(image.get("url"))
    return first_str(image)


def _location_label(location: Any) -> str | None:
    if not isinstance(location, Mapping):
        return None
    name = first_str(location.get("name"))
    if name:
        return name
    if location.get("@type") == "VirtualLocation":
        return "Online"
    return None


def parse_json_ld_event(data: Mapping[str, Any]) -> StructuredDataRawEvent:
    """
    Read the fields of one schema.org Event.

    Start and end timestamps are split into date and time parts at "T";
    a trailing "Z" is dropped from the time.
    """
    start_date, start_time = split_iso_datetime(first_str(data.get("startDate")))
    end_date, end_time = split_iso_datetime(first_str(data.get("endDate")))
    attendance_mode = data.get("eventAttendanceMode")

    return StructuredDataRawEvent(
        name=first_str(data.get("name")),
        summary=first_str(data.get("description")),
        url=first_str(data.get("url")),
        image_url=_image_url(data.get("image")),
        start_date=start_date,
        start_time=start_time,
        end_date=end_date,
        end_time=end_time,
        is_online_event=isinstance(attendance_mode, str)
        and "Online" in attendance_mode,
        location=_location_label(data.get("location")),
    )


def _events_in_block(data: Any) -> list[StructuredDataRawEvent]:
    events = []
    if not isinstance(data, Mapping):
        return events

    elements = data.get("itemListElement")
    if data.get("@type") == "ItemList" and isinstance(elements, list):
        for element in elements:
            if not isinstance(element, Mapping):
                continue
            event = element.get("item") or element
            if isinstance(event, Mapping) and event.get("@type") == "Event":
                events.append(parse_json_ld_event(event))

    if data.get("@type") == "Event":
        events.append(parse_json_ld_event(data))

    return events


def extract_structured_data(parser: HTMLParser) -> list[StructuredDataRawEvent] | None:
    """
    Collect events from every JSON-LD block on the page.

    Args:
        parser: Parsed listing page

    Returns:
        All events found, or None when there are none
    """
    events = []

    for block in parser.script_texts(JSON_LD_TYPE):
        try:
            data = json.loads(block)
        except json.JSONDecodeError as e:
            logger.debug(f"Failed to parse JSON-LD: {e}")
            continue
        events.extend(_events_in_block(data))

    if not events:
        logger.debug("No JSON-LD events found")
        return None
    return events
