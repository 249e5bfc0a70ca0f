"""Event records: the normalized output schema and the raw source shapes."""

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from ..utils.normalize import (
    first_str,
    format_amount,
    format_price,
    normalize_image_url,
)

SOURCE_NAME = "eventbrite"

# Tag prefix Eventbrite uses for its own category taxonomy
CATEGORY_TAG_PREFIX = "EventbriteCategory"


class ExtractionMethod(str, Enum):
    """Which extraction strategy produced a record."""

    EMBEDDED_STATE = "embedded-state"
    STRUCTURED_DATA = "structured-data"
    MARKUP = "markup"
    UNKNOWN = "unknown"


@dataclass
class NormalizedEvent:
    """
    Stable output record for one event.

    Every instance handed downstream has a name or a url; the raw shapes
    below return None from normalize() instead of building one without.
    """

    id: str | None = None
    name: str | None = None
    summary: str | None = None
    url: str | None = None
    image_url: str | None = None
    start_date: str | None = None
    start_time: str | None = None
    end_date: str | None = None
    end_time: str | None = None
    timezone: str | None = None
    is_online_event: bool = False
    is_free: bool = False
    price: str | None = None
    category: str | None = None
    organizer_id: str | None = None
    organizer_name: str | None = None
    tickets_url: str | None = None
    location: str | None = None
    date_text: str | None = None
    source: str = SOURCE_NAME
    extraction_method: ExtractionMethod = ExtractionMethod.UNKNOWN

    @property
    def identity_key(self) -> str | None:
        """Deduplication key: id, else url, else name."""
        return self.id or self.url or self.name

    def to_dict(self) -> dict[str, Any]:
        """Render the persisted record."""
        data = asdict(self)
        data.pop("source")
        data.pop("extraction_method")
        data["_source"] = self.source
        data["_extraction_method"] = self.extraction_method.value
        return data


def _dig(data: Any, *keys: str) -> Any:
    """Follow nested mapping keys, returning None on any missing level."""
    for key in keys:
        if not isinstance(data, Mapping):
            return None
        data = data.get(key)
    return data


def _as_id(value: Any) -> str | None:
    """Identifiers arrive as strings or integers; anything else is unusable."""
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    if value == "":
        return None
    return str(value)


@dataclass
class EmbeddedStateRawEvent:
    """
    One entry of the server-rendered search results.

    Kept as the source dict; ``profiles`` is the organizer lookup table
    that accompanies the results.
    """

    data: Mapping[str, Any]
    profiles: Mapping[str, Any] = field(default_factory=dict)

    def normalize(self) -> NormalizedEvent | None:
        data = self.data
        name = first_str(data.get("name"))
        url = first_str(data.get("url"))
        if not name and not url:
            return None

        price, is_free = self._resolve_price()

        raw_image = (
            first_str(_dig(data, "image", "url"))
            or first_str(_dig(data, "primary_image", "url"))
            or first_str(data.get("imageUrl"))
        )

        return NormalizedEvent(
            id=_as_id(data.get("id")),
            name=name,
            summary=first_str(data.get("summary")),
            url=url,
            image_url=normalize_image_url(raw_image),
            start_date=self._text("start_date", "startDate"),
            start_time=self._text("start_time", "startTime"),
            end_date=self._text("end_date", "endDate"),
            end_time=self._text("end_time", "endTime"),
            timezone=first_str(data.get("timezone")),
            is_online_event=bool(
                data.get("is_online_event") or data.get("isOnlineEvent")
            ),
            is_free=is_free,
            price=price,
            category=self._resolve_category(),
            organizer_id=_as_id(data.get("primary_organizer_id"))
            or _as_id(_dig(data, "primary_organizer", "id")),
            organizer_name=self._resolve_organizer_name(),
            tickets_url=first_str(data.get("tickets_url")),
            extraction_method=ExtractionMethod.EMBEDDED_STATE,
        )

    def _text(self, *keys: str) -> str | None:
        for key in keys:
            value = first_str(self.data.get(key))
            if value:
                return value
        return None

    def _resolve_organizer_name(self) -> str | None:
        data = self.data
        name = first_str(_dig(data, "primary_organizer", "name")) or first_str(
            data.get("organizerName")
        )
        if name:
            return name

        raw_id = data.get("primary_organizer_id")
        organizer_id = _as_id(raw_id)
        if organizer_id is None:
            return None
        profile = self.profiles.get(organizer_id)
        if profile is None and isinstance(raw_id, int):
            profile = self.profiles.get(raw_id)
        if not isinstance(profile, Mapping):
            return None
        return first_str(profile.get("name")) or first_str(profile.get("display_name"))

    def _resolve_price(self) -> tuple[str | None, bool]:
        """Ticket availability first, generic price resolution as fallback."""
        data = self.data
        is_free = bool(data.get("is_free") or data.get("isFree"))
        price = None

        availability = data.get("ticket_availability")
        if isinstance(availability, Mapping):
            minimum = availability.get("minimum_ticket_price")
            if not isinstance(minimum, Mapping):
                minimum = {}
            if availability.get("is_free"):
                is_free = True
                price = "Free"
            elif first_str(minimum.get("display")):
                price = first_str(minimum.get("display"))
            elif minimum.get("value") is not None:
                # Always minor units in this structure
                price = format_amount(
                    minimum["value"], minimum.get("currency"), minor_units=True
                )

        if not price and not is_free:
            price = format_price(data)

        if is_free and not price:
            price = "Free"

        return price, is_free

    def _resolve_category(self) -> str | None:
        tags = self.data.get("tags")
        if not isinstance(tags, list):
            return None
        for tag in tags:
            if not isinstance(tag, Mapping):
                continue
            if tag.get("prefix") == CATEGORY_TAG_PREFIX or tag.get("display_name"):
                return first_str(tag.get("display_name"))
        return None


@dataclass
class StructuredDataRawEvent:
    """Fields read from one schema.org Event in a JSON-LD block."""

    name: str | None = None
    summary: str | None = None
    url: str | None = None
    image_url: str | None = None
    start_date: str | None = None
    start_time: str | None = None
    end_date: str | None = None
    end_time: str | None = None
    is_online_event: bool = False
    location: str | None = None

    def normalize(self) -> NormalizedEvent | None:
        name = first_str(self.name)
        url = first_str(self.url)
        if not name and not url:
            return None
        return NormalizedEvent(
            name=name,
            summary=first_str(self.summary),
            url=url,
            image_url=normalize_image_url(first_str(self.image_url)),
            start_date=self.start_date,
            start_time=self.start_time,
            end_date=self.end_date,
            end_time=self.end_time,
            is_online_event=self.is_online_event,
            location=first_str(self.location),
            extraction_method=ExtractionMethod.STRUCTURED_DATA,
        )


@dataclass
class MarkupRawEvent:
    """Fields scraped from one event card in the listing HTML."""

    id: str | None = None
    name: str | None = None
    url: str | None = None
    image_url: str | None = None
    date_text: str | None = None
    price: str | None = None
    is_free: bool = False

    def normalize(self) -> NormalizedEvent | None:
        if not self.name and not self.url:
            return None
        return NormalizedEvent(
            id=self.id,
            name=self.name,
            url=self.url,
            image_url=self.image_url,
            date_text=self.date_text,
            price=self.price,
            is_free=self.is_free,
            extraction_method=ExtractionMethod.MARKUP,
        )


RawEvent = EmbeddedStateRawEvent | StructuredDataRawEvent | MarkupRawEvent
