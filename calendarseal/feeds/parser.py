"""ICS feed parsing into raw events."""

import logging
from typing import Any, Optional

from icalendar import Calendar
from pydantic import BaseModel, Field

from ..calendar.models import RawDateField, RawEvent
from ..exceptions import FeedParseError

logger = logging.getLogger(__name__)


class FeedCalendar(BaseModel):
    """A parsed calendar feed."""

    source_url: Optional[str] = Field(default=None, description="Source URL for tracking")
    events: list[RawEvent] = Field(default_factory=list, description="Raw events in feed order")

    @property
    def event_count(self) -> int:
        return len(self.events)


def _first(prop: Any) -> Any:
    # Repeated properties come back as a list; only the first one counts.
    if isinstance(prop, list):
        return prop[0] if prop else None
    return prop


def _ical_text(prop: Any) -> str:
    if hasattr(prop, "to_ical"):
        raw = prop.to_ical()
        return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)
    return str(prop)


def _raw_date(prop: Any) -> Optional[RawDateField]:
    prop = _first(prop)
    if prop is None:
        return None

    params = getattr(prop, "params", None) or {}
    tzid = params.get("TZID")
    return RawDateField(value=_ical_text(prop).strip(), tzid=str(tzid) if tzid else None)


def event_from_component(component: Any) -> RawEvent:
    """Build a RawEvent from an icalendar VEVENT component.

    Date values keep their feed text and TZID so zone resolution happens in
    one place. Properties icalendar failed to decode are listed in
    ``broken_properties``.
    """
    broken = []
    for name, _error in getattr(component, "errors", None) or []:
        upper = str(name).upper()
        if upper not in broken:
            broken.append(upper)

    summary = _first(component.get("SUMMARY"))
    rrule_prop = _first(component.get("RRULE"))

    return RawEvent(
        start=_raw_date(component.get("DTSTART")),
        end=_raw_date(component.get("DTEND")),
        title=str(summary) if summary is not None else None,
        rrule=_ical_text(rrule_prop) if rrule_prop is not None else None,
        broken_properties=tuple(broken),
    )


def parse_feed(ics_content: str, source_url: Optional[str] = None) -> FeedCalendar:
    """Parse ICS text into a FeedCalendar.

    Args:
        ics_content: Raw ICS text
        source_url: Where the content came from, for reporting

    Raises:
        FeedParseError: If the content is not a parsable VCALENDAR
    """
    if not ics_content or not ics_content.strip():
        raise FeedParseError("Empty ICS content", url=source_url)

    try:
        calendar = Calendar.from_ical(ics_content)
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise FeedParseError(f"Invalid ICS content: {e}", url=source_url) from e

    if getattr(calendar, "name", None) != "VCALENDAR":
        raise FeedParseError(
            f"Expected VCALENDAR, got {getattr(calendar, 'name', None)!r}", url=source_url
        )

    events = [event_from_component(component) for component in calendar.walk("VEVENT")]
    logger.debug("Parsed %d events from %s", len(events), source_url or "<inline>")

    return FeedCalendar(
        source_url=source_url,
        events=events,
    )
