"""Unit tests for calendarseal.feeds.parser."""

from typing import Callable

import pytest

from calendarseal.calendar.models import RawDateField
from calendarseal.exceptions import FeedParseError
from calendarseal.feeds.parser import parse_feed

pytestmark = pytest.mark.unit


def test_parse_feed_when_tzid_then_keeps_value_and_zone(make_ics: Callable[..., str]) -> None:
    ics = make_ics(
        """
        UID:1
        SUMMARY:Planning
        DTSTART;TZID=Europe/Berlin:20250624T090000
        DTEND;TZID=Europe/Berlin:20250624T100000
        """
    )

    feed = parse_feed(ics, source_url="https://example.com/a.ics")

    assert feed.event_count == 1
    event = feed.events[0]
    assert event.title == "Planning"
    assert event.start == RawDateField(value="20250624T090000", tzid="Europe/Berlin")
    assert event.end == RawDateField(value="20250624T100000", tzid="Europe/Berlin")
    assert event.rrule is None
    assert feed.source_url == "https://example.com/a.ics"


def test_parse_feed_when_utc_and_date_values_then_raw_text_preserved(
    make_ics: Callable[..., str],
) -> None:
    ics = make_ics(
        """
        UID:1
        DTSTART:20250624T160000Z
        """,
        """
        UID:2
        SUMMARY:Holiday
        DTSTART;VALUE=DATE:20250704
        DTEND;VALUE=DATE:20250705
        """,
    )

    first, second = parse_feed(ics).events

    assert first.start == RawDateField(value="20250624T160000Z")
    assert first.title is None
    assert first.end is None
    assert second.start == RawDateField(value="20250704")
    assert second.end == RawDateField(value="20250705")


def test_parse_feed_when_rrule_then_expression_text(make_ics: Callable[..., str]) -> None:
    ics = make_ics(
        """
        UID:1
        SUMMARY:Weekly Sync
        DTSTART:20250602T170000Z
        RRULE:FREQ=WEEKLY;BYDAY=MO
        """
    )

    event = parse_feed(ics).events[0]

    assert event.is_recurring is True
    assert event.has_broken_rule is False
    assert event.rrule == "FREQ=WEEKLY;BYDAY=MO"


def test_parse_feed_when_rrule_undecodable_then_marked_broken(
    make_ics: Callable[..., str],
) -> None:
    ics = make_ics(
        """
        UID:1
        SUMMARY:Broken
        DTSTART:20250602T170000Z
        RRULE:FREQ=WEEKLY;BYDAY=XX
        """
    )

    event = parse_feed(ics).events[0]

    assert event.has_broken_rule is True
    assert event.is_recurring is True


def test_parse_feed_when_calendar_default_zone_then_floating_dates_stay_floating(
    make_ics: Callable[..., str],
) -> None:
    ics = make_ics("UID:1\nDTSTART:20250602T170000").replace(
        "VERSION:2.0", "VERSION:2.0\r\nX-WR-CALNAME:Team\r\nX-WR-TIMEZONE:Europe/Berlin"
    )

    event = parse_feed(ics).events[0]

    assert event.start == RawDateField(value="20250602T170000")


def test_parse_feed_when_no_events_then_empty(make_ics: Callable[..., str]) -> None:
    assert parse_feed(make_ics()).events == []


@pytest.mark.parametrize(
    "content",
    [
        "",
        "   \n",
        "this is not a calendar",
        "BEGIN:VEVENT\r\nUID:1\r\nEND:VEVENT\r\n",
    ],
)
def test_parse_feed_when_not_a_calendar_then_raises(content: str) -> None:
    with pytest.raises(FeedParseError) as exc_info:
        parse_feed(content, source_url="https://example.com/bad.ics")
    assert exc_info.value.url == "https://example.com/bad.ics"
