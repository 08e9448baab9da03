"""Data models for calendar ingestion and the simplified output calendar."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

DEFAULT_WINDOW_DAYS = 7


class RawDateField(BaseModel):
    """A DTSTART/DTEND property as it appears in the feed."""

    value: str = Field(default="", description="Raw property value, e.g. 20250101T090000")
    tzid: Optional[str] = Field(default=None, description="TZID parameter, if any")

    model_config = ConfigDict(frozen=True)


class RawEvent(BaseModel):
    """Calendar event as read from a feed. Every field is optional."""

    start: Optional[RawDateField] = None
    end: Optional[RawDateField] = None
    title: Optional[str] = None
    rrule: Optional[str] = Field(default=None, description="RRULE expression, if recurring")
    broken_properties: tuple[str, ...] = Field(
        default=(), description="Property names the feed parser could not decode"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def has_broken_rule(self) -> bool:
        """Check if the feed carried an RRULE that could not be decoded."""
        return "RRULE" in self.broken_properties

    @property
    def is_recurring(self) -> bool:
        """Check if the event declares a recurrence rule, valid or not."""
        return bool(self.rrule) or self.has_broken_rule


@dataclass(frozen=True)
class ResolvedInstant:
    """An absolute point in time.

    ``when`` is expressed in the reference zone; ``zone`` is the zone the raw
    value was resolved in and anchors recurrence expansion.
    """

    when: datetime
    zone: tzinfo

    @property
    def local(self) -> datetime:
        """The instant as wall-clock time in its resolution zone."""
        return self.when.astimezone(self.zone)

    @property
    def utc(self) -> datetime:
        return self.when.astimezone(timezone.utc)

    def shifted(self, duration: timedelta) -> datetime:
        """Return the instant moved by an absolute duration, in the reference zone."""
        return (self.utc + duration).astimezone(self.when.tzinfo)


@dataclass(frozen=True)
class Window:
    """Time window between ``start`` and ``end`` in absolute time.

    Single events are tested with exclusive edges. Recurring occurrences
    count on the start edge, and on the end edge unless ``end_inclusive`` is
    False, which makes the window half-open ``[start, end)``.
    """

    start: datetime
    end: datetime
    end_inclusive: bool = True

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("Window bounds must be timezone-aware")
        if _utc(self.end) < _utc(self.start):
            raise ValueError("Window end must not precede its start")

    @classmethod
    def forward(cls, now: datetime, days: int = DEFAULT_WINDOW_DAYS) -> "Window":
        """Build the half-open window ``[now, now + days)``."""
        end = (_utc(now) + timedelta(days=days)).astimezone(now.tzinfo)
        return cls(start=now, end=end, end_inclusive=False)

    def contains_strictly(self, moment: datetime) -> bool:
        """Check ``start < moment < end``."""
        return _utc(self.start) < _utc(moment) < _utc(self.end)

    def is_past_end(self, moment: datetime) -> bool:
        """Check whether ``moment`` lies beyond the window's end edge."""
        if self.end_inclusive:
            return _utc(moment) > _utc(self.end)
        return _utc(moment) >= _utc(self.end)


def _utc(moment: datetime) -> datetime:
    # Same-tzinfo comparisons use wall-clock time; compare in UTC instead.
    return moment.astimezone(timezone.utc)


class SimplifiedEvent(BaseModel):
    """Public-safe reduction of an event occurrence."""

    title: str = Field(default="", description="Event title")
    start: AwareDatetime = Field(..., description="Occurrence start")
    end: AwareDatetime = Field(..., description="Occurrence end")

    model_config = ConfigDict(frozen=True)


class SimplifiedCalendar(BaseModel):
    """Ordered simplified events plus the run's creation timestamp."""

    events: tuple[SimplifiedEvent, ...] = Field(default=(), description="Events in feed order")
    date_created: AwareDatetime = Field(..., alias="dateCreated", description="Creation time")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


@dataclass(frozen=True)
class IngestResult:
    """Simplified events produced from one feed and the feed's raw event count."""

    events: list[SimplifiedEvent]
    feed_event_count: int
