"""Recurrence expansion and window selection of calendar feed events."""

from .date_resolver import resolve
from .event_filter import select
from .ingestor import ingest
from .models import (
    IngestResult,
    RawDateField,
    RawEvent,
    ResolvedInstant,
    SimplifiedCalendar,
    SimplifiedEvent,
    Window,
)
from .rrule_expander import OccurrenceSequence, expand

__all__ = [
    "IngestResult",
    "OccurrenceSequence",
    "RawDateField",
    "RawEvent",
    "ResolvedInstant",
    "SimplifiedCalendar",
    "SimplifiedEvent",
    "Window",
    "expand",
    "ingest",
    "resolve",
    "select",
]
