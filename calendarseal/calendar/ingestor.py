"""Per-feed accumulation of simplified events."""

import logging
from collections.abc import Iterable
from datetime import tzinfo

from .event_filter import select
from .models import IngestResult, RawEvent, SimplifiedEvent, Window

logger = logging.getLogger(__name__)


def ingest(feed_events: Iterable[RawEvent], window: Window, reference_zone: tzinfo) -> IngestResult:
    """Select the in-window events of one feed.

    Events are kept in feed order, and each recurring event's occurrences in
    chronological order. Unusable events are skipped and only counted.

    Args:
        feed_events: Raw events in feed order
        window: Selection window
        reference_zone: Zone for dates without a TZID and for the output

    Returns:
        IngestResult with the selected events and the number of raw events seen
    """
    events: list[SimplifiedEvent] = []
    feed_event_count = 0

    for raw_event in feed_events:
        feed_event_count += 1
        events.extend(select(raw_event, window, reference_zone))

    logger.debug("Produced %d simplified events from %d feed events", len(events), feed_event_count)
    return IngestResult(events=events, feed_event_count=feed_event_count)
