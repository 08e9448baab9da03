"""Window selection of feed events into simplified events.

Single events are kept only when they start strictly inside the window;
occurrences of recurring events also count when they start on the window
start (and on its end, for a closed window). Both policies are observable in
the output and are kept as-is.
"""

import logging
from datetime import datetime, timedelta, tzinfo

from ..exceptions import EventError, InvalidRuleError
from .date_resolver import resolve
from .models import RawEvent, ResolvedInstant, SimplifiedEvent, Window
from .rrule_expander import expand

logger = logging.getLogger(__name__)


def select(raw_event: RawEvent, window: Window, reference_zone: tzinfo) -> list[SimplifiedEvent]:
    """Reduce one feed event to the simplified events inside the window.

    Events that cannot be processed (missing or bad start, bad rule) yield an
    empty list; no per-event error escapes.

    Args:
        raw_event: Event read from the feed
        window: Selection window
        reference_zone: Zone for dates without a TZID and for the output

    Returns:
        Simplified events in chronological order
    """
    try:
        return _select(raw_event, window, reference_zone)
    except EventError as e:
        logger.debug("Skipping event %r: %s", raw_event.title, e)
        return []


def _select(raw_event: RawEvent, window: Window, reference_zone: tzinfo) -> list[SimplifiedEvent]:
    start = resolve(raw_event.start, reference_zone)

    duration = timedelta(0)
    if raw_event.end is not None:
        try:
            end = resolve(raw_event.end, reference_zone)
        except EventError as e:
            logger.debug("Ignoring unusable end of %r: %s", raw_event.title, e)
        else:
            # Negative durations are passed through unchanged
            duration = end.utc - start.utc

    title = raw_event.title or ""

    if raw_event.is_recurring:
        if raw_event.has_broken_rule or not raw_event.rrule:
            raise InvalidRuleError("Feed reported an undecodable RRULE")
        occurrences = list(expand(raw_event.rrule, start, window))
        return [
            SimplifiedEvent(title=title, start=occ.when, end=_end_of(occ, duration))
            for occ in occurrences
        ]

    if window.contains_strictly(start.when):
        return [SimplifiedEvent(title=title, start=start.when, end=_end_of(start, duration))]
    return []


def _end_of(start: ResolvedInstant, duration: timedelta) -> datetime:
    try:
        return start.shifted(duration)
    except OverflowError:
        logger.debug("End of occurrence at %s is out of range, using zero duration", start.when)
        return start.when
