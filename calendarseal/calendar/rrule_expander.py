"""RRULE expansion for calendarseal.

Rules are parsed with python-dateutil and anchored at the event's resolved
start, in the zone the start was resolved in, so wall-clock times stay stable
across DST transitions. Occurrences are produced lazily.
"""

import logging
import re
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone

from dateutil.rrule import rrule, rrulestr

from ..exceptions import InvalidRuleError
from .models import ResolvedInstant, Window

logger = logging.getLogger(__name__)

_UNTIL_RE = re.compile(r"^(?P<date>\d{8})(?:T(?P<time>\d{6})(?P<utc>Z)?)?$")


def _rule_body(expression: str) -> str:
    """Extract the RRULE value from an expression.

    Accepts ``FREQ=...`` or ``RRULE:FREQ=...``. DTSTART lines are dropped:
    the anchor always comes from the event.
    """
    body = None
    for raw_line in expression.strip().splitlines():
        line = raw_line.strip()
        if not line:
            continue
        name, sep, value = line.partition(":")
        if sep and name.upper().startswith("DTSTART"):
            logger.debug("Ignoring DTSTART inside rule expression: %s", line)
            continue
        if sep and name.upper() == "RRULE":
            line = value.strip()
        if body is not None:
            raise InvalidRuleError(f"Expected a single RRULE, got: {expression!r}")
        body = line

    if not body:
        raise InvalidRuleError("Empty RRULE expression")
    return body


def _normalize_until(body: str, anchor: datetime) -> str:
    """Rewrite a floating UNTIL as UTC.

    dateutil requires a UTC UNTIL when DTSTART is timezone-aware. A floating
    UNTIL is read in the anchor's zone; a date-only UNTIL covers that whole day.
    """
    parts = []
    for part in body.split(";"):
        key, sep, value = part.partition("=")
        if sep and key.strip().upper() == "UNTIL":
            value = value.strip()
            match = _UNTIL_RE.match(value)
            if match is None:
                raise InvalidRuleError(f"Invalid UNTIL value: {value!r}")
            if not match.group("utc"):
                try:
                    if match.group("time"):
                        naive = datetime.strptime(value, "%Y%m%dT%H%M%S")
                    else:
                        naive = datetime.strptime(value, "%Y%m%d") + timedelta(
                            days=1, seconds=-1
                        )
                except ValueError as e:
                    raise InvalidRuleError(f"Invalid UNTIL value: {value!r}") from e
                try:
                    until_utc = naive.replace(tzinfo=anchor.tzinfo).astimezone(timezone.utc)
                except OverflowError as e:
                    raise InvalidRuleError(f"UNTIL out of range: {value!r}") from e
                value = until_utc.strftime("%Y%m%dT%H%M%SZ")
            part = f"UNTIL={value}"
        parts.append(part)
    return ";".join(parts)


def parse_rule(expression: str, anchor: datetime) -> rrule:
    """Parse an RRULE expression anchored at ``anchor``.

    Raises:
        InvalidRuleError: If the expression is malformed
    """
    body = _normalize_until(_rule_body(expression), anchor)
    try:
        parsed = rrulestr(body, dtstart=anchor)
    except (ValueError, TypeError, KeyError, IndexError, AttributeError) as e:
        raise InvalidRuleError(f"Invalid RRULE {expression!r}: {e}") from e

    if not isinstance(parsed, rrule):
        raise InvalidRuleError(f"Expected a single RRULE, got: {expression!r}")
    return parsed


class OccurrenceSequence:
    """Occurrences of a rule whose start lies inside a window.

    The start edge is inclusive; the end edge is inclusive unless the window
    is half-open. Iteration is lazy and can be repeated; each pass replays
    the rule from the window start.
    """

    def __init__(self, rule: rrule, start: ResolvedInstant, window: Window):
        self._rule = rule
        self._start = start
        self._window = window

    def __iter__(self) -> Iterator[ResolvedInstant]:
        reference_zone = self._start.when.tzinfo
        window_start = self._window.start.astimezone(timezone.utc)
        occurrences = self._rule.xafter(window_start, inc=True)
        while True:
            try:
                occurrence = next(occurrences)
            except StopIteration:
                return
            except (ValueError, OverflowError) as e:
                raise InvalidRuleError(f"RRULE expansion failed: {e}") from e
            try:
                if self._window.is_past_end(occurrence):
                    return
                when = occurrence.astimezone(reference_zone)
            except OverflowError as e:
                raise InvalidRuleError(f"RRULE occurrence out of range: {e}") from e
            yield ResolvedInstant(when=when, zone=self._start.zone)


def expand(rule_expression: str, start: ResolvedInstant, window: Window) -> OccurrenceSequence:
    """Build the occurrence sequence of a recurring event inside a window.

    Args:
        rule_expression: RRULE expression, e.g. ``FREQ=WEEKLY;BYDAY=MO``
        start: Resolved event start; overrides any anchor in the rule
        window: Window; occurrences on its start edge are included

    Raises:
        InvalidRuleError: If the rule cannot be parsed
    """
    rule = parse_rule(rule_expression, start.local)
    return OccurrenceSequence(rule, start, window)
