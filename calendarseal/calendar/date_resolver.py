"""Resolution of raw DTSTART/DTEND values into absolute instants.

Values may carry a TZID parameter, e.g. ``TZID=Europe/Berlin:20251031T090000``.
The zone is always combined with the value before parsing so that a value is
never silently read in the wrong zone.
"""

import logging
import re
from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfoNotFoundError

from ..exceptions import MissingDateError, UnparsableDateError
from ..timezone_utils import load_zone
from .models import RawDateField, ResolvedInstant

logger = logging.getLogger(__name__)

TZID_PREFIX = "TZID="

# 20250623, 20250623T083000, 20250623T083000Z
_DATE_VALUE_RE = re.compile(
    r"^(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})"
    r"(?:T(?P<hour>\d{2})(?P<minute>\d{2})(?P<second>\d{2})(?P<utc>Z)?)?$"
)


def combine_tzid(raw_field: RawDateField) -> str:
    """Return the field as ``TZID=<zone>:<value>``, or the bare value without a zone."""
    if raw_field.tzid:
        return f"{TZID_PREFIX}{raw_field.tzid}:{raw_field.value}"
    return raw_field.value


def _split_tzid(text: str, default_zone: tzinfo) -> tuple[str, tzinfo]:
    """Split a possibly TZID-prefixed value into (value, zone)."""
    if not text.startswith(TZID_PREFIX):
        return text, default_zone

    tzid, sep, value = text[len(TZID_PREFIX):].rpartition(":")
    tzid = tzid.strip()
    if not sep or not tzid:
        raise UnparsableDateError(f"Malformed TZID date: {text!r}")

    try:
        zone = load_zone(tzid)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise UnparsableDateError(f"Unknown timezone {tzid!r}") from e
    return value, zone


def parse_date_text(text: str, default_zone: tzinfo) -> tuple[datetime, tzinfo]:
    """Parse a date value into an aware datetime in its resolution zone.

    Args:
        text: Bare value or ``TZID=<zone>:<value>``
        default_zone: Zone used when the value carries neither TZID nor ``Z``

    Returns:
        (aware datetime, zone used for resolution)

    Raises:
        UnparsableDateError: If the text, calendar date, or zone is invalid
    """
    value, zone = _split_tzid(text.strip(), default_zone)

    match = _DATE_VALUE_RE.match(value)
    if match is None:
        raise UnparsableDateError(f"Unable to parse date: {text!r}")

    parts = match.groupdict()
    if parts["utc"]:
        zone = timezone.utc

    try:
        naive = datetime(
            int(parts["year"]),
            int(parts["month"]),
            int(parts["day"]),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
        )
    except ValueError as e:
        raise UnparsableDateError(f"Invalid calendar date: {text!r}") from e

    return naive.replace(tzinfo=zone), zone


def resolve(raw_field: Optional[RawDateField], reference_zone: tzinfo) -> ResolvedInstant:
    """Resolve a raw date field into an instant expressed in ``reference_zone``.

    Args:
        raw_field: The feed's date property, or None when absent
        reference_zone: Zone for values without a TZID, and for the result

    Raises:
        MissingDateError: If the field is absent or empty
        UnparsableDateError: If the value cannot be parsed or is out of range
    """
    if raw_field is None or not raw_field.value.strip():
        raise MissingDateError("Missing date value")

    aware, zone = parse_date_text(combine_tzid(raw_field), reference_zone)
    try:
        when = aware.astimezone(reference_zone)
        # Comparisons go through UTC, so it must be representable as well
        when.astimezone(timezone.utc)
    except OverflowError as e:
        raise UnparsableDateError(f"Date out of range: {raw_field.value!r}") from e
    return ResolvedInstant(when=when, zone=zone)
