"""JSON serialization of the simplified calendar."""

import logging

from ..calendar.models import SimplifiedCalendar
from ..exceptions import SerializationError

logger = logging.getLogger(__name__)


def serialize(calendar: SimplifiedCalendar) -> bytes:
    """Serialize a calendar to compact UTF-8 JSON.

    Produces ``{"events": [{"title", "start", "end"}], "dateCreated": ...}``
    with ISO 8601 timestamps carrying their UTC offset and microseconds.

    Raises:
        SerializationError: If the calendar cannot be serialized
    """
    try:
        data = calendar.model_dump_json(by_alias=True).encode("utf-8")
    except ValueError as e:
        raise SerializationError(f"Failed to serialize calendar: {e}") from e

    logger.debug("Serialized %d events into %d bytes", len(calendar.events), len(data))
    return data


def deserialize(data: bytes) -> SimplifiedCalendar:
    """Parse bytes produced by :func:`serialize` back into a calendar.

    Raises:
        SerializationError: If the bytes are not a valid serialized calendar
    """
    try:
        return SimplifiedCalendar.model_validate_json(data)
    except ValueError as e:
        raise SerializationError(f"Failed to deserialize calendar: {e}") from e
