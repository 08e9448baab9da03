"""Exception hierarchy for calendarseal.

Per-event errors (``EventError`` subclasses) are recovered by skipping the
event. Every other error aborts the run before any artifact is written.
"""

from typing import Optional


class CalendarSealError(Exception):
    """Base exception for all calendarseal errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(CalendarSealError):
    """Required configuration is missing or malformed."""


# Per-event errors


class EventError(CalendarSealError):
    """An individual feed event could not be processed."""


class MissingDateError(EventError):
    """A date property is absent or empty."""


class UnparsableDateError(EventError):
    """A date property has an invalid format, calendar date, or zone."""


class InvalidRuleError(EventError):
    """A recurrence rule expression could not be parsed or expanded."""


# Per-feed errors


class FeedError(CalendarSealError):
    """A calendar feed could not be loaded."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class FeedFetchError(FeedError):
    """The feed could not be downloaded."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, url)
        self.status_code = status_code


class FeedParseError(FeedError):
    """The feed content is not a parsable calendar."""


# Output boundary errors


class EncryptionError(CalendarSealError):
    """Base exception for encryption boundary failures."""


class KeyDecodeError(EncryptionError):
    """The configured key is not valid hexadecimal."""


class CipherInitError(EncryptionError):
    """The cipher could not be initialised with the decoded key."""


class RandomSourceError(EncryptionError):
    """The operating system random source is unavailable."""


class SerializationError(CalendarSealError):
    """The calendar could not be converted to or from bytes."""


class OutputWriteError(CalendarSealError):
    """The encrypted artifact could not be written."""


class ArtifactReadError(CalendarSealError):
    """An encrypted artifact could not be read back."""
