"""Timezone detection and lookup utilities for calendarseal."""

from __future__ import annotations

import datetime
import logging
import os
import time
from pathlib import Path
from typing import ClassVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

# Used when the local zone cannot be detected by any strategy
DEFAULT_REFERENCE_TIMEZONE = "UTC"


class TimezoneDetector:
    """Detects the process's local timezone using multiple fallback strategies."""

    # Timezone abbreviation to IANA identifier mapping
    TZ_ABBREV_MAP: ClassVar[dict[str, str]] = {
        "PST": "America/Los_Angeles",
        "PDT": "America/Los_Angeles",
        "EST": "America/New_York",
        "EDT": "America/New_York",
        "CST": "America/Chicago",
        "CDT": "America/Chicago",
        "MST": "America/Denver",
        "MDT": "America/Denver",
        "GMT": "Europe/London",
        "BST": "Europe/London",
        "CET": "Europe/Paris",
        "CEST": "Europe/Paris",
        "UTC": "UTC",
    }

    # Windows timezone names emitted by Outlook/Exchange feeds
    WINDOWS_TZ_MAP: ClassVar[dict[str, str]] = {
        "Pacific Standard Time": "America/Los_Angeles",
        "Mountain Standard Time": "America/Denver",
        "Central Standard Time": "America/Chicago",
        "Eastern Standard Time": "America/New_York",
        "Alaskan Standard Time": "America/Anchorage",
        "Hawaiian Standard Time": "Pacific/Honolulu",
        "Arizona Standard Time": "America/Phoenix",
        "GMT Standard Time": "Europe/London",
        "Central European Standard Time": "Europe/Paris",
        "Romance Standard Time": "Europe/Paris",
        "W. Europe Standard Time": "Europe/Berlin",
        "China Standard Time": "Asia/Shanghai",
        "Tokyo Standard Time": "Asia/Tokyo",
        "India Standard Time": "Asia/Kolkata",
        "AUS Eastern Standard Time": "Australia/Sydney",
        "UTC": "UTC",
    }

    def get_local_timezone(self) -> str:
        """Get the process's local timezone as an IANA identifier.

        Strategies, in order: the ``TZ`` environment variable, the
        ``/etc/localtime`` symlink target, the abbreviation reported by
        :mod:`time`. Falls back to UTC.
        """
        tz_env = os.environ.get("TZ", "").lstrip(":").strip()
        if tz_env and self._is_valid(tz_env):
            return tz_env

        localtime = Path("/etc/localtime")
        try:
            if localtime.is_symlink():
                target = str(localtime.resolve())
                marker = "zoneinfo/"
                if marker in target:
                    candidate = target.split(marker, 1)[1]
                    if self._is_valid(candidate):
                        return candidate
        except OSError as e:
            logger.debug("Could not inspect %s: %s", localtime, e)

        for abbreviation in time.tzname:
            iana_tz = self.TZ_ABBREV_MAP.get(abbreviation)
            if iana_tz and self._is_valid(iana_tz):
                return iana_tz

        logger.warning(
            "Could not detect local timezone (tzname=%s), falling back to %s",
            "/".join(time.tzname),
            DEFAULT_REFERENCE_TIMEZONE,
        )
        return DEFAULT_REFERENCE_TIMEZONE

    @staticmethod
    def _is_valid(name: str) -> bool:
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            return False
        return True


class TimeProvider:
    """Provides current time with test time override support."""

    def now_utc(self) -> datetime.datetime:
        """Return current UTC time with tzinfo.

        Can be overridden via the CALENDARSEAL_TEST_TIME environment variable
        (ISO 8601, e.g. "2025-10-27T08:20:00-07:00"). Naive values are UTC.
        """
        test_time = os.environ.get("CALENDARSEAL_TEST_TIME")
        if test_time:
            try:
                from dateutil import parser as date_parser

                dt = date_parser.isoparse(test_time)
                if dt.tzinfo is not None:
                    return dt.astimezone(datetime.timezone.utc)
                return dt.replace(tzinfo=datetime.timezone.utc)
            except ValueError as e:
                logger.warning("Failed to parse CALENDARSEAL_TEST_TIME=%r: %s", test_time, e)

        return datetime.datetime.now(datetime.timezone.utc)


_detector = TimezoneDetector()
_time_provider = TimeProvider()


def get_local_timezone() -> str:
    """Get the local timezone (convenience function)."""
    return _detector.get_local_timezone()


def now_utc() -> datetime.datetime:
    """Get current UTC time (convenience function)."""
    return _time_provider.now_utc()


def windows_tz_to_iana(windows_tz: str) -> str | None:
    """Convert a Windows timezone name to an IANA identifier, or None if unknown."""
    return _detector.WINDOWS_TZ_MAP.get(windows_tz)


def load_zone(name: str) -> ZoneInfo:
    """Return the ZoneInfo for an IANA or Windows timezone name.

    Raises:
        ZoneInfoNotFoundError: if the name is unknown
        ValueError: if the name is malformed
        OSError: if the name points at something other than a zone file
    """
    iana = windows_tz_to_iana(name) or name
    return ZoneInfo(iana)
