"""End-to-end run: load feeds, select events, serialize, encrypt, write."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Optional

from .calendar.ingestor import ingest
from .calendar.models import SimplifiedCalendar, SimplifiedEvent, Window
from .config_loader import Config
from .feeds.source import FeedSource, HTTPFeedSource
from .output.encryptor import Encryptor
from .output.serializer import deserialize, serialize
from .output.sink import read_artifact, write_artifact
from .timezone_utils import now_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    """Outcome of a successful run."""

    output_path: Path
    calendar: SimplifiedCalendar
    feed_event_counts: list[int]

    @property
    def event_count(self) -> int:
        return len(self.calendar.events)


def collect_events(
    feed_urls: Sequence[str],
    feed_source: FeedSource,
    window: Window,
    reference_zone: tzinfo,
) -> tuple[list[SimplifiedEvent], list[int]]:
    """Load each feed in order and gather its in-window events.

    Any feed failure propagates and aborts the run.

    Returns:
        (all simplified events in feed order, raw event count per feed)
    """
    events: list[SimplifiedEvent] = []
    feed_event_counts: list[int] = []

    for index, url in enumerate(feed_urls):
        feed = feed_source.load(url)
        result = ingest(feed.events, window, reference_zone)
        logger.info("Calendar %d has %d events", index, result.feed_event_count)
        events.extend(result.events)
        feed_event_counts.append(result.feed_event_count)

    return events, feed_event_counts


def run(
    config: Config,
    feed_source: Optional[FeedSource] = None,
    now: Optional[datetime] = None,
) -> RunResult:
    """Build and write the encrypted calendar artifact.

    The key is validated before any feed is loaded. Nothing is written unless
    every feed loads and the calendar serializes and encrypts.

    Args:
        config: Run configuration
        feed_source: Source of parsed feeds; defaults to HTTP(S)/file loading
        now: Start of the window; defaults to the current time

    Raises:
        CalendarSealError: Any feed, configuration, encryption or output failure
    """
    encryptor = Encryptor(config.key_hex)
    reference_zone = config.reference_zone()

    moment = (now or now_utc()).astimezone(reference_zone)
    window = Window.forward(moment, config.window_days)
    logger.debug("Window %s .. %s (%s)", window.start, window.end, reference_zone)

    owned_source: Optional[HTTPFeedSource] = None
    if feed_source is None:
        owned_source = HTTPFeedSource(request_timeout=config.request_timeout)
        feed_source = owned_source
    try:
        events, feed_event_counts = collect_events(
            config.feeds, feed_source, window, reference_zone
        )
    finally:
        if owned_source is not None:
            owned_source.close()

    calendar = SimplifiedCalendar(events=tuple(events), date_created=moment)
    payload = encryptor.encrypt(serialize(calendar))
    output_path = write_artifact(config.output_path, payload)

    logger.info("Successfully encrypted and saved %d events to %s", len(events), output_path)
    return RunResult(
        output_path=output_path, calendar=calendar, feed_event_counts=feed_event_counts
    )


def decrypt_artifact(path: str | Path, key_hex: str) -> SimplifiedCalendar:
    """Read, decrypt and parse an artifact written by :func:`run`."""
    encryptor = Encryptor(key_hex)
    return deserialize(encryptor.decrypt(read_artifact(path)))
