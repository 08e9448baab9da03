"""Feed sources: where parsed calendars come from."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from ..exceptions import FeedFetchError
from .fetcher import DEFAULT_REQUEST_TIMEOUT, FeedFetcher
from .parser import FeedCalendar, parse_feed

logger = logging.getLogger(__name__)


class FeedSource(Protocol):
    """Protocol for anything that can load a calendar feed by URL."""

    def load(self, url: str) -> FeedCalendar:
        """Load and parse one feed.

        Raises:
            FeedFetchError: If the feed cannot be retrieved
            FeedParseError: If the feed cannot be parsed
        """
        ...


class HTTPFeedSource:
    """Feed source that downloads feeds over HTTP(S) or reads local files."""

    def __init__(
        self,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        fetcher: Optional[FeedFetcher] = None,
    ) -> None:
        self.fetcher = fetcher or FeedFetcher(request_timeout=request_timeout)

    def __enter__(self) -> HTTPFeedSource:
        return self

    def __exit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self.fetcher.close()

    def load(self, url: str) -> FeedCalendar:
        logger.debug("Loading feed %s", url)
        return parse_feed(self.fetcher.fetch(url), source_url=url)


class StaticFeedSource:
    """Feed source serving ICS text held in memory, keyed by URL."""

    def __init__(self, feeds: dict[str, str]) -> None:
        self.feeds = dict(feeds)

    def load(self, url: str) -> FeedCalendar:
        if url not in self.feeds:
            raise FeedFetchError(f"No feed registered for {url}", url=url)
        return parse_feed(self.feeds[url], source_url=url)
