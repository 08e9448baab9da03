"""Calendar feed loading: fetching and parsing ICS feeds."""

from .fetcher import FeedFetcher
from .parser import FeedCalendar, event_from_component, parse_feed
from .source import FeedSource, HTTPFeedSource, StaticFeedSource

__all__ = [
    "FeedCalendar",
    "FeedFetcher",
    "FeedSource",
    "HTTPFeedSource",
    "StaticFeedSource",
    "event_from_component",
    "parse_feed",
]
