"""HTTP client for downloading ICS calendar feeds."""

import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

import httpx

from ..exceptions import FeedFetchError

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0

DEFAULT_HEADERS = {
    "User-Agent": "calendarseal/1.0 ICS-Client",
    "Accept": "text/calendar, text/plain, */*",
    "Accept-Charset": "utf-8",
    "Cache-Control": "no-cache",
}


class FeedFetcher:
    """Synchronous downloader for ICS feeds.

    ``http``/``https`` URLs are fetched with httpx; ``file://`` URLs and plain
    paths are read from disk. No retries: every failure is a FeedFetchError.
    """

    def __init__(
        self,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            request_timeout: Read timeout in seconds
            client: Optional preconfigured client, owned by the caller
        """
        self.request_timeout = request_timeout
        self.client = client
        self._owns_client = client is None

        logger.debug("Feed fetcher initialized (shared_client: %s)", not self._owns_client)

    def __enter__(self) -> "FeedFetcher":
        self._ensure_client()
        return self

    def __exit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        self.close()

    def _ensure_client(self) -> httpx.Client:
        if self.client is None or self.client.is_closed:
            timeout = httpx.Timeout(connect=10.0, read=self.request_timeout, write=10.0, pool=30.0)
            self.client = httpx.Client(
                timeout=timeout,
                follow_redirects=True,
                verify=True,
                headers=DEFAULT_HEADERS,
            )
            self._owns_client = True
        return self.client

    def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self.client is not None and self._owns_client and not self.client.is_closed:
            self.client.close()
            logger.debug("Closed HTTP client")
        if self._owns_client:
            self.client = None

    def fetch(self, url: str) -> str:
        """Download the ICS text of a feed.

        Args:
            url: ``http(s)://`` or ``file://`` URL, or a filesystem path

        Returns:
            Feed content as text

        Raises:
            FeedFetchError: On invalid URLs, HTTP errors, timeouts or network failures
        """
        if not url or not url.strip():
            raise FeedFetchError("Empty feed URL", url=url)

        parsed = urlparse(url)
        if parsed.scheme in ("", "file") or (len(parsed.scheme) == 1 and url[1:2] == ":"):
            return self._read_local(url, parsed.scheme)

        if parsed.scheme not in ("http", "https"):
            raise FeedFetchError(f"Unsupported URL scheme: {parsed.scheme}", url=url)
        if not parsed.hostname:
            raise FeedFetchError("Feed URL is missing a hostname", url=url)

        client = self._ensure_client()
        logger.debug("Fetching ICS from %s", url)
        try:
            response = client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise FeedFetchError(f"Request timeout after {self.request_timeout}s", url=url) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise FeedFetchError(
                f"HTTP {status}: {e.response.reason_phrase}", url=url, status_code=status
            ) from e
        except httpx.HTTPError as e:
            raise FeedFetchError(f"Network error: {e}", url=url) from e

        logger.debug("Fetched %d bytes from %s", len(response.content), url)
        return response.text

    def _read_local(self, url: str, scheme: str) -> str:
        if scheme == "file":
            path = Path(url2pathname(unquote(urlparse(url).path)))
        else:
            path = Path(url)

        logger.debug("Reading ICS from %s", path)
        try:
            # read_text() would translate CRLF line endings
            return path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FeedFetchError(f"Cannot read feed file {path}: {e}", url=url) from e
