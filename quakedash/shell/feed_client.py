"""USGS Feed Client - Imperative Shell.

This module handles HTTP communication with the USGS summary feeds.
All I/O is contained here; normalization is in the core module.
"""

import logging
from typing import Any

import requests

from quakedash.core.earthquake import FeedParseError
from quakedash.core.feeds import USGS_FEED_BASE, FeedEndpoint


logger = logging.getLogger(__name__)


# Default timeout for feed requests (seconds)
DEFAULT_TIMEOUT = 30


class FeedFetchError(Exception):
    """Raised when a feed cannot be retrieved (network error or non-2xx)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FeedClient:
    """Client for fetching the USGS GeoJSON summary feeds.

    This is part of the imperative shell - it handles HTTP I/O.
    There is no retry; callers decide whether to fetch again.
    """

    def __init__(
        self,
        base_url: str = USGS_FEED_BASE,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize feed client.

        Args:
            base_url: Base URL of the summary feeds
            timeout: Request timeout in seconds
        """
        self.base_url = base_url
        self.timeout = timeout

    def fetch_feed(self, endpoint: FeedEndpoint) -> dict[str, Any]:
        """Fetch and decode one summary feed.

        This method performs HTTP I/O.

        Args:
            endpoint: Feed to fetch

        Returns:
            Decoded GeoJSON FeatureCollection

        Raises:
            FeedFetchError: If the request fails or returns a non-2xx status
            FeedParseError: If the body is not a JSON FeatureCollection
        """
        url = endpoint.url(self.base_url)

        logger.info("Fetching %s feed from %s", endpoint.time_range.value, url)

        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FeedFetchError(f"Feed request failed with HTTP {status}: {url}", status) from e
        except requests.RequestException as e:
            raise FeedFetchError(f"Feed request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise FeedParseError(f"Feed body is not valid JSON: {url}") from e

        if not isinstance(data, dict) or not isinstance(data.get("features"), list):
            raise FeedParseError(f"Feed body has no 'features' list: {url}")

        logger.info(
            "Fetched %d features from %s feed",
            len(data["features"]),
            endpoint.time_range.value,
        )

        return data
