"""Feed endpoint selection - Pure data and functions.

The USGS summary feeds are fixed GeoJSON files, one per time window.
Every TimeRange maps to exactly one FeedEndpoint.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum


# USGS real-time summary feed base URL
USGS_FEED_BASE = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary"


class TimeRange(str, Enum):
    """Time windows offered by the summary feeds."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class FeedEndpoint:
    """A remote summary feed.

    Attributes:
        time_range: Time window this feed covers
        filename: Feed file name under the base URL
        window: Length of the window the feed covers
        label: Human-readable name
    """
    time_range: TimeRange
    filename: str
    window: timedelta
    label: str

    def url(self, base_url: str = USGS_FEED_BASE) -> str:
        """Build the absolute feed URL."""
        return f"{base_url.rstrip('/')}/{self.filename}"


FEED_ENDPOINTS: dict[TimeRange, FeedEndpoint] = {
    TimeRange.DAY: FeedEndpoint(
        time_range=TimeRange.DAY,
        filename="all_day.geojson",
        window=timedelta(days=1),
        label="Past 24 Hours",
    ),
    TimeRange.WEEK: FeedEndpoint(
        time_range=TimeRange.WEEK,
        filename="all_week.geojson",
        window=timedelta(days=7),
        label="Past Week",
    ),
    TimeRange.MONTH: FeedEndpoint(
        time_range=TimeRange.MONTH,
        filename="all_month.geojson",
        window=timedelta(days=30),
        label="Past Month",
    ),
}

_unmapped = set(TimeRange) - set(FEED_ENDPOINTS)
if _unmapped:
    raise RuntimeError(f"No feed endpoint for time ranges: {sorted(r.value for r in _unmapped)}")

# Custom date windows are cut from the widest feed available
WIDEST_ENDPOINT = max(FEED_ENDPOINTS.values(), key=lambda e: e.window)


def parse_time_range(value: str | TimeRange) -> TimeRange:
    """Convert a string like 'week' to a TimeRange.

    Raises:
        ValueError: If the value is not a known time range
    """
    if isinstance(value, TimeRange):
        return value
    try:
        return TimeRange(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(r.value for r in TimeRange)
        raise ValueError(f"Unknown time range {value!r} (expected one of: {allowed})") from None


def select_endpoint(time_range: TimeRange, use_custom_date: bool = False) -> FeedEndpoint:
    """Choose the feed to fetch.

    Pure function. Custom date mode always uses the widest feed since the
    summary feeds offer no narrower query.
    """
    if use_custom_date:
        return WIDEST_ENDPOINT
    return FEED_ENDPOINTS[time_range]
