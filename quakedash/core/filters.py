"""Filter evaluation - Pure functions.

This module decides which earthquakes are kept for a given FilterConfig.
Malformed configurations never raise: an inverted range simply matches
nothing.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from quakedash.core.earthquake import Earthquake
from quakedash.core.feeds import TimeRange, select_endpoint


ALL_COUNTRIES = "all"

MIN_MAGNITUDE = 0.0
MAX_MAGNITUDE = 10.0
MAX_DEPTH_KM = 1000.0


@dataclass(frozen=True)
class FilterConfig:
    """User-selected filters, passed by value into the pipeline.

    Attributes:
        min_magnitude: Lower magnitude bound (inclusive)
        max_magnitude: Upper magnitude bound (inclusive)
        country: "all", or a case-insensitive substring matched against
            the record's country or place
        depth_range: (low, high) depth bounds in km (inclusive)
        time_range: Which summary feed to fetch
        use_custom_date: Fetch the widest feed and cut a date window
        custom_start_date: First day of the window (inclusive)
        custom_end_date: Last day of the window (inclusive)
    """
    min_magnitude: float = MIN_MAGNITUDE
    max_magnitude: float = MAX_MAGNITUDE
    country: str = ALL_COUNTRIES
    depth_range: tuple[float, float] = (0.0, MAX_DEPTH_KM)
    time_range: TimeRange = TimeRange.DAY
    use_custom_date: bool = False
    custom_start_date: date | None = None
    custom_end_date: date | None = None

    @property
    def fetch_key(self) -> tuple:
        """Fields that decide what has to be fetched.

        Changing anything else only requires re-filtering.
        """
        endpoint = select_endpoint(self.time_range, self.use_custom_date)
        if self.use_custom_date:
            return (endpoint.time_range, True, self.custom_start_date, self.custom_end_date)
        return (endpoint.time_range, False, None, None)


def matches_magnitude(earthquake: Earthquake, config: FilterConfig) -> bool:
    """Check if magnitude is within the configured range.

    Pure function.
    """
    return config.min_magnitude <= earthquake.magnitude <= config.max_magnitude


def matches_depth(earthquake: Earthquake, config: FilterConfig) -> bool:
    """Check if depth is within the configured range.

    Pure function.
    """
    low, high = config.depth_range
    return low <= earthquake.depth <= high


def matches_country(earthquake: Earthquake, config: FilterConfig) -> bool:
    """Check the country filter.

    Pure function. A match on either the derived country or the raw place
    text is enough, so values outside the known country set behave as a
    free-text search.
    """
    if config.country == ALL_COUNTRIES:
        return True

    needle = config.country.lower()
    return needle in earthquake.country.lower() or needle in earthquake.place.lower()


def matches_filters(earthquake: Earthquake, config: FilterConfig) -> bool:
    """Evaluate all filters against an earthquake.

    Pure function.

    Args:
        earthquake: Earthquake to evaluate
        config: Active filters

    Returns:
        True if the earthquake should be kept
    """
    return (
        matches_magnitude(earthquake, config)
        and matches_depth(earthquake, config)
        and matches_country(earthquake, config)
    )


def apply_filters(
    earthquakes: list[Earthquake],
    config: FilterConfig,
) -> list[Earthquake]:
    """Filter earthquakes, keeping input order.

    Pure function.
    """
    return [e for e in earthquakes if matches_filters(e, config)]


def start_of_day_ms(day: date, tz: tzinfo = timezone.utc) -> int:
    """Epoch milliseconds of local midnight at the start of a day."""
    return int(datetime.combine(day, time.min, tzinfo=tz).timestamp() * 1000)


def date_window(
    start: date | None,
    end: date | None,
    tz: tzinfo = timezone.utc,
) -> tuple[int | None, int | None]:
    """Compute the [start, end) millisecond bounds for a custom date range.

    Pure function. Both days are included in full, so the upper bound is
    midnight after the end day. A missing day leaves that side open.
    """
    lower = start_of_day_ms(start, tz) if start is not None else None
    upper = start_of_day_ms(end + timedelta(days=1), tz) if end is not None else None
    return lower, upper


def filter_by_date_window(
    earthquakes: list[Earthquake],
    start: date | None,
    end: date | None,
    tz: tzinfo = timezone.utc,
) -> list[Earthquake]:
    """Keep earthquakes whose timestamp falls inside a custom date range.

    Pure function.

    Args:
        earthquakes: Earthquakes to filter
        start: First day to keep (inclusive), None for no lower bound
        end: Last day to keep (inclusive), None for no upper bound
        tz: Time zone that defines day boundaries

    Returns:
        Earthquakes within the window, in input order
    """
    lower, upper = date_window(start, end, tz)
    result = earthquakes

    if lower is not None:
        result = [e for e in result if e.timestamp >= lower]

    if upper is not None:
        result = [e for e in result if e.timestamp < upper]

    return result
