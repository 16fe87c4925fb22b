"""Dashboard aggregates - Pure functions.

Every view here is derived from scratch from a record collection. Nothing
is cached or updated incrementally, so calling a function twice with the
same input yields equal output. Empty input always yields empty or
zero-valued results.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import timezone, tzinfo

from quakedash.core.config import Config
from quakedash.core.earthquake import Earthquake, format_date
from quakedash.core.filters import FilterConfig, apply_filters


SIGNIFICANT_MAGNITUDE = 5.0

ELLIPSIS = "..."


@dataclass(frozen=True)
class MagnitudeBin:
    """A magnitude interval [lower, upper), or [lower, upper] for the top bin."""
    lower: float
    upper: float
    closed: bool = False

    def contains(self, magnitude: float) -> bool:
        if self.closed:
            return self.lower <= magnitude <= self.upper
        return self.lower <= magnitude < self.upper


MAGNITUDE_BINS: tuple[MagnitudeBin, ...] = (
    MagnitudeBin(0.0, 2.0),
    MagnitudeBin(2.0, 3.0),
    MagnitudeBin(3.0, 4.0),
    MagnitudeBin(4.0, 5.0),
    MagnitudeBin(5.0, 6.0),
    MagnitudeBin(6.0, 10.0, closed=True),
)


@dataclass(frozen=True)
class BinCount:
    lower: float
    upper: float
    count: int


@dataclass(frozen=True)
class CountryCount:
    """One row of the top-country ranking.

    Attributes:
        country: Full country name (the grouping key)
        count: Number of earthquakes
        label: Country name shortened for display
    """
    country: str
    count: int
    label: str


@dataclass(frozen=True)
class DepthPoint:
    index: int
    depth: float
    magnitude: float
    place: str


@dataclass(frozen=True)
class TimelinePoint:
    index: int
    magnitude: float
    date: str
    place: str


@dataclass(frozen=True)
class SummaryStats:
    """Headline numbers for the filtered collection.

    Attributes:
        total: Number of earthquakes
        significant: Number with magnitude >= 5
        max_magnitude: Largest magnitude (0 when empty)
        average_magnitude: Mean magnitude (0 when empty)
        average_depth: Mean depth in km (0 when empty)
    """
    total: int
    significant: int
    max_magnitude: float
    average_magnitude: float
    average_depth: float


@dataclass(frozen=True)
class DashboardView:
    """Everything the presentation layer renders for one filter state."""
    filtered: list[Earthquake]
    distribution: list[BinCount]
    top_countries: list[CountryCount]
    depth_series: list[DepthPoint]
    timeline: list[TimelinePoint]
    countries: list[str]
    stats: SummaryStats
    recent: list[Earthquake] = field(default_factory=list)
    heatmap: list[tuple[float, float, float]] = field(default_factory=list)


def magnitude_distribution(
    earthquakes: list[Earthquake],
    bins: tuple[MagnitudeBin, ...] = MAGNITUDE_BINS,
) -> list[BinCount]:
    """Count earthquakes per magnitude bin.

    Pure function.
    """
    return [
        BinCount(
            lower=b.lower,
            upper=b.upper,
            count=sum(1 for e in earthquakes if b.contains(e.magnitude)),
        )
        for b in bins
    ]


def truncate_label(text: str, max_chars: int) -> str:
    """Shorten text to max_chars characters plus an ellipsis marker.

    Pure function.
    """
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + ELLIPSIS


def top_countries(
    earthquakes: list[Earthquake],
    limit: int = 15,
    label_max_chars: int = 20,
) -> list[CountryCount]:
    """Rank countries by number of earthquakes.

    Pure function. Counts are sorted descending; ties keep the order in
    which each country first appears.

    Args:
        earthquakes: Filtered earthquakes
        limit: Maximum number of countries to return
        label_max_chars: Display budget for the label

    Returns:
        Up to `limit` CountryCount rows
    """
    counts = Counter(e.country for e in earthquakes)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)

    return [
        CountryCount(
            country=country,
            count=count,
            label=truncate_label(country, label_max_chars),
        )
        for country, count in ranked[:limit]
    ]


def depth_series(earthquakes: list[Earthquake]) -> list[DepthPoint]:
    """Project earthquakes to depth/magnitude points, keeping input order.

    Pure function.
    """
    return [
        DepthPoint(
            index=i,
            depth=e.depth,
            magnitude=e.magnitude,
            place=e.short_place,
        )
        for i, e in enumerate(earthquakes)
    ]


def timeline_series(
    earthquakes: list[Earthquake],
    limit: int = 50,
    tz: tzinfo = timezone.utc,
) -> list[TimelinePoint]:
    """Take the earliest earthquakes in time order.

    Pure function.

    Args:
        earthquakes: Filtered earthquakes
        limit: Number of points to keep
        tz: Time zone for the date labels

    Returns:
        Up to `limit` points sorted by timestamp ascending
    """
    ordered = sorted(earthquakes, key=lambda e: e.timestamp)

    return [
        TimelinePoint(
            index=i,
            magnitude=e.magnitude,
            date=format_date(e.timestamp, tz),
            place=e.short_place,
        )
        for i, e in enumerate(ordered[:limit])
    ]


def distinct_countries(earthquakes: list[Earthquake]) -> list[str]:
    """Sorted set of countries in a collection.

    Pure function. Pass the unfiltered fetch so that narrowing other
    filters does not remove country choices.
    """
    return sorted({e.country for e in earthquakes})


def _mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def summary_stats(earthquakes: list[Earthquake]) -> SummaryStats:
    """Compute headline numbers, all zero for an empty collection.

    Pure function.
    """
    magnitudes = [e.magnitude for e in earthquakes]

    return SummaryStats(
        total=len(earthquakes),
        significant=sum(1 for m in magnitudes if m >= SIGNIFICANT_MAGNITUDE),
        max_magnitude=max(magnitudes, default=0.0),
        average_magnitude=_mean(magnitudes),
        average_depth=_mean([e.depth for e in earthquakes]),
    )


def recent_earthquakes(earthquakes: list[Earthquake], limit: int = 10) -> list[Earthquake]:
    """First `limit` earthquakes in feed order (newest first for USGS feeds)."""
    return earthquakes[:limit]


def heatmap_points(earthquakes: list[Earthquake]) -> list[tuple[float, float, float]]:
    """(latitude, longitude, magnitude) triples for a heatmap layer."""
    return [(e.latitude, e.longitude, e.magnitude) for e in earthquakes]


def build_dashboard(
    earthquakes: list[Earthquake],
    filters: FilterConfig,
    config: Config | None = None,
    timeline_limit: int | None = None,
) -> DashboardView:
    """Filter a fetched collection and derive every dashboard view.

    Pure function.

    Args:
        earthquakes: The full, unfiltered fetch
        filters: Active filters
        config: Limits and display settings (defaults if None)
        timeline_limit: Overrides config.timeline_limit when given

    Returns:
        DashboardView for the filter state
    """
    config = config or Config()
    tz = config.tz
    filtered = apply_filters(earthquakes, filters)

    return DashboardView(
        filtered=filtered,
        distribution=magnitude_distribution(filtered),
        top_countries=top_countries(
            filtered,
            limit=config.top_countries_limit,
            label_max_chars=config.country_label_max_chars,
        ),
        depth_series=depth_series(filtered),
        timeline=timeline_series(
            filtered,
            limit=timeline_limit or config.timeline_limit,
            tz=tz,
        ),
        countries=distinct_countries(earthquakes),
        stats=summary_stats(filtered),
        recent=recent_earthquakes(filtered, config.recent_limit),
        heatmap=heatmap_points(filtered),
    )
