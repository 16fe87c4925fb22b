"""Earthquake data models and feed normalization - Pure functions.

This module turns decoded USGS GeoJSON summary feeds into typed Earthquake
records. All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Mapping

from quakedash.core.country import classify_country


UNKNOWN_PLACE = "Unknown location"

# Rendering used for the record's display time, e.g. "01/10/2024, 03:04:05 PM"
TIME_FORMAT = "%m/%d/%Y, %I:%M:%S %p"
DATE_FORMAT = "%m/%d/%Y"


class FeedParseError(ValueError):
    """Raised when a feed body is not shaped like a GeoJSON FeatureCollection."""


@dataclass(frozen=True)
class Earthquake:
    """Immutable earthquake record.

    Attributes:
        id: Unique USGS event ID, stable across refetches
        place: Human-readable location description
        magnitude: Magnitude, never negative (0 when the feed omits it)
        timestamp: Event time in epoch milliseconds
        time: Display rendering of timestamp (never parsed back)
        depth: Depth in kilometers, always non-negative
        coordinates: (latitude, longitude) pair
        country: Country/region derived from place
    """
    id: str
    place: str
    magnitude: float
    timestamp: int
    time: str
    depth: float
    coordinates: tuple[float, float]
    country: str

    @property
    def latitude(self) -> float:
        return self.coordinates[0]

    @property
    def longitude(self) -> float:
        return self.coordinates[1]

    @property
    def short_place(self) -> str:
        """Place text before the first comma (e.g. '120km SE of Tokyo')."""
        return short_place(self.place)


def short_place(place: str) -> str:
    """Return the part of a place string before the first comma.

    Pure function.
    """
    return place.split(",")[0].strip()


def to_datetime(timestamp_ms: int, tz: tzinfo = timezone.utc) -> datetime:
    """Convert epoch milliseconds to an aware datetime in the given zone."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)


def format_timestamp(timestamp_ms: int, tz: tzinfo = timezone.utc) -> str:
    """Render epoch milliseconds as a date and time string.

    Pure function.
    """
    return to_datetime(timestamp_ms, tz).strftime(TIME_FORMAT)


def format_date(timestamp_ms: int, tz: tzinfo = timezone.utc) -> str:
    """Render epoch milliseconds as a date string.

    Pure function.
    """
    return to_datetime(timestamp_ms, tz).strftime(DATE_FORMAT)


def _optional_number(value: Any) -> float:
    """Read an optional numeric field; absent, malformed or non-finite values become 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def normalize_feature(
    feature: dict[str, Any],
    tz: tzinfo = timezone.utc,
    country_overrides: Mapping[str, str] | None = None,
) -> Earthquake | None:
    """Normalize a single GeoJSON feature into an Earthquake.

    Pure function. Missing optional fields get defaults:
    - absent, malformed or non-finite mag -> 0
    - absent place -> "Unknown location"
    - absent, malformed or non-finite depth -> 0

    Depth is stored as its absolute value and the feed's
    [longitude, latitude, depth] ordering becomes (latitude, longitude).

    Args:
        feature: GeoJSON feature dict from the USGS feed
        tz: Time zone used to render the display time
        country_overrides: Extra entries for the country override table

    Returns:
        Earthquake object, or None if the feature has no id, no time or
        no usable position
    """
    try:
        props = feature.get("properties") or {}
        geometry = feature.get("geometry") or {}
        coords = geometry.get("coordinates") or []

        event_id = feature.get("id")
        time_ms = props.get("time")
        if not event_id or time_ms is None or len(coords) < 2:
            return None

        longitude = float(coords[0])
        latitude = float(coords[1])
        if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
            return None

        depth = _optional_number(coords[2] if len(coords) > 2 else None)
        magnitude = _optional_number(props.get("mag"))
        place = props.get("place") or UNKNOWN_PLACE
        timestamp = int(time_ms)

        return Earthquake(
            id=str(event_id),
            place=place,
            magnitude=max(magnitude, 0.0),
            timestamp=timestamp,
            time=format_timestamp(timestamp, tz),
            depth=abs(depth),
            coordinates=(latitude, longitude),
            country=classify_country(props.get("place"), country_overrides),
        )
    except (AttributeError, TypeError, ValueError, OverflowError):
        return None


def parse_feed(
    geojson: Any,
    tz: tzinfo = timezone.utc,
    country_overrides: Mapping[str, str] | None = None,
) -> list[Earthquake]:
    """Parse a decoded feed into a list of Earthquakes.

    Pure function: skips features that cannot be normalized and keeps
    the feed's own ordering.

    Args:
        geojson: Decoded FeatureCollection
        tz: Time zone used to render display times
        country_overrides: Extra entries for the country override table

    Returns:
        List of Earthquake records in feed order

    Raises:
        FeedParseError: If the body has no list of features
    """
    if not isinstance(geojson, dict):
        raise FeedParseError(f"Expected a JSON object, got {type(geojson).__name__}")

    features = geojson.get("features")
    if not isinstance(features, list):
        raise FeedParseError("Feed has no 'features' list")

    earthquakes = []
    for feature in features:
        if not isinstance(feature, dict):
            continue
        earthquake = normalize_feature(feature, tz, country_overrides)
        if earthquake is not None:
            earthquakes.append(earthquake)

    return earthquakes
