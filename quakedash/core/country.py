"""Country classification - Pure functions.

USGS place strings look like "120km SE of Tokyo, Japan" or "8 km NW of
The Geysers, CA". The trailing comma-separated segment is usually a country,
a US state code, or an island group. This is a best-effort heuristic, not a
gazetteer: segments missing from the override table pass through unchanged.
"""

from typing import Mapping


UNKNOWN_COUNTRY = "Unknown"

UNITED_STATES = "United States"

# Two-letter codes used by the feed, keyed exactly as they appear
_CODE_OVERRIDES: dict[str, str] = {
    "AK": UNITED_STATES,
    "AZ": UNITED_STATES,
    "CA": UNITED_STATES,
    "CO": UNITED_STATES,
    "HI": UNITED_STATES,
    "ID": UNITED_STATES,
    "KS": UNITED_STATES,
    "MT": UNITED_STATES,
    "NM": UNITED_STATES,
    "NV": UNITED_STATES,
    "OK": UNITED_STATES,
    "OR": UNITED_STATES,
    "TN": UNITED_STATES,
    "TX": UNITED_STATES,
    "UT": UNITED_STATES,
    "WA": UNITED_STATES,
    "WY": UNITED_STATES,
    "MX": "Mexico",
    "PR": "Puerto Rico",
}

# Named regions the feed reports without their owning country
_NAMED_OVERRIDES: dict[str, str] = {
    "Alaska": UNITED_STATES,
    "California": UNITED_STATES,
    "Hawaii": UNITED_STATES,
    "Nevada": UNITED_STATES,
    "Washington": UNITED_STATES,
    "Aleutian Islands": UNITED_STATES,
    "Andreanof Islands": UNITED_STATES,
    "Fox Islands": UNITED_STATES,
    "Rat Islands": UNITED_STATES,
    "Kuril Islands": "Russia",
    "Komandorskiye Ostrova": "Russia",
    "Izu Islands": "Japan",
    "Bonin Islands": "Japan",
    "Ryukyu Islands": "Japan",
    "Volcano Islands": "Japan",
    "Kermadec Islands": "New Zealand",
    "Andaman Islands": "India",
    "Nicobar Islands": "India",
    "South Sandwich Islands": "United Kingdom",
    "Loyalty Islands": "France",
}

COUNTRY_OVERRIDES: dict[str, str] = {**_CODE_OVERRIDES, **_NAMED_OVERRIDES}


def trailing_segment(place: str | None) -> str:
    """Return the trimmed text after the last comma of a place string.

    Pure function.
    """
    if not place:
        return ""
    return place.split(",")[-1].strip()


def classify_country(
    place: str | None,
    extra_overrides: Mapping[str, str] | None = None,
) -> str:
    """Map a free-text place to a country or region name.

    Pure function.

    Args:
        place: Raw place string from the feed (may be None or empty)
        extra_overrides: Additional exact-match entries; these win over
            the built-in table

    Returns:
        Canonical name, the trailing segment itself when no override
        matches, or "Unknown" when the segment is empty
    """
    segment = trailing_segment(place)
    if not segment:
        return UNKNOWN_COUNTRY

    if extra_overrides and segment in extra_overrides:
        return extra_overrides[segment]

    return COUNTRY_OVERRIDES.get(segment, segment)
