"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Feed normalization
- Country classification
- Filter evaluation
- Dashboard aggregates
- Feed endpoint selection

All functions here are deterministic and have no I/O.
"""

from quakedash.core.earthquake import Earthquake, FeedParseError, normalize_feature, parse_feed
from quakedash.core.country import classify_country
from quakedash.core.filters import FilterConfig, apply_filters, filter_by_date_window, matches_filters
from quakedash.core.aggregates import DashboardView, build_dashboard
from quakedash.core.feeds import FeedEndpoint, TimeRange, select_endpoint

__all__ = [
    # Earthquake
    "Earthquake",
    "FeedParseError",
    "normalize_feature",
    "parse_feed",
    # Country
    "classify_country",
    # Filters
    "FilterConfig",
    "apply_filters",
    "filter_by_date_window",
    "matches_filters",
    # Aggregates
    "DashboardView",
    "build_dashboard",
    # Feeds
    "FeedEndpoint",
    "TimeRange",
    "select_endpoint",
]
