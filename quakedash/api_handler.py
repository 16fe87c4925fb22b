"""Web API Handler - Serves dashboard data to the browser frontend.

This module provides HTTP endpoints for the dashboard frontend.
Part of the imperative shell - handles HTTP I/O.
"""

import json
import logging
from dataclasses import asdict
from datetime import date
from typing import Any, Mapping

from flask import Request, Response

from quakedash.core.aggregates import DashboardView
from quakedash.core.config import TIMELINE_LIMITS
from quakedash.core.earthquake import Earthquake
from quakedash.core.feeds import parse_time_range
from quakedash.core.filters import FilterConfig
from quakedash.orchestrator import FetchOrchestrator

logger = logging.getLogger(__name__)


_TRUE_VALUES = {"1", "true", "yes", "on"}


def _cors_headers(origin: str | None, allowed_origins: list[str]) -> dict[str, str]:
    """Generate CORS headers for the response."""
    headers = {
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Max-Age": "3600",
    }
    if origin and origin in allowed_origins:
        headers["Access-Control-Allow-Origin"] = origin
    elif allowed_origins:
        headers["Access-Control-Allow-Origin"] = allowed_origins[0]
    return headers


def _json_response(
    data: dict[str, Any],
    status: int = 200,
    origin: str | None = None,
    allowed_origins: list[str] | None = None,
) -> Response:
    """Create a JSON response with CORS headers."""
    response = Response(
        json.dumps(data, default=str),
        status=status,
        mimetype="application/json",
    )
    for key, value in _cors_headers(origin, allowed_origins or []).items():
        response.headers[key] = value
    return response


def _preflight(origin: str | None, allowed_origins: list[str]) -> Response:
    response = Response("", status=204)
    for key, value in _cors_headers(origin, allowed_origins).items():
        response.headers[key] = value
    return response


def _earthquake_to_dict(eq: Earthquake | None) -> dict[str, Any] | None:
    """Convert Earthquake dataclass to JSON-serializable dict."""
    if eq is None:
        return None
    data = asdict(eq)
    data["coordinates"] = list(eq.coordinates)
    return data


def _view_to_dict(view: DashboardView) -> dict[str, Any]:
    """Convert DashboardView to JSON-serializable dict."""
    return {
        "earthquakes": [_earthquake_to_dict(eq) for eq in view.filtered],
        "count": len(view.filtered),
        "magnitude_distribution": [asdict(b) for b in view.distribution],
        "top_countries": [asdict(c) for c in view.top_countries],
        "depth_series": [asdict(p) for p in view.depth_series],
        "timeline": [asdict(p) for p in view.timeline],
        "countries": view.countries,
        "stats": asdict(view.stats),
        "recent": [_earthquake_to_dict(eq) for eq in view.recent],
        "heatmap": [list(p) for p in view.heatmap],
    }


def _parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _parse_date(value: str | None, default: date | None) -> date | None:
    if value is None:
        return default
    if not value.strip():
        return None
    return date.fromisoformat(value.strip())


def parse_filter_args(args: Mapping[str, str], defaults: FilterConfig) -> FilterConfig:
    """Build a FilterConfig from query parameters.

    Parameters that are absent keep their default value.

    Raises:
        ValueError: If a parameter cannot be parsed
    """
    def number(name: str, default: float) -> float:
        value = args.get(name)
        return default if value is None else float(value)

    low, high = defaults.depth_range

    return FilterConfig(
        min_magnitude=number("minMagnitude", defaults.min_magnitude),
        max_magnitude=number("maxMagnitude", defaults.max_magnitude),
        country=args.get("country", defaults.country) or defaults.country,
        depth_range=(number("depthMin", low), number("depthMax", high)),
        time_range=parse_time_range(args.get("timeRange", defaults.time_range)),
        use_custom_date=_parse_bool(args.get("useCustomDate"), defaults.use_custom_date),
        custom_start_date=_parse_date(args.get("customStartDate"), defaults.custom_start_date),
        custom_end_date=_parse_date(args.get("customEndDate"), defaults.custom_end_date),
    )


def get_dashboard(request: Request, orchestrator: FetchOrchestrator) -> Response:
    """API endpoint: Filtered earthquakes plus every aggregate view.

    Query params:
        minMagnitude, maxMagnitude: Magnitude range
        country: "all" or a substring of country/place
        depthMin, depthMax: Depth range in km
        timeRange: day, week or month
        useCustomDate, customStartDate, customEndDate: Custom date window
        timelineLimit: 50 or 100
        refresh: Fetch again even if the data matches the filters

    Returns:
        JSON with the dashboard views and fetch status
    """
    origin = request.headers.get("Origin")
    allowed = orchestrator.config.allowed_origins

    if request.method == "OPTIONS":
        return _preflight(origin, allowed)

    try:
        filters = parse_filter_args(request.args, orchestrator.config.default_filters)
        timeline_limit = request.args.get("timelineLimit")
        if timeline_limit is not None:
            timeline_limit = int(timeline_limit)
            if timeline_limit not in TIMELINE_LIMITS:
                raise ValueError(f"timelineLimit must be one of {TIMELINE_LIMITS}")
    except ValueError as e:
        return _json_response({"error": str(e)}, status=400, origin=origin, allowed_origins=allowed)

    result = orchestrator.refresh(filters, force=_parse_bool(request.args.get("refresh")))

    if result is not None and not result.success and not orchestrator.has_data:
        return _json_response(
            {"error": "Failed to fetch earthquake data", "detail": result.error},
            status=502,
            origin=origin,
            allowed_origins=allowed,
        )

    view = orchestrator.view(filters, timeline_limit=timeline_limit)

    response_data = _view_to_dict(view)
    response_data["selected"] = _earthquake_to_dict(orchestrator.selected)
    response_data["stale"] = orchestrator.needs_fetch(filters)
    response_data["error"] = orchestrator.last_error
    response_data["fetched_at"] = orchestrator.fetched_at.isoformat() if orchestrator.fetched_at else None

    return _json_response(response_data, origin=origin, allowed_origins=allowed)


def get_countries(request: Request, orchestrator: FetchOrchestrator) -> Response:
    """API endpoint: Distinct countries of the current fetch.

    Returns:
        JSON with a sorted list of countries
    """
    origin = request.headers.get("Origin")
    allowed = orchestrator.config.allowed_origins

    if request.method == "OPTIONS":
        return _preflight(origin, allowed)

    return _json_response(
        {"countries": orchestrator.countries()},
        origin=origin,
        allowed_origins=allowed,
    )


def select_earthquake(request: Request, orchestrator: FetchOrchestrator) -> Response:
    """API endpoint: Set the selected earthquake.

    Query params:
        id: Earthquake id; omit to clear the selection

    Returns:
        JSON with the selected earthquake, 404 if the id is unknown
    """
    origin = request.headers.get("Origin")
    allowed = orchestrator.config.allowed_origins

    if request.method == "OPTIONS":
        return _preflight(origin, allowed)

    earthquake_id = request.args.get("id") or None
    earthquake = orchestrator.select(earthquake_id)

    if earthquake_id is not None and earthquake is None:
        return _json_response(
            {"error": f"Unknown earthquake: {earthquake_id}"},
            status=404,
            origin=origin,
            allowed_origins=allowed,
        )

    return _json_response(
        {"selected": _earthquake_to_dict(earthquake)},
        origin=origin,
        allowed_origins=allowed,
    )
