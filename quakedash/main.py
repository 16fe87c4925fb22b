"""Cloud Function Entry Point.

This module provides the HTTP entry point for the dashboard API.
It's a thin wrapper that loads configuration, keeps one orchestrator
per instance and routes requests to the handlers.
"""

import logging
import os

import functions_framework
from flask import Request, Response

from quakedash.api_handler import _json_response, get_countries, get_dashboard, select_earthquake
from quakedash.core.config import Config, validate_config
from quakedash.orchestrator import FetchOrchestrator
from quakedash.shell.config_loader import ENV_CONFIG_VARS, load_config, load_config_from_env


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


ROUTES = {
    "dashboard": get_dashboard,
    "countries": get_countries,
    "select": select_earthquake,
}

_orchestrator: FetchOrchestrator | None = None


def _get_config() -> Config:
    """Load configuration from file or environment."""
    if os.environ.get("CONFIG_PATH"):
        return load_config(os.environ["CONFIG_PATH"])
    if any(os.environ.get(name) for name in ENV_CONFIG_VARS):
        return load_config_from_env()
    return load_config()


def _get_orchestrator() -> FetchOrchestrator:
    """Create the instance-wide orchestrator on first use.

    Fetched data lives as long as the instance, so a failed refetch keeps
    serving the previous data.
    """
    global _orchestrator

    if _orchestrator is None:
        config = _get_config()
        result = validate_config(config)
        for error in result.errors:
            log = logger.error if error.severity == "error" else logger.warning
            log("Config %s: %s", error.field, error.message)
        if not result.valid:
            raise ValueError("Invalid configuration")
        _orchestrator = FetchOrchestrator(config)

    return _orchestrator


@functions_framework.http
def quake_dashboard(request: Request) -> Response:
    """HTTP entry point.

    Query params:
        action: dashboard (default), countries or select

    Returns:
        JSON response from the selected handler
    """
    action = request.args.get("action", "dashboard")
    handler = ROUTES.get(action)

    if handler is None:
        return _json_response(
            {"error": f"Unknown action: {action}", "available": sorted(ROUTES)},
            status=404,
        )

    try:
        return handler(request, _get_orchestrator())
    except Exception as e:
        logger.exception("Unexpected error handling %s", action)
        return _json_response({"status": "error", "message": str(e)}, status=500)
