"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, FilterConfig) are defined in the core package
to avoid information leakage between layers.
"""

import logging
import os
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from quakedash.core.config import Config
from quakedash.core.feeds import USGS_FEED_BASE, parse_time_range
from quakedash.core.filters import ALL_COUNTRIES, MAX_DEPTH_KM, FilterConfig


logger = logging.getLogger(__name__)


# Variables read by load_config_from_env()
ENV_CONFIG_VARS = (
    "QUAKEDASH_FEED_BASE_URL",
    "QUAKEDASH_TIMEZONE",
    "QUAKEDASH_TIMELINE_LIMIT",
    "QUAKEDASH_TOP_COUNTRIES",
)


def _parse_date(value: Any) -> date | None:
    """Parse an ISO date (YAML may already have produced a date)."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _parse_filters(data: dict[str, Any]) -> FilterConfig:
    """Parse default filters from config data."""
    depth = data.get("depth_range", [0, MAX_DEPTH_KM])

    return FilterConfig(
        min_magnitude=float(data.get("min_magnitude", 0.0)),
        max_magnitude=float(data.get("max_magnitude", 10.0)),
        country=str(data.get("country", ALL_COUNTRIES)),
        depth_range=(float(depth[0]), float(depth[1])),
        time_range=parse_time_range(data.get("time_range", "day")),
        use_custom_date=bool(data.get("use_custom_date", False)),
        custom_start_date=_parse_date(data.get("custom_start_date")),
        custom_end_date=_parse_date(data.get("custom_end_date")),
    )


def _parse_overrides(data: dict[str, Any]) -> dict[str, str]:
    """Parse extra country override entries."""
    return {str(k): str(v) for k, v in data.items()}


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    Pure function apart from raising on malformed values.

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    defaults = Config()

    return Config(
        feed_base_url=data.get("feed_base_url", USGS_FEED_BASE),
        request_timeout_seconds=int(data.get("request_timeout_seconds", defaults.request_timeout_seconds)),
        display_timezone=data.get("display_timezone", defaults.display_timezone),
        top_countries_limit=int(data.get("top_countries_limit", defaults.top_countries_limit)),
        timeline_limit=int(data.get("timeline_limit", defaults.timeline_limit)),
        recent_limit=int(data.get("recent_limit", defaults.recent_limit)),
        country_label_max_chars=int(data.get("country_label_max_chars", defaults.country_label_max_chars)),
        country_overrides=_parse_overrides(data.get("country_overrides") or {}),
        default_filters=_parse_filters(data.get("default_filters") or {}),
        allowed_origins=list(data.get("allowed_origins", defaults.allowed_origins)),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: timezone %s, %d country overrides, timeline limit %d",
        config.display_timezone,
        len(config.country_overrides),
        config.timeline_limit,
    )

    return config


def load_config_from_env() -> Config:
    """Load minimal configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        QUAKEDASH_FEED_BASE_URL: Base URL of the summary feeds
        QUAKEDASH_TIMEZONE: Display time zone (IANA name)
        QUAKEDASH_TIMELINE_LIMIT: Timeline series length
        QUAKEDASH_TOP_COUNTRIES: Top-country ranking length

    Returns:
        Config object from environment
    """
    defaults = Config()

    return Config(
        feed_base_url=os.environ.get("QUAKEDASH_FEED_BASE_URL", defaults.feed_base_url),
        display_timezone=os.environ.get("QUAKEDASH_TIMEZONE", defaults.display_timezone),
        timeline_limit=int(os.environ.get("QUAKEDASH_TIMELINE_LIMIT", str(defaults.timeline_limit))),
        top_countries_limit=int(os.environ.get("QUAKEDASH_TOP_COUNTRIES", str(defaults.top_countries_limit))),
    )
