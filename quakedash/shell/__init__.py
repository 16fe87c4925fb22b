"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- USGS summary feed client (HTTP)
- Configuration loading (files/environment)

Keep this layer thin and simple. All business logic should be in core.
"""

from quakedash.shell.feed_client import FeedClient, FeedFetchError
from quakedash.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "FeedClient",
    "FeedFetchError",
    "load_config",
    "load_config_from_env",
]
