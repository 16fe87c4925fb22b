"""Cloud Function Entry Point - Root Module.

This is the root-level entry point for Google Cloud Functions.
It imports from the quakedash package.
"""

from quakedash.main import quake_dashboard

__all__ = [
    "quake_dashboard",
]
