"""Earthquake dashboard backend.

Fetches the USGS summary feeds and computes the filtered collection and
aggregate views rendered by the browser dashboard.
"""
