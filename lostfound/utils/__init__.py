"""Shared helpers for time handling and geographic distance."""

from .geo import haversine_meters
from .timestamps import ensure_utc, format_timestamp, parse_timestamp, utc_now

__all__ = [
    # Timestamps
    "utc_now",
    "ensure_utc",
    "format_timestamp",
    "parse_timestamp",
    # Geo
    "haversine_meters",
]
