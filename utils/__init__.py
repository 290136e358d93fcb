"""Utility modules for taskman.

This package provides helpers for timestamps and durations.

Modules:
    time_utils: Timestamp conversion, duration parsing and formatting
"""
from utils.time_utils import (
    format_clock,
    format_hms,
    format_local,
    format_time,
    format_timestamp,
    parse_time_string,
    parse_timestamp,
    utc_now,
)

__all__ = [
    "format_clock",
    "format_hms",
    "format_local",
    "format_time",
    "format_timestamp",
    "parse_time_string",
    "parse_timestamp",
    "utc_now",
]
