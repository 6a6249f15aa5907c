"""Formatting utilities for statemap output and diagnostics."""

from .time_formatter import format_duration, format_timestamp_ns
from .statemap_formatter import StatemapFormatter

__all__ = ["format_duration", "format_timestamp_ns", "StatemapFormatter"]
