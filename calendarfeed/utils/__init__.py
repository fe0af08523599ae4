"""Utility helpers for calendarfeed."""

from .logging import VERBOSE, AutoColoredFormatter, get_log_level, setup_logging

__all__ = ["VERBOSE", "AutoColoredFormatter", "get_log_level", "setup_logging"]
