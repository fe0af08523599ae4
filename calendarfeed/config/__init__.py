"""Configuration for calendarfeed."""

from .settings import CalendarFeedSettings, get_settings, reset_settings

__all__ = ["CalendarFeedSettings", "get_settings", "reset_settings"]
