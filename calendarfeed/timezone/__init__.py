"""
Timezone package for calendarfeed.

Resolves the zone declared by a calendar document into a tzinfo.

Example usage:
    >>> from calendarfeed.timezone import TimezoneService
    >>>
    >>> service = TimezoneService(default_timezone="UTC")
    >>> service.resolve("W. Europe Standard Time")
    zoneinfo.ZoneInfo(key='Europe/Berlin')
"""

from .service import (
    DEFAULT_TIMEZONE_NAME,
    WINDOWS_TZ_MAP,
    TimezoneError,
    TimezoneService,
    get_timezone_service,
)

__all__ = [
    "DEFAULT_TIMEZONE_NAME",
    "WINDOWS_TZ_MAP",
    "TimezoneError",
    "TimezoneService",
    "get_timezone_service",
]
