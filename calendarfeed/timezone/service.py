"""Timezone resolution for calendar documents.

Resolves the zone a document declares (X-WR-TIMEZONE or VTIMEZONE TZID)
into a tzinfo. IANA names go through zoneinfo, Outlook/Exchange Windows
names through an alias table, and anything zoneinfo cannot load is retried
with dateutil's tz database lookup before falling back to the configured
default zone.
"""

import logging
from datetime import tzinfo
from types import MappingProxyType
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import tz as dateutil_tz

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE_NAME = "UTC"

# Windows timezone names commonly found in ICS files exported by Outlook/Exchange
WINDOWS_TZ_MAP = MappingProxyType(
    {
        "Pacific Standard Time": "America/Los_Angeles",
        "Mountain Standard Time": "America/Denver",
        "Central Standard Time": "America/Chicago",
        "Eastern Standard Time": "America/New_York",
        "Alaskan Standard Time": "America/Anchorage",
        "Hawaiian Standard Time": "Pacific/Honolulu",
        "Arizona Standard Time": "America/Phoenix",
        "Atlantic Standard Time": "America/Halifax",
        "GMT Standard Time": "Europe/London",
        "Greenwich Standard Time": "Atlantic/Reykjavik",
        "W. Europe Standard Time": "Europe/Berlin",
        "W. European Standard Time": "Europe/Berlin",
        "Romance Standard Time": "Europe/Paris",
        "Central Europe Standard Time": "Europe/Budapest",
        "Central European Standard Time": "Europe/Warsaw",
        "E. Europe Standard Time": "Europe/Chisinau",
        "GTB Standard Time": "Europe/Bucharest",
        "FLE Standard Time": "Europe/Kiev",
        "Russian Standard Time": "Europe/Moscow",
        "Israel Standard Time": "Asia/Jerusalem",
        "India Standard Time": "Asia/Kolkata",
        "China Standard Time": "Asia/Shanghai",
        "Singapore Standard Time": "Asia/Singapore",
        "Tokyo Standard Time": "Asia/Tokyo",
        "Korea Standard Time": "Asia/Seoul",
        "AUS Eastern Standard Time": "Australia/Sydney",
        "New Zealand Standard Time": "Pacific/Auckland",
        "UTC": "UTC",
    }
)


class TimezoneError(Exception):
    """Raised when timezone operations fail."""


class TimezoneService:
    """Turns zone identifiers found in calendar documents into tzinfo objects."""

    def __init__(self, default_timezone: str = DEFAULT_TIMEZONE_NAME) -> None:
        """Initialize timezone service.

        Args:
            default_timezone: Zone used when a document declares none or an
                unknown one.
        """
        self.default_timezone = default_timezone
        self._cache: dict[str, tzinfo] = {}

    def get_default_timezone(self) -> tzinfo:
        """Get the configured fallback zone.

        Raises:
            TimezoneError: If the configured default itself cannot be loaded.
        """
        zone = self._lookup(self.default_timezone)
        if zone is None:
            raise TimezoneError(f"Default timezone '{self.default_timezone}' is not available")
        return zone

    def resolve(self, name: Optional[str]) -> tzinfo:
        """Resolve a zone identifier, falling back to the default zone.

        Args:
            name: IANA name, Windows name, or empty.

        Returns:
            A tzinfo usable with ``datetime.replace`` and ``astimezone``.
        """
        if not name or not name.strip():
            logger.debug(f"No timezone declared, using default {self.default_timezone}")
            return self.get_default_timezone()

        zone = self._lookup(name.strip())
        if zone is None:
            logger.warning(f"Unknown timezone '{name}', using default {self.default_timezone}")
            return self.get_default_timezone()
        return zone

    def resolve_name(self, name: Optional[str]) -> str:
        """Resolve a zone identifier to the canonical name used for output."""
        if not name or not name.strip():
            return self.default_timezone
        candidate = name.strip().lstrip("/")
        candidate = WINDOWS_TZ_MAP.get(candidate, candidate)
        if self._lookup(candidate) is None:
            return self.default_timezone
        return candidate

    def _lookup(self, name: str) -> Optional[tzinfo]:
        """Load a zone by name, or None when no database knows it."""
        if name in self._cache:
            return self._cache[name]

        # Some generators prefix TZIDs with a slash ("/Europe/Paris")
        candidate = name.lstrip("/")
        candidate = WINDOWS_TZ_MAP.get(candidate, candidate)

        zone: Optional[tzinfo] = None
        try:
            zone = ZoneInfo(candidate)
        except (ZoneInfoNotFoundError, ValueError):
            logger.debug(f"zoneinfo has no zone named '{candidate}', trying dateutil")
            zone = dateutil_tz.gettz(candidate)

        if zone is not None:
            self._cache[name] = zone
        return zone


_timezone_service: Optional[TimezoneService] = None


def get_timezone_service(default_timezone: Optional[str] = None) -> TimezoneService:
    """Get the shared timezone service instance.

    Passing ``default_timezone`` replaces the shared instance when it differs
    from the current default.
    """
    global _timezone_service  # noqa: PLW0603
    if _timezone_service is None or (
        default_timezone is not None and _timezone_service.default_timezone != default_timezone
    ):
        _timezone_service = TimezoneService(default_timezone or DEFAULT_TIMEZONE_NAME)
    return _timezone_service
