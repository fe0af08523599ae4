"""ICS calendar downloading and decoding module."""

from .exceptions import (
    ICSAuthError,
    ICSContentError,
    ICSError,
    ICSFetchError,
    ICSNetworkError,
    ICSParseError,
    ICSTimeoutError,
)
from .fetcher import ICSFetcher, read_ics_file
from .models import (
    AuthType,
    DateKind,
    DateValue,
    Frequency,
    ICSAuth,
    ICSResponse,
    ICSSource,
    ParsedCalendar,
    RawCalendarEvent,
    RecurrenceRule,
)
from .parser import ICSParser
from .rrule_expander import RRuleExpander, RRuleExpansionError, RRuleParseError

__all__ = [
    "AuthType",
    "DateKind",
    "DateValue",
    "Frequency",
    "ICSAuth",
    "ICSAuthError",
    "ICSContentError",
    "ICSError",
    "ICSFetchError",
    "ICSFetcher",
    "ICSNetworkError",
    "ICSParseError",
    "ICSParser",
    "ICSResponse",
    "ICSSource",
    "ICSTimeoutError",
    "ParsedCalendar",
    "RRuleExpander",
    "RRuleExpansionError",
    "RRuleParseError",
    "RawCalendarEvent",
    "RecurrenceRule",
    "read_ics_file",
]
