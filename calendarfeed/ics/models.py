"""Data models for decoded ICS calendar documents."""

import base64
import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")

# BYDAY token: optional signed ordinal followed by a two letter weekday code
BYDAY_PATTERN = re.compile(r"^([+-]?\d{1,2})?(MO|TU|WE|TH|FR|SA|SU)$")


class AuthType(str, Enum):
    """Supported authentication types for ICS sources."""

    NONE = "none"
    BASIC = "basic"
    BEARER = "bearer"


class ICSAuth(BaseModel):
    """Authentication configuration for ICS sources."""

    type: AuthType = AuthType.NONE
    username: Optional[str] = None
    password: Optional[str] = None
    bearer_token: Optional[str] = None

    def get_headers(self) -> dict[str, str]:
        """Get HTTP headers for authentication."""
        headers = {}

        if self.type == AuthType.BASIC and self.username and self.password:
            credentials = f"{self.username}:{self.password}"
            encoded = base64.b64encode(credentials.encode()).decode()
            headers["Authorization"] = f"Basic {encoded}"

        elif self.type == AuthType.BEARER and self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"

        return headers


class ICSSource(BaseModel):
    """Where to read a calendar document from."""

    url: str = Field(..., description="ICS calendar URL")
    auth: ICSAuth = Field(default_factory=ICSAuth, description="Authentication configuration")
    timeout: int = Field(default=30, description="HTTP timeout in seconds")

    model_config = ConfigDict(use_enum_values=True)


class ICSResponse(BaseModel):
    """Response from ICS fetch operation."""

    success: bool
    content: Optional[str] = None
    status_code: Optional[int] = None
    headers: dict[str, str] = Field(default_factory=dict)
    error_message: Optional[str] = None
    fetch_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def content_length(self) -> Optional[int]:
        """Get content length if available."""
        if self.content:
            return len(self.content.encode("utf-8"))
        return None


class DateKind(str, Enum):
    """Shape of a date-like iCalendar value."""

    DATE = "date"  # VALUE=DATE, no time of day
    LOCAL = "local"  # floating date-time, no zone attached
    ZONED = "zoned"  # UTC or TZID-qualified date-time


class DateValue(BaseModel):
    """A DTSTART/DTEND/RECURRENCE-ID/UNTIL value tagged with its shape.

    Every consumer normalizes through :meth:`to_instant`, so the rest of the
    code base only ever handles aware datetimes in the document zone.
    """

    kind: DateKind
    value: Union[datetime, date]

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_kind(self) -> "DateValue":
        is_datetime = isinstance(self.value, datetime)
        if self.kind == DateKind.DATE and is_datetime:
            raise ValueError("date kind requires a date value")
        if self.kind != DateKind.DATE and not is_datetime:
            raise ValueError(f"{self.kind.value} kind requires a datetime value")
        if self.kind == DateKind.LOCAL and self.value.tzinfo is not None:  # type: ignore[union-attr]
            raise ValueError("local kind requires a naive datetime")
        if self.kind == DateKind.ZONED and self.value.tzinfo is None:  # type: ignore[union-attr]
            raise ValueError("zoned kind requires an aware datetime")
        return self

    @classmethod
    def from_value(cls, value: Union[date, datetime]) -> "DateValue":
        """Tag a plain date or datetime with the matching kind."""
        if isinstance(value, datetime):
            kind = DateKind.LOCAL if value.tzinfo is None else DateKind.ZONED
            return cls(kind=kind, value=value)
        if isinstance(value, date):
            return cls(kind=DateKind.DATE, value=value)
        raise TypeError(f"Expected date or datetime, got {type(value).__name__}")

    @property
    def has_time(self) -> bool:
        """Whether the textual value carried a time-of-day component."""
        return self.kind != DateKind.DATE

    def to_instant(self, zone: tzinfo) -> datetime:
        """Normalize to an aware datetime expressed in ``zone``.

        Dates are anchored at local midnight and floating times keep their
        wall clock; zoned values keep their instant.
        """
        if self.kind == DateKind.DATE:
            return datetime(self.value.year, self.value.month, self.value.day, tzinfo=zone)
        if self.kind == DateKind.LOCAL:
            return self.value.replace(tzinfo=zone)  # type: ignore[call-arg]
        return self.value.astimezone(zone)  # type: ignore[union-attr]

    def shifted(self, delta: timedelta) -> "DateValue":
        """Return the same kind of value moved by ``delta``."""
        return DateValue(kind=self.kind, value=self.value + delta)


class Frequency(str, Enum):
    """RRULE FREQ values."""

    SECONDLY = "SECONDLY"
    MINUTELY = "MINUTELY"
    HOURLY = "HOURLY"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class RecurrenceRule(BaseModel):
    """The subset of an RRULE the feed interprets."""

    frequency: Frequency
    interval: int = Field(default=1, ge=1, description="Repeat every N periods")
    by_day: list[str] = Field(default_factory=list, description="BYDAY tokens, e.g. MO or -1FR")
    count: Optional[int] = Field(default=None, ge=1, description="Number of occurrences")
    until: Optional[DateValue] = Field(default=None, description="Inclusive end bound")

    model_config = ConfigDict(frozen=True)

    @field_validator("by_day", mode="before")
    @classmethod
    def _normalize_by_day(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            tokens = [str(token).strip().upper() for token in value if str(token).strip()]
            for token in tokens:
                if not BYDAY_PATTERN.match(token):
                    raise ValueError(f"Invalid BYDAY value: {token}")
            return tokens
        return value

    @model_validator(mode="after")
    def _check_bounds(self) -> "RecurrenceRule":
        if self.count is not None and self.until is not None:
            raise ValueError("RRULE cannot carry both COUNT and UNTIL")
        return self

    @property
    def weekdays(self) -> list[tuple[Optional[int], str]]:
        """BYDAY tokens split into (ordinal, weekday code) pairs."""
        pairs = []
        for token in self.by_day:
            match = BYDAY_PATTERN.match(token)
            if match:
                ordinal = int(match.group(1)) if match.group(1) else None
                pairs.append((ordinal, match.group(2)))
        return pairs


class RawCalendarEvent(BaseModel):
    """One VEVENT as read from the document, before any interpretation."""

    uid: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None

    start: Optional[DateValue] = None
    end: Optional[DateValue] = None

    rrule: Optional[RecurrenceRule] = None
    recurrence_id: Optional[DateValue] = Field(
        default=None, description="Original occurrence this event overrides"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def is_master(self) -> bool:
        """Event defines a recurring series."""
        return self.rrule is not None

    @property
    def is_override(self) -> bool:
        """Event replaces a single occurrence of another series."""
        return self.rrule is None and self.recurrence_id is not None


class ParsedCalendar(BaseModel):
    """Result of decoding one calendar document."""

    events: list[RawCalendarEvent] = Field(default_factory=list)
    timezone: str = Field(..., description="Resolved zone identifier of the document")
    calendar_name: Optional[str] = None
    prodid: Optional[str] = None

    total_components: int = 0
    skipped_components: int = 0
    warnings: list[str] = Field(default_factory=list)
