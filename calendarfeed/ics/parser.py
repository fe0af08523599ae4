"""iCalendar decoder producing RawCalendarEvent values."""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional, Union, cast

from icalendar import Calendar, Event as ICalEvent

from ..config.settings import CalendarFeedSettings
from ..timezone import TimezoneService, get_timezone_service
from .exceptions import ICSContentError, ICSParseError
from .models import DateValue, ParsedCalendar, RawCalendarEvent, RecurrenceRule
from .rrule_expander import RRuleExpander, RRuleParseError

logger = logging.getLogger(__name__)


class ICSParser:
    """Decodes iCalendar text into immutable raw events.

    The parser does not interpret recurrence; it only reads what each VEVENT
    declares. Events that cannot be read are skipped and reported in
    ``ParsedCalendar.warnings``.
    """

    def __init__(
        self,
        settings: CalendarFeedSettings,
        timezone_service: Optional[TimezoneService] = None,
    ) -> None:
        self.settings = settings
        self.timezone_service = timezone_service or get_timezone_service(
            settings.default_timezone
        )
        self.rrule_expander = RRuleExpander(settings)

    def parse(self, ics_content: Union[str, bytes], source: Optional[str] = None) -> ParsedCalendar:
        """Parse ICS content into raw events and calendar metadata.

        Args:
            ics_content: Raw ICS document
            source: Optional URL or path, only used in error messages

        Returns:
            Decoded calendar

        Raises:
            ICSContentError: If the content is empty or not a VCALENDAR.
            ICSParseError: If icalendar cannot decode the content.
        """
        if isinstance(ics_content, bytes):
            try:
                ics_content = ics_content.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ICSParseError(f"ICS content is not valid UTF-8: {e}", source=source) from e

        if not ics_content or not ics_content.strip():
            raise ICSContentError("Empty ICS content", source=source)

        try:
            calendar = Calendar.from_ical(ics_content)
        except (ValueError, KeyError, IndexError) as e:
            raise ICSParseError(f"Failed to parse ICS content: {e}", source=source) from e

        if getattr(calendar, "name", None) != "VCALENDAR":
            raise ICSContentError("Content is not a VCALENDAR document", source=source)

        calendar = cast("Calendar", calendar)
        timezone_name = self.timezone_service.resolve_name(self._declared_timezone(calendar))

        events: list[RawCalendarEvent] = []
        warnings: list[str] = []
        total_components = 0
        skipped = 0

        for component in calendar.walk():
            total_components += 1
            if component.name != "VEVENT":
                continue

            try:
                event = self._parse_event_component(cast("ICalEvent", component), warnings)
            except (ValueError, TypeError, AttributeError, KeyError) as e:
                warning = f"Failed to parse event: {e}"
                warnings.append(warning)
                logger.warning(warning)
                skipped += 1
                continue

            events.append(event)

        logger.debug(
            f"Parsed {len(events)} events from ICS content "
            f"(timezone={timezone_name}, skipped={skipped})"
        )

        return ParsedCalendar(
            events=events,
            timezone=timezone_name,
            calendar_name=self._get_calendar_property(calendar, "X-WR-CALNAME"),
            prodid=self._get_calendar_property(calendar, "PRODID"),
            total_components=total_components,
            skipped_components=skipped,
            warnings=warnings,
        )

    def _declared_timezone(self, calendar: Calendar) -> Optional[str]:
        """Zone named by X-WR-TIMEZONE, else by the first VTIMEZONE."""
        timezone_str = self._get_calendar_property(calendar, "X-WR-TIMEZONE")
        if timezone_str:
            return timezone_str

        for component in calendar.walk("VTIMEZONE"):
            tzid = component.get("TZID")
            if tzid:
                return str(tzid)
        return None

    def _parse_event_component(
        self, component: ICalEvent, warnings: list[str]
    ) -> RawCalendarEvent:
        """Read one VEVENT without interpreting it."""
        uid = self._text(component.get("UID"))

        start = self._parse_date_value(component.get("DTSTART"))
        end = self._parse_date_value(component.get("DTEND"))
        if end is None and start is not None:
            duration = component.get("DURATION")
            if duration is not None and isinstance(duration.dt, timedelta):
                end = start.shifted(duration.dt)

        return RawCalendarEvent(
            uid=uid,
            summary=self._text(component.get("SUMMARY")),
            description=self._text(component.get("DESCRIPTION")),
            location=self._text(component.get("LOCATION")),
            status=self._text(component.get("STATUS")),
            start=start,
            end=end,
            rrule=self._parse_rrule(component.get("RRULE"), uid, warnings),
            recurrence_id=self._parse_date_value(component.get("RECURRENCE-ID")),
        )

    def _parse_rrule(
        self, rrule_prop: Any, uid: Optional[str], warnings: list[str]
    ) -> Optional[RecurrenceRule]:
        """Read RRULE; a rule we cannot understand turns the event into a plain one."""
        if rrule_prop is None:
            return None

        if isinstance(rrule_prop, list):
            if len(rrule_prop) > 1:
                logger.debug(f"Event {uid} has {len(rrule_prop)} RRULEs, using the first")
            rrule_prop = rrule_prop[0]

        rrule_string = (
            rrule_prop.to_ical().decode("utf-8")
            if hasattr(rrule_prop, "to_ical")
            else str(rrule_prop)
        )

        try:
            return self.rrule_expander.parse_rrule_string(rrule_string)
        except RRuleParseError as e:
            warning = f"Ignoring unreadable RRULE on event {uid}: {e}"
            warnings.append(warning)
            logger.warning(warning)
            return None

    def _parse_date_value(self, dt_prop: Any) -> Optional[DateValue]:
        """Convert a DTSTART/DTEND/RECURRENCE-ID property into a DateValue."""
        if dt_prop is None:
            return None
        if isinstance(dt_prop, list):
            dt_prop = dt_prop[0]

        dt = dt_prop.dt
        if isinstance(dt, datetime) and dt.tzinfo is None:
            # TZIDs icalendar could not load itself (e.g. Windows names)
            tzid = dt_prop.params.get("TZID") if hasattr(dt_prop, "params") else None
            if tzid:
                dt = dt.replace(tzinfo=self.timezone_service.resolve(str(tzid)))
        elif not isinstance(dt, date):
            raise TypeError(f"Unsupported date value {dt!r}")

        return DateValue.from_value(dt)

    def _text(self, prop: Any) -> Optional[str]:
        if prop is None:
            return None
        return str(prop)

    def _get_calendar_property(self, calendar: Calendar, prop_name: str) -> Optional[str]:
        """Get calendar-level property as a string, or None if absent."""
        prop = calendar.get(prop_name)
        return str(prop) if prop else None
