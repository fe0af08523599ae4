"""Shared test configuration and fixtures for calendarfeed."""

import os
from collections.abc import Callable, Iterator
from datetime import date, datetime
from typing import Any, Optional, Union
from unittest.mock import patch

import pytest

from calendarfeed.config.settings import CalendarFeedSettings, reset_settings
from calendarfeed.ics.models import DateValue, RawCalendarEvent, RecurrenceRule
from calendarfeed.ics.rrule_expander import RRuleExpander
from calendarfeed.timezone import TimezoneService


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast isolated unit tests")
    config.addinivalue_line("markers", "fast: tests that finish in milliseconds")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep CALENDARFEED_* variables and config files of the host out of tests."""
    for key in list(os.environ):
        if key.startswith("CALENDARFEED_"):
            monkeypatch.delenv(key)

    reset_settings()
    with patch.object(CalendarFeedSettings, "_find_config_file", return_value=None):
        yield
    reset_settings()


@pytest.fixture
def test_settings() -> CalendarFeedSettings:
    """Real settings object with test-friendly retry timings."""
    return CalendarFeedSettings(
        default_timezone="UTC",
        max_occurrences=1000,
        max_retries=2,
        retry_backoff_factor=0.0,
        request_timeout=5,
        app_name="CalendarFeed-Test",
    )


@pytest.fixture
def timezone_service() -> TimezoneService:
    return TimezoneService(default_timezone="UTC")


@pytest.fixture
def make_raw_event() -> Callable[..., RawCalendarEvent]:
    """Factory for RawCalendarEvent accepting plain dates/datetimes and RRULE strings."""

    def _make(
        uid: str = "event-1",
        start: Optional[Union[date, datetime]] = None,
        end: Optional[Union[date, datetime]] = None,
        rrule: Optional[Union[str, RecurrenceRule]] = None,
        recurrence_id: Optional[Union[date, datetime]] = None,
        **fields: Any,
    ) -> RawCalendarEvent:
        if isinstance(rrule, str):
            rrule = RRuleExpander(CalendarFeedSettings()).parse_rrule_string(rrule)

        return RawCalendarEvent(
            uid=uid,
            start=DateValue.from_value(start) if start is not None else None,
            end=DateValue.from_value(end) if end is not None else None,
            rrule=rrule,
            recurrence_id=(
                DateValue.from_value(recurrence_id) if recurrence_id is not None else None
            ),
            **fields,
        )

    return _make


@pytest.fixture
def recurring_ics_content():
    """Berlin calendar with a weekly series, an override listed first, and single events."""
    return """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Test Company//Test Product//EN
X-WR-TIMEZONE:Europe/Berlin
BEGIN:VEVENT
UID:standup
RECURRENCE-ID;TZID=Europe/Berlin:20250113T100000
DTSTART;TZID=Europe/Berlin:20250113T113000
DTEND;TZID=Europe/Berlin:20250113T120000
SUMMARY:Standup (moved)
DESCRIPTION:Moved because of the offsite
END:VEVENT
BEGIN:VEVENT
UID:standup
DTSTART;TZID=Europe/Berlin:20250106T100000
DTEND;TZID=Europe/Berlin:20250106T101500
RRULE:FREQ=WEEKLY;BYDAY=MO;COUNT=4
SUMMARY:Standup
END:VEVENT
BEGIN:VEVENT
UID:holiday
DTSTART;VALUE=DATE:20250110
DTEND;VALUE=DATE:20250111
SUMMARY:Holiday
END:VEVENT
BEGIN:VEVENT
UID:lunch
DTSTART:20250108T120000
SUMMARY:Lunch
END:VEVENT
END:VCALENDAR"""

