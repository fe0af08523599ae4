"""Unit tests for FullCalendar JSON encoding."""

import json
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from calendarfeed.feed.models import (
    CalendarEvent,
    RecurrentEventModification,
    epoch_millis,
    format_event_date,
)
from calendarfeed.feed.serializer import events_to_dicts, events_to_json

BERLIN = ZoneInfo("Europe/Berlin")

EXPECTED_KEYS = {
    "id",
    "title",
    "description",
    "location",
    "status",
    "start",
    "end",
    "allDay",
    "recurrent",
    "recEndDate",
    "recurrenceFreq",
    "groupId",
    "modificationList",
    "datesDifference",
}


@pytest.fixture
def series() -> CalendarEvent:
    event = CalendarEvent(
        id="standup",
        title="Café standup",
        start=datetime(2025, 1, 6, 10, 0, 0, 250000, tzinfo=BERLIN),
        end=datetime(2025, 1, 6, 10, 15, 42, 250000, tzinfo=BERLIN),
        recurrent=1,
        rec_end_date=datetime(2025, 1, 1, tzinfo=timezone.utc),
        recurrence_freq="WEEKLY",
        group_id="standup_group",
    )
    event.add_modification(
        RecurrentEventModification(
            original_date=datetime(2025, 1, 1, tzinfo=timezone.utc),
            modified_start_date=datetime(2025, 1, 13, 11, 30, tzinfo=BERLIN),
            modified_end_date=datetime(2025, 1, 13, 12, 0, tzinfo=BERLIN),
            modified_title="Moved",
        )
    )
    return event


class TestFormatEventDate:
    """Tests for date rendering."""

    def test_iso_uses_milliseconds(self):
        value = datetime(2025, 1, 6, 10, 15, 42, 250000, tzinfo=BERLIN)

        assert format_event_date(value) == "2025-01-06T10:15:42.250"

    def test_legacy_repeats_seconds(self):
        value = datetime(2025, 1, 6, 10, 15, 42, 250000, tzinfo=BERLIN)

        assert format_event_date(value, "legacy") == "2025-01-06T10:15:42.042"

    def test_wall_clock_of_own_zone(self):
        value = datetime(2025, 7, 1, 8, 0, tzinfo=timezone.utc).astimezone(BERLIN)

        assert format_event_date(value) == "2025-07-01T10:00:00.000"

    def test_epoch_millis(self):
        assert epoch_millis(datetime(2025, 1, 1, tzinfo=timezone.utc)) == 1735689600000


class TestEventsToDicts:
    """Tests for record encoding."""

    def test_keys(self, series):
        (record,) = events_to_dicts([series])

        assert set(record) == EXPECTED_KEYS
        assert set(record["modificationList"][0]) == {
            "originalDate",
            "modifiedStartDate",
            "modifiedEndDate",
            "modifiedTitle",
            "modifiedDescription",
        }

    def test_iso_format(self, series):
        (record,) = events_to_dicts([series], "iso")

        assert record["start"] == "2025-01-06T10:00:00.250"
        assert record["end"] == "2025-01-06T10:15:42.250"
        assert record["recEndDate"] == "2025-01-01T00:00:00.000"
        assert record["datesDifference"] == 942000
        assert record["recurrent"] == 1
        assert record["allDay"] is False
        assert record["modificationList"][0]["modifiedStartDate"] == "2025-01-13T11:30:00.000"
        assert record["modificationList"][0]["modifiedDescription"] == ""

    def test_legacy_format(self, series):
        (record,) = events_to_dicts([series], "legacy")

        assert record["start"] == "2025-01-06T10:00:00.000"
        assert record["end"] == "2025-01-06T10:15:42.042"
        assert record["recEndDate"] == 1735689600000
        assert record["modificationList"][0]["originalDate"] == 1735689600000

    def test_plain_event_has_null_recurrence_fields(self):
        event = CalendarEvent(
            id="x",
            start=datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc),
            end=datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc),
        )

        (record,) = events_to_dicts([event])

        assert record["recEndDate"] is None
        assert record["recurrenceFreq"] is None
        assert record["groupId"] is None
        assert record["modificationList"] == []
        assert record["datesDifference"] == 0

    def test_unknown_format(self, series):
        with pytest.raises(ValueError, match="Unsupported date format"):
            events_to_dicts([series], "rfc2822")


class TestEventsToJson:
    """Tests for the JSON text."""

    def test_json_array_keeps_non_ascii(self, series):
        text = events_to_json([series])

        assert "Café standup" in text
        assert json.loads(text)[0]["id"] == "standup"

    def test_indent(self, series):
        assert events_to_json([series], indent=2).startswith("[\n  {")

    def test_empty(self):
        assert events_to_json([]) == "[]"
