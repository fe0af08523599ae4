"""Unit tests for CalendarPipeline."""

from datetime import datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from calendarfeed.feed.pipeline import CalendarPipeline, EventQuery
from calendarfeed.ics.exceptions import ICSContentError
from calendarfeed.ics.models import ParsedCalendar

BERLIN = ZoneInfo("Europe/Berlin")


def _berlin(month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(2025, month, day, hour, minute, tzinfo=BERLIN)


@pytest.fixture
def pipeline(test_settings: Any) -> CalendarPipeline:
    return CalendarPipeline(test_settings)


class TestCalendarPipeline:
    """End-to-end runs over a decoded calendar."""

    def test_without_query_every_event_is_emitted(
        self, pipeline: CalendarPipeline, recurring_ics_content: str
    ) -> None:
        result = pipeline.run_ics(recurring_ics_content)

        # The override is moved behind the other events
        assert [e.id for e in result] == ["standup", "holiday", "lunch", "standup"]
        assert result[0].start == _berlin(1, 6, 10)
        assert result[1].all_day is True
        assert result[2].end - result[2].start == timedelta(days=1)

    def test_expand_window(self, pipeline: CalendarPipeline, recurring_ics_content: str) -> None:
        query = EventQuery(interval_start=datetime(2025, 1, 6), interval_end=datetime(2025, 1, 31))

        result = pipeline.run_ics(recurring_ics_content, query)

        assert [e.id for e in result] == [
            "standup_0",
            "standup_1",
            "standup_2",
            "standup_3",
            "holiday",
            "lunch",
            "standup",
        ]
        assert [e.start for e in result[:4]] == [_berlin(1, d, 10) for d in (6, 13, 20, 27)]
        assert all(e.end - e.start == timedelta(minutes=15) for e in result[:4])

    def test_collapse_window(self, pipeline: CalendarPipeline, recurring_ics_content: str) -> None:
        query = EventQuery(
            interval_start=datetime(2025, 1, 6),
            interval_end=datetime(2025, 1, 31),
            collapse=True,
        )

        result = pipeline.run_ics(recurring_ics_content, query)

        assert [e.id for e in result] == ["standup", "holiday", "lunch"]
        series = result[0]
        assert series.recurrent == 1
        assert series.recurrence_freq == "WEEKLY"
        assert series.group_id == "standup_group"
        assert series.rec_end_date == _berlin(2, 3, 10)

        (modification,) = series.modification_list
        assert modification.original_date == _berlin(1, 13, 10)
        assert modification.modified_start_date == _berlin(1, 13, 11, 30)
        assert modification.modified_title == "Standup (moved)"

    def test_collapse_window_without_matches(
        self, pipeline: CalendarPipeline, recurring_ics_content: str
    ) -> None:
        query = EventQuery(
            interval_start=datetime(2025, 2, 10),
            interval_end=datetime(2025, 2, 20),
            collapse=True,
        )

        assert pipeline.run_ics(recurring_ics_content, query) == []

    def test_window_start_only(self, pipeline: CalendarPipeline, recurring_ics_content: str) -> None:
        query = EventQuery(interval_start=datetime(2025, 1, 14))

        result = pipeline.run_ics(recurring_ics_content, query)

        assert [e.id for e in result] == ["standup_0", "standup_1", "holiday", "lunch", "standup"]
        assert [e.start for e in result[:2]] == [_berlin(1, 20, 10), _berlin(1, 27, 10)]

    def test_aware_bounds_are_converted(
        self, pipeline: CalendarPipeline, recurring_ics_content: str
    ) -> None:
        # 09:30 UTC is 10:30 in Berlin, after the 10:00 occurrence
        query = EventQuery(
            interval_start=datetime.fromisoformat("2025-01-20T09:30:00+00:00"),
            interval_end=datetime.fromisoformat("2025-01-31T00:00:00+00:00"),
        )

        result = pipeline.run_ics(recurring_ics_content, query)

        assert [e.id for e in result] == ["standup_0"]
        assert result[0].start == _berlin(1, 27, 10)

    def test_events_without_start_are_skipped(
        self, pipeline: CalendarPipeline, make_raw_event
    ) -> None:
        calendar = ParsedCalendar(
            timezone="UTC",
            events=[
                make_raw_event(uid="nostart"),
                make_raw_event(uid="ok", start=datetime(2025, 1, 6, 9, 0)),
            ],
        )

        assert [e.id for e in pipeline.run(calendar)] == ["ok"]

    def test_process_uses_default_zone_when_none_declared(
        self, pipeline: CalendarPipeline, make_raw_event
    ) -> None:
        (event,) = pipeline.process([make_raw_event(start=datetime(2025, 1, 6, 9, 0))], None)

        assert event.start.utcoffset() == timedelta(0)

    def test_run_ics_propagates_decode_errors(self, pipeline: CalendarPipeline) -> None:
        with pytest.raises(ICSContentError):
            pipeline.run_ics("")

    def test_pipeline_keeps_no_request_state(
        self, pipeline: CalendarPipeline, recurring_ics_content: str
    ) -> None:
        collapsed = EventQuery(
            interval_start=datetime(2025, 1, 1),
            interval_end=datetime(2025, 1, 31),
            collapse=True,
        )

        first = pipeline.run_ics(recurring_ics_content, collapsed)
        second = pipeline.run_ics(recurring_ics_content, collapsed)

        assert len(first[0].modification_list) == 1
        assert len(second[0].modification_list) == 1
