"""Unit tests for interval helpers."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from calendarfeed.feed.intervals import intersects, to_instant
from calendarfeed.ics.models import DateValue

BERLIN = ZoneInfo("Europe/Berlin")


def _at(hour: int) -> datetime:
    return datetime(2025, 1, 6, hour, tzinfo=timezone.utc)


@pytest.mark.unit
@pytest.mark.fast
class TestIntersects:
    """Tests for the window intersection rule."""

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            ((10, 11), (9, 12), True),  # A inside B
            ((8, 10), (9, 12), True),  # A ends inside B
            ((11, 13), (9, 12), True),  # A starts inside B
            ((9, 12), (10, 11), False),  # A contains B
            ((9, 10), (10, 11), False),  # A ends on B's start
            ((11, 12), (10, 11), False),  # A starts on B's end
            ((9, 12), (9, 12), False),  # identical spans
            ((6, 7), (9, 12), False),  # disjoint
        ],
    )
    def test_intersects(self, a, b, expected):
        assert intersects(_at(a[0]), _at(a[1]), _at(b[0]), _at(b[1])) is expected

    def test_zero_length_event_inside_window(self):
        assert intersects(_at(10), _at(10), _at(9), _at(12)) is True


@pytest.mark.unit
class TestToInstant:
    """Tests for date-like normalization."""

    def test_date_is_local_midnight(self):
        assert to_instant(date(2025, 1, 6), BERLIN) == datetime(2025, 1, 6, tzinfo=BERLIN)

    def test_naive_datetime_keeps_wall_clock(self):
        result = to_instant(datetime(2025, 1, 6, 9, 30), BERLIN)

        assert (result.hour, result.minute) == (9, 30)
        assert result.tzinfo == BERLIN

    def test_aware_datetime_keeps_instant(self):
        result = to_instant(_at(9), BERLIN)

        assert result.hour == 10
        assert result == _at(9)

    def test_date_value(self):
        value = DateValue.from_value(date(2025, 7, 1))

        assert to_instant(value, BERLIN).utcoffset().total_seconds() == 7200
