"""Interval helpers shared by the event builder and the recurrence classifier."""

from datetime import date, datetime, tzinfo
from typing import Union

from ..ics.models import DateValue

DateLike = Union[DateValue, date, datetime]


def intersects(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Whether span A pokes into span B.

    True when A's end or A's start lies strictly between B's bounds. A span
    that fully contains B, or that only touches one of its bounds, does not
    count. Calendar consumers rely on exactly this behavior, so do not
    replace it with a general overlap test.
    """
    return (b_start < a_end < b_end) or (b_start < a_start < b_end)


def to_instant(value: DateLike, zone: tzinfo) -> datetime:
    """Normalize any date-like value to an aware datetime in ``zone``.

    Dates become local midnight, naive datetimes keep their wall clock and
    aware datetimes keep their instant.
    """
    if isinstance(value, DateValue):
        return value.to_instant(zone)
    return DateValue.from_value(value).to_instant(zone)
