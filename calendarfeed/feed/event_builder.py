"""Turns one raw VEVENT into a draft output record."""

import logging
from datetime import timedelta, tzinfo
from typing import Optional

from ..ics.models import RawCalendarEvent
from .intervals import to_instant
from .models import CalendarEvent

logger = logging.getLogger(__name__)

# Events without DTEND/DURATION last one calendar day
DEFAULT_EVENT_LENGTH = timedelta(days=1)


def is_all_day(raw: RawCalendarEvent) -> bool:
    """All-day only when neither DTSTART nor DTEND carries a time of day."""
    if raw.start is not None and raw.start.has_time:
        return False
    return not (raw.end is not None and raw.end.has_time)


def build_event(raw: RawCalendarEvent, zone: tzinfo) -> Optional[CalendarEvent]:
    """Build the draft record for ``raw`` in the document zone.

    Returns None when the event has no start, which callers treat as
    "skip this event".
    """
    if raw.start is None:
        logger.debug(f"Event {raw.uid!r} has no DTSTART, skipping")
        return None

    start = to_instant(raw.start, zone)
    if raw.end is not None:
        end = to_instant(raw.end, zone)
    else:
        # Wall-clock day, so DST changes do not shift the end time
        end = start + DEFAULT_EVENT_LENGTH

    if end < start:
        logger.warning(f"Event {raw.uid!r} ends before it starts, using start as end")
        end = start

    return CalendarEvent(
        id=raw.uid or "",
        title=raw.summary or "",
        description=raw.description or "",
        location=raw.location or "",
        status=raw.status or "",
        start=start,
        end=end,
        all_day=is_all_day(raw),
        recurrent=0,
    )
