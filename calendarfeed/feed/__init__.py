"""Recurrence resolution and interval matching for calendar feeds."""

from .event_builder import build_event, is_all_day
from .intervals import intersects, to_instant
from .models import CalendarEvent, RecurrentEventModification, format_event_date
from .pipeline import CalendarPipeline, EventQuery
from .recurrence import RecurrenceClassifier
from .sequencer import sequence_events
from .serializer import events_to_dicts, events_to_json
from .service import CalendarFeedService

__all__ = [
    "CalendarEvent",
    "CalendarFeedService",
    "CalendarPipeline",
    "EventQuery",
    "RecurrenceClassifier",
    "RecurrentEventModification",
    "build_event",
    "events_to_dicts",
    "events_to_json",
    "format_event_date",
    "intersects",
    "is_all_day",
    "sequence_events",
    "to_instant",
]
