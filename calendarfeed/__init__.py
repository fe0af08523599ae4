"""calendarfeed - iCalendar to FullCalendar event feed.

Reads an ICS document, resolves recurring series and per-instance overrides
over a requested window and emits display-ready event records.
"""

__version__ = "1.0.0"
__author__ = "CalendarFeed Team"

from .feed.pipeline import CalendarPipeline, EventQuery
from .feed.service import CalendarFeedService

__all__ = [
    "CalendarFeedService",
    "CalendarPipeline",
    "EventQuery",
    "__version__",
]
