"""Per-calendar pass: sequence, build, classify, collect."""

import logging
from collections.abc import Iterable
from datetime import datetime, tzinfo
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..config.settings import CalendarFeedSettings, get_settings
from ..ics.models import ParsedCalendar, RawCalendarEvent
from ..ics.parser import ICSParser
from ..ics.rrule_expander import RRuleExpander
from ..timezone import TimezoneService, get_timezone_service
from .event_builder import build_event
from .intervals import to_instant
from .models import CalendarEvent
from .recurrence import RecurrenceClassifier
from .sequencer import sequence_events

logger = logging.getLogger(__name__)


class EventQuery(BaseModel):
    """What the caller wants out of one calendar."""

    interval_start: Optional[datetime] = Field(
        default=None, description="Window start; naive values are read in the document zone"
    )
    interval_end: Optional[datetime] = Field(
        default=None, description="Window end; naive values are read in the document zone"
    )
    collapse: bool = Field(default=False, description="Summarize series instead of expanding")


class CalendarPipeline:
    """Runs the recurrence engine over decoded calendars.

    Holds no per-request state; every call builds its own classifier, so a
    single pipeline can serve concurrent requests.
    """

    def __init__(
        self,
        settings: Optional[CalendarFeedSettings] = None,
        timezone_service: Optional[TimezoneService] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.timezone_service = timezone_service or get_timezone_service(
            self.settings.default_timezone
        )
        self.expander = RRuleExpander(self.settings)
        self.parser = ICSParser(self.settings, self.timezone_service)

    def process(
        self,
        events: Iterable[RawCalendarEvent],
        timezone_name: Optional[str],
        query: Optional[EventQuery] = None,
    ) -> list[CalendarEvent]:
        """Turn raw events of one document into ordered output records."""
        query = query or EventQuery()
        zone = self.timezone_service.resolve(timezone_name)

        classifier = RecurrenceClassifier(
            self.expander,
            zone,
            interval_start=self._bound(query.interval_start, zone),
            interval_end=self._bound(query.interval_end, zone),
            collapse=query.collapse,
        )

        skipped = 0
        for raw in sequence_events(events):
            draft = build_event(raw, zone)
            if draft is None:
                skipped += 1
                continue
            classifier.classify(raw, draft)

        logger.debug(
            f"Produced {len(classifier.output)} records "
            f"(collapse={query.collapse}, skipped={skipped})"
        )
        return classifier.output

    def run(self, calendar: ParsedCalendar, query: Optional[EventQuery] = None) -> list[CalendarEvent]:
        """Process a decoded calendar."""
        return self.process(calendar.events, calendar.timezone, query)

    def run_ics(
        self,
        ics_content: Union[str, bytes],
        query: Optional[EventQuery] = None,
        source: Optional[str] = None,
    ) -> list[CalendarEvent]:
        """Decode ``ics_content`` and process it.

        Raises:
            ICSParseError: If the document cannot be decoded.
        """
        return self.run(self.parser.parse(ics_content, source=source), query)

    def _bound(self, value: Optional[datetime], zone: tzinfo) -> Optional[datetime]:
        if value is None:
            return None
        return to_instant(value, zone)
