"""Recurrence classification: expand, collapse, attach override, or pass through."""

import logging
from datetime import datetime, tzinfo
from typing import Optional

from ..ics.models import RawCalendarEvent, RecurrenceRule
from ..ics.rrule_expander import RRuleExpander, RRuleExpansionError, frequency_label
from .intervals import intersects, to_instant
from .models import CalendarEvent, RecurrentEventModification, group_id_for

logger = logging.getLogger(__name__)


class RecurrenceClassifier:
    """Decides what each sequenced event contributes to the output list.

    One instance serves one request: it owns the output list and the lookup
    of emitted records by id that overrides are attached through. The first
    record emitted under an id is the one overrides attach to.
    """

    def __init__(
        self,
        expander: RRuleExpander,
        zone: tzinfo,
        interval_start: Optional[datetime] = None,
        interval_end: Optional[datetime] = None,
        collapse: bool = False,
    ) -> None:
        self.expander = expander
        self.zone = zone
        self.interval_start = interval_start
        self.interval_end = interval_end
        self.collapse = collapse

        self.output: list[CalendarEvent] = []
        self._emitted: dict[str, CalendarEvent] = {}

    @property
    def has_bounds(self) -> bool:
        return self.interval_start is not None and self.interval_end is not None

    def classify(self, raw: RawCalendarEvent, draft: CalendarEvent) -> None:
        """Feed one event; the result, if any, is appended to ``output``."""
        if self.interval_start is None and self.interval_end is None and not self.collapse:
            self._emit(draft)
            return

        if raw.rrule is not None:
            try:
                self._handle_recurring(raw, raw.rrule, draft)
            except RRuleExpansionError as e:
                logger.warning(f"Cannot evaluate RRULE of event {draft.id!r}, treating as single: {e}")
            else:
                return
        elif self.collapse and raw.recurrence_id is not None:
            self._attach_override(raw, draft)
            return

        if not self.has_bounds or intersects(
            draft.start, draft.end, self.interval_start, self.interval_end  # type: ignore[arg-type]
        ):
            self._emit(draft)

    def _handle_recurring(
        self, raw: RawCalendarEvent, rule: RecurrenceRule, draft: CalendarEvent
    ) -> None:
        if raw.start is None:
            raise RRuleExpansionError("Recurring event has no start")

        if self.collapse:
            if self.has_bounds and not self.expander.occurrences(
                rule, raw.start, self.zone, self.interval_start, self.interval_end
            ):
                logger.debug(f"Series {draft.id!r} has no occurrence in the window, dropping")
                return
            self._emit(self._collapsed(rule, draft))
            return

        occurrences = self.expander.occurrences(
            rule, raw.start, self.zone, self.interval_start, self.interval_end
        )
        for index, occurrence in enumerate(occurrences):
            self._emit(draft.as_occurrence(occurrence, index))

    def _collapsed(self, rule: RecurrenceRule, draft: CalendarEvent) -> CalendarEvent:
        draft.recurrent = 1
        draft.group_id = group_id_for(draft.id)
        draft.rec_end_date = self.expander.recurrence_end_date(rule, draft.start, self.zone)
        draft.recurrence_freq = frequency_label(rule)
        return draft

    def _attach_override(self, raw: RawCalendarEvent, draft: CalendarEvent) -> None:
        master = self._emitted.get(draft.id)
        if master is None:
            logger.debug(f"No emitted series for override of {draft.id!r}, dropping it")
            return

        master.add_modification(
            RecurrentEventModification(
                original_date=to_instant(raw.recurrence_id, self.zone),  # type: ignore[arg-type]
                modified_start_date=draft.start,
                modified_end_date=draft.end,
                modified_title=draft.title,
                modified_description=draft.description,
            )
        )

    def _emit(self, record: CalendarEvent) -> None:
        self.output.append(record)
        self._emitted.setdefault(record.id, record)
