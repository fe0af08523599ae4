"""Orders raw events so recurrence masters come before their overrides."""

from collections.abc import Iterable

from ..ics.models import RawCalendarEvent


def sequence_events(events: Iterable[RawCalendarEvent]) -> list[RawCalendarEvent]:
    """Move override-only events behind everything else.

    Masters and plain events keep their document order, as do overrides
    among themselves. The input is not modified.
    """
    return sorted(events, key=lambda event: event.is_override)
