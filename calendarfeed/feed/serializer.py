"""JSON encoding of output records for FullCalendar."""

import json
from collections.abc import Iterable
from typing import Any, Optional

from .models import DATE_FORMAT_ISO, DATE_FORMAT_LEGACY, CalendarEvent

SUPPORTED_DATE_FORMATS = (DATE_FORMAT_ISO, DATE_FORMAT_LEGACY)


def events_to_dicts(
    events: Iterable[CalendarEvent], date_format: str = DATE_FORMAT_ISO
) -> list[dict[str, Any]]:
    """Records as JSON-ready dicts keyed the way FullCalendar expects."""
    if date_format not in SUPPORTED_DATE_FORMATS:
        raise ValueError(f"Unsupported date format: {date_format}")

    return [
        event.model_dump(mode="json", by_alias=True, context={"date_format": date_format})
        for event in events
    ]


def events_to_json(
    events: Iterable[CalendarEvent],
    date_format: str = DATE_FORMAT_ISO,
    indent: Optional[int] = None,
) -> str:
    """Encode records as a JSON array."""
    return json.dumps(events_to_dicts(events, date_format), indent=indent, ensure_ascii=False)
