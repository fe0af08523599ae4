"""Output records handed to FullCalendar."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from pydantic import BaseModel, Field, FieldSerializationInfo, computed_field, field_serializer

DATE_FORMAT_ISO = "iso"
DATE_FORMAT_LEGACY = "legacy"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_event_date(value: datetime, date_format: str = DATE_FORMAT_ISO) -> str:
    """Render an aware datetime as wall-clock text in its own zone.

    ``iso`` gives ``YYYY-MM-DDTHH:MM:SS.mmm`` with real milliseconds. ``legacy``
    reproduces the historical pattern whose fraction is the zero-padded
    seconds value (``10:15:42`` becomes ``10:15:42.042``).
    """
    base = value.strftime("%Y-%m-%dT%H:%M:%S")
    if date_format == DATE_FORMAT_LEGACY:
        return f"{base}.{value.second:03d}"
    return f"{base}.{value.microsecond // 1000:03d}"


def epoch_millis(value: datetime) -> int:
    """Milliseconds since the Unix epoch."""
    return (value - _EPOCH) // timedelta(milliseconds=1)


def _date_format(info: FieldSerializationInfo) -> str:
    context = info.context or {}
    return context.get("date_format", DATE_FORMAT_ISO)


def _serialize_secondary_date(
    value: Optional[datetime], info: FieldSerializationInfo
) -> Union[str, int, None]:
    """Dates other than start/end: text in iso mode, epoch millis in legacy mode."""
    if value is None:
        return None
    date_format = _date_format(info)
    if date_format == DATE_FORMAT_LEGACY:
        return epoch_millis(value)
    return format_event_date(value, date_format)


class RecurrentEventModification(BaseModel):
    """Replacement details for one occurrence of a collapsed series."""

    original_date: Optional[datetime] = Field(
        default=None, serialization_alias="originalDate", description="Occurrence replaced"
    )
    modified_start_date: Optional[datetime] = Field(
        default=None, serialization_alias="modifiedStartDate"
    )
    modified_end_date: Optional[datetime] = Field(
        default=None, serialization_alias="modifiedEndDate"
    )
    modified_title: str = Field(default="", serialization_alias="modifiedTitle")
    modified_description: str = Field(default="", serialization_alias="modifiedDescription")

    @field_serializer("original_date", "modified_start_date", "modified_end_date")
    def serialize_dates(
        self, value: Optional[datetime], info: FieldSerializationInfo
    ) -> Union[str, int, None]:
        return _serialize_secondary_date(value, info)


class CalendarEvent(BaseModel):
    """One display-ready event record.

    Built from a raw VEVENT and then mutated while recurrence is resolved:
    occurrences get their own id and group, collapsed series get the
    recurrence summary fields, and overrides land in ``modification_list``.
    """

    id: str = Field(default="", description="Event UID or occurrence id")
    title: str = Field(default="", description="SUMMARY")
    description: str = Field(default="", description="DESCRIPTION")
    location: str = Field(default="", description="LOCATION")
    status: str = Field(default="", description="STATUS")

    start: datetime = Field(..., description="Start in the document zone")
    end: datetime = Field(..., description="End in the document zone")
    all_day: bool = Field(default=False, serialization_alias="allDay")

    # Recurrence summary, only meaningful when recurrent == 1
    recurrent: int = Field(default=0, ge=0, le=1, description="1 for a collapsed series")
    rec_end_date: Optional[datetime] = Field(default=None, serialization_alias="recEndDate")
    recurrence_freq: Optional[str] = Field(default=None, serialization_alias="recurrenceFreq")
    group_id: Optional[str] = Field(default=None, serialization_alias="groupId")

    modification_list: list[RecurrentEventModification] = Field(
        default_factory=list, serialization_alias="modificationList"
    )

    @property
    def dates_difference(self) -> timedelta:
        """Elapsed time between start and end, DST shifts included."""
        return self.end.astimezone(timezone.utc) - self.start.astimezone(timezone.utc)

    @computed_field(alias="datesDifference")  # type: ignore[prop-decorator]
    @property
    def dates_difference_ms(self) -> int:
        """Duration in milliseconds, as exposed to the calendar UI."""
        return self.dates_difference // timedelta(milliseconds=1)

    def add_modification(self, modification: RecurrentEventModification) -> None:
        self.modification_list.append(modification)

    def as_occurrence(self, start: datetime, index: int) -> "CalendarEvent":
        """Copy of this record moved to ``start``, keeping its elapsed duration."""
        end = (start.astimezone(timezone.utc) + self.dates_difference).astimezone(start.tzinfo)
        return self.model_copy(
            update={
                "id": f"{self.id}_{index}",
                "start": start,
                "end": end,
                "group_id": group_id_for(self.id),
                "modification_list": list(self.modification_list),
            }
        )

    @field_serializer("start", "end")
    def serialize_bounds(self, value: datetime, info: FieldSerializationInfo) -> str:
        return format_event_date(value, _date_format(info))

    @field_serializer("rec_end_date")
    def serialize_rec_end_date(
        self, value: Optional[datetime], info: FieldSerializationInfo
    ) -> Union[str, int, None]:
        return _serialize_secondary_date(value, info)


def group_id_for(event_id: str) -> str:
    """Group identifier shared by every record of one series."""
    return f"{event_id}_group"
