"""RRULE parsing and occurrence generation for calendarfeed."""

# ruff: noqa: I001
from datetime import datetime, time, timedelta, timezone, tzinfo
import logging
from types import MappingProxyType
from typing import Optional

from dateutil.rrule import (
    DAILY,
    FR,
    HOURLY,
    MINUTELY,
    MO,
    MONTHLY,
    SA,
    SECONDLY,
    SU,
    TH,
    TU,
    WE,
    WEEKLY,
    YEARLY,
    rrule,
)
from pydantic import ValidationError

from ..config.settings import CalendarFeedSettings
from ..utils.logging import VERBOSE
from .models import DateKind, DateValue, Frequency, RecurrenceRule

UTC = timezone.utc

logger = logging.getLogger(__name__)

YEARLY_DURATION = timedelta(days=365)

# Open-ended series are displayed and expanded this far past their start
OPEN_ENDED_DURATION = 5 * YEARLY_DURATION

# Fixed nominal period per frequency, used to estimate where a COUNT bound ends
NOMINAL_PERIODS = MappingProxyType(
    {
        Frequency.DAILY: timedelta(days=1),
        Frequency.WEEKLY: timedelta(days=7),
        Frequency.MONTHLY: timedelta(days=30),
        Frequency.YEARLY: YEARLY_DURATION,
    }
)

WORKDAYS = frozenset({"MO", "TU", "WE", "TH", "FR"})

FREQUENCY_MAP = MappingProxyType(
    {
        Frequency.SECONDLY: SECONDLY,
        Frequency.MINUTELY: MINUTELY,
        Frequency.HOURLY: HOURLY,
        Frequency.DAILY: DAILY,
        Frequency.WEEKLY: WEEKLY,
        Frequency.MONTHLY: MONTHLY,
        Frequency.YEARLY: YEARLY,
    }
)

WEEKDAY_MAP = MappingProxyType(
    {"MO": MO, "TU": TU, "WE": WE, "TH": TH, "FR": FR, "SA": SA, "SU": SU}
)


class RRuleExpansionError(Exception):
    """Base exception for RRULE expansion errors."""


class RRuleParseError(RRuleExpansionError):
    """Error parsing RRULE string."""


def nominal_period(frequency: Frequency) -> timedelta:
    """Nominal length of one period; sub-daily frequencies fall back to a year."""
    return NOMINAL_PERIODS.get(frequency, YEARLY_DURATION)


def frequency_label(rule: RecurrenceRule) -> str:
    """Display label for a collapsed series.

    Weekly Monday-to-Friday rules are WORKDAYS, fortnightly ones BIWEEKLY and
    three-monthly ones QUARTERLY. Everything else reports its FREQ value.
    """
    if rule.frequency == Frequency.WEEKLY:
        # Ordinal tokens such as 1MO are not plain weekdays
        if len(rule.by_day) == len(WORKDAYS) and set(rule.by_day) == WORKDAYS:
            return "WORKDAYS"
        if rule.interval == 2:
            return "BIWEEKLY"
    elif rule.frequency == Frequency.MONTHLY and rule.interval == 3:
        return "QUARTERLY"
    return rule.frequency.value


class RRuleExpander:
    """Turns RecurrenceRule values into concrete occurrence instants.

    Generation is delegated to python-dateutil. Only FREQ, INTERVAL, BYDAY,
    COUNT and UNTIL are interpreted; other RRULE parts are ignored when the
    rule is parsed.
    """

    def __init__(self, settings: CalendarFeedSettings):
        """Initialize RRuleExpander with settings.

        Args:
            settings: calendarfeed configuration settings
        """
        self.settings = settings
        self.max_occurrences = getattr(settings, "max_occurrences", 1000)

    def parse_rrule_string(self, rrule_string: str) -> RecurrenceRule:
        """Parse RRULE string into a RecurrenceRule.

        Args:
            rrule_string: RRULE value (e.g. "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE")

        Returns:
            Validated rule.

        Raises:
            RRuleParseError: If the string is empty, lacks FREQ, or carries
                values the rule model rejects.
        """
        if not rrule_string or not rrule_string.strip():
            raise RRuleParseError("Empty RRULE string")

        value = rrule_string.strip()
        if value.upper().startswith("RRULE:"):
            value = value[len("RRULE:") :]

        fields: dict = {}
        try:
            for part in value.split(";"):
                if "=" not in part:
                    continue
                key, raw = part.split("=", 1)
                key = key.strip().upper()
                raw = raw.strip()

                if key == "FREQ":
                    fields["frequency"] = Frequency(raw.upper())
                elif key == "INTERVAL":
                    fields["interval"] = int(raw)
                elif key == "BYDAY":
                    fields["by_day"] = raw
                elif key == "COUNT":
                    fields["count"] = int(raw)
                elif key == "UNTIL":
                    fields["until"] = self._parse_until(raw)
                else:
                    logger.debug(f"Ignoring unsupported RRULE part {key}")

            if "frequency" not in fields:
                raise RRuleParseError(f"RRULE missing required FREQ parameter: {rrule_string}")

            return RecurrenceRule(**fields)

        except (ValueError, ValidationError) as e:
            raise RRuleParseError(f"Invalid RRULE format: {rrule_string}") from e

    def occurrences(
        self,
        rule: RecurrenceRule,
        start: DateValue,
        zone: tzinfo,
        window_start: Optional[datetime] = None,
        window_end: Optional[datetime] = None,
    ) -> list[datetime]:
        """Occurrence starts of ``rule`` inside a window, both bounds inclusive.

        A missing lower bound means the series start, a missing upper bound
        means five nominal years after it. Results are aware datetimes in
        ``zone`` and are capped at ``settings.max_occurrences``.

        Raises:
            RRuleExpansionError: If dateutil cannot evaluate the rule.
        """
        seed = self._seed(start, zone)
        lower = window_start if window_start is not None else seed
        upper = window_end if window_end is not None else seed + OPEN_ENDED_DURATION

        try:
            series = rrule(**self._rrule_kwargs(rule, seed, zone))
            found = []
            for occurrence in series.xafter(lower, count=self.max_occurrences + 1, inc=True):
                if occurrence > upper:
                    break
                found.append(occurrence.astimezone(zone))
        except (ValueError, TypeError, OverflowError) as e:
            raise RRuleExpansionError(f"Failed to expand RRULE: {e}") from e

        if len(found) > self.max_occurrences:
            logger.warning(f"Limiting RRULE expansion to {self.max_occurrences} occurrences")
            found = found[: self.max_occurrences]

        logger.log(
            VERBOSE,
            f"RRULE expansion: freq={rule.frequency.value} "
            f"window={lower.isoformat()}..{upper.isoformat()} occurrences={len(found)}",
        )
        return found

    def recurrence_end_date(
        self, rule: RecurrenceRule, start: datetime, zone: tzinfo
    ) -> datetime:
        """Where a collapsed series ends.

        UNTIL wins when present. A COUNT bound is estimated as ``count``
        nominal periods after ``start``, and open-ended series end five
        nominal years after it. Estimates are absolute durations, so they
        do not follow wall-clock shifts.
        """
        if rule.until is not None:
            return rule.until.to_instant(zone)

        if rule.count is not None:
            span = rule.count * nominal_period(rule.frequency)
        else:
            span = OPEN_ENDED_DURATION
        return (start.astimezone(UTC) + span).astimezone(zone)

    def _seed(self, start: DateValue, zone: tzinfo) -> datetime:
        # Zoned starts keep their own zone so a UTC series stays put across DST
        if start.kind == DateKind.ZONED:
            return start.value  # type: ignore[return-value]
        return start.to_instant(zone)

    def _rrule_kwargs(self, rule: RecurrenceRule, seed: datetime, zone: tzinfo) -> dict:
        kwargs = {
            "freq": FREQUENCY_MAP[rule.frequency],
            "dtstart": seed,
            "interval": rule.interval,
        }

        if rule.until is not None:
            kwargs["until"] = self._until_instant(rule.until, seed, zone)
        elif rule.count is not None:
            kwargs["count"] = rule.count

        byweekday = []
        for ordinal, code in rule.weekdays:
            weekday = WEEKDAY_MAP[code]
            byweekday.append(weekday(ordinal) if ordinal else weekday)
        if byweekday:
            kwargs["byweekday"] = byweekday

        return kwargs

    def _until_instant(self, until: DateValue, seed: datetime, zone: tzinfo) -> datetime:
        """UNTIL as an aware datetime dateutil can compare with ``seed``."""
        if until.kind == DateKind.DATE:
            # A date bound includes every occurrence on that day
            day_end = datetime.combine(until.value, time.max).replace(microsecond=0)
            return day_end.replace(tzinfo=zone)
        return until.to_instant(seed.tzinfo or zone)

    def _parse_until(self, value: str) -> DateValue:
        """Parse an UNTIL value.

        A trailing Z gives a UTC instant, a date-only value a DATE, anything
        else a floating local time.

        Raises:
            ValueError: If the value matches no supported format.
        """
        dt_str = value.rstrip("Z")

        formats = [
            "%Y%m%dT%H%M%S",  # 20250623T083000
            "%Y-%m-%dT%H:%M:%S",  # 2025-06-23T08:30:00
            "%Y%m%d",  # 20250623
            "%Y-%m-%d",  # 2025-06-23
        ]

        for fmt in formats:
            try:
                dt = datetime.strptime(dt_str, fmt)
            except ValueError:  # noqa: PERF203
                continue
            if "%H" not in fmt:
                return DateValue(kind=DateKind.DATE, value=dt.date())
            if value.endswith("Z"):
                return DateValue(kind=DateKind.ZONED, value=dt.replace(tzinfo=UTC))
            return DateValue(kind=DateKind.LOCAL, value=dt)

        raise ValueError(f"Unable to parse datetime: {value}")

