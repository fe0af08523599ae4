"""Command-line entry for calendarfeed.

Prints the FullCalendar JSON for a calendar URL or ICS file.
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import NoReturn, Optional

from .config.settings import get_settings
from .feed.pipeline import EventQuery
from .feed.serializer import events_to_json
from .feed.service import CalendarFeedService
from .ics.exceptions import ICSError
from .utils.logging import setup_logging_from_settings

logger = logging.getLogger(__name__)


def _parse_datetime(value: str) -> datetime:
    """argparse type for ISO 8601 window bounds."""
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid ISO datetime: {value}") from e


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for calendarfeed CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="calendarfeed",
        description="Resolve an iCalendar document into FullCalendar event JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  calendarfeed https://example.com/team.ics
  calendarfeed team.ics --start 2025-01-01 --end 2025-02-01
  calendarfeed team.ics --start 2025-01-01 --end 2025-12-31 --collapse
        """,
    )

    parser.add_argument("source", help="Calendar URL (http/https) or path to an .ics file")
    parser.add_argument("--start", type=_parse_datetime, help="Window start (ISO 8601)")
    parser.add_argument("--end", type=_parse_datetime, help="Window end (ISO 8601)")
    parser.add_argument(
        "--collapse",
        action="store_true",
        help="Summarize recurring series instead of expanding them",
    )
    parser.add_argument(
        "--date-format",
        choices=["iso", "legacy"],
        help="Date rendering (default: iso, or CALENDARFEED_DATE_FORMAT)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Console log level (default: from settings)",
    )
    parser.add_argument("--output", "-o", type=Path, help="Write JSON here instead of stdout")
    parser.add_argument("--indent", type=int, help="Pretty-print JSON with this indent")

    return parser


async def _run(args: argparse.Namespace, service: CalendarFeedService) -> str:
    query = EventQuery(interval_start=args.start, interval_end=args.end, collapse=args.collapse)
    events = await service.get_events(args.source, query)
    return events_to_json(events, service.settings.date_format, indent=args.indent)


def main(argv: Optional[list[str]] = None) -> NoReturn:
    """Run the calendarfeed CLI."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    if args.date_format:
        settings.date_format = args.date_format
    setup_logging_from_settings(settings, args.log_level)

    service = CalendarFeedService(settings)
    try:
        output = asyncio.run(_run(args, service))
    except ICSError as e:
        logger.error(f"Failed to load calendar: {e}")
        sys.exit(1)

    if args.output:
        args.output.write_text(output + "\n", encoding="utf-8")
        logger.info(f"Wrote events to {args.output}")
    else:
        sys.stdout.write(output + "\n")
    sys.exit(0)


if __name__ == "__main__":
    main()
