"""Entry points returning FullCalendar JSON for a URL or a file."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..config.settings import CalendarFeedSettings, get_settings
from ..ics.exceptions import ICSFetchError
from ..ics.fetcher import ICSFetcher, read_ics_file
from ..ics.models import ICSAuth, ICSSource
from .models import CalendarEvent
from .pipeline import CalendarPipeline, EventQuery
from .serializer import events_to_json

logger = logging.getLogger(__name__)


class CalendarFeedService:
    """Fetch, decode and resolve a calendar, then encode it as JSON.

    Fetch and decode failures propagate as ``ICSError`` subclasses; nothing
    is returned for a document that could not be read.
    """

    def __init__(
        self,
        settings: Optional[CalendarFeedSettings] = None,
        pipeline: Optional[CalendarPipeline] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.pipeline = pipeline or CalendarPipeline(self.settings)

    async def ical_to_json(self, url: str) -> str:
        """Every event of the calendar at ``url``, without any window."""
        return await self.get_ical_events(url, None, None)

    async def get_ical_events(
        self,
        url: str,
        start: Optional[datetime],
        end: Optional[datetime],
        collapse: bool = False,
    ) -> str:
        """Events of the calendar at ``url`` within [start, end] as JSON."""
        content = await self.fetch(url)
        query = EventQuery(interval_start=start, interval_end=end, collapse=collapse)
        return self.to_json(self.pipeline.run_ics(content, query, source=url))

    def get_events_from_file(
        self,
        path: Union[str, Path],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        collapse: bool = False,
    ) -> str:
        """Same as :meth:`get_ical_events` for a document on disk."""
        content = read_ics_file(path)
        query = EventQuery(interval_start=start, interval_end=end, collapse=collapse)
        return self.to_json(self.pipeline.run_ics(content, query, source=str(path)))

    async def get_events(
        self, source: str, query: Optional[EventQuery] = None
    ) -> list[CalendarEvent]:
        """Records for a URL or file path, before JSON encoding."""
        content = await self.load(source)
        return self.pipeline.run_ics(content, query, source=source)

    async def load(self, source: str) -> str:
        """Document text from an http(s) URL or a local path."""
        if source.lower().startswith(("http://", "https://")):
            return await self.fetch(source)
        return read_ics_file(source)

    async def fetch(self, url: str) -> str:
        """Download the document at ``url``.

        Raises:
            ICSFetchError: If the server answered without a usable document.
        """
        source = ICSSource(
            url=url,
            auth=self._auth(),
            timeout=self.settings.request_timeout,
        )
        async with ICSFetcher(self.settings) as fetcher:
            response = await fetcher.fetch_ics(source)

        if not response.success or response.content is None:
            raise ICSFetchError(
                response.error_message or "No content received",
                status_code=response.status_code,
                source=url,
            )
        return response.content

    def _auth(self) -> ICSAuth:
        """Credentials configured through the auth_* settings."""
        return ICSAuth(
            type=self.settings.auth_type,
            username=self.settings.auth_username,
            password=self.settings.auth_password,
            bearer_token=self.settings.auth_bearer_token,
        )

    def to_json(self, events: list[CalendarEvent]) -> str:
        return events_to_json(events, self.settings.date_format)
