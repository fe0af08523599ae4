"""HTTP client and file reader for ICS calendar documents."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Union

import httpx

from .. import __version__
from ..config.settings import CalendarFeedSettings
from .exceptions import (
    ICSAuthError,
    ICSContentError,
    ICSFetchError,
    ICSNetworkError,
    ICSTimeoutError,
)
from .models import ICSResponse, ICSSource

logger = logging.getLogger(__name__)


class ICSFetcher:
    """Async HTTP client for downloading ICS calendar files."""

    def __init__(self, settings: CalendarFeedSettings):
        """Initialize ICS fetcher.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self.client: Optional[httpx.AsyncClient] = None

        logger.debug("ICS fetcher initialized")

    async def __aenter__(self) -> "ICSFetcher":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self._close_client()

    async def _ensure_client(self) -> None:
        """Ensure HTTP client exists."""
        if self.client is None or self.client.is_closed:
            timeout = httpx.Timeout(
                connect=10.0, read=self.settings.request_timeout, write=10.0, pool=30.0
            )

            self.client = httpx.AsyncClient(
                timeout=timeout,
                follow_redirects=True,
                verify=self.settings.validate_ssl,
                headers={
                    "User-Agent": f"{self.settings.app_name}/{__version__} ICS-Client",
                    "Accept": "text/calendar, text/plain, */*",
                    "Accept-Charset": "utf-8",
                    "Cache-Control": "no-cache",
                },
            )

    async def _close_client(self) -> None:
        if self.client and not self.client.is_closed:
            await self.client.aclose()

    async def fetch_ics(self, source: ICSSource) -> ICSResponse:
        """Download ICS content from source.

        Args:
            source: URL, authentication and per-request options

        Returns:
            ICSResponse; ``success`` is False for non-auth HTTP errors and
            empty bodies.

        Raises:
            ICSAuthError: HTTP 401/403.
            ICSTimeoutError: Every attempt timed out.
            ICSNetworkError: Every attempt failed at the connection level.
            ICSFetchError: Any other transport failure.
        """
        await self._ensure_client()

        if not source.url.lower().startswith(("http://", "https://")):
            raise ICSFetchError(f"Unsupported URL scheme: {source.url}", source=source.url)

        headers = source.auth.get_headers()

        try:
            logger.debug(f"Fetching ICS from {source.url}")
            response = await self._make_request_with_retry(source.url, headers, source.timeout)
            return self._create_response(response)

        except httpx.TimeoutException as e:
            logger.error(f"Timeout fetching ICS from {source.url}: {e}")
            raise ICSTimeoutError(
                f"Request timeout after {source.timeout}s", source=source.url
            ) from e

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"HTTP error fetching ICS from {source.url}: {status}")

            if status == 401:
                raise ICSAuthError(
                    "Authentication failed - check credentials", status, source.url
                ) from e
            if status == 403:
                raise ICSAuthError(
                    "Access forbidden - insufficient permissions", status, source.url
                ) from e
            return ICSResponse(
                success=False,
                status_code=status,
                error_message=f"HTTP {status}: {e.response.reason_phrase}",
                headers=dict(e.response.headers),
            )

        except httpx.NetworkError as e:
            logger.error(f"Network error fetching ICS from {source.url}: {e}")
            raise ICSNetworkError(f"Network error: {e}", source=source.url) from e

        except httpx.HTTPError as e:
            logger.error(f"Unexpected error fetching ICS from {source.url}: {e}")
            raise ICSFetchError(f"Unexpected error: {e}", source=source.url) from e

    async def _make_request_with_retry(
        self, url: str, headers: dict[str, str], timeout: int
    ) -> httpx.Response:
        """GET ``url``, retrying timeouts and network errors with exponential backoff."""
        if self.client is None:
            raise ICSFetchError("HTTP client not initialized", source=url)

        for attempt in range(self.settings.max_retries + 1):
            try:
                response = await self.client.get(url, headers=headers, timeout=timeout)
                response.raise_for_status()

                logger.debug(f"Successfully fetched ICS from {url} (attempt {attempt + 1})")
                return response

            except (httpx.TimeoutException, httpx.NetworkError) as e:
                if attempt >= self.settings.max_retries:
                    logger.error(f"All retry attempts failed for {url}")
                    raise

                backoff_time = self.settings.retry_backoff_factor**attempt
                logger.warning(
                    f"Request failed (attempt {attempt + 1}/{self.settings.max_retries + 1}), "
                    f"retrying in {backoff_time:.1f}s: {e}"
                )
                await asyncio.sleep(backoff_time)

        raise ICSFetchError("Maximum retries exceeded", source=url)

    def _create_response(self, http_response: httpx.Response) -> ICSResponse:
        headers = dict(http_response.headers)
        content = http_response.text
        content_type = headers.get("content-type", "").lower()

        if content_type and not any(ct in content_type for ct in ["text/calendar", "text/plain"]):
            logger.warning(f"Unexpected content type: {content_type}")

        if not content or not content.strip():
            logger.error("Empty ICS content received")
            return ICSResponse(
                success=False,
                status_code=http_response.status_code,
                error_message="Empty content received",
                headers=headers,
            )

        if "BEGIN:VCALENDAR" not in content:
            logger.warning("Content does not appear to be valid ICS format")

        logger.debug(f"Successfully fetched ICS content ({len(content)} bytes)")

        return ICSResponse(
            success=True,
            content=content,
            status_code=http_response.status_code,
            headers=headers,
        )


def read_ics_file(path: Union[str, Path]) -> str:
    """Read a calendar document from disk.

    Raises:
        ICSFetchError: If the file cannot be read.
        ICSContentError: If the file is empty.
    """
    file_path = Path(path)
    try:
        content = file_path.read_bytes().decode("utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise ICSFetchError(f"Cannot read ICS file: {e}", source=str(file_path)) from e

    if not content.strip():
        raise ICSContentError("Empty ICS file", source=str(file_path))

    logger.debug(f"Read ICS file {file_path} ({len(content)} bytes)")
    return content
