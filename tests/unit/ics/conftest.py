"""Shared fixtures for ICS module tests."""

from unittest.mock import Mock

import pytest

from calendarfeed.config.settings import CalendarFeedSettings
from calendarfeed.ics.models import AuthType, ICSAuth, ICSSource

# ============================================================================
# Settings and Configuration Fixtures
# ============================================================================


@pytest.fixture
def mock_settings():
    """Create mock settings object with common defaults."""
    settings = Mock(spec=CalendarFeedSettings)
    settings.app_name = "CalendarFeed Test"
    settings.default_timezone = "UTC"
    settings.max_occurrences = 1000
    settings.max_retries = 2
    settings.retry_backoff_factor = 1.5
    settings.request_timeout = 30
    settings.validate_ssl = True
    settings.date_format = "iso"
    return settings


# ============================================================================
# Authentication and Source Fixtures
# ============================================================================


@pytest.fixture
def basic_ics_auth():
    """Create basic ICS authentication object."""
    return ICSAuth(type=AuthType.BASIC, username="testuser", password="testpass")


@pytest.fixture
def bearer_ics_auth():
    """Create bearer token ICS authentication object."""
    return ICSAuth(type=AuthType.BEARER, bearer_token="abc123token")


@pytest.fixture
def sample_ics_source():
    """Create sample ICS source for testing."""
    return ICSSource(
        url="https://example.com/calendar.ics",
        timeout=30,
    )


# ============================================================================
# ICS Content Fixtures
# ============================================================================


@pytest.fixture
def sample_ics_content():
    """Single timed UTC event."""
    return """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Test Company//Test Product//EN
X-WR-CALNAME:Team Calendar
BEGIN:VEVENT
UID:test-event-123
DTSTART:20250817T140000Z
DTEND:20250817T150000Z
SUMMARY:Test Meeting
DESCRIPTION:This is a test meeting description
LOCATION:Conference Room A
STATUS:CONFIRMED
END:VEVENT
END:VCALENDAR"""
