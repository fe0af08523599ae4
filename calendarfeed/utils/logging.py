"""Logging configuration and setup utilities."""

import logging
import os
import sys
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ..config.settings import CalendarFeedSettings

# Custom log level between INFO(20) and DEBUG(10)
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

# Libraries whose INFO output drowns out ours
THIRD_PARTY_LOGGERS = ("httpx", "httpcore", "asyncio")


def get_log_level(level_name: str) -> int:
    """Get numeric log level from string name, including custom VERBOSE level.

    Args:
        level_name: Log level name (DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL),
            case insensitive.

    Returns:
        Numeric log level value.

    Raises:
        AttributeError: If level name is not recognized.
    """
    level_name = level_name.upper()
    if level_name == "VERBOSE":
        return VERBOSE
    level: int = getattr(logging, level_name)
    return level


class AutoColoredFormatter(logging.Formatter):
    """Formatter that auto-detects terminal color support."""

    COLORS = {
        "ERROR": {"truecolor": "\033[91m", "basic": "\033[31m", "none": ""},
        "INFO": {"truecolor": "\033[94m", "basic": "\033[34m", "none": ""},
        "VERBOSE": {"truecolor": "\033[92m", "basic": "\033[32m", "none": ""},
        "WARNING": {"truecolor": "\033[93m", "basic": "\033[33m", "none": ""},
        "DEBUG": {"truecolor": "\033[95m", "basic": "\033[35m", "none": ""},
        "CRITICAL": {"truecolor": "\033[91m\033[1m", "basic": "\033[31m\033[1m", "none": ""},
        "RESET": {"truecolor": "\033[0m", "basic": "\033[0m", "none": ""},
    }

    def __init__(self, *args: Any, enable_colors: bool = True, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.enable_colors = enable_colors
        self.color_mode = self._detect_color_support() if enable_colors else "none"

    def _detect_color_support(self) -> str:
        """Pick a color mode from the attached stream and TERM/COLORTERM."""
        # Log output goes to stderr
        if not hasattr(sys.stderr, "isatty") or not sys.stderr.isatty():
            return "none"

        if os.environ.get("NO_COLOR"):
            return "none"

        term = os.environ.get("TERM", "").lower()
        colorterm = os.environ.get("COLORTERM", "").lower()

        if term == "dumb":
            return "none"
        if colorterm in ("truecolor", "24bit") or "256color" in term:
            return "truecolor"
        if term and "color" in term:
            return "basic"
        if os.name == "nt" and "WT_SESSION" in os.environ:
            return "truecolor"
        return "none"

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.color_mode == "none":
            return formatted

        level_name = record.levelname
        if level_name in self.COLORS:
            color_start = self.COLORS[level_name][self.color_mode]
            color_end = self.COLORS["RESET"][self.color_mode]
            formatted = formatted.replace(level_name, f"{color_start}{level_name}{color_end}", 1)

        return formatted


def setup_logging(
    log_level: str = "INFO",
    colors: bool = True,
    third_party_level: str = "WARNING",
) -> logging.Logger:
    """Set up console logging for the ``calendarfeed`` logger tree.

    Args:
        log_level: Level name, VERBOSE included.
        colors: Allow colored level names when the terminal supports them.
        third_party_level: Level applied to httpx/httpcore/asyncio loggers.

    Returns:
        The configured package logger.
    """
    numeric_level = get_log_level(log_level)

    logger = logging.getLogger("calendarfeed")
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(
        AutoColoredFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
            enable_colors=colors,
        )
    )
    logger.addHandler(console_handler)

    third_party = get_log_level(third_party_level)
    for lib in THIRD_PARTY_LOGGERS:
        logging.getLogger(lib).setLevel(third_party)

    logger.debug(f"Logging initialized at {log_level} level")
    return logger


def setup_logging_from_settings(
    settings: "CalendarFeedSettings", log_level: Optional[str] = None
) -> logging.Logger:
    """Configure logging from settings; ``log_level`` overrides the configured level."""
    return setup_logging(
        log_level=log_level or settings.log_level,
        colors=settings.log_colors,
        third_party_level=settings.third_party_log_level,
    )
