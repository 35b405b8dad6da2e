"""
Shared utilities for the Monopoly GO event scraper.

This module provides common utility functions used across the application:
- Logging configuration and setup
- Date parsing utilities
- Timing helpers
"""

import logging
import sys
import time
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

import dateparser


# =============================================================================
# Logging Utilities
# =============================================================================

LOGGER_NAMESPACE = 'mgo_events'
DEFAULT_LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(name)s: %(message)s'


def setup_logging(
    name: str = LOGGER_NAMESPACE,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the package logger.

    Records go to stderr, so stdout stays free for the NDJSON stream, and to
    ``log_file`` as well when one is given (its directory is created).
    Calling this again replaces the previous handlers.

    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_file: Optional file path for log output
        format_string: Custom format string

    Returns:
        Configured logger instance
    """
    formatter = logging.Formatter(format_string or DEFAULT_LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module."""
    return logging.getLogger(f'{LOGGER_NAMESPACE}.{name}')


# =============================================================================
# Date/Time Utilities
# =============================================================================

# Header formats seen on the schedule page, tried before fuzzy parsing
HEADER_DATE_FORMATS = (
    "%Y/%m/%d",
    "%Y-%m-%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%A, %B %d, %Y",
    "%d %B %Y",
)


def parse_calendar_date(date_string: str) -> Optional[date]:
    """
    Parse a header date string into a calendar date.

    Exact formats are tried first; anything else goes through dateparser,
    which must find a day, a month and a year.

    Args:
        date_string: The date text (e.g. "2025/05/29" or "May 29, 2025")

    Returns:
        Parsed date or None if parsing fails
    """
    text = (date_string or "").strip()
    if not text:
        return None

    for fmt in HEADER_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    parsed = dateparser.parse(
        text,
        settings={
            'REQUIRE_PARTS': ['day', 'month', 'year'],
            'RETURN_AS_TIMEZONE_AWARE': False,
        },
    )
    return parsed.date() if parsed else None


def is_valid_instant(value: str, fmt: str = "%Y-%m-%dT%H:%M:%S") -> bool:
    """Check that a naive timestamp string names a real calendar instant."""
    try:
        datetime.strptime(value, fmt)
        return True
    except ValueError:
        return False


# =============================================================================
# Timing Utilities
# =============================================================================

def monotonic_ms() -> int:
    """Current monotonic clock reading in milliseconds."""
    return int(time.monotonic() * 1000)


def elapsed_ms(started_ms: int) -> int:
    """Milliseconds elapsed since a monotonic_ms() reading."""
    return max(0, monotonic_ms() - started_ms)


__all__ = [
    # Logging
    'LOGGER_NAMESPACE',
    'setup_logging',
    'get_logger',
    # Date/Time
    'HEADER_DATE_FORMATS',
    'parse_calendar_date',
    'is_valid_instant',
    # Timing
    'monotonic_ms',
    'elapsed_ms',
]
