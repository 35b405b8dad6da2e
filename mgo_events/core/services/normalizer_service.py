"""
Event normalizer.

Turns raw fragments scraped from the schedule page into typed Events grouped
by calendar date. Fragments that cannot be parsed are dropped and logged;
a bad fragment never fails the whole run.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional
from urllib.parse import urljoin, urlparse

from mgo_events.config import SOURCE_ORIGIN
from mgo_events.core.models import Event, RawFragment, sort_events_by_date
from mgo_events.utils import parse_calendar_date, is_valid_instant

from .category_service import CategoryService

logger = logging.getLogger("mgo_events.normalizer")

TIME_RANGE_PATTERN = re.compile(
    r"(\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}) - (\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2})"
)
DURATION_PATTERN = re.compile(r"Duration:\s*(.*)")
UNKNOWN_DURATION = "Unknown"


def to_instant(timestamp: str) -> str:
    """Convert ``YYYY/MM/DD HH:MM:SS`` to ``YYYY-MM-DDTHH:MM:SS``."""
    return timestamp.replace("/", "-").replace(" ", "T", 1)


def parse_duration(duration_text: str) -> str:
    """Return the label after "Duration:", or "Unknown" when there is none."""
    match = DURATION_PATTERN.search(duration_text or "")
    if not match:
        return UNKNOWN_DURATION
    return match.group(1).strip() or UNKNOWN_DURATION


def resolve_icon_url(icon_path: str, origin: str = SOURCE_ORIGIN) -> Optional[str]:
    """
    Resolve an icon path against the source origin.

    Absolute URLs are returned unchanged; an empty path means no icon.
    """
    path = (icon_path or "").strip()
    if not path:
        return None
    if urlparse(path).scheme:
        return path
    return urljoin(origin.rstrip("/") + "/", path)


class NormalizerService:
    """Converts raw fragments into a date-keyed, sorted event mapping."""

    def __init__(
        self,
        origin: str = SOURCE_ORIGIN,
        category_service: Optional[CategoryService] = None,
    ):
        self.origin = origin
        self.category_service = category_service or CategoryService()

    def normalize_fragment(self, fragment: RawFragment) -> Optional[tuple]:
        """
        Normalize one fragment.

        Returns:
            (date_key, Event), or None when the fragment has to be dropped
        """
        header_date = parse_calendar_date(fragment.date_text)
        if header_date is None:
            logger.warning(f"Dropping '{fragment.name}': unparseable date header {fragment.date_text!r}")
            return None

        match = TIME_RANGE_PATTERN.search(fragment.time_text or "")
        if not match:
            logger.warning(f"Dropping '{fragment.name}': no time range in {fragment.time_text!r}")
            return None

        start_time = to_instant(match.group(1))
        end_time = to_instant(match.group(2))
        if not (is_valid_instant(start_time) and is_valid_instant(end_time)):
            logger.warning(f"Dropping '{fragment.name}': invalid timestamps {match.group(0)!r}")
            return None

        try:
            event = Event(
                name=fragment.name,
                start_time=start_time,
                end_time=end_time,
                duration=parse_duration(fragment.duration_text),
                category=self.category_service.classify(fragment.name).value,
                icon_url=resolve_icon_url(fragment.icon_path, self.origin),
            )
        except ValueError as e:
            logger.warning(f"Dropping '{fragment.name}': {e}")
            return None

        # Keyed by the header's date; overnight events may start on another day
        return header_date.isoformat(), event

    def normalize(self, fragments: Iterable[RawFragment]) -> Dict[str, List[Event]]:
        """
        Normalize every fragment and group the results.

        Args:
            fragments: Raw fragments, consumed once

        Returns:
            Mapping of ``YYYY-MM-DD`` to events, keys ascending and each list
            ascending by start time
        """
        grouped: Dict[str, List[Event]] = {}
        dropped = 0

        for fragment in fragments:
            try:
                normalized = self.normalize_fragment(fragment)
            except Exception as e:
                logger.error(f"Error parsing fragment {fragment!r}: {e}", exc_info=True)
                normalized = None

            if normalized is None:
                dropped += 1
                continue

            date_key, event = normalized
            grouped.setdefault(date_key, []).append(event)

        if dropped:
            logger.info(f"Dropped {dropped} unparseable fragment(s)")

        return sort_events_by_date(grouped)
