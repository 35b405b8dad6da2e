"""
Event entity model for the Monopoly GO event scraper.

This module defines the Event dataclass that represents one scheduled game event,
plus helpers for the date-keyed EventsByDate mapping built from those events.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .enums import EventCategory

# Naive local instant, no timezone attached
INSTANT_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$")
DATE_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

EventsByDate = Mapping[str, Sequence['Event']]


@dataclass(frozen=True)
class Event:
    """
    Represents one scheduled Monopoly GO event.

    Attributes:
        name: Event name as shown on the schedule page
        start_time: Start instant, ``YYYY-MM-DDTHH:MM:SS`` (no timezone)
        end_time: End instant, same format as start_time
        duration: Human-readable duration label (e.g. "5 Minutes")
        category: EventCategory value
        icon_url: Absolute URL of the event icon, if any
    """

    name: str
    start_time: str
    end_time: str
    duration: str
    category: str
    icon_url: Optional[str] = None

    def __post_init__(self):
        """Validate event data after initialization."""
        for label, value in (("start_time", self.start_time), ("end_time", self.end_time)):
            if not INSTANT_PATTERN.match(value):
                raise ValueError(f"Invalid {label}: {value!r}")

        if self.category not in EventCategory.all_categories():
            raise ValueError(f"Invalid category: {self.category}")

        # Fixed-width ISO strings compare chronologically
        if self.start_time > self.end_time:
            raise ValueError("Start time must not be after end time")

    def to_dict(self) -> dict:
        """Convert event to its JSON wire shape (absent icon is omitted)."""
        data = {
            'name': self.name,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'duration': self.duration,
            'category': self.category,
        }
        if self.icon_url is not None:
            data['iconUrl'] = self.icon_url
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Event':
        """Create Event instance from its JSON wire shape."""
        return cls(
            name=data['name'],
            start_time=data['startTime'],
            end_time=data['endTime'],
            duration=data.get('duration', 'Unknown'),
            category=data.get('category', EventCategory.EVENT.value),
            icon_url=data.get('iconUrl'),
        )


def sort_events_by_date(events_by_date: Mapping[str, Iterable[Event]]) -> Dict[str, List[Event]]:
    """
    Return a new mapping with ascending date keys and each day's events
    ascending by start time.

    The sort is stable, so events sharing a start time keep their input order.
    """
    return {
        date_key: sorted(events_by_date[date_key], key=lambda event: event.start_time)
        for date_key in sorted(events_by_date)
    }


def freeze_events_by_date(events_by_date: Mapping[str, Iterable[Event]]) -> EventsByDate:
    """Sort and wrap the mapping so neither the keys nor the lists can change."""
    ordered = sort_events_by_date(events_by_date)
    return MappingProxyType({date_key: tuple(events) for date_key, events in ordered.items()})


def events_by_date_to_dict(events_by_date: EventsByDate) -> Dict[str, List[dict]]:
    """Serialize EventsByDate to plain JSON-ready data, keys ascending."""
    return {
        date_key: [event.to_dict() for event in events_by_date[date_key]]
        for date_key in sorted(events_by_date)
    }


def events_by_date_from_dict(data: Mapping[str, Iterable[dict]]) -> EventsByDate:
    """Rebuild a frozen EventsByDate from its JSON representation."""
    parsed: Dict[str, List[Event]] = {}
    for date_key, items in data.items():
        if not DATE_KEY_PATTERN.match(date_key):
            raise ValueError(f"Invalid date key: {date_key!r}")
        parsed[date_key] = [Event.from_dict(item) for item in items]
    return freeze_events_by_date(parsed)


def count_events(events_by_date: EventsByDate) -> Tuple[int, int]:
    """Return (total events, total dates)."""
    return sum(len(events) for events in events_by_date.values()), len(events_by_date)
