"""
Core models package for the Monopoly GO event scraper.

This package contains domain models (entities) used throughout the application.
"""

from .enums import (
    EventCategory,
    StepState,
    PipelineStep,
)
from .event import (
    Event,
    EventsByDate,
    sort_events_by_date,
    freeze_events_by_date,
    events_by_date_to_dict,
    events_by_date_from_dict,
    count_events,
)
from .fragment import RawFragment
from .pipeline import (
    StepStatus,
    ProgressRecord,
    FinalRecord,
    StreamRecord,
    encode_record,
)

__all__ = [
    # Enums
    'EventCategory',
    'StepState',
    'PipelineStep',
    # Models
    'Event',
    'EventsByDate',
    'RawFragment',
    'StepStatus',
    'ProgressRecord',
    'FinalRecord',
    'StreamRecord',
    # Helpers
    'sort_events_by_date',
    'freeze_events_by_date',
    'events_by_date_to_dict',
    'events_by_date_from_dict',
    'count_events',
    'encode_record',
]
