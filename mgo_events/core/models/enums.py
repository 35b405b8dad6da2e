"""
Core enums for the Monopoly GO event scraper.

This module defines enumerations for event categories and pipeline step states.
"""

from enum import Enum


class EventCategory(str, Enum):
    """Event category types, serialized with these exact spellings."""
    EVENT = "Event"
    MILESTONE = "Milestone"
    PARTNER_EVENT = "PartnerEvent"
    TOURNAMENT = "Tournament"
    QUICK_EVENT = "QuickEvent"
    SEASON = "Season"
    SPECIAL_EVENT = "SpecialEvent"

    @classmethod
    def all_categories(cls) -> list[str]:
        """Get list of all category values."""
        return [category.value for category in cls]


class StepState(str, Enum):
    """Lifecycle of a single pipeline step."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class PipelineStep(str, Enum):
    """The five named steps of the scrape pipeline, in execution order."""
    ACQUIRE_RENDERER = "acquire renderer"
    LOAD_AND_WAIT = "load+wait"
    EXTRACT = "extract"
    NORMALIZE = "normalize"
    FINALIZE = "finalize"

    @classmethod
    def ordered(cls) -> list['PipelineStep']:
        return list(cls)
