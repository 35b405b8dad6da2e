"""
Fallback policy for hosts without a headless browser.

When the renderer cannot be provided at all, the pipeline reports a degraded
result carrying this fixed sample dataset instead of failing outright. The
sample is a fixture matching the Event shape, not a snapshot of the live site.
"""

from mgo_events.core.interfaces import RendererUnavailableError
from mgo_events.core.models import (
    Event,
    EventCategory,
    EventsByDate,
    FinalRecord,
    freeze_events_by_date,
)

ICON_BASE_URL = "https://api.monopolygo.game/storage/v1/object/public/event/icon"

FALLBACK_ERROR_MESSAGE = (
    "Headless browser not available in this environment. Sample data provided. "
    "To get real data, run the scraper on a host with Playwright browsers installed "
    "(playwright install chromium)."
)


def build_sample_events() -> EventsByDate:
    """Build the fixed two-date, three-event sample dataset."""
    return freeze_events_by_date({
        "2025-05-29": [
            Event(
                name="High Roller",
                start_time="2025-05-29T01:00:00",
                end_time="2025-05-29T06:59:00",
                duration="5 Minutes",
                category=EventCategory.QUICK_EVENT.value,
                icon_url=f"{ICON_BASE_URL}/highroller.png",
            ),
            Event(
                name="Mega Heist",
                start_time="2025-05-29T07:00:00",
                end_time="2025-05-29T12:59:00",
                duration="45 Minutes",
                category=EventCategory.TOURNAMENT.value,
                icon_url=f"{ICON_BASE_URL}/heist.png",
            ),
        ],
        "2025-05-30": [
            Event(
                name="Golden Blitz",
                start_time="2025-05-30T13:00:00",
                end_time="2025-05-31T12:59:59",
                duration="Whole Time",
                category=EventCategory.SPECIAL_EVENT.value,
                icon_url=f"{ICON_BASE_URL}/goldsticker.png",
            ),
        ],
    })


class FallbackService:
    """Decides whether a failure qualifies for sample data and builds the outcome."""

    def __init__(self, error_message: str = FALLBACK_ERROR_MESSAGE):
        self.error_message = error_message

    @staticmethod
    def is_eligible(error: BaseException) -> bool:
        """Only a missing rendering capability qualifies, not other launch errors."""
        return isinstance(error, RendererUnavailableError)

    def build_outcome(self) -> FinalRecord:
        """Build the degraded terminal record."""
        return FinalRecord(
            success=False,
            events=build_sample_events(),
            error=self.error_message,
        )
