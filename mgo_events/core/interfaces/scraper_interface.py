"""
Abstract scraper interface for the Monopoly GO event scraper.

This module defines the abstract base class for event scrapers and the
exception hierarchy shared by the extraction pipeline.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional

from mgo_events.core.models import EventsByDate, FinalRecord, StreamRecord

RecordSink = Callable[[StreamRecord], Awaitable[None]]


class EventScraper(ABC):
    """
    Abstract base class for event scrapers.

    A scraper reports progress to a record sink while it runs and always ends
    with exactly one FinalRecord.
    """

    @abstractmethod
    async def run(self, emit: RecordSink) -> FinalRecord:
        """
        Run the scraper, sending every stream record to ``emit``.

        Never raises for scrape failures: they are reported as a FinalRecord
        with ``success=False``.

        Returns:
            The FinalRecord that was emitted last
        """
        pass

    async def collect(self) -> List[StreamRecord]:
        """Run the scraper and return every emitted record in order."""
        records: List[StreamRecord] = []

        async def _append(record: StreamRecord):
            records.append(record)

        await self.run(_append)
        return records

    async def scrape_events(self) -> EventsByDate:
        """
        Run the scraper and return its events.

        Returns:
            EventsByDate from a successful run

        Raises:
            ScraperError: If the run failed or only produced sample data
        """
        records = await self.collect()
        final = records[-1]
        if not final.success:
            raise ScraperError(final.error or "Scrape failed")
        return final.events


class ScraperError(Exception):
    """Base exception for scraper errors."""
    pass


class ScraperConnectionError(ScraperError):
    """Raised when scraper cannot connect to the data source."""
    pass


class ScraperParseError(ScraperError):
    """Raised when scraper cannot parse the data."""
    pass


class ContainerNotFoundError(ScraperParseError):
    """Raised when the schedule container is missing from the rendered page."""

    def __init__(self, selector: Optional[str] = None):
        self.selector = selector
        super().__init__("Event box not found" + (f" ({selector})" if selector else ""))


class RecordSinkError(ScraperError):
    """Raised when a stream record cannot be delivered to the caller."""
    pass


class PipelineCancelledError(ScraperError):
    """Raised when a pipeline run is cancelled through its token."""

    def __init__(self, message: str = "Pipeline cancelled"):
        super().__init__(message)
