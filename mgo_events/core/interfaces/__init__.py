"""
Core interfaces package for the Monopoly GO event scraper.

This package contains the abstract scraper and renderer interfaces and the
exceptions they raise.
"""

from .renderer_interface import (
    Renderer,
    RenderSession,
    RenderedPage,
    RendererError,
    RendererUnavailableError,
    RendererTimeoutError,
)
from .scraper_interface import (
    EventScraper,
    RecordSink,
    ScraperError,
    ScraperConnectionError,
    ScraperParseError,
    ContainerNotFoundError,
    RecordSinkError,
    PipelineCancelledError,
)

__all__ = [
    # Renderer interfaces
    'Renderer',
    'RenderSession',
    'RenderedPage',
    'RendererError',
    'RendererUnavailableError',
    'RendererTimeoutError',
    # Scraper interfaces
    'EventScraper',
    'RecordSink',
    'ScraperError',
    'ScraperConnectionError',
    'ScraperParseError',
    'ContainerNotFoundError',
    'RecordSinkError',
    'PipelineCancelledError',
]
