"""
Monopoly GO event schedule scraper.

Renders the Monopoly GO "events today" schedule page in a headless browser,
extracts each event's name, time window, duration and icon, and reports the
result as date-grouped JSON over a newline-delimited progress stream.

Package structure:
- core/: Core logic (models, interfaces, extraction pipeline services)
- integrations/: Headless browser renderer (Playwright)
- api/: Streaming REST API (aiohttp) and its client
- utils/: Shared utilities (logging, date parsing, timing)

Usage:
    from mgo_events import ScrapePipeline, create_renderer, ScraperSettings

    settings = ScraperSettings.from_env()
    pipeline = ScrapePipeline(create_renderer(settings), settings=settings)
    events = await pipeline.scrape_events()
"""

__version__ = "1.0.0"

# Convenience imports for common use cases
from mgo_events.config import ScraperSettings
from mgo_events.core.models import (
    Event,
    EventCategory,
    EventsByDate,
    RawFragment,
    StepStatus,
    ProgressRecord,
    FinalRecord,
)
from mgo_events.core.services import (
    CancellationToken,
    ScrapePipeline,
    NormalizerService,
    ExtractorService,
    FallbackService,
)
from mgo_events.integrations.web import create_renderer, PlaywrightRenderer
from mgo_events.api import create_api_server, APIServer
from mgo_events.utils import setup_logging, get_logger

__all__ = [
    # Version
    '__version__',
    # Config
    'ScraperSettings',
    # Models
    'Event',
    'EventCategory',
    'EventsByDate',
    'RawFragment',
    'StepStatus',
    'ProgressRecord',
    'FinalRecord',
    # Services
    'CancellationToken',
    'ScrapePipeline',
    'NormalizerService',
    'ExtractorService',
    'FallbackService',
    # Integrations
    'create_renderer',
    'PlaywrightRenderer',
    # API
    'create_api_server',
    'APIServer',
    # Utils
    'setup_logging',
    'get_logger',
]
