"""
Core package for the Monopoly GO event scraper.

This package contains the core business logic:
- models: Domain entities (Event, RawFragment, StepStatus, stream records)
- interfaces: Abstract base classes (renderer, scraper) and their errors
- services: Extraction pipeline (extractor, normalizer, fallback, orchestrator)
"""

from .models import (
    # Enums
    EventCategory,
    StepState,
    PipelineStep,
    # Models
    Event,
    EventsByDate,
    RawFragment,
    StepStatus,
    ProgressRecord,
    FinalRecord,
)

from .interfaces import (
    Renderer,
    RenderSession,
    RenderedPage,
    RendererError,
    RendererUnavailableError,
    RendererTimeoutError,
    EventScraper,
    ScraperError,
    ContainerNotFoundError,
    PipelineCancelledError,
)

from .services import (
    CancellationToken,
    CategoryService,
    ExtractorService,
    NormalizerService,
    FallbackService,
    ScrapePipeline,
    StepTracker,
)

__all__ = [
    # Models
    'EventCategory',
    'StepState',
    'PipelineStep',
    'Event',
    'EventsByDate',
    'RawFragment',
    'StepStatus',
    'ProgressRecord',
    'FinalRecord',
    # Interfaces
    'Renderer',
    'RenderSession',
    'RenderedPage',
    'RendererError',
    'RendererUnavailableError',
    'RendererTimeoutError',
    'EventScraper',
    'ScraperError',
    'ContainerNotFoundError',
    'PipelineCancelledError',
    # Services
    'CancellationToken',
    'CategoryService',
    'ExtractorService',
    'NormalizerService',
    'FallbackService',
    'ScrapePipeline',
    'StepTracker',
]
