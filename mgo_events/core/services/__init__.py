"""
Core services package for the Monopoly GO event scraper.

This package contains the extraction pipeline: the DOM extractor, the event
normalizer and its category rules, the fallback policy, and the orchestrator
that sequences them.
"""

from .cancellation import CancellationToken
from .category_service import (
    CATEGORY_RULES,
    CategoryService,
    classify_event_name,
)
from .extractor_service import (
    SNAPSHOT_SCRIPT,
    ExtractorService,
    iter_fragments,
    scan_text_blocks,
    match_header,
    clean_event_name,
    validate_snapshot,
)
from .normalizer_service import (
    NormalizerService,
    UNKNOWN_DURATION,
    to_instant,
    parse_duration,
    resolve_icon_url,
)
from .fallback_service import (
    FallbackService,
    FALLBACK_ERROR_MESSAGE,
    build_sample_events,
)
from .pipeline_service import (
    ScrapePipeline,
    StepTracker,
    PROGRESS_STARTED,
    PROGRESS_AFTER_STEP,
    PROGRESS_DONE,
)

__all__ = [
    # Cancellation
    'CancellationToken',
    # Classification
    'CATEGORY_RULES',
    'CategoryService',
    'classify_event_name',
    # Extraction
    'SNAPSHOT_SCRIPT',
    'ExtractorService',
    'iter_fragments',
    'scan_text_blocks',
    'match_header',
    'clean_event_name',
    'validate_snapshot',
    # Normalization
    'NormalizerService',
    'UNKNOWN_DURATION',
    'to_instant',
    'parse_duration',
    'resolve_icon_url',
    # Fallback
    'FallbackService',
    'FALLBACK_ERROR_MESSAGE',
    'build_sample_events',
    # Pipeline
    'ScrapePipeline',
    'StepTracker',
    'PROGRESS_STARTED',
    'PROGRESS_AFTER_STEP',
    'PROGRESS_DONE',
]
