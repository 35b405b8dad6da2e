"""
API response models.

This module provides dataclasses for the JSON bodies of the non-streaming
endpoints, so every response has a consistent shape.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any

API_VERSION = "1.0.0"

# Content type of the scrape stream: one JSON record per line
NDJSON_CONTENT_TYPE = "application/x-ndjson"


@dataclass
class APIResponse:
    """Base API response model."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class HealthResponse:
    """Response model for health check endpoint."""
    status: str = "healthy"
    version: str = API_VERSION
    browser_enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "version": self.version,
            "browserEnabled": self.browser_enabled,
        }


@dataclass
class SampleEventsResponse:
    """Response model for the sample dataset endpoint."""
    events: Dict[str, Any] = field(default_factory=dict)
    note: str = "Fixture data; does not reflect the live schedule."

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, "events": self.events, "note": self.note}


__all__ = [
    'API_VERSION',
    'NDJSON_CONTENT_TYPE',
    'APIResponse',
    'HealthResponse',
    'SampleEventsResponse',
]
