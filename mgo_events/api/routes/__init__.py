"""
API route handlers.

This module provides route handlers for the REST API:
- Health check endpoint
- Scrape endpoint streaming newline-delimited JSON progress
- Sample dataset endpoint
"""

import asyncio
import logging
from typing import Callable, Optional

from aiohttp import web

from mgo_events.api.models import (
    NDJSON_CONTENT_TYPE,
    HealthResponse,
    SampleEventsResponse,
)
from mgo_events.core.interfaces import EventScraper, RecordSinkError
from mgo_events.core.models import StreamRecord, events_by_date_to_dict
from mgo_events.core.services import CancellationToken, build_sample_events

logger = logging.getLogger("mgo_events.api.routes")

PipelineFactory = Callable[[CancellationToken], EventScraper]

DISCONNECT_POLL_SECONDS = 0.5


# =============================================================================
# Health Routes
# =============================================================================

def create_health_handler(browser_enabled: bool = True):
    async def handle_health_check(request: web.Request) -> web.Response:
        """
        Health check endpoint.

        GET /api/health

        Returns:
            {"status": "healthy", "version": "1.0.0", "browserEnabled": true}
        """
        return web.json_response(HealthResponse(browser_enabled=browser_enabled).to_dict())

    return handle_health_check


async def handle_sample_events(request: web.Request) -> web.Response:
    """GET /api/sample-events: the fixture dataset used when no browser exists."""
    response = SampleEventsResponse(events=events_by_date_to_dict(build_sample_events()))
    return web.json_response(response.to_dict())


# =============================================================================
# Scrape Routes
# =============================================================================

async def watch_disconnect(request: web.Request, token: CancellationToken,
                           interval: float = DISCONNECT_POLL_SECONDS):
    """Cancel ``token`` once the client connection goes away."""
    while not token.cancelled:
        transport = request.transport
        if transport is None or transport.is_closing():
            logger.warning("Client disconnected, cancelling scrape")
            token.cancel("Client disconnected")
            return
        await asyncio.sleep(interval)


class ScrapeRoutes:
    """
    Route handler for the streaming scrape endpoint.

    Every request runs its own pipeline built by ``pipeline_factory``.
    """

    def __init__(self, pipeline_factory: PipelineFactory):
        self.pipeline_factory = pipeline_factory

    async def handle_scrape_events(self, request: web.Request) -> web.StreamResponse:
        """
        Run the scrape pipeline and stream its records.

        GET /api/scrape-events

        Response: chunked ``application/x-ndjson``, one record per line:
            {"type": "progress", "progress": 10, "methods": [...]}
            ...
            {"type": "final", "success": true, "events": {...}, "successfulMethodName": "..."}
        """
        response = web.StreamResponse(status=200, headers={'Cache-Control': 'no-cache'})
        response.content_type = NDJSON_CONTENT_TYPE
        response.charset = 'utf-8'
        response.enable_chunked_encoding()
        await response.prepare(request)

        token = CancellationToken()
        pipeline = self.pipeline_factory(token)
        watcher = asyncio.ensure_future(watch_disconnect(request, token))

        async def emit(record: StreamRecord):
            await response.write(record.to_line().encode('utf-8'))

        try:
            final = await pipeline.run(emit)
            logger.info(f"Scrape stream finished (success={final.success})")
        except RecordSinkError as e:
            logger.warning(f"Scrape stream aborted: {e}")
            return response
        finally:
            watcher.cancel()

        await response.write_eof()
        return response


def setup_routes(
    app: web.Application,
    scrape_routes: Optional[ScrapeRoutes] = None,
    browser_enabled: bool = True,
):
    """
    Configure all API routes.

    Args:
        app: aiohttp Application
        scrape_routes: ScrapeRoutes instance
        browser_enabled: Reported by the health endpoint
    """
    app.router.add_get('/api/health', create_health_handler(browser_enabled))
    app.router.add_get('/api/sample-events', handle_sample_events)

    if scrape_routes:
        app.router.add_get('/api/scrape-events', scrape_routes.handle_scrape_events)

    logger.info("API routes configured")


__all__ = [
    'PipelineFactory',
    'create_health_handler',
    'handle_sample_events',
    'watch_disconnect',
    'ScrapeRoutes',
    'setup_routes',
]
