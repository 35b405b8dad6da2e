"""
REST API module for the Monopoly GO event scraper.

This module provides a small aiohttp API:
- Health check endpoint
- Streaming scrape endpoint (newline-delimited JSON progress + final record)
- Sample dataset endpoint

Usage:
    from mgo_events.api import APIServer

    async with APIServer(settings=settings) as server:
        await server.serve_forever()
"""

import asyncio
import logging
from typing import Optional, Tuple

from aiohttp import web

from mgo_events.api.middleware import (
    create_logging_middleware,
    create_error_middleware,
)
from mgo_events.api.routes import (
    PipelineFactory,
    ScrapeRoutes,
    setup_routes,
)
from mgo_events.api.models import (
    API_VERSION,
    NDJSON_CONTENT_TYPE,
    APIResponse,
    HealthResponse,
    SampleEventsResponse,
)
from mgo_events.config import ScraperSettings
from mgo_events.core.services import CancellationToken, ScrapePipeline
from mgo_events.integrations.web import create_renderer

logger = logging.getLogger("mgo_events.api")

__version__ = API_VERSION


def default_pipeline_factory(settings: ScraperSettings) -> PipelineFactory:
    """Build a factory that creates one renderer-backed pipeline per request."""
    def factory(token: CancellationToken) -> ScrapePipeline:
        return ScrapePipeline(create_renderer(settings), settings=settings, token=token)

    return factory


def create_app(
    settings: Optional[ScraperSettings] = None,
    pipeline_factory: Optional[PipelineFactory] = None,
) -> web.Application:
    """
    Create and configure the aiohttp application.

    Args:
        settings: Scraper settings (defaults to ScraperSettings())
        pipeline_factory: Builds a pipeline for a request's cancellation token

    Returns:
        Configured Application
    """
    settings = settings or ScraperSettings()

    # Error middleware is outermost so logged failures still get a JSON body
    app = web.Application(middlewares=[
        create_error_middleware(),
        create_logging_middleware(),
    ])
    app['settings'] = settings

    scrape_routes = ScrapeRoutes(pipeline_factory or default_pipeline_factory(settings))
    setup_routes(app, scrape_routes=scrape_routes, browser_enabled=settings.browser_enabled)

    return app


async def create_api_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    settings: Optional[ScraperSettings] = None,
    pipeline_factory: Optional[PipelineFactory] = None,
) -> Tuple[web.Application, web.AppRunner]:
    """
    Create the app and start listening.

    Args:
        host: Host to bind to (defaults to settings.api_host)
        port: Port to bind to (defaults to settings.api_port)
        settings: Scraper settings
        pipeline_factory: Builds a pipeline for each scrape request

    Returns:
        Tuple of (Application, AppRunner)
    """
    settings = settings or ScraperSettings()
    host = host or settings.api_host
    port = settings.api_port if port is None else port

    app = create_app(settings, pipeline_factory)
    runner = web.AppRunner(app)
    await runner.setup()
    await web.TCPSite(runner, host, port).start()

    logger.info(f"Scrape API listening on http://{host}:{port} (browser enabled: {settings.browser_enabled})")
    return app, runner


async def stop_api_server(runner: Optional[web.AppRunner]):
    """Stop a server started by create_api_server. No-op for None."""
    if runner is None:
        return
    await runner.cleanup()
    logger.info("Scrape API stopped")


class APIServer:
    """
    Async context manager around create_api_server / stop_api_server.

    Usage:
        async with APIServer(port=8080, settings=settings) as server:
            await server.serve_forever()
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        settings: Optional[ScraperSettings] = None,
        pipeline_factory: Optional[PipelineFactory] = None,
    ):
        self.settings = settings or ScraperSettings()
        self.host = host or self.settings.api_host
        self.port = self.settings.api_port if port is None else port
        self.pipeline_factory = pipeline_factory
        self.runner: Optional[web.AppRunner] = None

    @property
    def is_running(self) -> bool:
        return self.runner is not None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    async def start(self):
        if self.is_running:
            return
        _, self.runner = await create_api_server(
            self.host, self.port, settings=self.settings, pipeline_factory=self.pipeline_factory,
        )

    async def stop(self):
        runner, self.runner = self.runner, None
        await stop_api_server(runner)

    async def serve_forever(self):
        """Block until the surrounding task is cancelled."""
        await self.start()
        await asyncio.Event().wait()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()


__all__ = [
    # Server functions
    'create_app',
    'create_api_server',
    'stop_api_server',
    'default_pipeline_factory',
    'APIServer',
    # Middleware
    'create_logging_middleware',
    'create_error_middleware',
    # Routes
    'PipelineFactory',
    'ScrapeRoutes',
    'setup_routes',
    # Models
    'API_VERSION',
    'NDJSON_CONTENT_TYPE',
    'APIResponse',
    'HealthResponse',
    'SampleEventsResponse',
]
