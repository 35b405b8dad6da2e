"""
Application initialization module.

This module wires settings, logging, the renderer and the pipeline together.

Usage:
    from mgo_events.app import create_pipeline, run_to_stream

    settings = init_app()
    final = await run_to_stream(settings, sys.stdout)
"""

import logging
from typing import Optional, TextIO

from mgo_events.config import ScraperSettings
from mgo_events.core.models import FinalRecord, StreamRecord
from mgo_events.core.services import CancellationToken, ScrapePipeline
from mgo_events.integrations.web import create_renderer
from mgo_events.utils import setup_logging, LOGGER_NAMESPACE


def init_app(settings: Optional[ScraperSettings] = None) -> ScraperSettings:
    """
    Load settings and configure logging.

    Args:
        settings: Explicit settings; read from the environment when omitted

    Returns:
        The settings in effect
    """
    settings = settings or ScraperSettings.from_env()
    setup_logging(
        LOGGER_NAMESPACE,
        level=getattr(logging, settings.log_level, logging.INFO),
        log_file=settings.log_file,
    )
    return settings


def create_pipeline(
    settings: ScraperSettings,
    token: Optional[CancellationToken] = None,
) -> ScrapePipeline:
    """Create a pipeline backed by the renderer the settings call for."""
    return ScrapePipeline(create_renderer(settings), settings=settings, token=token)


async def run_to_stream(
    settings: ScraperSettings,
    stream: TextIO,
    token: Optional[CancellationToken] = None,
) -> FinalRecord:
    """
    Run one pipeline, writing each record to ``stream`` as a JSON line.

    Every record is flushed as soon as it is written.
    """
    async def emit(record: StreamRecord):
        stream.write(record.to_line())
        stream.flush()

    pipeline = create_pipeline(settings, token)
    return await pipeline.run(emit)
