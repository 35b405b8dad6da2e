"""
API middleware for request processing.

This module provides middleware components:
- Request logging with timing
- JSON error bodies for HTTP errors and unhandled exceptions
"""

import logging
from typing import Callable

from aiohttp import web

from mgo_events.api.models import APIResponse
from mgo_events.utils import elapsed_ms, monotonic_ms

logger = logging.getLogger("mgo_events.api.middleware")


# =============================================================================
# Request Logging Middleware
# =============================================================================

def create_logging_middleware():
    """
    Create an aiohttp middleware that logs each request and how long it took.

    For the scrape stream the time covers the whole pipeline run, since the
    handler only returns once the final record has been written.
    """
    @web.middleware
    async def logging_middleware(request: web.Request, handler: Callable):
        started = monotonic_ms()
        peer = request.remote or "-"
        logger.info(f"{peer} {request.method} {request.path}")

        try:
            response = await handler(request)
        except web.HTTPException as e:
            logger.warning(f"{request.method} {request.path} -> {e.status} ({elapsed_ms(started)}ms)")
            raise
        except Exception as e:
            logger.error(f"{request.method} {request.path} -> {type(e).__name__}: {e}")
            raise

        logger.info(f"{request.method} {request.path} -> {response.status} ({elapsed_ms(started)}ms)")
        return response

    return logging_middleware


# =============================================================================
# Error Handling Middleware
# =============================================================================

def create_error_middleware():
    """Create an aiohttp middleware turning errors into APIResponse bodies."""
    @web.middleware
    async def error_middleware(request: web.Request, handler: Callable):
        try:
            return await handler(request)
        except web.HTTPException as e:
            if e.status < 400:
                raise
            message = f"Not found: {request.path}" if e.status == 404 else e.reason
            return web.json_response(
                APIResponse(success=False, error=message).to_dict(),
                status=e.status,
            )
        except Exception:
            logger.exception(f"Unhandled error in {request.path}")
            return web.json_response(
                APIResponse(success=False, error="Internal server error").to_dict(),
                status=500,
            )

    return error_middleware


__all__ = [
    'create_logging_middleware',
    'create_error_middleware',
]
