"""
Web rendering integration module.

This package provides the headless-browser renderer used by the scrape
pipeline (Playwright + Chromium).
"""

from .browser import (
    PlaywrightRenderer,
    PlaywrightSession,
    PlaywrightPage,
    DisabledRenderer,
    create_renderer,
    is_missing_browser_error,
)

__all__ = [
    'PlaywrightRenderer',
    'PlaywrightSession',
    'PlaywrightPage',
    'DisabledRenderer',
    'create_renderer',
    'is_missing_browser_error',
]
