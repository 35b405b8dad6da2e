"""
External integrations for the Monopoly GO event scraper.

This package contains modules for integrating with external services:
- web: Headless browser rendering (Playwright)
"""

from .web import PlaywrightRenderer, DisabledRenderer, create_renderer

__all__ = [
    'PlaywrightRenderer',
    'DisabledRenderer',
    'create_renderer',
]
