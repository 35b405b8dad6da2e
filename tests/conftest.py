"""
Pytest configuration and shared fixtures for testing.

This file contains in-memory stand-ins for the headless browser so the
pipeline can be exercised without Playwright, plus shared fixtures that
can be used across all test files.
"""

import asyncio
from typing import Any, List, Optional

import pytest

from mgo_events.config import ScraperSettings
from mgo_events.core.interfaces import (
    Renderer,
    RenderSession,
    RenderedPage,
    RendererUnavailableError,
)


# =============================================================================
# Fake renderer
# =============================================================================

class FakePage(RenderedPage):
    """Page returning a canned DOM snapshot."""

    def __init__(self, snapshot: Any = None, selector_error: Optional[Exception] = None,
                 evaluate_error: Optional[Exception] = None, hang_on_selector: bool = False):
        self.snapshot = snapshot
        self.selector_error = selector_error
        self.evaluate_error = evaluate_error
        self.hang_on_selector = hang_on_selector
        self.calls: List[tuple] = []

    async def wait_for_selector(self, selector: str, timeout_ms: int):
        self.calls.append(('wait_for_selector', selector, timeout_ms))
        if self.hang_on_selector:
            await asyncio.Event().wait()
        if self.selector_error:
            raise self.selector_error

    async def wait_fixed(self, ms: int):
        self.calls.append(('wait_fixed', ms))

    async def evaluate_in_page(self, script: str, arg: Any = None) -> Any:
        self.calls.append(('evaluate_in_page', arg))
        if self.evaluate_error:
            raise self.evaluate_error
        return self.snapshot


class FakeSession(RenderSession):
    """Session handing out a single FakePage and recording close() calls."""

    def __init__(self, page: FakePage, open_error: Optional[Exception] = None,
                 close_error: Optional[Exception] = None):
        self.page = page
        self.open_error = open_error
        self.close_error = close_error
        self.opened: List[tuple] = []
        self.close_count = 0

    async def open_page(self, url: str, wait_condition: str, timeout_ms: int) -> RenderedPage:
        self.opened.append((url, wait_condition, timeout_ms))
        if self.open_error:
            raise self.open_error
        return self.page

    async def close(self):
        self.close_count += 1
        if self.close_error:
            raise self.close_error


class FakeRenderer(Renderer):
    """Renderer that returns a prepared FakeSession or raises a launch error."""

    def __init__(self, session: Optional[FakeSession] = None, launch_error: Optional[Exception] = None):
        self.session = session
        self.launch_error = launch_error
        self.launch_count = 0

    async def launch(self) -> RenderSession:
        self.launch_count += 1
        if self.launch_error:
            raise self.launch_error
        return self.session


# =============================================================================
# Snapshot builders
# =============================================================================

def make_image(name: str, blocks: Optional[List[str]], src: str = "", use_alt: bool = False) -> dict:
    """Build one image entry as returned by the page snapshot script."""
    return {
        'title': None if use_alt else f"Monopoly Go Event Name: {name}",
        'alt': f"Monopoly Go Event Name: {name}" if use_alt else None,
        'src': src,
        'blocks': blocks,
    }


def make_event_image(name: str, time_range: str, duration: str = "5 Minutes", src: str = "") -> dict:
    return make_image(name, [time_range, f"Duration: {duration}"], src=src)


def make_item(header: str, images: List[dict]) -> dict:
    return {'header': header, 'images': images}


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def settings():
    """Default settings with the settle delay disabled."""
    return ScraperSettings(settle_delay_ms=0)


@pytest.fixture
def schedule_snapshot():
    """Two dated list items holding three events, plus a non-event item."""
    return [
        make_item("Events for 2025/05/29", [
            make_event_image("Mega Heist", "2025/05/29 07:00:00 - 2025/05/29 12:59:00",
                             "45 Minutes", "/icons/heist.png"),
            make_event_image("High Roller", "2025/05/29 01:00:00 - 2025/05/29 06:59:00",
                             "5 Minutes", "/icons/highroller.png"),
        ]),
        make_item("Today's Tips", [
            make_event_image("Ignored", "2025/05/29 01:00:00 - 2025/05/29 02:00:00"),
        ]),
        make_item("Events for 2025/05/30", [
            make_event_image("Golden Blitz", "2025/05/30 13:00:00 - 2025/05/31 12:59:59",
                             "Whole Time", "https://cdn.example.com/gold.png"),
        ]),
    ]


@pytest.fixture
def make_renderer():
    """Factory for a FakeRenderer around a FakeSession around a FakePage."""
    def factory(snapshot: Any = None, **kwargs) -> FakeRenderer:
        page = FakePage(
            snapshot,
            selector_error=kwargs.pop('selector_error', None),
            evaluate_error=kwargs.pop('evaluate_error', None),
            hang_on_selector=kwargs.pop('hang_on_selector', False),
        )
        session = FakeSession(
            page,
            open_error=kwargs.pop('open_error', None),
            close_error=kwargs.pop('close_error', None),
        )
        return FakeRenderer(session, launch_error=kwargs.pop('launch_error', None))

    return factory


@pytest.fixture
def unavailable_renderer():
    return FakeRenderer(launch_error=RendererUnavailableError())


@pytest.fixture
def record_sink():
    """A record sink collecting everything emitted into ``sink.records``."""
    class RecordingSink:
        def __init__(self):
            self.records = []

        async def __call__(self, record):
            self.records.append(record)

    return RecordingSink()
