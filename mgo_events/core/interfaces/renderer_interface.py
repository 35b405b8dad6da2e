"""
Abstract renderer interface for the Monopoly GO event scraper.

The renderer is the external headless-browser capability the pipeline drives:
launch a session, open a page, wait for it to settle, and evaluate a script in
the page context. Concrete implementations live in ``mgo_events.integrations``.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class RenderedPage(ABC):
    """A page opened by a RenderSession."""

    @abstractmethod
    async def wait_for_selector(self, selector: str, timeout_ms: int):
        """
        Wait until an element matching ``selector`` is attached to the DOM.

        Raises:
            RendererTimeoutError: If the element does not appear in time
        """
        pass

    @abstractmethod
    async def wait_fixed(self, ms: int):
        """Wait a fixed amount of time for late scripts to settle."""
        pass

    @abstractmethod
    async def evaluate_in_page(self, script: str, arg: Any = None) -> Any:
        """
        Evaluate a JavaScript function inside the page.

        Args:
            script: Function source, called with ``arg``
            arg: JSON-serializable argument

        Returns:
            The JSON-serializable value returned by the script
        """
        pass


class RenderSession(ABC):
    """An exclusively-owned browser session."""

    @abstractmethod
    async def open_page(self, url: str, wait_condition: str, timeout_ms: int) -> RenderedPage:
        """
        Navigate a new page to ``url`` and wait for ``wait_condition``.

        Raises:
            RendererTimeoutError: If navigation does not settle in time
        """
        pass

    @abstractmethod
    async def close(self):
        """Close the session and release every resource it holds."""
        pass


class Renderer(ABC):
    """Factory for render sessions."""

    @abstractmethod
    async def launch(self) -> RenderSession:
        """
        Launch a new session.

        Raises:
            RendererUnavailableError: If no browser can be provided on this host
            RendererError: For any other launch failure
        """
        pass


class RendererError(Exception):
    """Base exception for renderer errors."""
    pass


class RendererUnavailableError(RendererError):
    """Raised when the rendering capability does not exist in this environment."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Headless browser not available in this environment")


class RendererTimeoutError(RendererError):
    """Raised when a bounded navigation or selector wait runs out of time."""
    pass
