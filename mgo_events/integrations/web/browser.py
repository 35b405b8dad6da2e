"""
Playwright-backed renderer.

Launches headless Chromium with a desktop viewport and user agent, and wraps
Playwright's page API in the renderer interface used by the pipeline.
Note: Requires Playwright browser binaries. Run: playwright install chromium
"""

from typing import Any, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from mgo_events.config import ScraperSettings
from mgo_events.core.interfaces import (
    Renderer,
    RenderSession,
    RenderedPage,
    RendererError,
    RendererTimeoutError,
    RendererUnavailableError,
)
from mgo_events.utils import get_logger

logger = get_logger("browser")

# Playwright error texts that mean the browser itself is not installed
MISSING_BROWSER_MARKERS = (
    "Executable doesn't exist",
    "playwright install",
    "Host system is missing dependencies",
)


def is_missing_browser_error(error: BaseException) -> bool:
    message = str(error)
    return any(marker in message for marker in MISSING_BROWSER_MARKERS)


class PlaywrightPage(RenderedPage):
    """A Playwright page behind the renderer interface."""

    def __init__(self, page: Page):
        self.page = page

    async def wait_for_selector(self, selector: str, timeout_ms: int):
        try:
            await self.page.wait_for_selector(selector, state="attached", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise RendererTimeoutError(
                f"Selector '{selector}' did not appear within {timeout_ms}ms"
            ) from e
        except PlaywrightError as e:
            raise RendererError(f"Waiting for '{selector}' failed: {e}") from e

    async def wait_fixed(self, ms: int):
        await self.page.wait_for_timeout(ms)

    async def evaluate_in_page(self, script: str, arg: Any = None) -> Any:
        try:
            return await self.page.evaluate(script, arg)
        except PlaywrightError as e:
            raise RendererError(f"Page script failed: {e}") from e


class PlaywrightSession(RenderSession):
    """One Playwright driver, browser and context, closed together."""

    def __init__(self, playwright: Playwright, browser: Browser, context: BrowserContext):
        self.playwright = playwright
        self.browser = browser
        self.context = context

    async def open_page(self, url: str, wait_condition: str, timeout_ms: int) -> RenderedPage:
        page = await self.context.new_page()
        logger.info(f"Navigating to {url} ...")
        try:
            await page.goto(url, wait_until=wait_condition, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise RendererTimeoutError(f"Navigation to {url} timed out after {timeout_ms}ms") from e
        except PlaywrightError as e:
            raise RendererError(f"Navigation to {url} failed: {e}") from e
        return PlaywrightPage(page)

    async def close(self):
        try:
            await self.browser.close()
        finally:
            await self.playwright.stop()


class PlaywrightRenderer(Renderer):
    """Launches Chromium sessions configured from ScraperSettings."""

    def __init__(self, settings: Optional[ScraperSettings] = None):
        self.settings = settings or ScraperSettings()

    async def launch(self) -> PlaywrightSession:
        try:
            playwright = await async_playwright().start()
        except Exception as e:
            raise RendererUnavailableError(f"Playwright driver could not start: {e}") from e

        try:
            logger.info("Launching headless Chromium...")
            browser = await playwright.chromium.launch(
                headless=self.settings.headless,
                args=self.settings.browser_args,
            )
            context = await browser.new_context(
                viewport=self.settings.viewport,
                user_agent=self.settings.user_agent,
                extra_http_headers=self.settings.extra_http_headers,
            )
        except PlaywrightError as e:
            await playwright.stop()
            if is_missing_browser_error(e):
                raise RendererUnavailableError(
                    "Headless browser not available in this environment "
                    "(run: playwright install chromium)"
                ) from e
            raise RendererError(f"Browser launch failed: {e}") from e
        except BaseException:
            await playwright.stop()
            raise

        return PlaywrightSession(playwright, browser, context)


class DisabledRenderer(Renderer):
    """Renderer for hosts configured without a browser."""

    async def launch(self) -> RenderSession:
        raise RendererUnavailableError(
            "Headless browser disabled by configuration (MGO_BROWSER_ENABLED=false)"
        )


def create_renderer(settings: Optional[ScraperSettings] = None) -> Renderer:
    """Pick the renderer for the given settings."""
    settings = settings or ScraperSettings()
    if not settings.browser_enabled:
        return DisabledRenderer()
    return PlaywrightRenderer(settings)
