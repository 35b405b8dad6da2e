"""
Configuration for the Monopoly GO event scraper.

Module-level constants hold the defaults; ScraperSettings.from_env() applies
overrides from the environment (and a local .env file, if present).
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotenv import load_dotenv

# Source site
TARGET_URL = "https://monopolygo.game/monopoly-go-events-today-schedule"
SOURCE_ORIGIN = "https://monopolygo.game"

# Schedule markup
EVENT_BOX_SELECTOR = "ul.events_eventBox__nV6sM"
EVENT_NAME_PREFIX = "Monopoly Go Event Name: "

# Waits (milliseconds)
NAVIGATION_TIMEOUT_MS = 30000
SELECTOR_TIMEOUT_MS = 15000
SETTLE_DELAY_MS = 3000
WAIT_CONDITION = "networkidle"

# Browser session
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
VIEWPORT = {'width': 1366, 'height': 768}
EXTRA_HTTP_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "DNT": "1",
}
BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-web-security",
    "--disable-features=VizDisplayCompositor",
]

# Reported as successfulMethodName on a successful run
SUCCESSFUL_METHOD_NAME = "Playwright Browser Automation"

# API server
API_HOST = "0.0.0.0"
API_PORT = 8080


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ScraperSettings:
    """Runtime settings for one scraper process."""
    target_url: str = TARGET_URL
    source_origin: str = SOURCE_ORIGIN
    event_box_selector: str = EVENT_BOX_SELECTOR
    event_name_prefix: str = EVENT_NAME_PREFIX
    navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS
    selector_timeout_ms: int = SELECTOR_TIMEOUT_MS
    settle_delay_ms: int = SETTLE_DELAY_MS
    wait_condition: str = WAIT_CONDITION
    headless: bool = True
    browser_enabled: bool = True
    user_agent: str = USER_AGENT
    viewport: Dict[str, int] = field(default_factory=lambda: dict(VIEWPORT))
    extra_http_headers: Dict[str, str] = field(default_factory=lambda: dict(EXTRA_HTTP_HEADERS))
    browser_args: List[str] = field(default_factory=lambda: list(BROWSER_ARGS))
    api_host: str = API_HOST
    api_port: int = API_PORT
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> 'ScraperSettings':
        """
        Build settings from environment variables.

        Raises:
            ValueError: If a numeric variable is not a non-negative integer
        """
        load_dotenv(dotenv_path)
        return cls(
            target_url=os.getenv('MGO_TARGET_URL', TARGET_URL),
            source_origin=os.getenv('MGO_SOURCE_ORIGIN', SOURCE_ORIGIN).rstrip('/'),
            event_box_selector=os.getenv('MGO_EVENT_BOX_SELECTOR', EVENT_BOX_SELECTOR),
            navigation_timeout_ms=_env_int('MGO_NAVIGATION_TIMEOUT_MS', NAVIGATION_TIMEOUT_MS),
            selector_timeout_ms=_env_int('MGO_SELECTOR_TIMEOUT_MS', SELECTOR_TIMEOUT_MS),
            settle_delay_ms=_env_int('MGO_SETTLE_DELAY_MS', SETTLE_DELAY_MS),
            headless=_env_bool('MGO_HEADLESS', True),
            browser_enabled=_env_bool('MGO_BROWSER_ENABLED', True),
            api_host=os.getenv('API_HOST', API_HOST),
            api_port=_env_int('API_PORT', API_PORT),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            log_file=os.getenv('LOG_FILE') or None,
        )
