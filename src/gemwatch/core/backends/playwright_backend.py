"""
Playwright browser session for the listing site.

One PlaywrightBackend holds one Chromium browser, context and page for
the lifetime of an acquisition run.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from .base import BrowserError, NavigationTimeout

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page, Playwright

    from gemwatch.core.config.models import BrowserConfig

logger = logging.getLogger(__name__)


DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)

# Hide navigator.webdriver
HIDE_WEBDRIVER_SCRIPT = (
    "Object.defineProperty(navigator, 'webdriver', {get: () => undefined});"
)

STEALTH_ARGS = (
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
)


class PlaywrightBackend:
    """Single-page Chromium session.

    Two acquisition runs must never share an instance; the runner creates
    one per run and closes it when the run ends.
    """

    def __init__(
        self,
        headless: bool = True,
        timeout: float = 60.0,
        viewport: tuple[int, int] = (1920, 1080),
        user_agent: str | None = None,
        stealth: bool = True,
        screenshots_path: Path | str = "snapshots",
        screenshots_on_error: bool = True,
    ):
        self.headless = headless
        self.timeout_ms = int(timeout * 1000)
        self.viewport = viewport
        self.user_agent = user_agent or DESKTOP_USER_AGENT
        self.stealth = stealth
        self.screenshots_path = Path(screenshots_path)
        self.screenshots_on_error = screenshots_on_error

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @classmethod
    def from_config(cls, config: BrowserConfig) -> "PlaywrightBackend":
        return cls(
            headless=config.headless,
            timeout=config.timeout_seconds,
            viewport=(config.viewport_width, config.viewport_height),
            user_agent=config.user_agent,
            stealth=config.stealth,
            screenshots_path=config.screenshots_dir,
            screenshots_on_error=config.screenshots_on_error,
        )

    async def _start(self) -> Page:
        """Launch Chromium and open the session page."""
        from playwright.async_api import async_playwright

        width, height = self.viewport
        self._playwright = await async_playwright().start()

        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=list(STEALTH_ARGS) if self.stealth else [],
            )
        except Exception as e:
            raise BrowserError(
                "Could not launch Chromium. Run: playwright install chromium",
                cause=e,
            ) from e

        self._context = await self._browser.new_context(
            viewport={"width": width, "height": height},
            user_agent=self.user_agent,
            locale="en-IN",
        )
        if self.stealth:
            await self._context.add_init_script(HIDE_WEBDRIVER_SCRIPT)

        page = await self._context.new_page()
        page.set_default_timeout(self.timeout_ms)
        logger.debug(f"Chromium started (headless={self.headless}, viewport={width}x{height})")
        return page

    async def open(self, url: str) -> Page:
        """Load url in the session page, starting the browser on first use.

        Raises:
            NavigationTimeout: If the document does not load in time
            BrowserError: If the browser fails to start or navigate
        """
        if self._page is None or self._page.is_closed():
            self._page = await self._start()

        logger.info(f"Opening {url}")
        try:
            await self._page.goto(url, wait_until="domcontentloaded", timeout=self.timeout_ms)
        except Exception as e:
            await self.capture_screenshot("navigation")
            if "timeout" in str(e).lower():
                raise NavigationTimeout(f"Navigation timeout: {url}", url=url, cause=e) from e
            raise BrowserError(f"Navigation to {url} failed: {e}", url=url, cause=e) from e

        return self._page

    async def capture_screenshot(self, prefix: str = "error") -> Path | None:
        """Save a full-page screenshot of the session page, if enabled."""
        if not self.screenshots_on_error or self._page is None or self._page.is_closed():
            return None

        path = self.screenshots_path / f"{prefix}_{datetime.now():%Y%m%d_%H%M%S}.png"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await self._page.screenshot(path=str(path), full_page=True)
        except Exception as e:
            logger.warning(f"Screenshot failed: {e}")
            return None

        logger.info(f"Screenshot saved: {path}")
        return path

    async def close(self) -> None:
        """Tear down page, context, browser and driver, in that order."""
        for resource in (self._page, self._context, self._browser):
            if resource is not None:
                try:
                    await resource.close()
                except Exception as e:
                    logger.debug(f"Close failed: {e}")

        if self._playwright is not None:
            await self._playwright.stop()

        self._page = self._context = self._browser = self._playwright = None
        logger.debug("Browser session closed")
