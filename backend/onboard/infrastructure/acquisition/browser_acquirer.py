"""Headless-browser acquisition for client-rendered (SPA) pages via Playwright.

Lifecycle:
    - ``start()`` launches Chromium once per process (app startup)
    - ``acquire()`` opens an isolated browser context per URL and always closes it
    - ``stop()`` closes the browser (app shutdown)
"""

import logging

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeout,
)

from onboard.application.interfaces.source_acquirer import SourceAcquirer
from onboard.domain.exceptions import AcquisitionError
from onboard.infrastructure.acquisition.static_html_acquirer import BROWSER_USER_AGENT
from onboard.infrastructure.acquisition.url_strategy import ensure_scheme, require_content

logger = logging.getLogger(__name__)

_MAIN_SELECTORS = ("main", "article", "[role=main]")
_NETWORK_IDLE_TIMEOUT_MS = 10_000


class BrowserAcquirer(SourceAcquirer):
    """Renders a page in headless Chromium and returns its visible text."""

    def __init__(
        self,
        *,
        navigation_timeout_s: int = 30,
        settle_delay_ms: int = 2000,
        min_content_length: int = 100,
    ) -> None:
        self._timeout_ms = navigation_timeout_s * 1000
        self._settle_delay_ms = settle_delay_ms
        self._min_length = min_content_length
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def start(self) -> None:
        """Launch the headless Chromium browser."""
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=True)
        logger.info(
            "BrowserAcquirer started (timeout=%dms, settle=%dms)",
            self._timeout_ms,
            self._settle_delay_ms,
        )

    async def stop(self) -> None:
        """Close the browser and clean up Playwright resources."""
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        logger.info("BrowserAcquirer stopped")

    async def acquire(self, url: str) -> str:
        if not self._browser:
            raise AcquisitionError(url, "headless browser is not running")

        url = ensure_scheme(url)
        context: BrowserContext | None = None
        try:
            context = await self._browser.new_context(
                service_workers="block",
                user_agent=BROWSER_USER_AGENT,
            )
            page = await context.new_page()
            page.set_default_timeout(self._timeout_ms)

            logger.info("Rendering: %s", url)
            try:
                response = await page.goto(url, wait_until="domcontentloaded", timeout=self._timeout_ms)
            except PlaywrightTimeout as e:
                raise AcquisitionError(url, f"navigation timed out after {self._timeout_ms}ms") from e
            if response is not None and response.status in (401, 403):
                raise AcquisitionError(url, f"access denied (HTTP {response.status})")
            if response is not None and response.status >= 400:
                raise AcquisitionError(url, f"HTTP {response.status}")

            try:
                await page.wait_for_load_state("networkidle", timeout=_NETWORK_IDLE_TIMEOUT_MS)
            except PlaywrightTimeout:
                logger.debug("Network idle timeout — proceeding with extraction")

            # Client-side frameworks keep rendering after network idle
            await page.wait_for_timeout(self._settle_delay_ms)

            text = await self._visible_text(page)
        except PlaywrightError as e:
            raise AcquisitionError(url, f"browser error: {e}") from e
        finally:
            if context is not None:
                await context.close()

        text = require_content(text, url, self._min_length)
        logger.info("Rendered %d characters from %s", len(text), url)
        return text

    @staticmethod
    async def _visible_text(page: Page) -> str:
        """Text of the main content element, else the whole body."""
        for selector in _MAIN_SELECTORS:
            locator = page.locator(selector).first
            if await locator.count() == 0:
                continue
            text = await locator.inner_text()
            if text.strip():
                return text
        return await page.locator("body").inner_text()
