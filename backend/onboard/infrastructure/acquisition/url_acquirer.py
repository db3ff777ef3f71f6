"""URL acquisition dispatcher — one strategy per classified URL."""

import logging

from onboard.application.interfaces.source_acquirer import SourceAcquirer
from onboard.infrastructure.acquisition.browser_acquirer import BrowserAcquirer
from onboard.infrastructure.acquisition.url_strategy import AcquisitionStrategy, classify_url

logger = logging.getLogger(__name__)


class UrlAcquirer(SourceAcquirer):
    """Classifies a URL and delegates to the matching acquirer."""

    def __init__(
        self,
        document_export: SourceAcquirer,
        static_html: SourceAcquirer,
        browser: SourceAcquirer | None = None,
        *,
        browser_render_hosts: list[str] | None = None,
    ):
        self._acquirers: dict[AcquisitionStrategy, SourceAcquirer] = {
            AcquisitionStrategy.DOCUMENT_EXPORT: document_export,
            AcquisitionStrategy.STATIC_HTML: static_html,
        }
        if browser is not None:
            self._acquirers[AcquisitionStrategy.BROWSER_RENDER] = browser
        self._browser_hosts = list(browser_render_hosts or [])

    def strategy_for(self, url: str) -> AcquisitionStrategy:
        strategy = classify_url(url, self._browser_hosts)
        if strategy == AcquisitionStrategy.BROWSER_RENDER and not self._browser_available():
            logger.warning("No headless browser available — fetching %s as static HTML", url)
            return AcquisitionStrategy.STATIC_HTML
        return strategy

    async def acquire(self, url: str) -> str:
        strategy = self.strategy_for(url)
        logger.info("Acquiring %s via %s", url, strategy.value)
        return await self._acquirers[strategy].acquire(url)

    def _browser_available(self) -> bool:
        browser = self._acquirers.get(AcquisitionStrategy.BROWSER_RENDER)
        if browser is None:
            return False
        if isinstance(browser, BrowserAcquirer):
            return browser.is_running
        return True
