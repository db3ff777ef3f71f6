"""Plain HTTP fetch + BeautifulSoup extraction for server-rendered pages."""

import logging

import httpx

from onboard.application.interfaces.source_acquirer import SourceAcquirer
from onboard.domain.exceptions import AcquisitionError
from onboard.infrastructure.acquisition.html_text import extract_main_text
from onboard.infrastructure.acquisition.url_strategy import ensure_scheme, require_content

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0 Safari/537.36"
)


class StaticHtmlAcquirer(SourceAcquirer):
    """Fetches raw HTML and extracts the main content container's text."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        *,
        min_content_length: int = 100,
        timeout: float = 30.0,
    ):
        self._http_client = http_client
        self._min_length = min_content_length
        self._timeout = timeout

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def acquire(self, url: str) -> str:
        url = ensure_scheme(url)
        client = await self._get_client()
        should_close = self._http_client is None
        try:
            response = await client.get(
                url,
                follow_redirects=True,
                headers={
                    "User-Agent": BROWSER_USER_AGENT,
                    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
                },
            )
        except httpx.TimeoutException as e:
            raise AcquisitionError(url, f"request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise AcquisitionError(url, f"request failed: {e}") from e
        finally:
            if should_close:
                await client.aclose()

        if response.status_code in (401, 403):
            raise AcquisitionError(url, f"access denied (HTTP {response.status_code})")
        if response.status_code >= 400:
            raise AcquisitionError(url, f"HTTP {response.status_code}")

        text = require_content(extract_main_text(response.text), url, self._min_length)
        logger.info("Scraped %d characters from %s", len(text), url)
        return text
