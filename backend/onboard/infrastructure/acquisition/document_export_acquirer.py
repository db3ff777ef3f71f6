"""Fast path for hosted office documents: download the plain-text export."""

import logging

import httpx

from onboard.application.interfaces.source_acquirer import SourceAcquirer
from onboard.domain.exceptions import AcquisitionError
from onboard.infrastructure.acquisition.url_strategy import export_url, require_content

logger = logging.getLogger(__name__)


class DocumentExportAcquirer(SourceAcquirer):
    """Fetches ``/export`` endpoints of Google Docs, Sheets and Slides."""

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
        target = export_url(url)
        if target is None:
            raise AcquisitionError(url, "not a recognized document export URL")

        client = await self._get_client()
        should_close = self._http_client is None
        try:
            response = await client.get(target, follow_redirects=True)
        except httpx.TimeoutException as e:
            raise AcquisitionError(url, f"export request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise AcquisitionError(url, f"export request failed: {e}") from e
        finally:
            if should_close:
                await client.aclose()

        if response.status_code in (401, 403):
            raise AcquisitionError(
                url, "permission denied — share the document with 'Anyone with the link can view'"
            )
        if response.status_code != 200:
            raise AcquisitionError(url, f"export endpoint returned HTTP {response.status_code}")

        # A private document redirects to an HTML sign-in page instead of a 401
        content_type = response.headers.get("content-type", "")
        if content_type.startswith("text/html"):
            raise AcquisitionError(
                url, "permission denied — the export returned a sign-in page instead of the document"
            )

        text = require_content(response.text, url, self._min_length)
        logger.info("Exported %d characters from %s", len(text), url)
        return text
