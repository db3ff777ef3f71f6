"""Unit tests for URL classification and the static, export and browser acquirers."""

import httpx
import pytest
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeout

from onboard.domain.exceptions import AcquisitionError, InsufficientContentError
from onboard.infrastructure.acquisition.browser_acquirer import BrowserAcquirer
from onboard.infrastructure.acquisition.document_export_acquirer import DocumentExportAcquirer
from onboard.infrastructure.acquisition.html_text import extract_main_text
from onboard.infrastructure.acquisition.static_html_acquirer import StaticHtmlAcquirer
from onboard.infrastructure.acquisition.url_acquirer import UrlAcquirer
from onboard.infrastructure.acquisition.url_strategy import (
    AcquisitionStrategy,
    classify_url,
    export_url,
)

BROWSER_HOSTS = ["notion.so", "notion.site"]
POLICY = "Our travel policy covers economy flights, mid-range hotels and a daily meal allowance for every trip. Book all travel through the company travel portal."


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ── Classification ───────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://docs.google.com/document/d/abc123/edit", AcquisitionStrategy.DOCUMENT_EXPORT),
        ("docs.google.com/spreadsheets/u/0/d/sheet-1/edit#gid=0", AcquisitionStrategy.DOCUMENT_EXPORT),
        ("https://www.notion.so/acme/Handbook-123", AcquisitionStrategy.BROWSER_RENDER),
        ("https://acme.notion.site/Handbook", AcquisitionStrategy.BROWSER_RENDER),
        ("https://notnotion.so/page", AcquisitionStrategy.STATIC_HTML),
        ("https://example.com/about", AcquisitionStrategy.STATIC_HTML),
    ],
)
def test_classify_url(url, expected):
    assert classify_url(url, BROWSER_HOSTS) is expected


def test_export_url_mapping():
    assert export_url("https://docs.google.com/document/d/abc/edit") == (
        "https://docs.google.com/document/d/abc/export?format=txt"
    )
    assert export_url("https://docs.google.com/spreadsheets/d/s1/edit") == (
        "https://docs.google.com/spreadsheets/d/s1/export?format=csv"
    )
    assert export_url("https://docs.google.com/presentation/u/1/d/p1/edit") == (
        "https://docs.google.com/presentation/d/p1/export/txt"
    )
    assert export_url("https://example.com/doc") is None


# ── HTML text ────────────────────────────────────────────────────────


def test_main_text_prefers_main_and_drops_noise():
    html = f"""
    <html><head><script>var x = 1;</script><style>p {{}}</style></head>
    <body>
      <nav>Home Pricing Login</nav>
      <main><h1>Travel</h1><p>{POLICY}</p></main>
      <footer>Copyright</footer>
    </body></html>
    """

    text = extract_main_text(html)

    assert text == f"Travel\n{POLICY}"


def test_main_text_falls_back_to_body():
    text = extract_main_text(f"<html><body><div>{POLICY}</div><aside>Ads</aside></body></html>")

    assert text == POLICY


# ── Static HTML ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_static_html_acquires_main_content():
    def handler(request: httpx.Request) -> httpx.Response:
        assert "Mozilla" in request.headers["User-Agent"]
        return httpx.Response(200, html=f"<body><nav>Menu</nav><article>{POLICY}</article></body>")

    text = await StaticHtmlAcquirer(_client(handler)).acquire("example.com/travel")

    assert text == POLICY


@pytest.mark.asyncio
async def test_static_html_short_page_is_insufficient():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, html="<body><main>Loading...</main></body>")

    with pytest.raises(InsufficientContentError):
        await StaticHtmlAcquirer(_client(handler)).acquire("https://example.com/app")


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [403, 404, 500])
async def test_static_html_error_status(status):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text="nope")

    with pytest.raises(AcquisitionError):
        await StaticHtmlAcquirer(_client(handler)).acquire("https://example.com/private")


@pytest.mark.asyncio
async def test_static_html_timeout_is_acquisition_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(AcquisitionError) as exc_info:
        await StaticHtmlAcquirer(_client(handler)).acquire("https://example.com/slow")

    assert "timed out" in exc_info.value.reason


# ── Document export ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_document_export_downloads_plain_text():
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, text=POLICY, headers={"content-type": "text/plain; charset=utf-8"})

    text = await DocumentExportAcquirer(_client(handler)).acquire(
        "https://docs.google.com/document/d/abc/edit"
    )

    assert text == POLICY
    assert requested == ["https://docs.google.com/document/d/abc/export?format=txt"]


@pytest.mark.asyncio
async def test_document_export_permission_denied():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="forbidden")

    with pytest.raises(AcquisitionError) as exc_info:
        await DocumentExportAcquirer(_client(handler)).acquire("https://docs.google.com/document/d/abc/edit")

    assert "permission denied" in exc_info.value.reason


@pytest.mark.asyncio
async def test_document_export_sign_in_page_is_permission_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, html="<html><body>Sign in to continue</body></html>")

    with pytest.raises(AcquisitionError) as exc_info:
        await DocumentExportAcquirer(_client(handler)).acquire("https://docs.google.com/document/d/abc/edit")

    assert "sign-in page" in exc_info.value.reason


# ── Dispatch ─────────────────────────────────────────────────────────


class RecordingAcquirer:
    def __init__(self, name: str):
        self.name = name
        self.urls: list[str] = []

    async def acquire(self, url: str) -> str:
        self.urls.append(url)
        return self.name


@pytest.mark.asyncio
async def test_dispatches_to_matching_strategy():
    export, static, browser = RecordingAcquirer("export"), RecordingAcquirer("static"), RecordingAcquirer("browser")
    acquirer = UrlAcquirer(export, static, browser, browser_render_hosts=BROWSER_HOSTS)

    assert await acquirer.acquire("https://docs.google.com/document/d/abc/edit") == "export"
    assert await acquirer.acquire("https://acme.notion.site/Handbook") == "browser"
    assert await acquirer.acquire("https://example.com") == "static"


@pytest.mark.asyncio
async def test_browser_hosts_fall_back_to_static_without_browser():
    static = RecordingAcquirer("static")
    acquirer = UrlAcquirer(RecordingAcquirer("export"), static, None, browser_render_hosts=BROWSER_HOSTS)

    assert acquirer.strategy_for("https://www.notion.so/page") is AcquisitionStrategy.STATIC_HTML
    assert await acquirer.acquire("https://www.notion.so/page") == "static"


# ── Browser rendering ────────────────────────────────────────────────


class FakeResponse:
    def __init__(self, status: int):
        self.status = status


class FakeLocator:
    def __init__(self, text: str | None = None, error: Exception | None = None):
        self._text = text
        self._error = error

    @property
    def first(self):
        return self

    async def count(self) -> int:
        return 0 if self._text is None and self._error is None else 1

    async def inner_text(self) -> str:
        if self._error:
            raise self._error
        return self._text or ""


class FakePage:
    def __init__(self, *, status: int = 200, goto_error: Exception | None = None, locators=None):
        self._status = status
        self._goto_error = goto_error
        self._locators = locators or {}

    def set_default_timeout(self, timeout_ms: int) -> None:
        pass

    async def goto(self, url: str, **kwargs):
        if self._goto_error:
            raise self._goto_error
        return FakeResponse(self._status)

    async def wait_for_load_state(self, state: str, **kwargs) -> None:
        pass

    async def wait_for_timeout(self, delay_ms: int) -> None:
        pass

    def locator(self, selector: str) -> FakeLocator:
        return self._locators.get(selector, FakeLocator())


class FakeContext:
    def __init__(self, page: FakePage):
        self._page = page
        self.closed = False

    async def new_page(self) -> FakePage:
        return self._page

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self, page: FakePage | None = None, error: Exception | None = None):
        self._page = page or FakePage()
        self._error = error
        self.contexts: list[FakeContext] = []

    async def new_context(self, **kwargs) -> FakeContext:
        if self._error:
            raise self._error
        context = FakeContext(self._page)
        self.contexts.append(context)
        return context


def _browser_acquirer(browser: FakeBrowser) -> BrowserAcquirer:
    acquirer = BrowserAcquirer(settle_delay_ms=0)
    acquirer._browser = browser
    return acquirer


@pytest.mark.asyncio
async def test_browser_renders_main_content_and_closes_context():
    browser = FakeBrowser(FakePage(locators={"main": FakeLocator(POLICY)}))

    text = await _browser_acquirer(browser).acquire("acme.notion.site/Handbook")

    assert text == POLICY
    assert browser.contexts[0].closed


@pytest.mark.asyncio
async def test_browser_falls_back_to_body_when_main_is_empty():
    page = FakePage(locators={"main": FakeLocator("   "), "body": FakeLocator(POLICY)})

    text = await _browser_acquirer(FakeBrowser(page)).acquire("https://acme.notion.site/Handbook")

    assert text == POLICY


@pytest.mark.asyncio
async def test_browser_short_render_is_insufficient():
    browser = FakeBrowser(FakePage(locators={"body": FakeLocator("Loading...")}))

    with pytest.raises(InsufficientContentError):
        await _browser_acquirer(browser).acquire("https://acme.notion.site/Handbook")

    assert browser.contexts[0].closed


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "page",
    [
        FakePage(goto_error=PlaywrightTimeout("Timeout 30000ms exceeded")),
        FakePage(status=404),
        FakePage(status=403),
        FakePage(locators={"main": FakeLocator(error=PlaywrightError("Target page, context or browser has been closed"))}),
    ],
    ids=["timeout", "not-found", "forbidden", "extraction-failure"],
)
async def test_browser_failures_close_the_context(page):
    browser = FakeBrowser(page)

    with pytest.raises(AcquisitionError):
        await _browser_acquirer(browser).acquire("https://acme.notion.site/Handbook")

    assert browser.contexts[0].closed


@pytest.mark.asyncio
async def test_browser_context_failure_is_acquisition_error():
    browser = FakeBrowser(error=PlaywrightError("Target page, context or browser has been closed"))

    with pytest.raises(AcquisitionError) as exc_info:
        await _browser_acquirer(browser).acquire("https://team.notion.site/page")

    assert "browser error" in exc_info.value.reason
    assert browser.contexts == []


@pytest.mark.asyncio
async def test_browser_not_started_is_acquisition_error():
    with pytest.raises(AcquisitionError):
        await BrowserAcquirer().acquire("https://team.notion.site/page")
