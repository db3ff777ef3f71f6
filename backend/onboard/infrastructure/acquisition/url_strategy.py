"""URL classification for source acquisition.

Every URL maps to exactly one strategy, checked in precedence order:
document export, then browser render, then static HTML.
"""

import re
from enum import Enum
from urllib.parse import urlparse

from onboard.domain.exceptions import InsufficientContentError


class AcquisitionStrategy(str, Enum):
    DOCUMENT_EXPORT = "document_export"
    BROWSER_RENDER = "browser_render"
    STATIC_HTML = "static_html"


# Hosted office documents with a plain-text export endpoint
_EXPORT_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"^https?://docs\.google\.com/document/(?:u/\d+/)?d/(?P<id>[\w-]+)"),
        "https://docs.google.com/document/d/{id}/export?format=txt",
    ),
    (
        re.compile(r"^https?://docs\.google\.com/spreadsheets/(?:u/\d+/)?d/(?P<id>[\w-]+)"),
        "https://docs.google.com/spreadsheets/d/{id}/export?format=csv",
    ),
    (
        re.compile(r"^https?://docs\.google\.com/presentation/(?:u/\d+/)?d/(?P<id>[\w-]+)"),
        "https://docs.google.com/presentation/d/{id}/export/txt",
    ),
)


def ensure_scheme(url: str) -> str:
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        return f"https://{url}"
    return url


def export_url(url: str) -> str | None:
    """Plain-text export endpoint for a hosted document, or ``None``."""
    url = ensure_scheme(url)
    for pattern, template in _EXPORT_PATTERNS:
        match = pattern.match(url)
        if match:
            return template.format(id=match.group("id"))
    return None


def _host_matches(host: str, domains: list[str]) -> bool:
    host = host.lower().split(":")[0]
    for domain in domains:
        domain = domain.lower().lstrip(".")
        if host == domain or host.endswith(f".{domain}"):
            return True
    return False


def classify_url(url: str, browser_render_hosts: list[str]) -> AcquisitionStrategy:
    """Pick the acquisition strategy for ``url``."""
    url = ensure_scheme(url)
    if export_url(url) is not None:
        return AcquisitionStrategy.DOCUMENT_EXPORT
    if _host_matches(urlparse(url).netloc, browser_render_hosts):
        return AcquisitionStrategy.BROWSER_RENDER
    return AcquisitionStrategy.STATIC_HTML


def require_content(text: str, source: str, minimum: int) -> str:
    """Return stripped ``text``, or raise when it is too short to be useful."""
    text = text.strip()
    if len(text) < minimum:
        raise InsufficientContentError(source, len(text), minimum)
    return text
