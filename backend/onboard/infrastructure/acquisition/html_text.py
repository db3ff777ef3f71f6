"""Visible-text extraction from raw HTML with BeautifulSoup."""

from bs4 import BeautifulSoup

# Removed before looking for content
_NOISE_TAGS = ("script", "style", "noscript", "nav", "header", "footer", "aside")

# Main content areas before the full body
CONTENT_SELECTORS = (
    "main",
    "article",
    "[role=main]",
    "#content",
    ".content",
    "#main",
    ".main-content",
    ".post-content",
    ".entry-content",
    "body",
)


def extract_main_text(html: str) -> str:
    """Text of the first non-empty content container (whole document as last resort)."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(list(_NOISE_TAGS)):
        tag.decompose()

    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = element.get_text(separator="\n", strip=True)
        if text:
            return text
    return soup.get_text(separator="\n", strip=True)
