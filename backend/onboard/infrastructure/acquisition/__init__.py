"""Source acquisition adapters (URLs and uploaded files)."""

from .url_strategy import AcquisitionStrategy, classify_url, export_url
from .document_export_acquirer import DocumentExportAcquirer
from .static_html_acquirer import StaticHtmlAcquirer
from .browser_acquirer import BrowserAcquirer
from .url_acquirer import UrlAcquirer
from .file_text_extractor import FileTextExtractor

__all__ = [
    "AcquisitionStrategy",
    "classify_url",
    "export_url",
    "DocumentExportAcquirer",
    "StaticHtmlAcquirer",
    "BrowserAcquirer",
    "UrlAcquirer",
    "FileTextExtractor",
]
