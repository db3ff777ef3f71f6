"""File text extractor — extracts text from PDF, DOCX, XLSX, HTML and plain text uploads.

Parsing runs in a worker thread so large documents never block the event loop.
"""

import asyncio
import io
import logging
from pathlib import Path

from onboard.application.interfaces.source_acquirer import TextExtractor
from onboard.domain.exceptions import AcquisitionError, UnsupportedFormatError
from onboard.infrastructure.acquisition.html_text import extract_main_text
from onboard.infrastructure.acquisition.url_strategy import require_content

logger = logging.getLogger(__name__)


class FileTextExtractor(TextExtractor):
    """Infrastructure adapter that extracts text from stored uploads.

    Format libraries:
    - PDF: PyMuPDF (fitz), page texts concatenated
    - DOCX: python-docx
    - XLSX: openpyxl
    - HTML: BeautifulSoup
    - TXT/MD/CSV/JSON/LOG: built-in
    """

    # Extension → handler method mapping
    _HANDLERS: dict[str, str] = {
        ".pdf": "_extract_pdf",
        ".docx": "_extract_docx",
        ".xlsx": "_extract_xlsx",
        ".html": "_extract_html",
        ".htm": "_extract_html",
        ".txt": "_extract_text",
        ".md": "_extract_text",
        ".csv": "_extract_text",
        ".json": "_extract_text",
        ".log": "_extract_text",
    }

    def __init__(self, upload_dir: str, *, min_content_length: int = 100):
        self._upload_dir = Path(upload_dir)
        self._min_length = min_content_length

    def supports(self, file_path: str) -> bool:
        return Path(file_path).suffix.lower() in self._HANDLERS

    async def extract(self, file_path: str) -> str:
        """Extract text from a file stored under the upload directory.

        Raises:
            AcquisitionError: the file is missing or cannot be parsed.
            UnsupportedFormatError: no handler for the file extension.
            InsufficientContentError: too little text was extracted.
        """
        extension = Path(file_path).suffix.lower()
        handler_name = self._HANDLERS.get(extension)
        if handler_name is None:
            raise UnsupportedFormatError(extension)

        path = self._resolve(file_path)
        if not path.is_file():
            raise AcquisitionError(file_path, "file not found")

        handler = getattr(self, handler_name)
        try:
            data = await asyncio.to_thread(path.read_bytes)
            text = await asyncio.to_thread(handler, data)
        except OSError as e:
            raise AcquisitionError(file_path, f"could not read file: {e}") from e
        except Exception as e:
            raise AcquisitionError(file_path, f"could not parse {extension} file: {e}") from e

        text = require_content(text, file_path, self._min_length)
        logger.info("Extracted %d characters from %s", len(text), path.name)
        return text

    def _resolve(self, file_path: str) -> Path:
        path = Path(file_path)
        if path.is_absolute():
            return path
        return self._upload_dir / path

    # ── Format-specific handlers ─────────────────────────────────────

    @staticmethod
    def _extract_pdf(data: bytes) -> str:
        """Extract text from PDF using PyMuPDF."""
        import fitz  # PyMuPDF

        pages: list[str] = []
        with fitz.open(stream=data, filetype="pdf") as doc:
            for page_num, page in enumerate(doc):
                text = page.get_text("text")
                if text.strip():
                    pages.append(text)
                else:
                    logger.debug("Page %d has no text layer", page_num + 1)
        return "\n\n".join(pages)

    @staticmethod
    def _extract_docx(data: bytes) -> str:
        """Extract text from DOCX using python-docx."""
        from docx import Document

        doc = Document(io.BytesIO(data))
        parts: list[str] = []

        for para in doc.paragraphs:
            if para.text.strip():
                parts.append(para.text)

        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    parts.append(" | ".join(cells))

        return "\n".join(parts)

    @staticmethod
    def _extract_xlsx(data: bytes) -> str:
        """Extract text from XLSX using openpyxl."""
        from openpyxl import load_workbook

        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        parts: list[str] = []
        try:
            for sheet_name in wb.sheetnames:
                ws = wb[sheet_name]
                parts.append(f"--- Sheet: {sheet_name} ---")
                for row in ws.iter_rows(values_only=True):
                    cells = [str(cell) for cell in row if cell is not None]
                    if cells:
                        parts.append(" | ".join(cells))
        finally:
            wb.close()
        return "\n".join(parts)

    @classmethod
    def _extract_html(cls, data: bytes) -> str:
        return extract_main_text(cls._decode(data))

    @classmethod
    def _extract_text(cls, data: bytes) -> str:
        return cls._decode(data)

    @staticmethod
    def _decode(data: bytes) -> str:
        # Try UTF-8 first, then fall back to latin-1
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return data.decode("latin-1")
