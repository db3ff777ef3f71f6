"""Abstract interfaces (ports) for obtaining raw text from URLs and files."""

from abc import ABC, abstractmethod


class SourceAcquirer(ABC):
    """Capability interface shared by every URL acquisition strategy."""

    @abstractmethod
    async def acquire(self, url: str) -> str:
        """Return the visible text behind a URL.

        Raises:
            AcquisitionError: network, permission or timeout failure.
            InsufficientContentError: extracted text below the minimum length.
        """
        ...


class TextExtractor(ABC):
    """Port for text extraction from uploaded files."""

    @abstractmethod
    async def extract(self, file_path: str) -> str:
        """Extract text from a stored file.

        Raises:
            AcquisitionError: the file is missing or unreadable.
            UnsupportedFormatError: no extractor for the file extension.
            InsufficientContentError: extracted text below the minimum length.
        """
        ...

    @abstractmethod
    def supports(self, file_path: str) -> bool:
        """Check whether the file's extension has an extractor."""
        ...
