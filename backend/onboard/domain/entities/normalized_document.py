"""Domain entity for cleaned, header-prefixed source text."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class NormalizedDocument:
    """Output of the content normalizer.

    ``content`` is the full document (header block + rule + body) that gets
    chunked; ``body`` is the cleaned text alone.
    """

    content: str
    body: str
    source_url: str
    extracted_at: datetime
    title: str | None = None
    original_length: int = 0

    @property
    def removed_characters(self) -> int:
        return max(self.original_length - len(self.body), 0)

    @property
    def compression_ratio(self) -> float:
        """Characters removed / characters in (0.0 for empty input)."""
        if self.original_length == 0:
            return 0.0
        return self.removed_characters / self.original_length
