"""Domain entity for tenant-owned source documents."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ResourceKind(str, Enum):
    """How a resource's raw content is obtained."""

    FILE = "file"
    URL = "url"


@dataclass
class Resource:
    """A document owned by a tenant (company).

    Records are created by the resource management collaborator; the core
    only reads them and writes back the processing outcome
    (``processed``, ``processing_error``, ``extracted_content``).
    """

    tenant_id: str
    kind: ResourceKind
    title: str
    id: str | None = None
    url: str | None = None          # URL resources
    file_path: str | None = None    # File resources, relative to the upload dir
    file_url: str | None = None     # Public download location of an uploaded file
    mime_type: str | None = None
    file_size: int | None = None
    processed: bool = False
    processing_error: str | None = None
    extracted_content: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def location(self) -> str | None:
        """Where a reader can find the original document."""
        if self.kind == ResourceKind.URL:
            return self.url
        return self.file_url or self.file_path

    def mark_processed(self, extracted_content: str) -> None:
        """Transition to the processed state."""
        self.processed = True
        self.processing_error = None
        self.extracted_content = extracted_content
        self.updated_at = datetime.now(timezone.utc)

    def mark_failed(self, message: str) -> None:
        """Record a durable, inspectable ingestion failure."""
        self.processed = False
        self.processing_error = message
        self.updated_at = datetime.now(timezone.utc)
