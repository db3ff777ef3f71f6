"""Domain entities for resource chunks — text windows with vector embeddings."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class Chunk:
    """A contiguous text window derived from one resource, suitable for vector search.

    ``tenant_id`` always equals the owning resource's tenant id; it is the
    only tenant-isolation boundary inside the shared index. Chunks are
    immutable once stored.
    """

    resource_id: str
    tenant_id: str
    chunk_index: int
    content: str
    embedding: list[float] = field(default_factory=list)
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class RetrievedChunk:
    """A chunk plus its similarity score for one query pipeline run (never persisted)."""

    chunk: Chunk
    score: float  # cosine similarity, higher is closer

    @property
    def resource_id(self) -> str:
        return self.chunk.resource_id

    @property
    def tenant_id(self) -> str:
        return self.chunk.tenant_id

    @property
    def content(self) -> str:
        return self.chunk.content


@dataclass
class RankedChunks:
    """Merged, score-ordered retrieval result across all query variants."""

    chunks: list[RetrievedChunk] = field(default_factory=list)
    query_variants: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.chunks

    def __len__(self) -> int:
        return len(self.chunks)
