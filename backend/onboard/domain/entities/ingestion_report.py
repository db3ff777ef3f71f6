"""Domain entity summarizing one ingestion run."""

from dataclasses import dataclass


@dataclass
class IngestionReport:
    """What processing a resource produced."""

    resource_id: str
    tenant_id: str
    chunk_count: int
    raw_characters: int
    normalized_characters: int
    compression_ratio: float
    replaced_chunks: int = 0
    duration_ms: int = 0
