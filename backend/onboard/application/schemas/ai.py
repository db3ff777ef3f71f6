"""Pydantic schemas for the assistant API requests and responses."""

from datetime import datetime

from pydantic import BaseModel, Field


# ── Request Schemas ──────────────────────────────────────────────────


class ChatRequest(BaseModel):
    """Request body for an employee question."""

    query: str = Field(..., min_length=1, description="The employee's question, in any language")
    tenant_id: str = Field(..., min_length=1, description="Company the employee belongs to")


# ── Response Schemas ─────────────────────────────────────────────────


class ResourceDescriptorSchema(BaseModel):
    resource_id: str
    title: str
    kind: str
    location: str | None = None


class SourceSchema(BaseModel):
    """One document an answer drew on."""

    resource_id: str
    score: float
    preview: str
    resource: ResourceDescriptorSchema | None = None


class AnswerSchema(BaseModel):
    """Answer to an employee question."""

    content: str
    sources: list[SourceSchema] = []
    cached: bool = False
    empty_outcome: str | None = None


class PopularQuestionSchema(BaseModel):
    query: str
    tenant_id: str
    count: int
    last_asked: datetime | None = None


class CacheStatsSchema(BaseModel):
    total_questions: int = 0
    cached_questions: int = 0
    popular_questions: list[PopularQuestionSchema] = []
    backend_available: bool = True


class IngestionResultSchema(BaseModel):
    """Outcome of processing one resource."""

    resource_id: str
    tenant_id: str
    chunk_count: int
    raw_characters: int
    normalized_characters: int
    compression_ratio: float
    replaced_chunks: int = 0
    duration_ms: int = 0


class MessageSchema(BaseModel):
    message: str
    deleted_keys: int | None = None
