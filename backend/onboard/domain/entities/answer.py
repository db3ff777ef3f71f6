"""Domain entities for synthesized answers, their sources, and cached copies."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


@dataclass
class ResourceDescriptor:
    """Human-facing description of the document behind an attribution."""

    resource_id: str
    title: str
    kind: str
    location: str | None = None


@dataclass
class SourceAttribution:
    """One contributing document for an answer — cited once, however many chunks it supplied."""

    resource_id: str
    score: float
    preview: str
    resource: ResourceDescriptor | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource_id": self.resource_id,
            "score": self.score,
            "preview": self.preview,
            "resource": None if self.resource is None else {
                "resource_id": self.resource.resource_id,
                "title": self.resource.title,
                "kind": self.resource.kind,
                "location": self.resource.location,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SourceAttribution":
        resource = data.get("resource")
        return cls(
            resource_id=data["resource_id"],
            score=float(data.get("score", 0.0)),
            preview=data.get("preview", ""),
            resource=ResourceDescriptor(**resource) if resource else None,
        )


class EmptyOutcome(str, Enum):
    """Why retrieval produced nothing — each maps to a distinct user-facing message."""

    NO_RESOURCES = "no_resources"
    NOT_PROCESSED = "not_processed"
    NO_MATCH = "no_match"


@dataclass
class Answer:
    """The result of answering one employee question."""

    content: str
    sources: list[SourceAttribution] = field(default_factory=list)
    cached: bool = False
    empty_outcome: EmptyOutcome | None = None


@dataclass
class CachedAnswer:
    """A memoized answer for one normalized (query, tenant) key."""

    content: str
    sources: list[SourceAttribution] = field(default_factory=list)
    cached_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "sources": [s.to_dict() for s in self.sources],
            "cached_at": self.cached_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CachedAnswer":
        return cls(
            content=data["content"],
            sources=[SourceAttribution.from_dict(s) for s in data.get("sources", [])],
            cached_at=datetime.fromisoformat(data["cached_at"]),
        )


@dataclass
class PopularQuestion:
    """A frequently asked (normalized) question for a tenant."""

    query: str
    tenant_id: str
    count: int
    last_asked: datetime | None = None


@dataclass
class CacheStats:
    """Per-tenant cache and popularity statistics."""

    total_questions: int = 0
    cached_questions: int = 0
    popular_questions: list[PopularQuestion] = field(default_factory=list)
    backend_available: bool = True
