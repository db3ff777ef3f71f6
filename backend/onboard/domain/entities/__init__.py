from .chat_message import ChatMessage, TokenUsage, ChatCompletionResult
from .resource import Resource, ResourceKind
from .chunk import Chunk, RetrievedChunk, RankedChunks
from .normalized_document import NormalizedDocument
from .ingestion_report import IngestionReport
from .answer import (
    Answer,
    CachedAnswer,
    CacheStats,
    EmptyOutcome,
    PopularQuestion,
    ResourceDescriptor,
    SourceAttribution,
)

__all__ = [
    "ChatMessage",
    "TokenUsage",
    "ChatCompletionResult",
    "Resource",
    "ResourceKind",
    "Chunk",
    "RetrievedChunk",
    "RankedChunks",
    "NormalizedDocument",
    "IngestionReport",
    "Answer",
    "CachedAnswer",
    "CacheStats",
    "EmptyOutcome",
    "PopularQuestion",
    "ResourceDescriptor",
    "SourceAttribution",
]
