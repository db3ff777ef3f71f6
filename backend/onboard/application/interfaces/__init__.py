from .chat_provider import ChatProvider
from .embedding_provider import EmbeddingProvider
from .chunk_repository import ChunkRepository
from .resource_repository import ResourceRepository
from .cache_backend import CacheBackend
from .source_acquirer import SourceAcquirer, TextExtractor

__all__ = [
    "ChatProvider",
    "EmbeddingProvider",
    "ChunkRepository",
    "ResourceRepository",
    "CacheBackend",
    "SourceAcquirer",
    "TextExtractor",
]
