from .resource_repository import SQLAlchemyResourceRepository
from .chunk_repository import PgChunkRepository, build_similarity_query, hnsw_session_settings

__all__ = [
    "SQLAlchemyResourceRepository",
    "PgChunkRepository",
    "build_similarity_query",
    "hnsw_session_settings",
]
