"""SQLAlchemy implementation of ChunkRepository — pgvector-powered vector search."""

import logging

from sqlalchemy import Select, delete, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from onboard.application.interfaces.chunk_repository import ChunkRepository
from onboard.domain.entities import Chunk, RetrievedChunk
from onboard.infrastructure.database.models.chunk_models import ChunkModel

logger = logging.getLogger(__name__)

# pgvector caps hnsw.ef_search at 1000
_MAX_EF_SEARCH = 1000
# pgvector default; bounds how far an iterative scan may walk past other tenants
DEFAULT_MAX_SCAN_TUPLES = 20_000


def build_similarity_query(query_embedding: list[float], tenant_id: str, k: int) -> Select:
    """Top-``k`` chunks of one tenant by cosine distance.

    The tenant predicate sits in the same statement as the HNSW ordering.
    Run it after ``hnsw_session_settings`` so the index keeps scanning until
    ``k`` rows of this tenant pass the filter, instead of stopping after one
    ``ef_search`` batch that other tenants may fill entirely.
    """
    distance = ChunkModel.embedding.cosine_distance(query_embedding).label("distance")
    return (
        select(
            ChunkModel.id,
            ChunkModel.resource_id,
            ChunkModel.tenant_id,
            ChunkModel.chunk_index,
            ChunkModel.content,
            ChunkModel.created_at,
            distance,
        )
        .where(ChunkModel.tenant_id == tenant_id)
        .order_by(distance)
        .limit(k)
    )


def hnsw_session_settings(ef_search: int, max_scan_tuples: int) -> list:
    """Transaction-local HNSW settings for a tenant-filtered search (pgvector >= 0.8).

    ``strict_order`` iterative scans keep results in exact distance order
    while the index is re-entered for more candidates.
    """
    # SET LOCAL cannot take bind parameters; both values are ints.
    return [
        text(f"SET LOCAL hnsw.ef_search = {int(ef_search)}"),
        text("SET LOCAL hnsw.iterative_scan = strict_order"),
        text(f"SET LOCAL hnsw.max_scan_tuples = {int(max_scan_tuples)}"),
    ]


class PgChunkRepository(ChunkRepository):
    """Concrete chunk repository backed by PostgreSQL + pgvector.

    Opens a short-lived session per call so that several variant searches
    can run concurrently without sharing one connection.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        max_scan_tuples: int = DEFAULT_MAX_SCAN_TUPLES,
    ):
        self._session_factory = session_factory
        self._max_scan_tuples = max_scan_tuples

    async def insert_chunks(self, chunks: list[Chunk]) -> None:
        """Persist a batch of chunks with their embeddings."""
        if not chunks:
            return

        models = [
            ChunkModel(
                resource_id=chunk.resource_id,
                tenant_id=chunk.tenant_id,
                chunk_index=chunk.chunk_index,
                content=chunk.content,
                embedding=chunk.embedding,
            )
            for chunk in chunks
        ]

        async with self._session_factory() as session:
            async with session.begin():
                session.add_all(models)
        logger.info("Stored %d chunks for resource %s", len(models), chunks[0].resource_id)

    async def similarity_search(
        self,
        query_embedding: list[float],
        tenant_id: str,
        *,
        k: int,
        candidate_pool_size: int,
    ) -> list[RetrievedChunk]:
        ef_search = min(max(int(candidate_pool_size), int(k)), _MAX_EF_SEARCH)
        query = build_similarity_query(query_embedding, tenant_id, k)

        async with self._session_factory() as session:
            async with session.begin():
                for statement in hnsw_session_settings(ef_search, self._max_scan_tuples):
                    await session.execute(statement)
                rows = (await session.execute(query)).all()

        return [
            RetrievedChunk(
                chunk=Chunk(
                    id=row.id,
                    resource_id=row.resource_id,
                    tenant_id=row.tenant_id,
                    chunk_index=row.chunk_index,
                    content=row.content,
                    embedding=[],  # Don't return full embedding in search results
                    created_at=row.created_at,
                ),
                score=1.0 - float(row.distance),
            )
            for row in rows
        ]

    async def count_by_tenant(self, tenant_id: str) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(ChunkModel).where(ChunkModel.tenant_id == tenant_id)
            )
            return int(result.scalar_one())

    async def delete_by_resource(self, resource_id: str, tenant_id: str) -> int:
        """Delete all chunks belonging to a resource."""
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    delete(ChunkModel)
                    .where(ChunkModel.resource_id == resource_id)
                    .where(ChunkModel.tenant_id == tenant_id)
                )
        count = result.rowcount or 0
        if count > 0:
            logger.info("Deleted %d chunks for resource %s", count, resource_id)
        return count
