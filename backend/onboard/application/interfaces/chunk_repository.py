"""Abstract repository interface (port) for tenant-scoped chunks and vector search."""

from abc import ABC, abstractmethod

from onboard.domain.entities import Chunk, RetrievedChunk


class ChunkRepository(ABC):
    """Port for chunk persistence and vector similarity search."""

    @abstractmethod
    async def insert_chunks(self, chunks: list[Chunk]) -> None:
        """Persist a batch of chunks with their embeddings."""
        ...

    @abstractmethod
    async def similarity_search(
        self,
        query_embedding: list[float],
        tenant_id: str,
        *,
        k: int,
        candidate_pool_size: int,
    ) -> list[RetrievedChunk]:
        """Find the tenant's chunks most similar to the query embedding.

        The tenant filter must be applied by the index query itself, never
        after the fact. ``candidate_pool_size`` is the number of approximate
        nearest-neighbour candidates the index considers before truncating
        to ``k`` and should be well above ``k``.

        Returns:
            Up to ``k`` results ordered by descending score; an empty list
            when the tenant has no chunks.
        """
        ...

    @abstractmethod
    async def count_by_tenant(self, tenant_id: str) -> int:
        """Return how many chunks a tenant has indexed."""
        ...

    @abstractmethod
    async def delete_by_resource(self, resource_id: str, tenant_id: str) -> int:
        """Delete all chunks of a resource. Returns count of deleted rows."""
        ...
