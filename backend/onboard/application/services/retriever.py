"""Multi-query retriever — expands a question, searches every variant, merges by max score."""

import asyncio
import logging
import time
from collections.abc import Iterable

from onboard.application.interfaces.chunk_repository import ChunkRepository
from onboard.application.services.embedding_service import EmbeddingService
from onboard.application.services.query_expander import QueryExpander
from onboard.domain.entities import RankedChunks, RetrievedChunk
from onboard.domain.exceptions import TenantMismatchError

logger = logging.getLogger(__name__)

_DEFAULT_K_PER_VARIANT = 10
_DEFAULT_CANDIDATE_MULTIPLIER = 20
_DEFAULT_TOP_N = 15
MERGE_KEY_PREFIX_LENGTH = 50


def merge_key(hit: RetrievedChunk) -> tuple[str, str]:
    """Identity used to collapse the same chunk found by several variants."""
    return hit.resource_id, hit.content[:MERGE_KEY_PREFIX_LENGTH]


def merge_by_max_score(result_sets: Iterable[list[RetrievedChunk]]) -> list[RetrievedChunk]:
    """Merge variant result sets, keeping the highest-scoring entry per key.

    Ties and lower scores never replace an existing entry, so the outcome
    does not depend on which variant's search finished last. Returns the
    merged entries ordered by score descending.
    """
    merged: dict[tuple[str, str], RetrievedChunk] = {}
    for results in result_sets:
        for hit in results:
            key = merge_key(hit)
            existing = merged.get(key)
            if existing is None or hit.score > existing.score:
                merged[key] = hit
    return sorted(merged.values(), key=lambda h: h.score, reverse=True)


class Retriever:
    """Runs expanded queries against the chunk store and ranks the merged results."""

    def __init__(
        self,
        chunk_repository: ChunkRepository,
        embedding_service: EmbeddingService,
        query_expander: QueryExpander,
        *,
        k_per_variant: int = _DEFAULT_K_PER_VARIANT,
        candidate_multiplier: int = _DEFAULT_CANDIDATE_MULTIPLIER,
        top_n: int = _DEFAULT_TOP_N,
    ):
        self._chunk_repo = chunk_repository
        self._embedding_service = embedding_service
        self._expander = query_expander
        self._k = k_per_variant
        self._candidate_pool_size = k_per_variant * candidate_multiplier
        self._top_n = top_n

    async def retrieve(self, query_text: str, tenant_id: str) -> RankedChunks:
        """Return the tenant's best chunks for ``query_text`` across all variants.

        An empty result is a normal outcome, not an error.
        """
        start = time.monotonic()
        variants = self._expander.expand(query_text)
        if not variants:
            return RankedChunks(chunks=[], query_variants=[])

        embeddings = await self._embedding_service.embed_queries(variants)

        # Searches run concurrently; results are merged only after all of
        # them have completed, so the merge map is never shared between tasks.
        result_sets = await asyncio.gather(
            *(
                self._chunk_repo.similarity_search(
                    embedding,
                    tenant_id,
                    k=self._k,
                    candidate_pool_size=self._candidate_pool_size,
                )
                for embedding in embeddings
            )
        )
        for results in result_sets:
            self._ensure_tenant(results, tenant_id)

        ranked = merge_by_max_score(result_sets)[: self._top_n]

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Retrieved %d chunks for tenant %s from %d variants (%d raw hits) in %dms",
            len(ranked),
            tenant_id,
            len(variants),
            sum(len(r) for r in result_sets),
            duration_ms,
        )
        return RankedChunks(chunks=ranked, query_variants=variants)

    @staticmethod
    def _ensure_tenant(results: list[RetrievedChunk], tenant_id: str) -> None:
        for hit in results:
            if hit.tenant_id != tenant_id:
                raise TenantMismatchError(
                    expected_tenant=tenant_id,
                    actual_tenant=hit.tenant_id,
                    subject=f"chunk {hit.chunk.id} of resource {hit.resource_id}",
                )
