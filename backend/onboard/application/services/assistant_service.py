"""Assistant service — answers employee questions from their company's documents.

Flow per question:
    1. Track the question for popularity (detached)
    2. Return a cached answer if one exists
    3. Retrieve ranked chunks across query variants
    4. Empty result → one of three explanatory messages (not cached)
    5. Otherwise synthesize, cache the answer (detached) and return it
"""

import logging

from onboard.application.interfaces.chunk_repository import ChunkRepository
from onboard.application.interfaces.resource_repository import ResourceRepository
from onboard.application.services.answer_synthesizer import AnswerSynthesizer
from onboard.application.services.background_tasks import BackgroundTaskSupervisor
from onboard.application.services.response_cache import ResponseCache
from onboard.application.services.retriever import Retriever
from onboard.domain.entities import Answer, CacheStats, EmptyOutcome, PopularQuestion
from onboard.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("AssistantService")

EMPTY_OUTCOME_MESSAGES: dict[EmptyOutcome, str] = {
    EmptyOutcome.NO_RESOURCES: (
        "I don't have any documents for your company yet. Ask an administrator to "
        "upload documents or add links so I can answer questions."
    ),
    EmptyOutcome.NOT_PROCESSED: (
        "Your company's documents are still being processed. Please try again in a few minutes."
    ),
    EmptyOutcome.NO_MATCH: (
        "I couldn't find information about that in your company's documents. Try "
        "rephrasing the question or ask about a different topic."
    ),
}


class AssistantService:
    """Application service behind ``answer_query`` and the cache operations."""

    def __init__(
        self,
        retriever: Retriever,
        synthesizer: AnswerSynthesizer,
        cache: ResponseCache,
        resource_repository: ResourceRepository,
        chunk_repository: ChunkRepository,
        supervisor: BackgroundTaskSupervisor,
    ):
        self._retriever = retriever
        self._synthesizer = synthesizer
        self._cache = cache
        self._resource_repo = resource_repository
        self._chunk_repo = chunk_repository
        self._supervisor = supervisor

    async def answer_query(self, query: str, tenant_id: str) -> Answer:
        """Answer ``query`` for ``tenant_id``.

        Raises:
            SynthesisError: the completion call failed.
        """
        plog.separator(f"Question for tenant {tenant_id}")
        self._supervisor.spawn(self._cache.track(query, tenant_id), name=f"track:{tenant_id}")

        cached = await self._cache.get(query, tenant_id)
        if cached is not None:
            plog.step_complete(PipelineStage.CACHE, "Answer served from cache")
            return Answer(content=cached.content, sources=cached.sources, cached=True)

        with plog.timed_step(PipelineStage.RETRIEVE, "Retrieving chunks"):
            ranked = await self._retriever.retrieve(query, tenant_id)
        plog.detail("Query variants", count=len(ranked.query_variants), chunks=len(ranked))

        if ranked.is_empty:
            outcome = await self._classify_empty(tenant_id)
            plog.step_complete(PipelineStage.COMPLETE, "No matching content", outcome=outcome.value)
            return Answer(
                content=EMPTY_OUTCOME_MESSAGES[outcome],
                sources=[],
                cached=False,
                empty_outcome=outcome,
            )

        with plog.timed_step(PipelineStage.SYNTHESIZE, f"Synthesizing from {len(ranked)} chunks"):
            content, sources = await self._synthesizer.synthesize(query, ranked, tenant_id)

        self._supervisor.spawn(
            self._cache.put(query, tenant_id, content, sources),
            name=f"cache:{tenant_id}",
        )
        plog.step_complete(PipelineStage.COMPLETE, "Answer ready", sources=len(sources))
        return Answer(content=content, sources=sources, cached=False)

    async def _classify_empty(self, tenant_id: str) -> EmptyOutcome:
        if await self._resource_repo.count_by_tenant(tenant_id) == 0:
            return EmptyOutcome.NO_RESOURCES
        if await self._chunk_repo.count_by_tenant(tenant_id) == 0:
            return EmptyOutcome.NOT_PROCESSED
        return EmptyOutcome.NO_MATCH

    # ── Cache operations ─────────────────────────────────────────────

    async def get_popular_questions(self, tenant_id: str, limit: int = 10) -> list[PopularQuestion]:
        return await self._cache.top_n(tenant_id, limit)

    async def get_cache_stats(self, tenant_id: str) -> CacheStats:
        return await self._cache.stats(tenant_id)

    async def clear_cache(self, tenant_id: str) -> int:
        return await self._cache.clear(tenant_id)
