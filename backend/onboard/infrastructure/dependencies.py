"""FastAPI dependency injection — wires infrastructure to the application layer.

Process-wide handles (shared HTTP client, cache connection, headless browser,
detached-task supervisor) are opened once in the app lifespan and injected
into request-scoped services; nothing connects at import time.
"""

import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass

import httpx
from fastapi import Depends
from playwright.async_api import Error as PlaywrightError
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.application.interfaces import CacheBackend
from onboard.application.services import (
    AnswerSynthesizer,
    AssistantService,
    BackgroundTaskSupervisor,
    ContentNormalizer,
    EmbeddingService,
    IngestionService,
    QueryExpander,
    ResponseCache,
    Retriever,
)
from onboard.config import Settings, get_settings
from onboard.domain.exceptions import CacheBackendError
from onboard.infrastructure.acquisition import (
    BrowserAcquirer,
    DocumentExportAcquirer,
    FileTextExtractor,
    StaticHtmlAcquirer,
    UrlAcquirer,
)
from onboard.infrastructure.cache import RedisCacheBackend
from onboard.infrastructure.database.repositories import (
    PgChunkRepository,
    SQLAlchemyResourceRepository,
)
from onboard.infrastructure.database.session import async_session_factory, get_db_session
from onboard.infrastructure.openrouter import OpenRouterClient, OpenRouterEmbeddingProvider

logger = logging.getLogger(__name__)


@dataclass
class AppResources:
    """Long-lived client handles shared by every request."""

    http_client: httpx.AsyncClient
    cache_backend: CacheBackend
    browser: BrowserAcquirer | None
    supervisor: BackgroundTaskSupervisor


_resources: AppResources | None = None


async def open_app_resources(settings: Settings) -> AppResources:
    """Connect the shared clients (called once from the app lifespan)."""
    global _resources

    http_client = httpx.AsyncClient(timeout=settings.http_timeout)

    cache_backend = RedisCacheBackend.from_url(settings.redis_url)
    try:
        await cache_backend.ping()
        logger.info("Redis connected at %s", settings.redis_url)
    except CacheBackendError as e:
        logger.warning("Redis unavailable — response cache degrades to always-miss: %s", e)

    browser: BrowserAcquirer | None = BrowserAcquirer(
        navigation_timeout_s=settings.browser_navigation_timeout,
        settle_delay_ms=settings.browser_settle_delay_ms,
        min_content_length=settings.min_content_length,
    )
    try:
        await browser.start()
    except PlaywrightError as e:
        logger.warning("Headless browser unavailable — dynamic pages fetched as static HTML: %s", e)
        browser = None

    _resources = AppResources(
        http_client=http_client,
        cache_backend=cache_backend,
        browser=browser,
        supervisor=BackgroundTaskSupervisor(),
    )
    return _resources


async def close_app_resources(settings: Settings) -> None:
    """Drain detached tasks, then close clients in reverse order."""
    global _resources
    if _resources is None:
        return
    resources, _resources = _resources, None

    await resources.supervisor.shutdown(settings.background_task_grace_seconds)
    if resources.browser is not None:
        await resources.browser.stop()
    await resources.cache_backend.close()
    await resources.http_client.aclose()


def get_app_resources() -> AppResources:
    if _resources is None:
        raise RuntimeError("Application resources are not initialized — is the lifespan running?")
    return _resources


# ── Service factories ────────────────────────────────────────────────


def _embedding_service(settings: Settings, resources: AppResources) -> EmbeddingService:
    provider = OpenRouterEmbeddingProvider(
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        app_name=settings.openrouter_app_name,
        model=settings.embedding_model,
        model_dimensions=settings.embedding_dimensions,
        http_client=resources.http_client,
    )
    return EmbeddingService(
        provider,
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
        batch_size=settings.embedding_batch_size,
    )


async def get_ingestion_service(
    session: AsyncSession = Depends(get_db_session),
    resources: AppResources = Depends(get_app_resources),
) -> AsyncGenerator[IngestionService, None]:
    """Provides an IngestionService with acquisition, embedding and storage wired up."""
    settings = get_settings()

    url_acquirer = UrlAcquirer(
        document_export=DocumentExportAcquirer(
            resources.http_client, min_content_length=settings.min_content_length
        ),
        static_html=StaticHtmlAcquirer(
            resources.http_client, min_content_length=settings.min_content_length
        ),
        browser=resources.browser,
        browser_render_hosts=settings.browser_render_hosts,
    )

    yield IngestionService(
        resource_repository=SQLAlchemyResourceRepository(session),
        chunk_repository=PgChunkRepository(
            async_session_factory, max_scan_tuples=settings.hnsw_max_scan_tuples
        ),
        url_acquirer=url_acquirer,
        file_extractor=FileTextExtractor(
            settings.upload_dir, min_content_length=settings.min_content_length
        ),
        normalizer=ContentNormalizer(),
        embedding_service=_embedding_service(settings, resources),
        file_chunk_overlap=settings.chunk_overlap,
        url_chunk_overlap=settings.url_chunk_overlap,
        replace_existing_chunks=settings.reingest_replaces_chunks,
    )


def get_response_cache(
    resources: AppResources = Depends(get_app_resources),
) -> ResponseCache:
    settings = get_settings()
    return ResponseCache(
        resources.cache_backend,
        ttl_seconds=settings.cache_ttl_seconds,
        stats_ttl_seconds=settings.query_stats_ttl_seconds,
    )


async def get_assistant_service(
    session: AsyncSession = Depends(get_db_session),
    resources: AppResources = Depends(get_app_resources),
    cache: ResponseCache = Depends(get_response_cache),
) -> AsyncGenerator[AssistantService, None]:
    """Provides an AssistantService with retrieval, synthesis and caching wired up."""
    settings = get_settings()

    resource_repo = SQLAlchemyResourceRepository(session)
    chunk_repo = PgChunkRepository(
        async_session_factory, max_scan_tuples=settings.hnsw_max_scan_tuples
    )

    retriever = Retriever(
        chunk_repo,
        _embedding_service(settings, resources),
        QueryExpander(max_variants=settings.max_query_variants),
        k_per_variant=settings.retrieval_k_per_variant,
        candidate_multiplier=settings.retrieval_candidate_multiplier,
        top_n=settings.retrieval_top_n,
    )
    synthesizer = AnswerSynthesizer(
        OpenRouterClient(
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            app_name=settings.openrouter_app_name,
            http_client=resources.http_client,
        ),
        resource_repo,
        model=settings.chat_model,
        max_tokens=settings.completion_max_tokens,
        temperature=settings.completion_temperature,
    )

    yield AssistantService(
        retriever=retriever,
        synthesizer=synthesizer,
        cache=cache,
        resource_repository=resource_repo,
        chunk_repository=chunk_repo,
        supervisor=resources.supervisor,
    )
