"""Ingestion service — turns a stored resource into tenant-scoped, embedded chunks.

Pipeline per resource:
    1. Acquire raw text (file extractor or URL acquirer)
    2. Normalize (strip chrome, add header block)
    3. Chunk and embed (file and URL call sites use different overlaps)
    4. Store chunks carrying the resource's tenant id
    5. Write the processing outcome back onto the resource

Any failure is written back as ``processed=False`` plus ``processing_error``
and then re-raised, so failed ingestion stays inspectable.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from onboard.application.interfaces.chunk_repository import ChunkRepository
from onboard.application.interfaces.resource_repository import ResourceRepository
from onboard.application.interfaces.source_acquirer import SourceAcquirer, TextExtractor
from onboard.application.services.content_normalizer import ContentNormalizer
from onboard.application.services.embedding_service import EmbeddingService
from onboard.domain.entities import Chunk, IngestionReport, Resource, ResourceKind
from onboard.domain.exceptions import (
    AcquisitionError,
    EntityNotFoundError,
    InsufficientContentError,
)
from onboard.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("IngestionService")


class IngestionService:
    """Application service behind ``process_file`` and ``process_url``."""

    def __init__(
        self,
        resource_repository: ResourceRepository,
        chunk_repository: ChunkRepository,
        url_acquirer: SourceAcquirer,
        file_extractor: TextExtractor,
        normalizer: ContentNormalizer,
        embedding_service: EmbeddingService,
        *,
        file_chunk_overlap: int = 150,
        url_chunk_overlap: int = 200,
        replace_existing_chunks: bool = False,
        clock: Callable[[], datetime] | None = None,
    ):
        self._resource_repo = resource_repository
        self._chunk_repo = chunk_repository
        self._url_acquirer = url_acquirer
        self._file_extractor = file_extractor
        self._normalizer = normalizer
        self._embedding_service = embedding_service
        self._file_overlap = file_chunk_overlap
        self._url_overlap = url_chunk_overlap
        self._replace_existing = replace_existing_chunks
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def process_file(self, resource_id: str) -> IngestionReport:
        """Extract, chunk and index an uploaded file resource."""
        resource = await self._load(resource_id, ResourceKind.FILE)

        async def acquire() -> str:
            if not resource.file_path:
                raise AcquisitionError(resource_id, "resource has no stored file")
            return await self._file_extractor.extract(resource.file_path)

        return await self._run(resource, acquire, self._file_overlap)

    async def process_url(self, resource_id: str) -> IngestionReport:
        """Fetch, chunk and index a URL resource."""
        resource = await self._load(resource_id, ResourceKind.URL)

        async def acquire() -> str:
            if not resource.url:
                raise AcquisitionError(resource_id, "resource has no URL")
            return await self._url_acquirer.acquire(resource.url)

        return await self._run(resource, acquire, self._url_overlap)

    # ── Pipeline ─────────────────────────────────────────────────────

    async def _load(self, resource_id: str, kind: ResourceKind) -> Resource:
        resource = await self._resource_repo.get_by_id(resource_id)
        if resource is None:
            raise EntityNotFoundError("Resource", resource_id)
        if resource.kind != kind:
            raise ValueError(
                f"Resource {resource_id} is a {resource.kind.value} resource, not a {kind.value} resource"
            )
        return resource

    async def _run(
        self,
        resource: Resource,
        acquire: Callable[[], Awaitable[str]],
        chunk_overlap: int,
    ) -> IngestionReport:
        plog.separator(f"Ingest {resource.kind.value} {resource.id}")
        start = time.monotonic()
        source = resource.location or resource.id or ""

        try:
            with plog.timed_step(PipelineStage.ACQUIRE, f"Acquiring {source}"):
                raw_text = await acquire()

            with plog.timed_step(PipelineStage.NORMALIZE, "Normalizing content"):
                document = self._normalizer.normalize(
                    raw_text,
                    source,
                    resource.title,
                    extracted_at=self._clock(),
                )
            if not document.body:
                raise InsufficientContentError(source, 0, 1)
            plog.detail(
                "Normalized",
                raw_chars=document.original_length,
                body_chars=len(document.body),
                compression=f"{document.compression_ratio:.1%}",
            )

            with plog.timed_step(PipelineStage.EMBED, "Chunking and embedding", overlap=chunk_overlap):
                pairs = await self._embedding_service.chunk_and_embed(
                    document.content,
                    chunk_overlap=chunk_overlap,
                )

            chunks = [
                Chunk(
                    resource_id=resource.id,
                    tenant_id=resource.tenant_id,
                    chunk_index=index,
                    content=text,
                    embedding=vector,
                )
                for index, (text, vector) in enumerate(pairs)
            ]

            replaced = 0
            with plog.timed_step(PipelineStage.STORE, f"Storing {len(chunks)} chunks"):
                if self._replace_existing:
                    replaced = await self._chunk_repo.delete_by_resource(resource.id, resource.tenant_id)
                    plog.detail("Replaced previous chunks", deleted=replaced)
                await self._chunk_repo.insert_chunks(chunks)

            resource.mark_processed(document.content)
            await self._resource_repo.save_processing_outcome(resource)

        except Exception as e:
            plog.step_error(PipelineStage.ERROR, f"Ingestion failed for resource {resource.id}", error=e)
            resource.mark_failed(str(e))
            try:
                await self._resource_repo.save_processing_outcome(resource)
            except Exception:
                logger.exception("Could not record failure for resource %s", resource.id)
            raise

        duration_ms = int((time.monotonic() - start) * 1000)
        report = IngestionReport(
            resource_id=resource.id,
            tenant_id=resource.tenant_id,
            chunk_count=len(chunks),
            raw_characters=document.original_length,
            normalized_characters=len(document.content),
            compression_ratio=document.compression_ratio,
            replaced_chunks=replaced,
            duration_ms=duration_ms,
        )
        plog.step_complete(PipelineStage.COMPLETE, f"Resource {resource.id} processed")
        plog.stats(chunks=report.chunk_count, tenant=report.tenant_id, duration_ms=duration_ms)
        return report
