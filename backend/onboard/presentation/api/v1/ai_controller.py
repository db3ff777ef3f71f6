"""AI API controller — ingestion, question answering and cache maintenance endpoints.

Callers are authenticated and tenant-authorized upstream; ids arrive well-formed.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, status

from onboard.application.schemas.ai import (
    AnswerSchema,
    CacheStatsSchema,
    ChatRequest,
    IngestionResultSchema,
    MessageSchema,
    PopularQuestionSchema,
    SourceSchema,
)
from onboard.application.services.assistant_service import AssistantService
from onboard.application.services.ingestion_service import IngestionService
from onboard.domain.entities import Answer, IngestionReport, PopularQuestion
from onboard.domain.exceptions import (
    AcquisitionError,
    EntityNotFoundError,
    InsufficientContentError,
    SynthesisError,
    UnsupportedFormatError,
)
from onboard.infrastructure.dependencies import get_assistant_service, get_ingestion_service

router = APIRouter(prefix="/ai", tags=["ai"])


# ── Helpers ──────────────────────────────────────────────────────────


def _to_answer_schema(answer: Answer) -> AnswerSchema:
    return AnswerSchema(
        content=answer.content,
        sources=[SourceSchema(**s.to_dict()) for s in answer.sources],
        cached=answer.cached,
        empty_outcome=answer.empty_outcome.value if answer.empty_outcome else None,
    )


def _to_popular_schema(question: PopularQuestion) -> PopularQuestionSchema:
    return PopularQuestionSchema(**asdict(question))


def _to_ingestion_schema(report: IngestionReport) -> IngestionResultSchema:
    return IngestionResultSchema(**asdict(report))


async def _ingest(run, resource_id: str) -> IngestionResultSchema:
    """Run an ingestion coroutine factory and map domain errors to HTTP errors."""
    try:
        report = await run(resource_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except UnsupportedFormatError as e:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(e)) from e
    except (AcquisitionError, InsufficientContentError) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _to_ingestion_schema(report)


# ── Ingestion ────────────────────────────────────────────────────────


@router.post("/process-file/{resource_id}", response_model=IngestionResultSchema)
async def process_file(
    resource_id: str,
    service: IngestionService = Depends(get_ingestion_service),
):
    """Extract, chunk and index an uploaded file resource."""
    return await _ingest(service.process_file, resource_id)


@router.post("/process-url/{resource_id}", response_model=IngestionResultSchema)
async def process_url(
    resource_id: str,
    service: IngestionService = Depends(get_ingestion_service),
):
    """Fetch, chunk and index a URL resource."""
    return await _ingest(service.process_url, resource_id)


# ── Question answering ───────────────────────────────────────────────


@router.post("/chat", response_model=AnswerSchema)
async def chat(
    body: ChatRequest,
    service: AssistantService = Depends(get_assistant_service),
):
    """Answer an employee question from the company's documents."""
    try:
        answer = await service.answer_query(body.query, body.tenant_id)
    except SynthesisError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
    return _to_answer_schema(answer)


@router.get("/status")
async def ai_status() -> dict:
    """Liveness of the assistant endpoints."""
    return {"status": "ok", "message": "AI service is running"}


# ── Popularity & cache ───────────────────────────────────────────────


@router.get("/popular-questions/{tenant_id}", response_model=list[PopularQuestionSchema])
async def popular_questions(
    tenant_id: str,
    limit: int = Query(default=10, ge=1, le=100),
    service: AssistantService = Depends(get_assistant_service),
):
    """Most frequently asked questions for a tenant."""
    questions = await service.get_popular_questions(tenant_id, limit)
    return [_to_popular_schema(q) for q in questions]


@router.get("/cache-stats/{tenant_id}", response_model=CacheStatsSchema)
async def cache_stats(
    tenant_id: str,
    service: AssistantService = Depends(get_assistant_service),
):
    """Cache and popularity statistics for a tenant."""
    stats = await service.get_cache_stats(tenant_id)
    return CacheStatsSchema(
        total_questions=stats.total_questions,
        cached_questions=stats.cached_questions,
        popular_questions=[_to_popular_schema(q) for q in stats.popular_questions],
        backend_available=stats.backend_available,
    )


@router.post("/cache/clear/{tenant_id}", response_model=MessageSchema)
async def clear_cache(
    tenant_id: str,
    service: AssistantService = Depends(get_assistant_service),
):
    """Drop a tenant's cached answers and popularity data."""
    deleted = await service.clear_cache(tenant_id)
    return MessageSchema(message=f"Cache cleared for tenant {tenant_id}", deleted_keys=deleted)
