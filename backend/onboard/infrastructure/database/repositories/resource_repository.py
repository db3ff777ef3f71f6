"""SQLAlchemy implementation of the ResourceRepository."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.application.interfaces import ResourceRepository
from onboard.domain.entities import Resource, ResourceKind
from onboard.domain.exceptions import EntityNotFoundError
from onboard.infrastructure.database.models.resource_models import ResourceModel

logger = logging.getLogger(__name__)


class SQLAlchemyResourceRepository(ResourceRepository):
    """Concrete resource repository backed by PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, resource_id: str) -> Resource | None:
        result = await self._session.execute(
            select(ResourceModel).where(ResourceModel.id == resource_id)
        )
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def get_many(self, resource_ids: list[str], tenant_id: str) -> list[Resource]:
        if not resource_ids:
            return []
        result = await self._session.execute(
            select(ResourceModel)
            .where(ResourceModel.id.in_(resource_ids))
            .where(ResourceModel.tenant_id == tenant_id)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def count_by_tenant(self, tenant_id: str) -> int:
        result = await self._session.execute(
            select(func.count()).select_from(ResourceModel).where(ResourceModel.tenant_id == tenant_id)
        )
        return int(result.scalar_one())

    async def save_processing_outcome(self, resource: Resource) -> Resource:
        """Write back the processing fields and commit.

        Commits immediately so a failure outcome survives the rollback of
        the request that raised it.
        """
        model = await self._session.get(ResourceModel, resource.id)
        if model is None:
            raise EntityNotFoundError("Resource", resource.id)

        model.processed = resource.processed
        model.processing_error = resource.processing_error
        model.extracted_content = resource.extracted_content
        model.updated_at = resource.updated_at
        await self._session.commit()
        logger.info(
            "Saved processing outcome for resource %s (processed=%s)",
            resource.id,
            resource.processed,
        )
        return resource

    # ── Mapping ──────────────────────────────────────────────────────

    @staticmethod
    def _to_domain(model: ResourceModel) -> Resource:
        return Resource(
            id=model.id,
            tenant_id=model.tenant_id,
            kind=ResourceKind(model.kind),
            title=model.title,
            url=model.url,
            file_path=model.file_path,
            file_url=model.file_url,
            mime_type=model.mime_type,
            file_size=model.file_size,
            processed=bool(model.processed),
            processing_error=model.processing_error,
            extracted_content=model.extracted_content,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
