"""Abstract repository interface (port) for tenant resources."""

from abc import ABC, abstractmethod

from onboard.domain.entities import Resource


class ResourceRepository(ABC):
    """Port for resource metadata — implemented in the infrastructure layer.

    Resource creation and deletion belong to the resource management
    collaborator; the core reads records and writes back processing outcomes.
    """

    @abstractmethod
    async def get_by_id(self, resource_id: str) -> Resource | None:
        """Retrieve a single resource by its ID."""
        ...

    @abstractmethod
    async def get_many(self, resource_ids: list[str], tenant_id: str) -> list[Resource]:
        """Retrieve the tenant's resources with the given IDs (missing IDs are skipped)."""
        ...

    @abstractmethod
    async def count_by_tenant(self, tenant_id: str) -> int:
        """Return the number of resources a tenant owns."""
        ...

    @abstractmethod
    async def save_processing_outcome(self, resource: Resource) -> Resource:
        """Durably persist ``processed``, ``processing_error`` and ``extracted_content``."""
        ...
