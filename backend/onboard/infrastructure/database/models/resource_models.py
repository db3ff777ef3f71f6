"""SQLAlchemy ORM model for tenant-owned resources."""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from onboard.infrastructure.database.base import Base


def _generate_uuid() -> str:
    return str(uuid.uuid4())


class ResourceModel(Base):
    """A document (uploaded file or URL) owned by one tenant.

    Rows are created by the resource management collaborator; ingestion
    writes back ``processed``, ``processing_error`` and ``extracted_content``.
    """

    __tablename__ = "resources"

    # ── Identity ──────────────────────────────────────────────────────
    id = Column(String(36), primary_key=True, default=_generate_uuid)
    tenant_id = Column(String(64), nullable=False, index=True)
    kind = Column(String(10), nullable=False)  # "file" | "url"
    title = Column(String(500), nullable=False)

    # ── Location ──────────────────────────────────────────────────────
    url = Column(String(2000), nullable=True)
    file_path = Column(String(500), nullable=True)
    file_url = Column(String(2000), nullable=True)
    mime_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)

    # ── Processing outcome ────────────────────────────────────────────
    processed = Column(Boolean, nullable=False, default=False, server_default="false")
    processing_error = Column(Text, nullable=True)
    extracted_content = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        # Target of the chunks' composite foreign key
        UniqueConstraint("id", "tenant_id", name="uq_resources_id_tenant"),
    )
