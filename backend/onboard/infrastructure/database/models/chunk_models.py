"""SQLAlchemy ORM model for resource chunks with pgvector embeddings."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKeyConstraint,
    Index,
    Integer,
    String,
    Text,
    func,
)

from pgvector.sqlalchemy import Vector

from onboard.config import get_settings
from onboard.infrastructure.database.base import Base

EMBEDDING_DIMENSIONS = get_settings().embedding_dimensions


class ChunkModel(Base):
    """A text window from a processed resource, with a vector embedding.

    ``tenant_id`` is denormalized from the owning resource so the similarity
    search can filter on it directly. The composite foreign key makes the
    database reject a chunk whose tenant differs from its resource's tenant.
    """

    __tablename__ = "resource_chunks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    resource_id = Column(String(36), nullable=False, index=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    chunk_index = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    embedding = Column(Vector(EMBEDDING_DIMENSIONS), nullable=False)  # HNSW max: 2000
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        ForeignKeyConstraint(
            ["resource_id", "tenant_id"],
            ["resources.id", "resources.tenant_id"],
            ondelete="CASCADE",
            name="fk_chunks_resource_tenant",
        ),
        Index(
            "idx_chunks_embedding_hnsw",
            embedding,
            postgresql_using="hnsw",
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ),
    )
