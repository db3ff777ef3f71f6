from .resource_models import ResourceModel
from .chunk_models import ChunkModel

__all__ = [
    "ResourceModel",
    "ChunkModel",
]
