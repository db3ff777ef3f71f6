from .base import Base
from .session import engine, async_session_factory, get_db_session, init_database
from .models import ResourceModel, ChunkModel

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "get_db_session",
    "init_database",
    "ResourceModel",
    "ChunkModel",
]
